"""
잔액 정합성 조정자

계좌 잔액에 영향을 주는 모든 변경을 하나의 작업 단위로 실행하고,
변경 직후 영향받은 계좌의 잔액을 전체 재계산으로 갱신.

- 거래 생성/수정/삭제 → 해당 계좌 재계산 (계좌 이동 시 양쪽 모두)
- 초기 잔액 변경 → 새 초기 잔액 + Σ(SETTLED) (증분 반영 없음)
- 작업 단위 안의 어떤 오류도 전체 롤백 후 그대로 전파
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

from core.errors import ConflictError, NotFoundError
from core.ledger.balance import recompute
from core.ledger.inputs import (
    AccountCreate,
    AccountPatch,
    TransactionCreate,
    TransactionPatch,
    check_installment_bounds,
    parse_input,
)
from core.ledger.models import Account, Transaction
from core.ledger.store import LedgerStore
from core.ledger.types import TransactionStatus
from core.utils.money import to_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceDrift:
    """저장된 잔액과 재계산 잔액의 차이"""

    account_id: str
    owner_id: str
    stored: Decimal
    computed: Decimal

    @property
    def difference(self) -> Decimal:
        """재계산 - 저장"""
        return self.computed - self.stored


class BalanceCoordinator:
    """잔액 정합성 조정자

    각 작업은 정확히 하나의 작업 단위(LedgerStore.run_atomic) 안에서 실행.
    같은 계좌에 대한 동시 변경은 저장소 쓰기 잠금으로 직렬화되므로
    "읽기 → 재계산 → 쓰기" 사이에 다른 변경이 끼어들 수 없음.

    Args:
        store: Ledger 저장소

    사용 예시:
    ```python
    coordinator = BalanceCoordinator(LedgerStore(db))

    account = await coordinator.create_account("user-1", {
        "name": "Wallet",
        "kind": "wallet",
        "initial_balance": "100.00",
    })
    await coordinator.create_transaction("user-1", {
        "account_id": account.id,
        "category_id": "default:expense:food",
        "kind": "expense",
        "amount": "12.50",
        "description": "Lunch",
        "occurred_at": now_utc(),
    })
    ```
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    # =========================================================================
    # Account
    # =========================================================================

    async def create_account(
        self,
        owner_id: str,
        data: AccountCreate | Mapping[str, Any],
    ) -> Account:
        """계좌 생성 (current_balance = initial_balance)"""
        payload = parse_input(AccountCreate, data)

        async def work(unit: LedgerStore) -> Account:
            return await unit.create_account(owner_id, payload)

        account = await self.store.run_atomic(work)
        logger.info(
            f"Account created: {account.id} owner={owner_id} "
            f"initial_balance={account.initial_balance}"
        )
        return account

    async def update_account(
        self,
        owner_id: str,
        account_id: str,
        patch: AccountPatch | Mapping[str, Any],
    ) -> Account:
        """계좌 부분 수정

        name/kind/color/icon은 그대로 저장.
        initial_balance는 값이 바뀐 경우에만 전체 재계산과 함께 저장.

        Raises:
            NotFoundError: 계좌 없음 / 타인 소유
            ValidationError: 입력 오류
        """
        payload = parse_input(AccountPatch, patch)
        changes = payload.changes()
        new_initial = changes.pop("initial_balance", None)

        async def work(unit: LedgerStore) -> Account:
            account = await self._load_account(unit, owner_id, account_id)

            if changes:
                await unit.update_account_fields(account.id, changes)
            if new_initial is not None and new_initial != account.initial_balance:
                await self._apply_initial_balance(unit, account.id, new_initial)

            return await self._load_account(unit, owner_id, account_id)

        account = await self.store.run_atomic(work)
        logger.info(f"Account updated: {account_id} fields={sorted(payload.model_fields_set)}")
        return account

    async def update_account_initial_balance(
        self,
        owner_id: str,
        account_id: str,
        value: Any,
    ) -> Account:
        """초기 잔액 변경

        저장된 값과 같으면 아무것도 하지 않음.
        다르면 current_balance = value + Σ(SETTLED)로 다시 계산하고
        두 필드를 함께 저장.
        """
        new_initial = to_money(value)

        async def work(unit: LedgerStore) -> Account:
            account = await self._load_account(unit, owner_id, account_id)
            if new_initial == account.initial_balance:
                return account

            await self._apply_initial_balance(unit, account.id, new_initial)
            return await self._load_account(unit, owner_id, account_id)

        account = await self.store.run_atomic(work)
        logger.info(
            f"Initial balance set: {account_id} initial={account.initial_balance} "
            f"current={account.current_balance}"
        )
        return account

    # =========================================================================
    # Transaction
    # =========================================================================

    async def create_transaction(
        self,
        owner_id: str,
        data: TransactionCreate | Mapping[str, Any],
    ) -> Transaction:
        """거래 생성

        SETTLED 거래면 같은 작업 단위에서 계좌 잔액 재계산.

        Raises:
            NotFoundError: 계좌/카테고리 없음 또는 타인 소유
            ConflictError: 보관된 계좌
            ValidationError: 입력 오류
        """
        payload = parse_input(TransactionCreate, data)

        async def work(unit: LedgerStore) -> Transaction:
            account = await self._load_account(unit, owner_id, payload.account_id)
            self._ensure_writable(account)
            await self._ensure_category(unit, owner_id, payload.category_id)

            transaction = await unit.create_transaction(owner_id, payload)
            if transaction.is_settled:
                await self._refresh_balance(unit, account.id)
            return transaction

        transaction = await self.store.run_atomic(work)
        logger.info(
            f"Transaction created: {transaction.id} account={transaction.account_id} "
            f"{transaction.kind} {transaction.amount} ({transaction.status})"
        )
        return transaction

    async def update_transaction(
        self,
        owner_id: str,
        transaction_id: str,
        patch: TransactionPatch | Mapping[str, Any],
    ) -> Transaction:
        """거래 부분 수정

        계좌가 바뀌면 새 계좌 검증 후 새 계좌와 기존 계좌 모두 재계산.
        계좌가 그대로여도 해당 계좌는 항상 재계산.

        Raises:
            NotFoundError: 거래/새 계좌/새 카테고리 없음 또는 타인 소유
            ConflictError: 보관된 계좌로 이동
            ValidationError: 입력 오류
        """
        payload = parse_input(TransactionPatch, patch)
        changes = payload.changes()

        async def work(unit: LedgerStore) -> Transaction:
            current = await self._load_transaction(unit, owner_id, transaction_id)

            new_account_id = changes.get("account_id", current.account_id)
            moved = new_account_id != current.account_id
            if moved:
                target = await self._load_account(unit, owner_id, new_account_id)
                self._ensure_writable(target)

            if changes.get("category_id", current.category_id) != current.category_id:
                await self._ensure_category(unit, owner_id, changes["category_id"])

            check_installment_bounds(
                changes.get("installment_count", current.installment_count),
                changes.get("installment_index", current.installment_index),
            )

            await unit.update_transaction(current.id, changes)
            await self._refresh_balance(unit, new_account_id)
            if moved:
                await self._refresh_balance(unit, current.account_id)

            return await self._load_transaction(unit, owner_id, transaction_id)

        transaction = await self.store.run_atomic(work)
        logger.info(
            f"Transaction updated: {transaction_id} fields={sorted(changes)} "
            f"account={transaction.account_id}"
        )
        return transaction

    async def delete_transaction(self, owner_id: str, transaction_id: str) -> None:
        """거래 삭제 후 계좌 재계산

        Raises:
            NotFoundError: 거래 없음 또는 타인 소유
        """

        async def work(unit: LedgerStore) -> Transaction:
            current = await self._load_transaction(unit, owner_id, transaction_id)
            await unit.delete_transaction(current.id)
            await self._refresh_balance(unit, current.account_id)
            return current

        deleted = await self.store.run_atomic(work)
        logger.info(f"Transaction deleted: {transaction_id} account={deleted.account_id}")

    # =========================================================================
    # 재계산 / 재조정
    # =========================================================================

    async def recompute_account(self, owner_id: str, account_id: str) -> Account:
        """단일 계좌 재계산 (저장값이 어긋나 있으면 복구)"""

        async def work(unit: LedgerStore) -> Account:
            account = await self._load_account(unit, owner_id, account_id)
            drift = await self._reconcile(unit, account)
            if drift is not None:
                self._log_drift(drift)
            return await self._load_account(unit, owner_id, account_id)

        return await self.store.run_atomic(work)

    async def reconcile_all(self) -> list[BalanceDrift]:
        """전체 계좌 재스캔 (보관 계좌 포함)

        계좌마다 별도 작업 단위로 실행하여 잠금 시간을 짧게 유지.

        Returns:
            저장 잔액이 어긋나 있던 계좌 목록 (이미 복구됨)
        """
        account_ids = await self.store.list_all_account_ids()
        drifts: list[BalanceDrift] = []

        for account_id in account_ids:

            async def work(unit: LedgerStore, account_id: str = account_id) -> BalanceDrift | None:
                account = await unit.find_account(account_id)
                if account is None:
                    # 스캔 도중 영구 삭제됨
                    return None
                return await self._reconcile(unit, account)

            drift = await self.store.run_atomic(work)
            if drift is not None:
                self._log_drift(drift)
                drifts.append(drift)

        logger.info(f"Reconcile finished: accounts={len(account_ids)} drifted={len(drifts)}")
        return drifts

    # =========================================================================
    # 내부
    # =========================================================================

    async def _load_account(self, unit: LedgerStore, owner_id: str, account_id: str) -> Account:
        account = await unit.find_account(account_id, owner_id, include_archived=True)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    async def _load_transaction(
        self,
        unit: LedgerStore,
        owner_id: str,
        transaction_id: str,
    ) -> Transaction:
        transaction = await unit.find_transaction(transaction_id, owner_id)
        if transaction is None:
            raise NotFoundError("Transaction", transaction_id)
        return transaction

    async def _ensure_category(self, unit: LedgerStore, owner_id: str, category_id: str) -> None:
        if await unit.find_visible_category(category_id, owner_id) is None:
            raise NotFoundError("Category", category_id)

    def _ensure_writable(self, account: Account) -> None:
        """보관된 계좌에는 새 거래를 추가할 수 없음"""
        if account.is_archived:
            raise ConflictError(f"Account is archived: {account.id}")

    async def _settled_total_balance(self, unit: LedgerStore, account_id: str, initial: Decimal) -> Decimal:
        settled = await unit.list_transactions_for_account(account_id, TransactionStatus.SETTLED)
        return recompute(initial, settled)

    async def _refresh_balance(self, unit: LedgerStore, account_id: str) -> Decimal:
        """계좌 잔액 재계산 후 저장"""
        account = await unit.find_account(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)

        balance = await self._settled_total_balance(unit, account.id, account.initial_balance)
        await unit.update_account_balance(account.id, balance)
        logger.debug(f"Balance recomputed: {account.id} {account.current_balance} → {balance}")
        return balance

    async def _apply_initial_balance(self, unit: LedgerStore, account_id: str, initial: Decimal) -> None:
        balance = await self._settled_total_balance(unit, account_id, initial)
        await unit.update_account_balance(account_id, balance, initial_balance=initial)

    async def _reconcile(self, unit: LedgerStore, account: Account) -> BalanceDrift | None:
        """재계산 결과가 저장값과 다르면 저장하고 차이 반환"""
        computed = await self._settled_total_balance(unit, account.id, account.initial_balance)
        if computed == account.current_balance:
            return None

        await unit.update_account_balance(account.id, computed)
        return BalanceDrift(
            account_id=account.id,
            owner_id=account.owner_id,
            stored=account.current_balance,
            computed=computed,
        )

    def _log_drift(self, drift: BalanceDrift) -> None:
        logger.warning(
            f"Balance drift repaired: {drift.account_id} "
            f"stored={drift.stored} computed={drift.computed} diff={drift.difference}"
        )
