"""
계좌 생명주기 관리

- 보관(archive): soft delete. 거래가 있어도 허용 (경고 로그)
- 복원(restore): 보관된 계좌만
- 영구 삭제(purge): 거래가 하나라도 있으면 거부

상태 전이는 AccountStateMachine으로 검증하고,
허용되지 않은 전이는 ConflictError로 변환.
"""

import logging

from core.domain.state_machines import AccountState, AccountStateMachine, StateMachineError
from core.errors import ConflictError, NotFoundError
from core.ledger.models import Account
from core.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


class AccountLifecycleManager:
    """계좌 생명주기 관리자

    Args:
        store: Ledger 저장소

    사용 예시:
    ```python
    lifecycle = AccountLifecycleManager(store)

    await lifecycle.archive("user-1", account_id)
    await lifecycle.restore("user-1", account_id)
    await lifecycle.purge("user-1", account_id)  # 거래가 있으면 ConflictError
    ```
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    async def list_accounts(self, owner_id: str, include_archived: bool = False) -> list[Account]:
        """계좌 목록 (거래 수 포함)"""
        return await self.store.list_accounts(owner_id, include_archived=include_archived)

    async def get_account(
        self,
        owner_id: str,
        account_id: str,
        include_archived: bool = False,
    ) -> Account:
        """계좌 조회

        Raises:
            NotFoundError: 없음 / 타인 소유 / 보관됨(include_archived=False)
        """
        account = await self.store.find_account(account_id, owner_id, include_archived=include_archived)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    async def archive(self, owner_id: str, account_id: str) -> Account:
        """계좌 보관

        연결된 거래는 그대로 유지되며 보관된 계좌를 계속 가리킴.

        Raises:
            NotFoundError: 계좌 없음
            ConflictError: 이미 보관된 계좌
        """

        async def work(unit: LedgerStore) -> Account:
            account = await self._load(unit, owner_id, account_id)
            self._transition(account, AccountState.ARCHIVED)

            count = await unit.count_transactions_for_account(account.id)
            if count:
                logger.warning(
                    f"Archiving account with transactions: {account.id} count={count}"
                )

            await unit.set_account_archived(account.id, True)
            return await self._load(unit, owner_id, account_id)

        account = await self.store.run_atomic(work)
        logger.info(f"Account archived: {account_id} owner={owner_id}")
        return account

    async def restore(self, owner_id: str, account_id: str) -> Account:
        """보관된 계좌 복원

        Raises:
            NotFoundError: 계좌 없음
            ConflictError: 보관 상태가 아님
        """

        async def work(unit: LedgerStore) -> Account:
            account = await self._load(unit, owner_id, account_id)
            self._transition(account, AccountState.ACTIVE)

            await unit.set_account_archived(account.id, False)
            return await self._load(unit, owner_id, account_id)

        account = await self.store.run_atomic(work)
        logger.info(f"Account restored: {account_id} owner={owner_id}")
        return account

    async def purge(self, owner_id: str, account_id: str) -> None:
        """계좌 영구 삭제

        Raises:
            NotFoundError: 계좌 없음
            ConflictError: 거래가 연결되어 있음 (계좌와 잔액은 변경되지 않음)
        """

        async def work(unit: LedgerStore) -> None:
            account = await self._load(unit, owner_id, account_id)
            self._transition(account, AccountState.PURGED)

            count = await unit.count_transactions_for_account(account.id)
            if count:
                raise ConflictError(
                    f"Account has {count} transaction(s) and cannot be purged: {account.id}"
                )

            await unit.delete_account(account.id)

        await self.store.run_atomic(work)
        logger.info(f"Account purged: {account_id} owner={owner_id}")

    async def _load(self, unit: LedgerStore, owner_id: str, account_id: str) -> Account:
        account = await unit.find_account(account_id, owner_id, include_archived=True)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    def _transition(self, account: Account, target: AccountState) -> None:
        machine = AccountStateMachine(account.state)
        try:
            machine.transition(target)
        except StateMachineError as e:
            raise ConflictError(str(e)) from e
