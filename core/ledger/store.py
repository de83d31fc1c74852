"""
Ledger 저장소

계좌 / 거래 / 카테고리 영속화 및 조회.

쓰기 메서드는 작업 단위(run_atomic) 안에서 호출되어야 함.
작업 단위 밖의 쓰기는 커밋되지 않음.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, TypeVar

from core.ledger.inputs import AccountCreate, CategoryCreate, TransactionCreate, TransactionFilter
from core.ledger.models import (
    ACCOUNT_COLUMNS,
    CATEGORY_COLUMNS,
    TRANSACTION_COLUMNS,
    Account,
    Category,
    Transaction,
)
from core.ledger.types import TransactionKind, TransactionStatus
from core.utils.money import format_money
from core.utils.timezone import now_utc, to_db_timestamp

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

T = TypeVar("T")

# 부분 수정 허용 컬럼
ACCOUNT_UPDATABLE: frozenset[str] = frozenset({"name", "kind", "color", "icon"})
TRANSACTION_UPDATABLE: frozenset[str] = frozenset({
    "account_id",
    "category_id",
    "kind",
    "amount",
    "description",
    "occurred_at",
    "status",
    "is_installment",
    "installment_count",
    "installment_index",
    "is_recurring",
    "frequency",
    "receipt_url",
    "notes",
})
CATEGORY_UPDATABLE: frozenset[str] = frozenset({"name", "color", "icon"})


def _to_db_value(value: Any) -> Any:
    """Python 값 → SQLite 저장 값"""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, Decimal):
        return format_money(value)
    if isinstance(value, datetime):
        return to_db_timestamp(value)
    if isinstance(value, Enum):
        return value.value
    return value


def _new_id() -> str:
    return str(uuid.uuid4())


class LedgerStore:
    """Ledger 저장소

    계좌/거래/카테고리 CRUD와 조회 헬퍼 제공.
    잔액 계산 규칙은 알지 못함 (BalanceCoordinator 담당).

    Args:
        db: SQLite 어댑터 (작업 단위 안에서는 단위 전용 연결)

    사용 예시:
    ```python
    store = LedgerStore(db)

    async def work(unit: LedgerStore) -> Account:
        account = await unit.find_account(account_id, owner_id)
        ...
        return account

    account = await store.run_atomic(work)
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def run_atomic(self, fn: Callable[[LedgerStore], Awaitable[T]]) -> T:
        """작업 단위 실행

        fn 안의 모든 읽기/쓰기는 하나의 BEGIN IMMEDIATE 트랜잭션.
        fn이 예외를 던지거나 취소되면 전체 롤백.

        Args:
            fn: 단위 전용 LedgerStore를 받는 코루틴 함수

        Returns:
            fn의 반환값
        """
        async with self.db.unit_of_work() as unit:
            return await fn(LedgerStore(unit))

    # =========================================================================
    # Account
    # =========================================================================

    async def find_account(
        self,
        account_id: str,
        owner_id: str | None = None,
        include_archived: bool = True,
    ) -> Account | None:
        """계좌 조회

        Args:
            account_id: 계좌 ID
            owner_id: 지정 시 소유자 일치 조건 추가
            include_archived: False면 보관된 계좌 제외

        Returns:
            Account 또는 None
        """
        sql = f"SELECT {ACCOUNT_COLUMNS} FROM account WHERE account_id = ?"
        params: list[Any] = [account_id]

        if owner_id is not None:
            sql += " AND owner_id = ?"
            params.append(owner_id)
        if not include_archived:
            sql += " AND deleted_at IS NULL"

        row = await self.db.fetchone(sql, tuple(params))
        return Account.from_row(row) if row else None

    async def list_accounts(
        self,
        owner_id: str,
        include_archived: bool = False,
    ) -> list[Account]:
        """소유자 계좌 목록 (거래 수 포함)"""
        sql = f"""
            SELECT {ACCOUNT_COLUMNS}, transaction_count
            FROM v_account_summary
            WHERE owner_id = ?
        """
        if not include_archived:
            sql += " AND deleted_at IS NULL"
        sql += " ORDER BY created_at ASC, name ASC"

        rows = await self.db.fetchall(sql, (owner_id,))
        return [Account.from_row(row) for row in rows]

    async def list_all_account_ids(self) -> list[str]:
        """전체 계좌 ID (보관 포함, 재조정용)"""
        rows = await self.db.fetchall(
            "SELECT account_id FROM account ORDER BY created_at ASC"
        )
        return [row[0] for row in rows]

    async def create_account(self, owner_id: str, data: AccountCreate) -> Account:
        """계좌 생성 (current_balance = initial_balance)"""
        now = to_db_timestamp(now_utc())
        account_id = _new_id()

        await self.db.execute(
            """
            INSERT INTO account (
                account_id, owner_id, name, kind, initial_balance, current_balance,
                is_active, deleted_at, color, icon, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, 1, NULL, ?, ?, ?, ?)
            """,
            (
                account_id,
                owner_id,
                data.name,
                data.kind.value,
                format_money(data.initial_balance),
                format_money(data.initial_balance),
                data.color,
                data.icon,
                now,
                now,
            ),
        )

        account = await self.find_account(account_id)
        assert account is not None
        return account

    async def update_account_fields(self, account_id: str, fields: dict[str, Any]) -> None:
        """계좌 표시 정보 수정 (name/kind/color/icon)"""
        await self._update_columns("account", "account_id", account_id, fields, ACCOUNT_UPDATABLE)

    async def update_account_balance(
        self,
        account_id: str,
        current_balance: Decimal,
        initial_balance: Decimal | None = None,
    ) -> None:
        """잔액 저장

        initial_balance를 함께 주면 두 필드를 같은 UPDATE로 저장.
        """
        now = to_db_timestamp(now_utc())

        if initial_balance is None:
            await self.db.execute(
                "UPDATE account SET current_balance = ?, updated_at = ? WHERE account_id = ?",
                (format_money(current_balance), now, account_id),
            )
        else:
            await self.db.execute(
                """
                UPDATE account
                SET current_balance = ?, initial_balance = ?, updated_at = ?
                WHERE account_id = ?
                """,
                (format_money(current_balance), format_money(initial_balance), now, account_id),
            )

    async def set_account_archived(
        self,
        account_id: str,
        archived: bool,
        at: datetime | None = None,
    ) -> None:
        """보관 표시 설정/해제

        보관: is_active=0, deleted_at=at
        복원: is_active=1, deleted_at=NULL
        """
        now = now_utc()
        deleted_at = to_db_timestamp(at or now) if archived else None

        await self.db.execute(
            """
            UPDATE account
            SET is_active = ?, deleted_at = ?, updated_at = ?
            WHERE account_id = ?
            """,
            (0 if archived else 1, deleted_at, to_db_timestamp(now), account_id),
        )

    async def delete_account(self, account_id: str) -> None:
        """계좌 영구 삭제"""
        await self.db.execute("DELETE FROM account WHERE account_id = ?", (account_id,))

    async def count_transactions_for_account(self, account_id: str) -> int:
        """계좌에 연결된 거래 수 (상태 무관)"""
        row = await self.db.fetchone(
            "SELECT COUNT(*) FROM ledger_transaction WHERE account_id = ?",
            (account_id,),
        )
        return int(row[0]) if row else 0

    # =========================================================================
    # Transaction
    # =========================================================================

    async def find_transaction(
        self,
        transaction_id: str,
        owner_id: str | None = None,
    ) -> Transaction | None:
        """거래 조회"""
        sql = f"SELECT {TRANSACTION_COLUMNS} FROM ledger_transaction WHERE transaction_id = ?"
        params: list[Any] = [transaction_id]

        if owner_id is not None:
            sql += " AND owner_id = ?"
            params.append(owner_id)

        row = await self.db.fetchone(sql, tuple(params))
        return Transaction.from_row(row) if row else None

    async def list_transactions_for_account(
        self,
        account_id: str,
        status: TransactionStatus | str | None = None,
    ) -> list[Transaction]:
        """계좌의 거래 전체 (status 지정 시 해당 상태만)"""
        sql = f"SELECT {TRANSACTION_COLUMNS} FROM ledger_transaction WHERE account_id = ?"
        params: list[Any] = [account_id]

        if status is not None:
            sql += " AND status = ?"
            params.append(_to_db_value(status))

        sql += " ORDER BY occurred_at ASC, created_at ASC"

        rows = await self.db.fetchall(sql, tuple(params))
        return [Transaction.from_row(row) for row in rows]

    async def create_transaction(self, owner_id: str, data: TransactionCreate) -> Transaction:
        """거래 저장"""
        now = to_db_timestamp(now_utc())
        transaction_id = _new_id()

        await self.db.execute(
            f"""
            INSERT INTO ledger_transaction ({TRANSACTION_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                transaction_id,
                owner_id,
                data.account_id,
                data.category_id,
                data.kind.value,
                format_money(data.amount),
                data.description,
                to_db_timestamp(data.occurred_at),
                data.status.value,
                int(data.is_installment),
                data.installment_count,
                data.installment_index,
                int(data.is_recurring),
                _to_db_value(data.frequency),
                data.receipt_url,
                data.notes,
                now,
                now,
            ),
        )

        transaction = await self.find_transaction(transaction_id)
        assert transaction is not None
        return transaction

    async def update_transaction(self, transaction_id: str, fields: dict[str, Any]) -> None:
        """거래 부분 수정 (허용 컬럼만)"""
        await self._update_columns(
            "ledger_transaction", "transaction_id", transaction_id, fields, TRANSACTION_UPDATABLE
        )

    async def delete_transaction(self, transaction_id: str) -> None:
        """거래 삭제"""
        await self.db.execute(
            "DELETE FROM ledger_transaction WHERE transaction_id = ?",
            (transaction_id,),
        )

    async def list_transactions(
        self,
        owner_id: str,
        filters: TransactionFilter,
    ) -> tuple[list[Transaction], int]:
        """거래 목록 (최신순, 페이지네이션)

        Returns:
            (현재 페이지 거래 목록, 전체 건수)
        """
        where = ["owner_id = ?"]
        params: list[Any] = [owner_id]

        if filters.kind is not None:
            where.append("kind = ?")
            params.append(filters.kind.value)
        if filters.account_id is not None:
            where.append("account_id = ?")
            params.append(filters.account_id)
        if filters.category_id is not None:
            where.append("category_id = ?")
            params.append(filters.category_id)
        if filters.status is not None:
            where.append("status = ?")
            params.append(filters.status.value)
        if filters.start is not None:
            where.append("occurred_at >= ?")
            params.append(to_db_timestamp(filters.start))
        if filters.end is not None:
            where.append("occurred_at <= ?")
            params.append(to_db_timestamp(filters.end))

        where_sql = " AND ".join(where)

        count_row = await self.db.fetchone(
            f"SELECT COUNT(*) FROM ledger_transaction WHERE {where_sql}",
            tuple(params),
        )
        total = int(count_row[0]) if count_row else 0

        offset = (filters.page - 1) * filters.limit
        rows = await self.db.fetchall(
            f"""
            SELECT {TRANSACTION_COLUMNS} FROM ledger_transaction
            WHERE {where_sql}
            ORDER BY occurred_at DESC, created_at DESC
            LIMIT ? OFFSET ?
            """,
            tuple(params + [filters.limit, offset]),
        )

        return [Transaction.from_row(row) for row in rows], total

    async def list_recurring(self, owner_id: str) -> list[Transaction]:
        """반복 거래 목록 (최신순)"""
        rows = await self.db.fetchall(
            f"""
            SELECT {TRANSACTION_COLUMNS} FROM ledger_transaction
            WHERE owner_id = ? AND is_recurring = 1
            ORDER BY occurred_at DESC, created_at DESC
            """,
            (owner_id,),
        )
        return [Transaction.from_row(row) for row in rows]

    async def list_settled(
        self,
        owner_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        kind: TransactionKind | None = None,
    ) -> list[Transaction]:
        """SETTLED 거래 조회 (대시보드 집계용)

        Args:
            start: 포함 시작
            end: 제외 끝
        """
        sql = f"""
            SELECT {TRANSACTION_COLUMNS} FROM ledger_transaction
            WHERE owner_id = ? AND status = ?
        """
        params: list[Any] = [owner_id, TransactionStatus.SETTLED.value]

        if start is not None:
            sql += " AND occurred_at >= ?"
            params.append(to_db_timestamp(start))
        if end is not None:
            sql += " AND occurred_at < ?"
            params.append(to_db_timestamp(end))
        if kind is not None:
            sql += " AND kind = ?"
            params.append(kind.value)

        sql += " ORDER BY occurred_at ASC"

        rows = await self.db.fetchall(sql, tuple(params))
        return [Transaction.from_row(row) for row in rows]

    # =========================================================================
    # Category
    # =========================================================================

    async def find_visible_category(self, category_id: str, owner_id: str) -> Category | None:
        """호출자가 사용할 수 있는 카테고리 (기본 또는 본인 소유)"""
        row = await self.db.fetchone(
            f"""
            SELECT {CATEGORY_COLUMNS} FROM category
            WHERE category_id = ? AND (owner_id IS NULL OR owner_id = ?)
            """,
            (category_id, owner_id),
        )
        return Category.from_row(row) if row else None

    async def find_owned_category(self, category_id: str, owner_id: str) -> Category | None:
        """호출자 소유 카테고리 (기본 카테고리 제외)"""
        row = await self.db.fetchone(
            f"SELECT {CATEGORY_COLUMNS} FROM category WHERE category_id = ? AND owner_id = ?",
            (category_id, owner_id),
        )
        return Category.from_row(row) if row else None

    async def find_category_by_name(
        self,
        owner_id: str,
        kind: TransactionKind | str,
        name: str,
    ) -> Category | None:
        """소유자 + 유형 + 이름(대소문자 무시)으로 조회"""
        row = await self.db.fetchone(
            f"""
            SELECT {CATEGORY_COLUMNS} FROM category
            WHERE owner_id = ? AND kind = ? AND name = ? COLLATE NOCASE
            """,
            (owner_id, _to_db_value(kind), name),
        )
        return Category.from_row(row) if row else None

    async def list_categories(
        self,
        owner_id: str,
        kind: TransactionKind | None = None,
    ) -> list[Category]:
        """카테고리 목록 (기본 먼저, 이름순)"""
        sql = f"""
            SELECT {CATEGORY_COLUMNS} FROM category
            WHERE (owner_id IS NULL OR owner_id = ?)
        """
        params: list[Any] = [owner_id]

        if kind is not None:
            sql += " AND kind = ?"
            params.append(kind.value)

        sql += " ORDER BY is_default DESC, name COLLATE NOCASE ASC"

        rows = await self.db.fetchall(sql, tuple(params))
        return [Category.from_row(row) for row in rows]

    async def create_category(self, owner_id: str, data: CategoryCreate) -> Category:
        """사용자 카테고리 생성"""
        category_id = _new_id()

        await self.db.execute(
            f"""
            INSERT INTO category ({CATEGORY_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, 0, ?)
            """,
            (
                category_id,
                owner_id,
                data.name,
                data.kind.value,
                data.color,
                data.icon,
                to_db_timestamp(now_utc()),
            ),
        )

        category = await self.find_owned_category(category_id, owner_id)
        assert category is not None
        return category

    async def update_category_fields(self, category_id: str, fields: dict[str, Any]) -> None:
        """카테고리 수정 (name/color/icon)"""
        await self._update_columns(
            "category", "category_id", category_id, fields, CATEGORY_UPDATABLE, touch=False
        )

    async def delete_category(self, category_id: str) -> None:
        """카테고리 삭제"""
        await self.db.execute("DELETE FROM category WHERE category_id = ?", (category_id,))

    async def count_transactions_for_category(self, category_id: str) -> int:
        """카테고리를 참조하는 거래 수"""
        row = await self.db.fetchone(
            "SELECT COUNT(*) FROM ledger_transaction WHERE category_id = ?",
            (category_id,),
        )
        return int(row[0]) if row else 0

    # =========================================================================
    # 내부
    # =========================================================================

    async def _update_columns(
        self,
        table: str,
        key_column: str,
        key: str,
        fields: dict[str, Any],
        allowed: frozenset[str],
        touch: bool = True,
    ) -> None:
        """허용된 컬럼만 UPDATE

        Raises:
            ValueError: 허용되지 않은 컬럼
        """
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"Cannot update {table} columns: {sorted(unknown)}")
        if not fields:
            return

        columns = sorted(fields)
        assignments = [f"{column} = ?" for column in columns]
        params = [_to_db_value(fields[column]) for column in columns]

        if touch:
            assignments.append("updated_at = ?")
            params.append(to_db_timestamp(now_utc()))

        params.append(key)
        await self.db.execute(
            f"UPDATE {table} SET {', '.join(assignments)} WHERE {key_column} = ?",
            tuple(params),
        )
