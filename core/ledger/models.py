"""
Ledger 도메인 모델

Account / Transaction / Category 불변 데이터 구조.
DB 행(tuple) → 모델 변환은 각 모델의 from_row()에서 담당하며,
컬럼 순서는 *_COLUMNS 상수와 일치해야 함.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from core.domain.state_machines import AccountState
from core.ledger.types import TransactionStatus
from core.utils.money import parse_stored_money
from core.utils.timezone import from_db_timestamp


ACCOUNT_COLUMNS: str = """
    account_id, owner_id, name, kind, initial_balance, current_balance,
    is_active, deleted_at, color, icon, created_at, updated_at
"""

TRANSACTION_COLUMNS: str = """
    transaction_id, owner_id, account_id, category_id, kind, amount,
    description, occurred_at, status,
    is_installment, installment_count, installment_index,
    is_recurring, frequency, receipt_url, notes,
    created_at, updated_at
"""

CATEGORY_COLUMNS: str = """
    category_id, owner_id, name, kind, color, icon, is_default, created_at
"""


@dataclass(frozen=True)
class Account:
    """계좌

    current_balance는 파생값:
    initial_balance + Σ(SETTLED 거래의 부호 있는 금액)
    """

    id: str
    owner_id: str
    name: str
    kind: str
    initial_balance: Decimal
    current_balance: Decimal
    active: bool
    deleted_at: datetime | None
    color: str
    icon: str
    created_at: datetime
    updated_at: datetime
    transaction_count: int | None = None  # 목록 조회 시에만 채워짐

    @property
    def is_archived(self) -> bool:
        """보관(soft delete) 여부"""
        return self.deleted_at is not None

    @property
    def state(self) -> AccountState:
        """생명주기 상태"""
        return AccountState.ARCHIVED if self.is_archived else AccountState.ACTIVE

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> "Account":
        """ACCOUNT_COLUMNS 순서의 행 변환 (추가 컬럼은 transaction_count)"""
        return cls(
            id=row[0],
            owner_id=row[1],
            name=row[2],
            kind=row[3],
            initial_balance=parse_stored_money(row[4]),
            current_balance=parse_stored_money(row[5]),
            active=bool(row[6]),
            deleted_at=from_db_timestamp(row[7]),
            color=row[8],
            icon=row[9],
            created_at=from_db_timestamp(row[10]),
            updated_at=from_db_timestamp(row[11]),
            transaction_count=row[12] if len(row) > 12 else None,
        )


@dataclass(frozen=True)
class Transaction:
    """거래

    SETTLED 상태만 계좌 잔액에 반영.
    INCOME은 +amount, EXPENSE는 -amount.
    """

    id: str
    owner_id: str
    account_id: str
    category_id: str
    kind: str
    amount: Decimal
    description: str
    occurred_at: datetime
    status: str
    is_installment: bool = False
    installment_count: int | None = None
    installment_index: int | None = None
    is_recurring: bool = False
    frequency: str | None = None
    receipt_url: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_settled(self) -> bool:
        """잔액 반영 대상 여부"""
        return self.status == TransactionStatus.SETTLED.value

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> "Transaction":
        """TRANSACTION_COLUMNS 순서의 행 변환"""
        return cls(
            id=row[0],
            owner_id=row[1],
            account_id=row[2],
            category_id=row[3],
            kind=row[4],
            amount=parse_stored_money(row[5]),
            description=row[6],
            occurred_at=from_db_timestamp(row[7]),
            status=row[8],
            is_installment=bool(row[9]),
            installment_count=row[10],
            installment_index=row[11],
            is_recurring=bool(row[12]),
            frequency=row[13],
            receipt_url=row[14],
            notes=row[15],
            created_at=from_db_timestamp(row[16]),
            updated_at=from_db_timestamp(row[17]),
        )


@dataclass(frozen=True)
class Category:
    """카테고리

    owner_id가 None이면 시스템 기본 카테고리 (수정/삭제 불가).
    """

    id: str
    owner_id: str | None
    name: str
    kind: str
    color: str
    icon: str
    is_default: bool
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> "Category":
        """CATEGORY_COLUMNS 순서의 행 변환"""
        return cls(
            id=row[0],
            owner_id=row[1],
            name=row[2],
            kind=row[3],
            color=row[4],
            icon=row[5],
            is_default=bool(row[6]),
            created_at=from_db_timestamp(row[7]),
        )
