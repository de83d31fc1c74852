"""
입력 스키마 (Pydantic)

계좌/거래/카테고리 생성 및 부분 수정 입력 검증.
검증은 저장소 변경 전에 수행되므로 실패 시 부분 상태가 생기지 않음.

Patch 모델은 "필드 있음 / 없음"을 model_fields_set으로 구분.
값이 None인 것과 필드가 없는 것은 다름:
- receipt_url=None: 영수증 URL 삭제
- receipt_url 생략: 변경 없음
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, ClassVar, Mapping, TypeVar

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from core.constants import Defaults
from core.errors import ValidationError
from core.ledger.types import (
    AccountKind,
    RecurrenceFrequency,
    TransactionKind,
    TransactionStatus,
)
from core.utils.money import to_money
from core.utils.timezone import ensure_utc


# float 거부 + 소수점 2자리 정규화
MoneyValue = Annotated[Decimal, BeforeValidator(to_money)]

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
RECEIPT_URL_PATTERN = r"^https?://[^\s/$.?#][^\s]*$"

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_input(model: type[ModelT], data: ModelT | Mapping[str, Any]) -> ModelT:
    """입력 검증

    이미 검증된 모델 인스턴스는 그대로 반환.

    Raises:
        ValidationError: 필드 검증 실패
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e


class _LedgerInput(BaseModel):
    """입력 모델 공통 설정"""

    model_config = {
        "extra": "forbid",
        "str_strip_whitespace": True,
    }


class _PatchInput(_LedgerInput):
    """부분 수정 입력 공통

    NON_NULLABLE 필드는 명시적으로 None을 보낼 수 없음.
    """

    NON_NULLABLE: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_for_required(self) -> "_PatchInput":
        for name in self.model_fields_set & self.NON_NULLABLE:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """명시적으로 전달된 필드만 반환"""
        return {name: getattr(self, name) for name in self.model_fields_set}

    def has(self, name: str) -> bool:
        """필드 전달 여부"""
        return name in self.model_fields_set


# =========================================================================
# Account
# =========================================================================

class AccountCreate(_LedgerInput):
    """계좌 생성 입력"""

    name: str = Field(..., min_length=2, max_length=50, description="계좌 이름")
    kind: AccountKind = Field(..., description="계좌 유형")
    initial_balance: MoneyValue = Field(default=Decimal("0.00"), description="초기 잔액 (음수 허용)")
    color: str = Field(default=Defaults.ACCOUNT_COLOR, pattern=HEX_COLOR_PATTERN)
    icon: str = Field(default=Defaults.ACCOUNT_ICON, max_length=30)


class AccountPatch(_PatchInput):
    """계좌 부분 수정 입력

    initial_balance 변경은 전체 재계산으로 처리됨.
    보관/복원은 AccountLifecycleManager를 통해서만 가능.
    """

    NON_NULLABLE: ClassVar[frozenset[str]] = frozenset({"name", "kind", "initial_balance", "color", "icon"})

    name: str | None = Field(default=None, min_length=2, max_length=50)
    kind: AccountKind | None = None
    initial_balance: MoneyValue | None = None
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)
    icon: str | None = Field(default=None, max_length=30)


# =========================================================================
# Transaction
# =========================================================================

class TransactionCreate(_LedgerInput):
    """거래 생성 입력"""

    account_id: str = Field(..., min_length=1, description="계좌 ID")
    category_id: str = Field(..., min_length=1, description="카테고리 ID")
    kind: TransactionKind = Field(..., description="거래 유형")
    amount: MoneyValue = Field(..., gt=0, description="금액 (양수)")
    description: str = Field(..., min_length=2, max_length=200)
    occurred_at: datetime = Field(..., description="거래 일시 (naive면 UTC)")
    status: TransactionStatus = Field(default=TransactionStatus.SETTLED)
    is_installment: bool = False
    installment_count: int | None = Field(default=None, ge=2, le=60)
    installment_index: int | None = Field(default=None, ge=1)
    is_recurring: bool = False
    frequency: RecurrenceFrequency | None = None
    receipt_url: str | None = Field(default=None, pattern=RECEIPT_URL_PATTERN)
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("occurred_at")
    @classmethod
    def normalize_occurred_at(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def check_installments(self) -> "TransactionCreate":
        check_installment_bounds(self.installment_count, self.installment_index)
        return self


class TransactionPatch(_PatchInput):
    """거래 부분 수정 입력

    account_id 변경 시 기존 계좌와 새 계좌 모두 재계산.
    """

    NON_NULLABLE: ClassVar[frozenset[str]] = frozenset({
        "account_id",
        "category_id",
        "kind",
        "amount",
        "description",
        "occurred_at",
        "status",
        "is_installment",
        "is_recurring",
    })

    account_id: str | None = Field(default=None, min_length=1)
    category_id: str | None = Field(default=None, min_length=1)
    kind: TransactionKind | None = None
    amount: MoneyValue | None = Field(default=None, gt=0)
    description: str | None = Field(default=None, min_length=2, max_length=200)
    occurred_at: datetime | None = None
    status: TransactionStatus | None = None
    is_installment: bool | None = None
    installment_count: int | None = Field(default=None, ge=2, le=60)
    installment_index: int | None = Field(default=None, ge=1)
    is_recurring: bool | None = None
    frequency: RecurrenceFrequency | None = None
    receipt_url: str | None = Field(default=None, pattern=RECEIPT_URL_PATTERN)
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("occurred_at")
    @classmethod
    def normalize_occurred_at(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


def check_installment_bounds(count: int | None, index: int | None) -> None:
    """할부 회차 검증 (index ≤ count)"""
    if count is not None and index is not None and index > count:
        raise ValidationError(
            f"installment_index ({index}) cannot exceed installment_count ({count})"
        )


def parse_kind(value: TransactionKind | str) -> TransactionKind:
    """거래 유형 변환

    Raises:
        ValidationError: income/expense 이외의 값
    """
    try:
        return TransactionKind(value)
    except ValueError as e:
        raise ValidationError(f"Unknown transaction kind: {value!r}") from e


class TransactionFilter(_LedgerInput):
    """거래 목록 조회 조건"""

    kind: TransactionKind | None = None
    account_id: str | None = None
    category_id: str | None = None
    status: TransactionStatus | None = None
    start: datetime | None = Field(default=None, description="포함 시작 일시")
    end: datetime | None = Field(default=None, description="포함 끝 일시")
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=Defaults.PAGE_LIMIT, ge=1, le=Defaults.MAX_PAGE_LIMIT)

    @field_validator("start", "end")
    @classmethod
    def normalize_bounds(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


# =========================================================================
# Category
# =========================================================================

class CategoryCreate(_LedgerInput):
    """사용자 카테고리 생성 입력"""

    name: str = Field(..., min_length=2, max_length=50)
    kind: TransactionKind
    color: str = Field(default=Defaults.CATEGORY_COLOR, pattern=HEX_COLOR_PATTERN)
    icon: str = Field(default=Defaults.CATEGORY_ICON, max_length=30)


class CategoryPatch(_PatchInput):
    """사용자 카테고리 부분 수정 입력 (유형 변경 불가)"""

    NON_NULLABLE: ClassVar[frozenset[str]] = frozenset({"name", "color", "icon"})

    name: str | None = Field(default=None, min_length=2, max_length=50)
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)
    icon: str | None = Field(default=None, max_length=30)
