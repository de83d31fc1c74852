"""
잔액 재계산 엔진

계좌 잔액 = 초기 잔액 + Σ(SETTLED 거래의 부호 있는 금액)

항상 전체 거래를 다시 합산 (증분 반영 없음).
누적 오차가 생길 여지가 없고, 불일치가 생겨도 다음 재계산에서 자동 복구됨.
부수 효과 없는 순수 함수.
"""

from decimal import Decimal
from typing import Any, Iterable, Protocol

from core.errors import ValidationError
from core.ledger.types import TransactionKind
from core.utils.money import to_money


class SettledAmount(Protocol):
    """재계산에 필요한 최소 필드 (kind, amount)"""

    kind: Any
    amount: Decimal


def signed_amount(kind: str | TransactionKind, amount: Any) -> Decimal:
    """거래 유형에 따른 부호 적용

    Args:
        kind: income 또는 expense
        amount: 양수 금액

    Returns:
        INCOME이면 +amount, EXPENSE면 -amount

    Raises:
        ValidationError: 알 수 없는 거래 유형
    """
    value = to_money(amount)
    kind_value = kind.value if isinstance(kind, TransactionKind) else kind

    if kind_value == TransactionKind.INCOME.value:
        return value
    if kind_value == TransactionKind.EXPENSE.value:
        return -value

    raise ValidationError(f"Unknown transaction kind: {kind_value!r}")


def recompute(
    initial_balance: Any,
    settled_transactions: Iterable[SettledAmount],
) -> Decimal:
    """현재 잔액 재계산

    Args:
        initial_balance: 계좌 초기 잔액 (음수 허용)
        settled_transactions: 계좌의 SETTLED 거래 전체

    Returns:
        현재 잔액 (소수점 2자리 Decimal)

    Example:
        >>> recompute(Decimal("100.00"), [])
        Decimal('100.00')
    """
    balance = to_money(initial_balance)

    for txn in settled_transactions:
        balance += signed_amount(txn.kind, txn.amount)

    return to_money(balance)
