"""
금액 유틸리티

모든 금액은 Decimal, 소수점 2자리 고정.
float 입력은 거부 (이진 부동소수점 오차 누적 방지).

경계 표현:
- Decimal / 10진 문자열 ("12.50") / 정수 (12 → 12.00)
- 최소 단위 정수 (1250 → 12.50): from_minor_units / to_minor_units
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from core.constants import Money
from core.errors import ValidationError


def to_money(value: Any) -> Decimal:
    """금액 정규화

    Args:
        value: Decimal, 10진 문자열 또는 정수

    Returns:
        소수점 2자리로 정규화된 Decimal

    Raises:
        ValidationError: float/bool 입력, 숫자가 아닌 문자열,
            소수점 3자리 이상의 유효 자릿수

    Example:
        >>> to_money("10.5")
        Decimal('10.50')
        >>> to_money(3)
        Decimal('3.00')
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError(
            f"Money must be a decimal string or integer, got {type(value).__name__}"
        )

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation as e:
            raise ValidationError(f"Invalid money value: {value!r}") from e
    else:
        raise ValidationError(f"Unsupported money type: {type(value).__name__}")

    if not amount.is_finite():
        raise ValidationError(f"Money must be finite: {value!r}")

    try:
        quantized = amount.quantize(Money.QUANTUM)
    except InvalidOperation as e:
        raise ValidationError(f"Money out of range: {value!r}") from e

    if quantized != amount:
        raise ValidationError(f"Money allows at most two decimal places: {value!r}")

    return quantized


def from_minor_units(minor: int) -> Decimal:
    """최소 단위 정수 → Decimal

    Example:
        >>> from_minor_units(1250)
        Decimal('12.50')
    """
    if isinstance(minor, bool) or not isinstance(minor, int):
        raise ValidationError(f"Minor units must be an integer, got {type(minor).__name__}")
    return (Decimal(minor) / Money.MINOR_UNITS).quantize(Money.QUANTUM)


def to_minor_units(amount: Any) -> int:
    """Decimal → 최소 단위 정수

    Example:
        >>> to_minor_units("12.50")
        1250
    """
    return int(to_money(amount) * Money.MINOR_UNITS)


def format_money(amount: Decimal) -> str:
    """저장/표시용 문자열 (항상 소수점 2자리)"""
    return str(amount.quantize(Money.QUANTUM))


def parse_stored_money(raw: str | None) -> Decimal:
    """DB TEXT 컬럼 → Decimal (NULL은 0)"""
    if raw is None:
        return Money.ZERO
    return Decimal(raw).quantize(Money.QUANTUM)
