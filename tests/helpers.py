"""
테스트 헬퍼

소유자 ID, 기본 카테고리 ID, 입력 생성 헬퍼.
"""

from datetime import datetime, timezone
from typing import Any

OWNER = "user-1"
OTHER_OWNER = "user-2"

FOOD = "default:expense:food"
SALARY = "default:income:salary"


def at(year: int, month: int, day: int, hour: int = 12) -> datetime:
    """UTC 시각 헬퍼"""
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def account_input(name: str = "Wallet", **overrides: Any) -> dict[str, Any]:
    """계좌 생성 입력 헬퍼"""
    data: dict[str, Any] = {"name": name, "kind": "wallet"}
    data.update(overrides)
    return data


def transaction_input(account_id: str, **overrides: Any) -> dict[str, Any]:
    """거래 생성 입력 헬퍼 (기본: 10.00 지출, SETTLED)"""
    data: dict[str, Any] = {
        "account_id": account_id,
        "category_id": FOOD,
        "kind": "expense",
        "amount": "10.00",
        "description": "Groceries",
        "occurred_at": at(2026, 10, 5),
    }
    data.update(overrides)
    return data
