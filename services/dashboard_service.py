"""
Dashboard 서비스

SETTLED 거래 기준 집계 (월간 요약, 카테고리별 합계, 월별 추이, 최근 거래, 계좌 요약).
모든 금액은 Decimal, 소수점 2자리. 월 경계는 UTC 기준.
"""

import logging
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable

from core.constants import Defaults, Money
from core.errors import ValidationError
from core.ledger.inputs import TransactionFilter, parse_kind
from core.ledger.models import Transaction
from core.ledger.store import LedgerStore
from core.ledger.types import ReportPeriod, TransactionKind
from core.utils.money import to_money
from core.utils.timezone import days_ago, ensure_utc, month_range, month_start, now_utc

logger = logging.getLogger(__name__)

PERCENT = Decimal("100")


def _totals(transactions: Iterable[Transaction]) -> tuple[Decimal, Decimal]:
    """(수입 합계, 지출 합계)"""
    income = Money.ZERO
    expense = Money.ZERO
    for txn in transactions:
        if txn.kind == TransactionKind.INCOME.value:
            income += txn.amount
        else:
            expense += txn.amount
    return to_money(income), to_money(expense)


def variation(current: Decimal, previous: Decimal) -> Decimal:
    """전월 대비 증감률 (%)

    전월 값이 0이면 0.
    """
    if previous == 0:
        return Money.ZERO
    return ((current - previous) / previous * PERCENT).quantize(Money.QUANTUM)


def _parse_period(value: ReportPeriod | str) -> ReportPeriod:
    try:
        return ReportPeriod(value)
    except ValueError as e:
        raise ValidationError(f"Unknown report period: {value!r}") from e


def period_start(period: ReportPeriod, now: datetime) -> datetime:
    """집계 시작 시각

    - week: 7일 전
    - month: 이번 달 1일
    - year: 올해 1월 1일
    """
    if period == ReportPeriod.WEEK:
        return days_ago(now, 7)
    if period == ReportPeriod.YEAR:
        return month_start(now).replace(month=1)
    return month_start(now)


class DashboardService:
    """Dashboard 서비스

    읽기 전용 집계. 계좌 잔액은 저장된 current_balance를 그대로 사용.

    Args:
        store: Ledger 저장소
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    async def get_summary(self, owner_id: str, now: datetime | None = None) -> dict[str, Any]:
        """이번 달 요약 + 전월 대비"""
        now = ensure_utc(now) if now is not None else now_utc()

        current_start, current_end = month_range(now)
        previous_start, previous_end = month_range(now, -1)

        income, expense = _totals(
            await self.store.list_settled(owner_id, current_start, current_end)
        )
        previous_income, previous_expense = _totals(
            await self.store.list_settled(owner_id, previous_start, previous_end)
        )
        accounts = await self.get_accounts_summary(owner_id)

        return {
            "month": current_start.strftime("%Y-%m"),
            "current": {
                "income": income,
                "expense": expense,
                "net": income - expense,
            },
            "previous": {
                "income": previous_income,
                "expense": previous_expense,
            },
            "variation": {
                "income": variation(income, previous_income),
                "expense": variation(expense, previous_expense),
            },
            "total_balance": accounts["total_balance"],
            "active_accounts": accounts["active_accounts"],
        }

    async def get_by_category(
        self,
        owner_id: str,
        kind: TransactionKind | str = TransactionKind.EXPENSE,
        period: ReportPeriod | str = ReportPeriod.MONTH,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """카테고리별 합계 (합계 내림차순)"""
        kind = parse_kind(kind)
        period = _parse_period(period)
        now = ensure_utc(now) if now is not None else now_utc()

        transactions = await self.store.list_settled(
            owner_id, start=period_start(period, now), kind=kind
        )
        categories = {c.id: c for c in await self.store.list_categories(owner_id)}

        grouped: dict[str, dict[str, Any]] = {}
        for txn in transactions:
            bucket = grouped.get(txn.category_id)
            if bucket is None:
                category = categories.get(txn.category_id)
                bucket = {
                    "category_id": txn.category_id,
                    "name": category.name if category else None,
                    "color": category.color if category else None,
                    "icon": category.icon if category else None,
                    "total": Money.ZERO,
                    "count": 0,
                }
                grouped[txn.category_id] = bucket
            bucket["total"] += txn.amount
            bucket["count"] += 1

        return sorted(grouped.values(), key=lambda b: b["total"], reverse=True)

    async def get_balance_history(
        self,
        owner_id: str,
        months: int = Defaults.HISTORY_MONTHS,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """최근 N개월 월별 수입/지출/순액 (오래된 달부터)"""
        if months < 1:
            raise ValidationError(f"months must be at least 1: {months}")
        now = ensure_utc(now) if now is not None else now_utc()

        history = []
        for offset in range(-(months - 1), 1):
            start, end = month_range(now, offset)
            income, expense = _totals(await self.store.list_settled(owner_id, start, end))
            history.append({
                "month": start.strftime("%Y-%m"),
                "income": income,
                "expense": expense,
                "net": income - expense,
            })

        return history

    async def get_recent_transactions(
        self,
        owner_id: str,
        limit: int = Defaults.RECENT_TRANSACTIONS,
    ) -> list[dict[str, Any]]:
        """최근 거래 (상태 무관, 최신순) + 카테고리/계좌 이름"""
        if not 1 <= limit <= Defaults.MAX_PAGE_LIMIT:
            raise ValidationError(f"limit must be between 1 and {Defaults.MAX_PAGE_LIMIT}: {limit}")

        transactions, _ = await self.store.list_transactions(owner_id, TransactionFilter(limit=limit))
        categories = {c.id: c for c in await self.store.list_categories(owner_id)}
        accounts = {
            a.id: a for a in await self.store.list_accounts(owner_id, include_archived=True)
        }

        recent = []
        for txn in transactions:
            category = categories.get(txn.category_id)
            account = accounts.get(txn.account_id)
            item = asdict(txn)
            item["category_name"] = category.name if category else None
            item["category_color"] = category.color if category else None
            item["category_icon"] = category.icon if category else None
            item["account_name"] = account.name if account else None
            recent.append(item)

        return recent

    async def get_accounts_summary(self, owner_id: str) -> dict[str, Any]:
        """활성 계좌 수 + 총 잔액"""
        accounts = await self.store.list_accounts(owner_id, include_archived=False)
        total = sum((a.current_balance for a in accounts), Money.ZERO)
        return {
            "active_accounts": len(accounts),
            "total_balance": to_money(total),
        }
