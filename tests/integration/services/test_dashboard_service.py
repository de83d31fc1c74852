"""
DashboardService 통합 테스트

기준 시각 2026-10-15, 9월/10월 SETTLED 거래로 집계 검증
"""

from decimal import Decimal

import pytest
import pytest_asyncio

from core.errors import ValidationError
from core.ledger.types import ReportPeriod
from services.bootstrap import LedgerServices
from services.dashboard_service import period_start, variation
from tests.helpers import FOOD, OTHER_OWNER, OWNER, SALARY, account_input, at, transaction_input

TRANSPORT = "default:expense:transport"
NOW = at(2026, 10, 15)


@pytest_asyncio.fixture
async def seeded(services: LedgerServices) -> LedgerServices:
    """9월: 수입 800 / 지출 100, 10월: 수입 1000 / 지출 280 (+ 대기 999)"""
    coordinator = services.coordinator
    account = await coordinator.create_account(OWNER, account_input(initial_balance="100"))
    archived = await coordinator.create_account(OWNER, account_input("Old", initial_balance="5"))
    await services.lifecycle.archive(OWNER, archived.id)
    await coordinator.create_account(OTHER_OWNER, account_input(initial_balance="9999"))

    def income(amount: str, when):
        return transaction_input(account.id, kind="income", category_id=SALARY, amount=amount, occurred_at=when)

    def expense(amount: str, when, category_id: str = FOOD, **extra):
        return transaction_input(account.id, category_id=category_id, amount=amount, occurred_at=when, **extra)

    for payload in (
        income("800", at(2026, 9, 1)),
        expense("100", at(2026, 9, 30, 23)),
        income("1000", at(2026, 10, 1, 0)),
        expense("200", at(2026, 10, 5)),
        expense("50", at(2026, 10, 10), TRANSPORT),
        expense("30", at(2026, 10, 12)),
        expense("999", at(2026, 10, 14), status="pending"),
    ):
        await coordinator.create_transaction(OWNER, payload)

    return services


class TestHelpers:
    """집계 헬퍼 테스트"""

    def test_variation(self) -> None:
        assert variation(Decimal("150"), Decimal("100")) == Decimal("50.00")
        assert variation(Decimal("50"), Decimal("200")) == Decimal("-75.00")

    def test_variation_zero_previous(self) -> None:
        assert variation(Decimal("10"), Decimal("0")) == Decimal("0.00")

    def test_period_start(self) -> None:
        assert period_start(ReportPeriod.WEEK, NOW) == at(2026, 10, 8)
        assert period_start(ReportPeriod.MONTH, NOW) == at(2026, 10, 1, 0)
        assert period_start(ReportPeriod.YEAR, NOW) == at(2026, 1, 1, 0)


class TestSummary:
    """월간 요약 테스트"""

    @pytest.mark.asyncio
    async def test_summary(self, seeded: LedgerServices) -> None:
        summary = await seeded.dashboard.get_summary(OWNER, now=NOW)

        assert summary["month"] == "2026-10"
        assert summary["current"] == {
            "income": Decimal("1000.00"),
            "expense": Decimal("280.00"),
            "net": Decimal("720.00"),
        }
        assert summary["previous"] == {"income": Decimal("800.00"), "expense": Decimal("100.00")}
        assert summary["variation"] == {"income": Decimal("25.00"), "expense": Decimal("180.00")}
        assert summary["total_balance"] == Decimal("1520.00")
        assert summary["active_accounts"] == 1

    @pytest.mark.asyncio
    async def test_empty_owner(self, services: LedgerServices) -> None:
        summary = await services.dashboard.get_summary(OWNER, now=NOW)

        assert summary["current"]["net"] == Decimal("0.00")
        assert summary["variation"]["expense"] == Decimal("0.00")
        assert summary["total_balance"] == Decimal("0.00")
        assert summary["active_accounts"] == 0


class TestByCategory:
    """카테고리별 합계 테스트"""

    @pytest.mark.asyncio
    async def test_month(self, seeded: LedgerServices) -> None:
        groups = await seeded.dashboard.get_by_category(OWNER, now=NOW)

        assert [(g["name"], g["total"], g["count"]) for g in groups] == [
            ("Food", Decimal("230.00"), 2),
            ("Transport", Decimal("50.00"), 1),
        ]
        assert groups[0]["category_id"] == FOOD
        assert groups[0]["color"] == "#ef4444"

    @pytest.mark.asyncio
    async def test_week(self, seeded: LedgerServices) -> None:
        groups = await seeded.dashboard.get_by_category(OWNER, period="week", now=NOW)

        assert [(g["category_id"], g["total"]) for g in groups] == [
            (TRANSPORT, Decimal("50.00")),
            (FOOD, Decimal("30.00")),
        ]

    @pytest.mark.asyncio
    async def test_income_year(self, seeded: LedgerServices) -> None:
        groups = await seeded.dashboard.get_by_category(OWNER, kind="income", period="year", now=NOW)

        assert len(groups) == 1
        assert groups[0]["total"] == Decimal("1800.00")
        assert groups[0]["count"] == 2

    @pytest.mark.asyncio
    async def test_invalid_period(self, services: LedgerServices) -> None:
        with pytest.raises(ValidationError):
            await services.dashboard.get_by_category(OWNER, period="decade", now=NOW)


class TestBalanceHistory:
    """월별 추이 테스트"""

    @pytest.mark.asyncio
    async def test_three_months(self, seeded: LedgerServices) -> None:
        history = await seeded.dashboard.get_balance_history(OWNER, months=3, now=NOW)

        assert [h["month"] for h in history] == ["2026-08", "2026-09", "2026-10"]
        assert history[0]["net"] == Decimal("0.00")
        assert history[1] == {
            "month": "2026-09",
            "income": Decimal("800.00"),
            "expense": Decimal("100.00"),
            "net": Decimal("700.00"),
        }
        assert history[2]["net"] == Decimal("720.00")

    @pytest.mark.asyncio
    async def test_default_length(self, services: LedgerServices) -> None:
        history = await services.dashboard.get_balance_history(OWNER, now=NOW)

        assert len(history) == 6
        assert history[0]["month"] == "2026-05"

    @pytest.mark.asyncio
    async def test_invalid_months(self, services: LedgerServices) -> None:
        with pytest.raises(ValidationError):
            await services.dashboard.get_balance_history(OWNER, months=0)


class TestRecentTransactions:
    """최근 거래 테스트"""

    @pytest.mark.asyncio
    async def test_recent_includes_all_statuses(self, seeded: LedgerServices) -> None:
        recent = await seeded.dashboard.get_recent_transactions(OWNER, limit=2)

        assert [r["amount"] for r in recent] == [Decimal("999.00"), Decimal("30.00")]
        assert recent[0]["status"] == "pending"
        assert recent[0]["category_name"] == "Food"
        assert recent[0]["category_icon"] == "utensils"
        assert recent[0]["account_name"] == "Wallet"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, 201])
    async def test_invalid_limit(self, services: LedgerServices, limit: int) -> None:
        with pytest.raises(ValidationError):
            await services.dashboard.get_recent_transactions(OWNER, limit=limit)


class TestAccountsSummary:
    """계좌 요약 테스트"""

    @pytest.mark.asyncio
    async def test_excludes_archived(self, seeded: LedgerServices) -> None:
        summary = await seeded.dashboard.get_accounts_summary(OWNER)

        assert summary == {"active_accounts": 1, "total_balance": Decimal("1520.00")}
