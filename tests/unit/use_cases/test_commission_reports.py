"""Unit tests for commission rate lookup and commission reporting"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.commissions import (
    GetCommissionRate,
    GetCommissionSummary,
    GetCommissionAnalytics,
    GenerateDailyCommissionReport,
)
from src.domain.commission import InstitutionCommission
from src.domain.platform import Course, Institution, Payment, PaymentStatus
from src.domain.subscription import InstitutionSubscription, SubscriptionStatus
from src.domain.tier import CommissionTier, InstitutionPlanType


def institution_subscription(status=SubscriptionStatus.ACTIVE, tier_id="ctier_pro") -> InstitutionSubscription:
    now = datetime.utcnow()
    return InstitutionSubscription(
        id="isub_1",
        institution_id="inst_1",
        commission_tier_id=tier_id,
        plan_type=InstitutionPlanType.PROFESSIONAL,
        status=status,
        start_date=now - timedelta(days=10),
        end_date=now + timedelta(days=20),
        amount=Decimal("299.00"),
    )


@pytest.fixture
def institution_repo():
    repo = MagicMock()
    repo.get_by_id = AsyncMock(
        return_value=Institution(id="inst_1", name="Lingua", commission_rate=Decimal("25.00"))
    )
    return repo


@pytest.fixture
def subscription_repo():
    repo = MagicMock()
    repo.get_current = AsyncMock(return_value=institution_subscription())
    return repo


@pytest.fixture
def tier_repo():
    repo = MagicMock()
    repo.get_commission_tier = AsyncMock(
        return_value=CommissionTier(
            id="ctier_pro",
            plan_type=InstitutionPlanType.PROFESSIONAL,
            name="Professional",
            price=Decimal("299.00"),
            commission_rate=Decimal("15.00"),
        )
    )
    return repo


@pytest.mark.asyncio
class TestGetCommissionRate:
    async def test_active_tier_rate(self, institution_repo, subscription_repo, tier_repo, policy):
        result = await GetCommissionRate(institution_repo, subscription_repo, tier_repo, policy).execute("inst_1")

        assert result.is_ok()
        assert result.value.commission_rate == Decimal("15.00")
        assert result.value.source == "TIER"

    async def test_cancelled_subscription_falls_back_to_stored_rate(
        self, institution_repo, subscription_repo, tier_repo, policy
    ):
        """
        Given: A CANCELLED subscription whose tier rate is 15% and a stored rate of 25%
        When: The reporting rate is requested
        Then: The stored 25% is reported
        """
        subscription_repo.get_current.return_value = institution_subscription(status=SubscriptionStatus.CANCELLED)

        result = await GetCommissionRate(institution_repo, subscription_repo, tier_repo, policy).execute("inst_1")

        assert result.value.commission_rate == Decimal("25.00")
        assert result.value.source == "INSTITUTION"

    async def test_unknown_institution(self, institution_repo, subscription_repo, tier_repo, policy):
        institution_repo.get_by_id = AsyncMock(return_value=None)

        result = await GetCommissionRate(institution_repo, subscription_repo, tier_repo, policy).execute("nope")

        assert result.is_err()
        assert result.error.code == "INSTITUTION_NOT_FOUND"


@pytest.mark.asyncio
class TestGetCommissionSummary:
    async def test_totals_over_period(self, institution_repo, subscription_repo, tier_repo, policy):
        payment_repo = MagicMock()
        payment_repo.list_completed_between = AsyncMock(
            return_value=[
                Payment(id="p1", amount=Decimal("200.00"), status=PaymentStatus.COMPLETED),
                Payment(id="p2", amount=Decimal("100.00"), status=PaymentStatus.COMPLETED),
            ]
        )
        commission_repo = MagicMock()
        commission_repo.get_by_payment_id = AsyncMock(
            side_effect=[
                InstitutionCommission(
                    institution_id="inst_1", payment_id="p1",
                    amount=Decimal("30.00"), commission_rate=Decimal("15.00"),
                ),
                None,
            ]
        )
        use_case = GetCommissionSummary(
            institution_repo, subscription_repo, tier_repo, payment_repo, commission_repo, policy
        )

        result = await use_case.execute("inst_1", datetime(2024, 1, 1), datetime(2024, 1, 31))

        assert result.is_ok()
        summary = result.value
        assert summary.total_revenue == Decimal("300.00")
        assert summary.total_commission == Decimal("30.00")
        assert summary.total_institution_share == Decimal("270.00")
        assert summary.payment_count == 2
        assert summary.commission_rate == Decimal("15.00")

    async def test_inverted_range(self, institution_repo, subscription_repo, tier_repo, policy):
        use_case = GetCommissionSummary(
            institution_repo, subscription_repo, tier_repo, MagicMock(), MagicMock(), policy
        )

        result = await use_case.execute("inst_1", datetime(2024, 2, 1), datetime(2024, 1, 1))

        assert result.is_err()
        assert result.error.code == "INVALID_DATE_RANGE"


@pytest.mark.asyncio
class TestGetCommissionAnalytics:
    async def test_periods_and_top_institutions(self):
        commission_repo = MagicMock()
        commission_repo.sum_for_period = AsyncMock(
            side_effect=[
                (Decimal("120.00"), 4),
                (Decimal("900.00"), 30),
                (Decimal("2500.00"), 80),
            ]
        )
        commission_repo.totals_by_institution = AsyncMock(
            return_value=[("inst_1", Decimal("80.00")), ("inst_gone", Decimal("40.00"))]
        )
        institution_repo = MagicMock()
        institution_repo.get_by_ids = AsyncMock(return_value=[Institution(id="inst_1", name="Lingua")])
        course_repo = MagicMock()
        course_repo.list_by_institution = AsyncMock(
            side_effect=[[Course(id="c1", title="A"), Course(id="c2", title="B")], []]
        )

        result = await GetCommissionAnalytics(commission_repo, institution_repo, course_repo).execute(
            now=datetime(2024, 5, 20, 15, 0)
        )

        assert result.is_ok()
        analytics = result.value
        assert analytics.monthly.total == Decimal("120.00")
        assert analytics.yearly.count == 30
        assert analytics.all_time.total == Decimal("2500.00")
        assert [t.id for t in analytics.top_institutions] == ["inst_1", "inst_gone"]
        assert analytics.top_institutions[0].course_count == 2
        assert analytics.top_institutions[1].name == "Unknown"

        start, end = commission_repo.totals_by_institution.call_args[0]
        assert start == datetime(2024, 5, 1)
        assert commission_repo.totals_by_institution.call_args.kwargs["limit"] == 5


@pytest.mark.asyncio
class TestDailyCommissionReport:
    async def test_report_for_day(self, subscription_repo):
        institution_repo = MagicMock()
        institution_repo.list_all = AsyncMock(
            return_value=[
                Institution(id="inst_1", name="Lingua", commission_rate=Decimal("15.00")),
                Institution(id="inst_2", name="Polyglot", commission_rate=Decimal("25.00")),
            ]
        )
        subscription_repo.get_current = AsyncMock(side_effect=[institution_subscription(), None])
        commission_repo = MagicMock()
        commission_repo.sum_for_period = AsyncMock(
            side_effect=[(Decimal("45.00"), 3), (Decimal("0.00"), 0)]
        )

        result = await GenerateDailyCommissionReport(institution_repo, subscription_repo, commission_repo).execute(
            day=datetime(2024, 5, 20, 18, 30)
        )

        assert result.is_ok()
        report = result.value
        assert report.date.isoformat() == "2024-05-20"
        assert report.total_institutions == 2
        assert report.active_subscriptions == 1
        assert report.total_commissions == Decimal("45.00")
        assert report.institutions[1].plan_type == "NONE"
