"""Commission reporting use cases

Read-only aggregates over the commission ledger for dashboards and the
cron report task.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.commission_repository import CommissionRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.app.repositories.platform_repository import InstitutionRepository, CourseRepository
from src.app.repositories.institution_subscription_repository import InstitutionSubscriptionRepository
from src.app.repositories.tier_repository import TierRepository
from src.domain.commission import resolve_reporting_rate
from src.domain.policy import GovernancePolicy
from src.domain.subscription import SubscriptionStatus
from .dtos import (
    CommissionSummaryDTO,
    CommissionTotalDTO,
    TopInstitutionDTO,
    CommissionAnalyticsDTO,
    DailyInstitutionCommissionDTO,
    DailyCommissionReportDTO,
)

logger = logging.getLogger(__name__)

TOP_INSTITUTIONS_LIMIT = 5


class GetCommissionSummary:
    """
    Use Case: Revenue and commission totals for one institution over a period

    Revenue counts COMPLETED payments for the institution's courses; commission
    counts the records attached to those payments (0 where none exists yet).
    """

    def __init__(
        self,
        institution_repo: InstitutionRepository,
        subscription_repo: InstitutionSubscriptionRepository,
        tier_repo: TierRepository,
        payment_repo: PaymentRepository,
        commission_repo: CommissionRepository,
        policy: GovernancePolicy,
    ):
        self.institution_repo = institution_repo
        self.subscription_repo = subscription_repo
        self.tier_repo = tier_repo
        self.payment_repo = payment_repo
        self.commission_repo = commission_repo
        self.policy = policy

    async def execute(
        self, institution_id: str, start_date: datetime, end_date: datetime
    ) -> Result[CommissionSummaryDTO]:
        if end_date < start_date:
            return Return.err(
                Error(code="INVALID_DATE_RANGE", message="end_date must not be before start_date")
            )

        try:
            institution = await self.institution_repo.get_by_id(institution_id)
            if not institution:
                return Return.err(
                    Error(
                        code="INSTITUTION_NOT_FOUND",
                        message=f"Institution not found: {institution_id}",
                    )
                )

            payments = await self.payment_repo.list_completed_between(
                start_date, end_date, institution_id=institution_id
            )

            total_revenue = Decimal("0.00")
            total_commission = Decimal("0.00")
            for payment in payments:
                total_revenue += Decimal(payment.amount)
                commission = await self.commission_repo.get_by_payment_id(payment.id)
                if commission:
                    total_commission += Decimal(commission.amount)

            subscription = await self.subscription_repo.get_current(institution_id)
            tier = None
            if subscription and subscription.commission_tier_id:
                tier = await self.tier_repo.get_commission_tier(subscription.commission_tier_id)

            rate = resolve_reporting_rate(
                stored_rate=institution.commission_rate,
                subscription_active=bool(subscription) and subscription.status == SubscriptionStatus.ACTIVE,
                tier_rate=tier.commission_rate if tier else None,
                default_rate=self.policy.default_commission_rate,
            )

            return Return.ok(
                CommissionSummaryDTO(
                    institution_id=institution_id,
                    institution_name=institution.name,
                    total_revenue=total_revenue,
                    total_commission=total_commission,
                    total_institution_share=total_revenue - total_commission,
                    commission_rate=rate,
                    period_start=start_date,
                    period_end=end_date,
                    payment_count=len(payments),
                )
            )

        except Exception as e:
            logger.error(f"Error building commission summary for {institution_id}: {e}")
            return Return.err(
                Error(
                    code="COMMISSION_SUMMARY_FAILED",
                    message="Failed to build commission summary",
                    reason=str(e),
                )
            )


class GetCommissionAnalytics:
    """
    Use Case: Platform-wide commission totals

    Month-to-date, year-to-date and all-time totals, plus the top institutions
    by month-to-date commission.
    """

    def __init__(
        self,
        commission_repo: CommissionRepository,
        institution_repo: InstitutionRepository,
        course_repo: CourseRepository,
    ):
        self.commission_repo = commission_repo
        self.institution_repo = institution_repo
        self.course_repo = course_repo

    async def execute(self, now: Optional[datetime] = None) -> Result[CommissionAnalyticsDTO]:
        try:
            now = now or datetime.utcnow()
            start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
            start_of_year = start_of_month.replace(month=1)

            monthly_total, monthly_count = await self.commission_repo.sum_for_period(start=start_of_month)
            yearly_total, yearly_count = await self.commission_repo.sum_for_period(start=start_of_year)
            all_total, all_count = await self.commission_repo.sum_for_period()

            totals = await self.commission_repo.totals_by_institution(
                start_of_month, now, limit=TOP_INSTITUTIONS_LIMIT
            )
            institutions = {
                inst.id: inst
                for inst in await self.institution_repo.get_by_ids([inst_id for inst_id, _ in totals])
            }

            top = []
            for institution_id, amount in totals:
                institution = institutions.get(institution_id)
                courses = await self.course_repo.list_by_institution(institution_id)
                top.append(
                    TopInstitutionDTO(
                        id=institution_id,
                        name=institution.name if institution else "Unknown",
                        commission_amount=amount,
                        course_count=len(courses),
                    )
                )

            return Return.ok(
                CommissionAnalyticsDTO(
                    monthly=CommissionTotalDTO(total=monthly_total, count=monthly_count),
                    yearly=CommissionTotalDTO(total=yearly_total, count=yearly_count),
                    all_time=CommissionTotalDTO(total=all_total, count=all_count),
                    top_institutions=top,
                )
            )

        except Exception as e:
            logger.error(f"Error building commission analytics: {e}")
            return Return.err(
                Error(
                    code="COMMISSION_ANALYTICS_FAILED",
                    message="Failed to build commission analytics",
                    reason=str(e),
                )
            )


class GenerateDailyCommissionReport:
    """
    Use Case: Per-institution commissions recorded on one calendar day (UTC)
    """

    def __init__(
        self,
        institution_repo: InstitutionRepository,
        subscription_repo: InstitutionSubscriptionRepository,
        commission_repo: CommissionRepository,
    ):
        self.institution_repo = institution_repo
        self.subscription_repo = subscription_repo
        self.commission_repo = commission_repo

    async def execute(self, day: Optional[datetime] = None) -> Result[DailyCommissionReportDTO]:
        try:
            day = day or datetime.utcnow()
            start_of_day = day.replace(hour=0, minute=0, second=0, microsecond=0)
            end_of_day = start_of_day + timedelta(days=1) - timedelta(microseconds=1)

            institutions = await self.institution_repo.list_all()

            rows = []
            active_subscriptions = 0
            total = Decimal("0.00")
            for institution in institutions:
                subscription = await self.subscription_repo.get_current(institution.id)
                if subscription and subscription.status == SubscriptionStatus.ACTIVE:
                    active_subscriptions += 1

                daily, _ = await self.commission_repo.sum_for_period(
                    start=start_of_day, end=end_of_day, institution_id=institution.id
                )
                total += daily
                rows.append(
                    DailyInstitutionCommissionDTO(
                        institution_id=institution.id,
                        name=institution.name,
                        plan_type=subscription.plan_type.value if subscription else "NONE",
                        commission_rate=institution.commission_rate,
                        daily_commissions=daily,
                    )
                )

            logger.info(
                f"Daily commission report for {start_of_day.date()}: total {total}, "
                f"{active_subscriptions} active subscriptions"
            )

            return Return.ok(
                DailyCommissionReportDTO(
                    date=start_of_day.date(),
                    total_institutions=len(institutions),
                    active_subscriptions=active_subscriptions,
                    total_commissions=total,
                    institutions=rows,
                )
            )

        except Exception as e:
            logger.error(f"Error generating daily commission report: {e}")
            return Return.err(
                Error(
                    code="DAILY_REPORT_FAILED",
                    message="Failed to generate daily commission report",
                    reason=str(e),
                )
            )
