"""Usage analytics use cases over student subscriptions"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.enrollment_repository import EnrollmentRepository
from src.domain.policy import GovernancePolicy
from src.domain.subscription import StudentSubscription, add_months, days_between_ceil, usage_percentage
from .dtos import UsageMetricsDTO, ApproachingLimitsResponseDTO

logger = logging.getLogger(__name__)


def days_until_monthly_reset(now: datetime) -> int:
    """Days until the platform-wide reset on the 1st of next month"""
    first_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return days_between_ceil(now, add_months(first_of_month, 1))


def build_usage_metrics(
    subscription: StudentSubscription,
    active_enrollments: int,
    threshold: float,
    now: datetime,
) -> UsageMetricsDTO:
    enrollment_pct = usage_percentage(active_enrollments, subscription.enrollment_quota)
    attendance_pct = usage_percentage(subscription.monthly_attendance, subscription.attendance_quota)
    percentage = max(enrollment_pct, attendance_pct)

    return UsageMetricsDTO(
        user_id=subscription.student_id,
        subscription_id=subscription.id,
        current_enrollments=active_enrollments,
        max_enrollments=subscription.enrollment_quota,
        monthly_enrollments=subscription.monthly_enrollments,
        monthly_attendance=subscription.monthly_attendance,
        max_monthly_attendance=subscription.attendance_quota,
        usage_percentage=percentage,
        is_approaching_limit=percentage >= threshold,
        days_until_reset=days_until_monthly_reset(now),
    )


class GetUserUsageMetrics:
    """
    Use Case: Quota usage for one student

    usage_percentage is the higher of enrollment and attendance usage;
    unlimited quotas count as 0%.
    """

    def __init__(
        self,
        subscription_repo: StudentSubscriptionRepository,
        enrollment_repo: EnrollmentRepository,
        policy: GovernancePolicy,
    ):
        self.subscription_repo = subscription_repo
        self.enrollment_repo = enrollment_repo
        self.policy = policy

    async def execute(self, user_id: str) -> Result[UsageMetricsDTO]:
        try:
            subscription = await self.subscription_repo.get_current(user_id)
            if not subscription:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"No subscription found for user {user_id}",
                    )
                )

            active_enrollments = await self.enrollment_repo.count_active_by_student(user_id)
            return Return.ok(
                build_usage_metrics(
                    subscription,
                    active_enrollments,
                    self.policy.usage_alert_threshold,
                    datetime.utcnow(),
                )
            )

        except Exception as e:
            logger.error(f"Error getting usage metrics for user {user_id}: {e}")
            return Return.err(
                Error(
                    code="GET_USAGE_METRICS_FAILED",
                    message="Failed to get usage metrics",
                    reason=str(e),
                )
            )


class GetUsersApproachingLimits:
    """
    Use Case: ACTIVE subscribers at or above the alert threshold

    Sorted by usage percentage, highest first. Subscribers whose metrics
    cannot be computed are logged and counted as failed.
    """

    def __init__(
        self,
        subscription_repo: StudentSubscriptionRepository,
        enrollment_repo: EnrollmentRepository,
        policy: GovernancePolicy,
    ):
        self.subscription_repo = subscription_repo
        self.enrollment_repo = enrollment_repo
        self.policy = policy

    async def execute(self) -> Result[ApproachingLimitsResponseDTO]:
        try:
            now = datetime.utcnow()
            threshold = self.policy.usage_alert_threshold
            subscriptions = await self.subscription_repo.list_active()

            users = []
            failed = 0
            for subscription in subscriptions:
                try:
                    active = await self.enrollment_repo.count_active_by_student(subscription.student_id)
                    metrics = build_usage_metrics(subscription, active, threshold, now)
                except Exception as e:
                    failed += 1
                    logger.error(f"Error getting metrics for user {subscription.student_id}: {e}")
                    continue
                if metrics.is_approaching_limit:
                    users.append(metrics)

            users.sort(key=lambda m: m.usage_percentage, reverse=True)
            return Return.ok(
                ApproachingLimitsResponseDTO(threshold=threshold, users=users, failed=failed)
            )

        except Exception as e:
            logger.error(f"Error getting users approaching limits: {e}")
            return Return.err(
                Error(
                    code="GET_USAGE_METRICS_FAILED",
                    message="Failed to list users approaching limits",
                    reason=str(e),
                )
            )
