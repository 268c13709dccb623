"""Usage tracking use cases

Each call consumes one unit of quota with a conditional UPDATE and then
re-evaluates usage against the alert threshold.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.domain.subscription import SubscriptionStatus, usage_percentage
from src.domain.usage_alert import UsageAlertType
from .alerts import UsageAlertPublisher
from .dtos import TrackUsageResponseDTO

logger = logging.getLogger(__name__)


class TrackEnrollmentUsage:
    """
    Use Case: Consume one enrollment from a student's quota

    Business Rules:
    1. current_enrollments and monthly_enrollments move together, atomically
    2. The increment is rejected (not clamped) when either counter is at quota
    3. Crossing the alert threshold raises an advisory alert only
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: StudentSubscriptionRepository,
        alert_publisher: UsageAlertPublisher,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.alert_publisher = alert_publisher

    async def execute(self, user_id: str, course_id: str) -> Result[TrackUsageResponseDTO]:
        try:
            # Step 1: Load subscription
            subscription = await self.subscription_repo.get_current(user_id)
            if not subscription:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"No subscription found for user {user_id}",
                    )
                )
            if subscription.status != SubscriptionStatus.ACTIVE:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_ACTIVE",
                        message=f"Subscription {subscription.id} is {subscription.status.value}",
                    )
                )

            # Step 2: Compare-and-increment
            subscription_id = subscription.id
            if not await self.subscription_repo.try_increment_enrollment(subscription_id):
                return Return.err(
                    Error(
                        code="ENROLLMENT_QUOTA_EXCEEDED",
                        message="Enrollment quota exceeded",
                        reason=f"quota={subscription.enrollment_quota}",
                    )
                )

            # Step 3: Threshold check on fresh counters
            subscription = await self.subscription_repo.get_by_id(subscription_id)
            alert = await self.alert_publisher.record(
                subscription, UsageAlertType.ENROLLMENT_LIMIT_APPROACHING
            )
            await self.uow.commit()

            if alert:
                await self.alert_publisher.publish(alert)
                await self.uow.commit()

            logger.info(f"Tracked enrollment usage for user {user_id} in course {course_id}")

            used = subscription.current_enrollments
            quota = subscription.enrollment_quota
            return Return.ok(
                TrackUsageResponseDTO(
                    subscription_id=subscription_id,
                    used=used,
                    quota=quota,
                    usage_percentage=usage_percentage(used, quota),
                    alert_raised=alert is not None,
                    alert_id=alert.id if alert else None,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error tracking enrollment usage for user {user_id}: {e}")
            return Return.err(
                Error(
                    code="TRACK_USAGE_FAILED",
                    message="Failed to track enrollment usage",
                    reason=str(e),
                )
            )


class TrackAttendanceUsage:
    """
    Use Case: Consume one live class attendance from a student's monthly quota
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: StudentSubscriptionRepository,
        alert_publisher: UsageAlertPublisher,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.alert_publisher = alert_publisher

    async def execute(self, user_id: str, session_id: str) -> Result[TrackUsageResponseDTO]:
        try:
            subscription = await self.subscription_repo.get_current(user_id)
            if not subscription:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"No subscription found for user {user_id}",
                    )
                )
            if subscription.status != SubscriptionStatus.ACTIVE:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_ACTIVE",
                        message=f"Subscription {subscription.id} is {subscription.status.value}",
                    )
                )

            subscription_id = subscription.id
            if not await self.subscription_repo.try_increment_attendance(subscription_id):
                return Return.err(
                    Error(
                        code="ATTENDANCE_QUOTA_EXCEEDED",
                        message="Monthly live class quota exceeded",
                        reason=f"quota={subscription.attendance_quota}",
                    )
                )

            subscription = await self.subscription_repo.get_by_id(subscription_id)
            alert = await self.alert_publisher.record(
                subscription, UsageAlertType.ATTENDANCE_LIMIT_APPROACHING
            )
            await self.uow.commit()

            if alert:
                await self.alert_publisher.publish(alert)
                await self.uow.commit()

            logger.info(f"Tracked attendance usage for user {user_id} in session {session_id}")

            used = subscription.monthly_attendance
            quota = subscription.attendance_quota
            return Return.ok(
                TrackUsageResponseDTO(
                    subscription_id=subscription_id,
                    used=used,
                    quota=quota,
                    usage_percentage=usage_percentage(used, quota),
                    alert_raised=alert is not None,
                    alert_id=alert.id if alert else None,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error tracking attendance usage for user {user_id}: {e}")
            return Return.err(
                Error(
                    code="TRACK_USAGE_FAILED",
                    message="Failed to track attendance usage",
                    reason=str(e),
                )
            )
