"""Usage alert publishing shared by the tracking use cases"""

import logging
from typing import Optional
from src.app.repositories.usage_alert_repository import UsageAlertRepository
from src.app.services.notification_service import NotificationService
from src.domain.policy import GovernancePolicy
from src.domain.subscription import StudentSubscription, usage_percentage
from src.domain.usage_alert import UsageAlert, UsageAlertType, build_alert_message

logger = logging.getLogger(__name__)


class UsageAlertPublisher:
    """
    Records and delivers approaching-limit alerts

    record() only writes the alert row; the caller commits and then calls
    publish() so a failed delivery never rolls back the tracked usage.
    """

    def __init__(
        self,
        alert_repo: UsageAlertRepository,
        notification_service: NotificationService,
        policy: GovernancePolicy,
    ):
        self.alert_repo = alert_repo
        self.notification_service = notification_service
        self.policy = policy

    async def record(
        self, subscription: StudentSubscription, alert_type: UsageAlertType
    ) -> Optional[UsageAlert]:
        if alert_type == UsageAlertType.ENROLLMENT_LIMIT_APPROACHING:
            used = max(subscription.current_enrollments, subscription.monthly_enrollments)
            quota = subscription.enrollment_quota
        else:
            used = subscription.monthly_attendance
            quota = subscription.attendance_quota

        if quota < 0:
            return None

        percentage = usage_percentage(used, quota)
        if percentage < self.policy.usage_alert_threshold:
            return None

        alert = await self.alert_repo.create(
            UsageAlert(
                user_id=subscription.student_id,
                subscription_id=subscription.id,
                alert_type=alert_type,
                message=build_alert_message(alert_type, used, quota, percentage),
                used=used,
                quota=quota,
                usage_percentage=percentage,
            )
        )
        logger.warning(
            f"User {subscription.student_id} at {percentage}% of {alert_type.value} quota"
        )
        return alert

    async def publish(self, alert: UsageAlert) -> bool:
        sent = await self.notification_service.send_usage_alert(alert)
        if sent:
            await self.alert_repo.mark_notified(alert.id)
        else:
            logger.warning(f"Usage alert {alert.id} was not delivered")
        return sent
