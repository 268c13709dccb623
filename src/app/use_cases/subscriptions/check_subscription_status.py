"""CheckSubscriptionStatus Use Case

Periodic institution subscription check run by the cron worker.
"""

import logging
from datetime import datetime, timedelta
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.institution_subscription_repository import InstitutionSubscriptionRepository
from src.domain.policy import GovernancePolicy
from src.domain.subscription import SubscriptionStatus, days_between_ceil
from .dtos import ExpiringSubscriptionDTO, SubscriptionStatusCheckDTO

logger = logging.getLogger(__name__)


class CheckSubscriptionStatus:
    """
    Use Case: Report expiring institution subscriptions and expire overdue ones

    Business Rules:
    1. ACTIVE subscriptions ending within policy.expiring_soon_days are reported
    2. ACTIVE subscriptions whose end_date has passed are marked EXPIRED
    3. A failure expiring one subscription is logged and skipped
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: InstitutionSubscriptionRepository,
        policy: GovernancePolicy,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.policy = policy

    async def execute(self) -> Result[SubscriptionStatusCheckDTO]:
        try:
            now = datetime.utcnow()
            window_end = now + timedelta(days=self.policy.expiring_soon_days)

            # Step 1: Expiring soon
            expiring = await self.subscription_repo.get_expiring_between(now, window_end)
            expiring_dtos = [
                ExpiringSubscriptionDTO(
                    subscription_id=sub.id,
                    institution_id=sub.institution_id,
                    plan_type=sub.plan_type.value,
                    end_date=sub.end_date,
                    days_remaining=days_between_ceil(now, sub.end_date),
                )
                for sub in expiring
            ]
            if expiring_dtos:
                logger.info(f"Found {len(expiring_dtos)} institution subscriptions expiring soon")

            # Step 2: Expire overdue subscriptions
            overdue = await self.subscription_repo.get_overdue_active(now)
            expired_count = 0
            for subscription_id in [sub.id for sub in overdue]:
                try:
                    subscription = await self.subscription_repo.get_by_id(subscription_id)
                    subscription.status = SubscriptionStatus.EXPIRED
                    await self.subscription_repo.update(subscription)
                    await self.uow.commit()
                    expired_count += 1
                except Exception as e:
                    await self.uow.rollback()
                    logger.error(f"Failed to expire subscription {subscription_id}: {e}")

            if expired_count:
                logger.info(f"Marked {expired_count} institution subscriptions as EXPIRED")

            return Return.ok(
                SubscriptionStatusCheckDTO(
                    checked_at=now,
                    expiring_soon=expiring_dtos,
                    expired_count=expired_count,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error checking subscription status: {e}")
            return Return.err(
                Error(
                    code="CHECK_SUBSCRIPTION_STATUS_FAILED",
                    message="Failed to check subscription status",
                    reason=str(e),
                )
            )
