"""GetGracePeriod Use Case"""

import logging
from datetime import datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.tier_repository import TierRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.domain.subscription import grace_period_end, days_between_ceil
from .dtos import GracePeriodDTO

logger = logging.getLogger(__name__)


class GetGracePeriod:
    """
    Use Case: Report whether a student is inside the post-expiry grace window

    Grace window = end_date + tier.grace_period_days. The student is in grace
    only when now is strictly after end_date and strictly before the window end.
    """

    def __init__(
        self,
        tier_repo: TierRepository,
        subscription_repo: StudentSubscriptionRepository,
    ):
        self.tier_repo = tier_repo
        self.subscription_repo = subscription_repo

    async def execute(self, user_id: str, now: Optional[datetime] = None) -> Result[GracePeriodDTO]:
        try:
            subscription = await self.subscription_repo.get_current(user_id)
            if not subscription:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"No subscription found for user {user_id}",
                    )
                )

            tier = await self.tier_repo.get_student_tier(subscription.tier_id)
            if not tier:
                return Return.err(
                    Error(
                        code="TIER_NOT_FOUND",
                        message=f"Student tier not found: {subscription.tier_id}",
                    )
                )

            now = now or datetime.utcnow()
            expiry_date = grace_period_end(subscription.end_date, tier.grace_period_days)
            in_grace = subscription.end_date < now < expiry_date
            days_remaining = days_between_ceil(now, expiry_date) if in_grace else 0

            return Return.ok(
                GracePeriodDTO(
                    is_in_grace_period=in_grace,
                    days_remaining=days_remaining,
                    expiry_date=expiry_date,
                )
            )

        except Exception as e:
            logger.error(f"Error computing grace period for user {user_id}: {e}")
            return Return.err(
                Error(
                    code="GRACE_PERIOD_FAILED",
                    message="Failed to compute grace period",
                    reason=str(e),
                )
            )
