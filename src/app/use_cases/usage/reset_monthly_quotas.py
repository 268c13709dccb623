"""ResetMonthlyQuotas Use Case"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from .dtos import ResetMonthlyQuotasResponseDTO

logger = logging.getLogger(__name__)


class ResetMonthlyQuotas:
    """
    Use Case: Zero monthly counters on every ACTIVE student subscription

    Platform-wide sweep, not aligned to each subscription's billing anniversary.
    """

    def __init__(self, uow: UnitOfWork, subscription_repo: StudentSubscriptionRepository):
        self.uow = uow
        self.subscription_repo = subscription_repo

    async def execute(self) -> Result[ResetMonthlyQuotasResponseDTO]:
        try:
            reset_count = await self.subscription_repo.reset_monthly_counters()
            await self.uow.commit()

            logger.info(f"Reset monthly quotas for {reset_count} subscriptions")
            return Return.ok(
                ResetMonthlyQuotasResponseDTO(reset_count=reset_count, reset_at=datetime.utcnow())
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error resetting monthly quotas: {e}")
            return Return.err(
                Error(
                    code="RESET_QUOTAS_FAILED",
                    message="Failed to reset monthly quotas",
                    reason=str(e),
                )
            )
