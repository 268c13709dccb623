"""GetCommissionRate Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.platform_repository import InstitutionRepository
from src.app.repositories.institution_subscription_repository import InstitutionSubscriptionRepository
from src.app.repositories.tier_repository import TierRepository
from src.domain.commission import resolve_reporting_rate
from src.domain.policy import GovernancePolicy
from src.domain.subscription import SubscriptionStatus
from .dtos import CommissionRateDTO

logger = logging.getLogger(__name__)


class GetCommissionRate:
    """
    Use Case: Lenient commission rate for an institution

    Unlike the per-payment calculation this never fails for a missing tier:
    ACTIVE subscription tier rate > stored institution rate > policy default.
    """

    def __init__(
        self,
        institution_repo: InstitutionRepository,
        subscription_repo: InstitutionSubscriptionRepository,
        tier_repo: TierRepository,
        policy: GovernancePolicy,
    ):
        self.institution_repo = institution_repo
        self.subscription_repo = subscription_repo
        self.tier_repo = tier_repo
        self.policy = policy

    async def execute(self, institution_id: str) -> Result[CommissionRateDTO]:
        try:
            institution = await self.institution_repo.get_by_id(institution_id)
            if not institution:
                return Return.err(
                    Error(
                        code="INSTITUTION_NOT_FOUND",
                        message=f"Institution not found: {institution_id}",
                    )
                )

            subscription = await self.subscription_repo.get_current(institution_id)
            tier = None
            if subscription and subscription.commission_tier_id:
                tier = await self.tier_repo.get_commission_tier(subscription.commission_tier_id)

            is_active = bool(subscription) and subscription.status == SubscriptionStatus.ACTIVE
            rate = resolve_reporting_rate(
                stored_rate=institution.commission_rate,
                subscription_active=is_active,
                tier_rate=tier.commission_rate if tier else None,
                default_rate=self.policy.default_commission_rate,
            )

            if is_active and tier:
                source = "TIER"
            elif institution.commission_rate is not None:
                source = "INSTITUTION"
            else:
                source = "DEFAULT"

            return Return.ok(
                CommissionRateDTO(institution_id=institution_id, commission_rate=rate, source=source)
            )

        except Exception as e:
            logger.error(f"Error getting commission rate for institution {institution_id}: {e}")
            return Return.err(
                Error(
                    code="GET_COMMISSION_RATE_FAILED",
                    message="Failed to get commission rate",
                    reason=str(e),
                )
            )
