"""ListTiers Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.tier_repository import TierRepository
from .dtos import TierCatalogDTO, StudentTierDTO, CommissionTierDTO

logger = logging.getLogger(__name__)


class ListTiers:
    """Active student tiers by price and active commission tiers by rate"""

    def __init__(self, tier_repo: TierRepository):
        self.tier_repo = tier_repo

    async def execute(self) -> Result[TierCatalogDTO]:
        try:
            student_tiers = await self.tier_repo.list_student_tiers(active_only=True)
            commission_tiers = await self.tier_repo.list_commission_tiers(active_only=True)

            return Return.ok(
                TierCatalogDTO(
                    student_tiers=[StudentTierDTO.from_entity(t) for t in student_tiers],
                    commission_tiers=[CommissionTierDTO.from_entity(t) for t in commission_tiers],
                )
            )

        except Exception as e:
            logger.error(f"Error listing tiers: {e}")
            return Return.err(
                Error(code="LIST_TIERS_FAILED", message="Failed to list tiers", reason=str(e))
            )
