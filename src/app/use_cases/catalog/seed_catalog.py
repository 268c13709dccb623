"""SeedTierCatalog Use Case"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.tier_repository import TierRepository
from src.domain.tier import (
    CommissionTier,
    StudentTier,
    DEFAULT_COMMISSION_TIERS,
    DEFAULT_STUDENT_TIERS,
)
from .dtos import SeedTierCatalogResponseDTO

logger = logging.getLogger(__name__)


class SeedTierCatalog:
    """
    Use Case: Install the default tier catalog

    Rows are matched by plan type, so running the seed twice updates the
    existing tiers in place instead of duplicating them.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        tier_repo: TierRepository,
        student_tiers: Optional[List[Dict[str, Any]]] = None,
        commission_tiers: Optional[List[Dict[str, Any]]] = None,
    ):
        self.uow = uow
        self.tier_repo = tier_repo
        self.student_tiers = student_tiers if student_tiers is not None else DEFAULT_STUDENT_TIERS
        self.commission_tiers = (
            commission_tiers if commission_tiers is not None else DEFAULT_COMMISSION_TIERS
        )

    async def execute(self) -> Result[SeedTierCatalogResponseDTO]:
        created = 0
        updated = 0
        try:
            for values in self.student_tiers:
                tier = await self.tier_repo.get_student_tier_by_plan(values["plan_type"])
                if tier:
                    _apply(tier, values)
                    updated += 1
                else:
                    tier = StudentTier(**values)
                    created += 1
                await self.tier_repo.save_student_tier(tier)

            for values in self.commission_tiers:
                tier = await self.tier_repo.get_commission_tier_by_plan(
                    values["plan_type"], active_only=False
                )
                if tier:
                    _apply(tier, values)
                    updated += 1
                else:
                    tier = CommissionTier(**values)
                    created += 1
                await self.tier_repo.save_commission_tier(tier)

            await self.uow.commit()

            logger.info(f"Seeded tier catalog: {created} created, {updated} updated")

            return Return.ok(SeedTierCatalogResponseDTO(created=created, updated=updated))

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error seeding tier catalog: {e}")
            return Return.err(
                Error(
                    code="SEED_CATALOG_FAILED",
                    message="Failed to seed tier catalog",
                    reason=str(e),
                )
            )


def _apply(tier, values: Dict[str, Any]) -> None:
    for key, value in values.items():
        setattr(tier, key, value)
    tier.updated_at = datetime.utcnow()
