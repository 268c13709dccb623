"""SQLAlchemy Tier Repository Implementation"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.tier_repository import TierRepository
from src.domain.tier import StudentTier, CommissionTier, StudentPlanType, InstitutionPlanType


class SqlAlchemyTierRepository(TierRepository):
    """
    SQLAlchemy implementation of TierRepository
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_student_tier(self, tier_id: str) -> Optional[StudentTier]:
        statement = select(StudentTier).where(StudentTier.id == tier_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_student_tier_by_plan(self, plan_type: StudentPlanType) -> Optional[StudentTier]:
        statement = select(StudentTier).where(StudentTier.plan_type == plan_type)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list_student_tiers(self, active_only: bool = True) -> List[StudentTier]:
        statement = select(StudentTier)
        if active_only:
            statement = statement.where(StudentTier.is_active == True)  # noqa: E712
        statement = statement.order_by(StudentTier.price.asc())
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_commission_tier(self, tier_id: str) -> Optional[CommissionTier]:
        statement = select(CommissionTier).where(CommissionTier.id == tier_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_commission_tier_by_plan(
        self, plan_type: InstitutionPlanType, active_only: bool = True
    ) -> Optional[CommissionTier]:
        statement = select(CommissionTier).where(CommissionTier.plan_type == plan_type)
        if active_only:
            statement = statement.where(CommissionTier.is_active == True)  # noqa: E712
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list_commission_tiers(self, active_only: bool = True) -> List[CommissionTier]:
        statement = select(CommissionTier)
        if active_only:
            statement = statement.where(CommissionTier.is_active == True)  # noqa: E712
        statement = statement.order_by(CommissionTier.commission_rate.asc())
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def save_student_tier(self, tier: StudentTier) -> StudentTier:
        self.session.add(tier)
        await self.session.flush()
        await self.session.refresh(tier)
        return tier

    async def save_commission_tier(self, tier: CommissionTier) -> CommissionTier:
        self.session.add(tier)
        await self.session.flush()
        await self.session.refresh(tier)
        return tier
