"""SQLAlchemy Institution Subscription Repository Implementation"""

from datetime import datetime
from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.institution_subscription_repository import InstitutionSubscriptionRepository
from src.domain.subscription import InstitutionSubscription, SubscriptionStatus


class SqlAlchemyInstitutionSubscriptionRepository(InstitutionSubscriptionRepository):
    """
    SQLAlchemy implementation of InstitutionSubscriptionRepository
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, subscription_id: str) -> Optional[InstitutionSubscription]:
        statement = select(InstitutionSubscription).where(
            InstitutionSubscription.id == subscription_id
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_current(self, institution_id: str) -> Optional[InstitutionSubscription]:
        statement = (
            select(InstitutionSubscription)
            .where(
                InstitutionSubscription.institution_id == institution_id,
                InstitutionSubscription.status != SubscriptionStatus.EXPIRED,
            )
            .order_by(InstitutionSubscription.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def create(self, subscription: InstitutionSubscription) -> InstitutionSubscription:
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription

    async def update(self, subscription: InstitutionSubscription) -> InstitutionSubscription:
        subscription.updated_at = datetime.utcnow()
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription

    async def get_expired_trials(self, now: datetime) -> List[InstitutionSubscription]:
        statement = select(InstitutionSubscription).where(
            InstitutionSubscription.status == SubscriptionStatus.TRIAL,
            InstitutionSubscription.end_date <= now,
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_expiring_between(
        self, start: datetime, end: datetime
    ) -> List[InstitutionSubscription]:
        statement = (
            select(InstitutionSubscription)
            .where(
                InstitutionSubscription.status == SubscriptionStatus.ACTIVE,
                InstitutionSubscription.end_date >= start,
                InstitutionSubscription.end_date <= end,
            )
            .order_by(InstitutionSubscription.end_date.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_overdue_active(self, now: datetime) -> List[InstitutionSubscription]:
        statement = select(InstitutionSubscription).where(
            InstitutionSubscription.status == SubscriptionStatus.ACTIVE,
            InstitutionSubscription.end_date < now,
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())
