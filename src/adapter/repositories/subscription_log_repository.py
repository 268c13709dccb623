"""SQLAlchemy Subscription Log Repository Implementation"""

from typing import List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.subscription_log_repository import SubscriptionLogRepository
from src.domain.subscription_log import SubscriptionLog, BillingHistory, SubjectType


class SqlAlchemySubscriptionLogRepository(SubscriptionLogRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_log(self, log: SubscriptionLog) -> SubscriptionLog:
        self.session.add(log)
        await self.session.flush()
        return log

    async def add_billing(self, billing: BillingHistory) -> BillingHistory:
        self.session.add(billing)
        await self.session.flush()
        return billing

    async def list_logs(
        self, subject_type: SubjectType, subject_id: str, limit: int = 50
    ) -> List[SubscriptionLog]:
        statement = (
            select(SubscriptionLog)
            .where(
                SubscriptionLog.subject_type == subject_type,
                SubscriptionLog.subject_id == subject_id,
            )
            .order_by(SubscriptionLog.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list_billing(
        self, subject_type: SubjectType, subject_id: str, limit: int = 10
    ) -> List[BillingHistory]:
        statement = (
            select(BillingHistory)
            .where(
                BillingHistory.subject_type == subject_type,
                BillingHistory.subject_id == subject_id,
            )
            .order_by(BillingHistory.billing_date.desc())
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())
