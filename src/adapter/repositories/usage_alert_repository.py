"""SQLAlchemy Usage Alert Repository Implementation"""

from datetime import datetime
from typing import List
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.usage_alert_repository import UsageAlertRepository
from src.domain.usage_alert import UsageAlert


class SqlAlchemyUsageAlertRepository(UsageAlertRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, alert: UsageAlert) -> UsageAlert:
        self.session.add(alert)
        await self.session.flush()
        await self.session.refresh(alert)
        return alert

    async def mark_notified(self, alert_id: str) -> None:
        statement = (
            update(UsageAlert)
            .where(UsageAlert.id == alert_id)
            .values(notified_at=datetime.utcnow())
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(statement)

    async def list_by_user(self, user_id: str, limit: int = 20) -> List[UsageAlert]:
        statement = (
            select(UsageAlert)
            .where(UsageAlert.user_id == user_id)
            .order_by(UsageAlert.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())
