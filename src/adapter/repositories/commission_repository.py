"""SQLAlchemy Commission Repository Implementation

Provides persistence for commission ledger entries and payouts with
pessimistic locking for payout sweeps.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy import update, func, desc
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.commission_repository import CommissionRepository
from src.domain.commission import InstitutionCommission, InstitutionPayout, CommissionStatus


class SqlAlchemyCommissionRepository(CommissionRepository):
    """
    SQLAlchemy implementation of CommissionRepository

    Features:
    - Unique payment_id keeps recalculation idempotent
    - SELECT FOR UPDATE on pending commissions during payouts
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_payment_id(self, payment_id: str) -> Optional[InstitutionCommission]:
        statement = select(InstitutionCommission).where(
            InstitutionCommission.payment_id == payment_id
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def create(self, commission: InstitutionCommission) -> InstitutionCommission:
        self.session.add(commission)
        await self.session.flush()
        await self.session.refresh(commission)
        return commission

    async def update(self, commission: InstitutionCommission) -> InstitutionCommission:
        commission.updated_at = datetime.utcnow()
        self.session.add(commission)
        await self.session.flush()
        await self.session.refresh(commission)
        return commission

    async def list_pending(
        self, institution_id: str, for_update: bool = False
    ) -> List[InstitutionCommission]:
        statement = (
            select(InstitutionCommission)
            .where(
                InstitutionCommission.institution_id == institution_id,
                InstitutionCommission.status == CommissionStatus.PENDING,
            )
            .order_by(InstitutionCommission.created_at.asc())
        )

        if for_update:
            statement = statement.with_for_update()

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def mark_paid(self, commission_ids: List[str], payout_id: str) -> int:
        if not commission_ids:
            return 0

        statement = (
            update(InstitutionCommission)
            .where(InstitutionCommission.id.in_(commission_ids))
            .values(
                status=CommissionStatus.PAID,
                payout_id=payout_id,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(statement)
        return result.rowcount

    async def create_payout(self, payout: InstitutionPayout) -> InstitutionPayout:
        self.session.add(payout)
        await self.session.flush()
        await self.session.refresh(payout)
        return payout

    async def list_for_period(
        self, institution_id: str, start: datetime, end: datetime
    ) -> List[InstitutionCommission]:
        statement = (
            select(InstitutionCommission)
            .where(
                InstitutionCommission.institution_id == institution_id,
                InstitutionCommission.created_at >= start,
                InstitutionCommission.created_at <= end,
            )
            .order_by(InstitutionCommission.created_at.desc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def sum_for_period(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        institution_id: Optional[str] = None,
    ) -> Tuple[Decimal, int]:
        statement = select(
            func.coalesce(func.sum(InstitutionCommission.amount), 0),
            func.count(InstitutionCommission.id),
        )

        if start:
            statement = statement.where(InstitutionCommission.created_at >= start)
        if end:
            statement = statement.where(InstitutionCommission.created_at <= end)
        if institution_id:
            statement = statement.where(InstitutionCommission.institution_id == institution_id)

        result = await self.session.execute(statement)
        total, count = result.one()
        return Decimal(str(total)), int(count)

    async def totals_by_institution(
        self, start: datetime, end: datetime, limit: Optional[int] = None
    ) -> List[Tuple[str, Decimal]]:
        total = func.sum(InstitutionCommission.amount).label("total")
        statement = (
            select(InstitutionCommission.institution_id, total)
            .where(
                InstitutionCommission.created_at >= start,
                InstitutionCommission.created_at <= end,
            )
            .group_by(InstitutionCommission.institution_id)
            .order_by(desc("total"))
        )

        if limit:
            statement = statement.limit(limit)

        result = await self.session.execute(statement)
        return [(row[0], Decimal(str(row[1]))) for row in result.all()]
