"""SQLAlchemy Payment Repository Implementation"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.commission import InstitutionCommission
from src.domain.enrollment import Enrollment
from src.domain.platform import Payment, PaymentStatus, Course


class SqlAlchemyPaymentRepository(PaymentRepository):
    """
    SQLAlchemy implementation of PaymentRepository

    Institution filters walk payment -> enrollment -> course.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, payment_id: str) -> Optional[Payment]:
        statement = select(Payment).where(Payment.id == payment_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list_completed_without_commission(self) -> List[Payment]:
        statement = (
            select(Payment)
            .outerjoin(InstitutionCommission, InstitutionCommission.payment_id == Payment.id)
            .where(
                Payment.status == PaymentStatus.COMPLETED,
                InstitutionCommission.id.is_(None),
            )
            .order_by(Payment.created_at.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list_completed_between(
        self, start: datetime, end: datetime, institution_id: Optional[str] = None
    ) -> List[Payment]:
        statement = select(Payment).where(
            Payment.status == PaymentStatus.COMPLETED,
            Payment.created_at >= start,
            Payment.created_at <= end,
        )

        if institution_id:
            statement = (
                statement.join(Enrollment, Enrollment.id == Payment.enrollment_id)
                .join(Course, Course.id == Enrollment.course_id)
                .where(Course.institution_id == institution_id)
            )

        statement = statement.order_by(Payment.created_at.asc())
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def sum_completed_for_institution(self, institution_id: str) -> Decimal:
        statement = (
            select(func.coalesce(func.sum(Payment.amount), 0))
            .join(Enrollment, Enrollment.id == Payment.enrollment_id)
            .join(Course, Course.id == Enrollment.course_id)
            .where(
                Payment.status == PaymentStatus.COMPLETED,
                Course.institution_id == institution_id,
            )
        )
        result = await self.session.execute(statement)
        return Decimal(str(result.scalar_one()))
