"""SQLAlchemy Student Subscription Repository Implementation

Quota counters are moved with conditional UPDATE statements so that the
check and the increment happen in one database round trip.
"""

from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import update, or_, and_, case, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.domain.subscription import StudentSubscription, SubscriptionStatus


class SqlAlchemyStudentSubscriptionRepository(StudentSubscriptionRepository):
    """
    SQLAlchemy implementation of StudentSubscriptionRepository

    Features:
    - Current subscription = newest non-EXPIRED row
    - Atomic compare-and-increment for enrollment and attendance quotas
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, subscription_id: str) -> Optional[StudentSubscription]:
        statement = select(StudentSubscription).where(StudentSubscription.id == subscription_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_current(self, student_id: str) -> Optional[StudentSubscription]:
        statement = (
            select(StudentSubscription)
            .where(
                StudentSubscription.student_id == student_id,
                StudentSubscription.status != SubscriptionStatus.EXPIRED,
            )
            .order_by(StudentSubscription.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def create(self, subscription: StudentSubscription) -> StudentSubscription:
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription

    async def update(self, subscription: StudentSubscription) -> StudentSubscription:
        subscription.updated_at = datetime.utcnow()
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription

    async def get_expired_trials(self, now: datetime) -> List[StudentSubscription]:
        statement = select(StudentSubscription).where(
            StudentSubscription.status == SubscriptionStatus.TRIAL,
            StudentSubscription.end_date <= now,
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list_active(self) -> List[StudentSubscription]:
        statement = select(StudentSubscription).where(
            StudentSubscription.status == SubscriptionStatus.ACTIVE
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def try_increment_enrollment(self, subscription_id: str) -> bool:
        statement = (
            update(StudentSubscription)
            .where(
                StudentSubscription.id == subscription_id,
                StudentSubscription.status == SubscriptionStatus.ACTIVE,
                or_(
                    StudentSubscription.enrollment_quota < 0,
                    and_(
                        StudentSubscription.current_enrollments < StudentSubscription.enrollment_quota,
                        StudentSubscription.monthly_enrollments < StudentSubscription.enrollment_quota,
                    ),
                ),
            )
            .values(
                current_enrollments=StudentSubscription.current_enrollments + 1,
                monthly_enrollments=StudentSubscription.monthly_enrollments + 1,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(statement)
        return result.rowcount == 1

    async def decrement_enrollment(self, subscription_id: str) -> None:
        statement = (
            update(StudentSubscription)
            .where(StudentSubscription.id == subscription_id)
            .values(
                current_enrollments=case(
                    (StudentSubscription.current_enrollments > 0, StudentSubscription.current_enrollments - 1),
                    else_=0,
                ),
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(statement)

    async def try_increment_attendance(self, subscription_id: str) -> bool:
        statement = (
            update(StudentSubscription)
            .where(
                StudentSubscription.id == subscription_id,
                StudentSubscription.status == SubscriptionStatus.ACTIVE,
                or_(
                    StudentSubscription.attendance_quota < 0,
                    StudentSubscription.monthly_attendance < StudentSubscription.attendance_quota,
                ),
            )
            .values(
                monthly_attendance=StudentSubscription.monthly_attendance + 1,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(statement)
        return result.rowcount == 1

    async def reset_monthly_counters(self) -> int:
        statement = (
            update(StudentSubscription)
            .where(StudentSubscription.status == SubscriptionStatus.ACTIVE)
            .values(monthly_enrollments=0, monthly_attendance=0, updated_at=datetime.utcnow())
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(statement)
        return result.rowcount

    async def active_plan_counts(self) -> Dict[str, int]:
        statement = (
            select(StudentSubscription.plan_type, func.count(StudentSubscription.id))
            .where(StudentSubscription.status == SubscriptionStatus.ACTIVE)
            .group_by(StudentSubscription.plan_type)
        )
        result = await self.session.execute(statement)
        return {
            (plan.value if hasattr(plan, "value") else str(plan)): int(count)
            for plan, count in result.all()
        }
