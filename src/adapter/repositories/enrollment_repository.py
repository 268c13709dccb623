"""SQLAlchemy Enrollment Repository Implementation"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.enrollment_repository import EnrollmentRepository
from src.domain.enrollment import Enrollment, EnrollmentStatus
from src.domain.platform import Course


class SqlAlchemyEnrollmentRepository(EnrollmentRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, enrollment_id: str) -> Optional[Enrollment]:
        statement = select(Enrollment).where(Enrollment.id == enrollment_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_active(self, student_id: str, course_id: str) -> Optional[Enrollment]:
        statement = select(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
            Enrollment.is_active == True,  # noqa: E712
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def create(self, enrollment: Enrollment) -> Enrollment:
        self.session.add(enrollment)
        await self.session.flush()
        await self.session.refresh(enrollment)
        return enrollment

    async def update(self, enrollment: Enrollment) -> Enrollment:
        enrollment.updated_at = datetime.utcnow()
        self.session.add(enrollment)
        await self.session.flush()
        await self.session.refresh(enrollment)
        return enrollment

    async def count_active_by_student(self, student_id: str) -> int:
        statement = select(func.count(Enrollment.id)).where(
            Enrollment.student_id == student_id,
            Enrollment.is_active == True,  # noqa: E712
        )
        result = await self.session.execute(statement)
        return int(result.scalar_one())

    async def count_by_course(
        self, course_id: str, status: Optional[EnrollmentStatus] = None
    ) -> int:
        statement = select(func.count(Enrollment.id)).where(Enrollment.course_id == course_id)
        if status:
            statement = statement.where(Enrollment.status == status)
        result = await self.session.execute(statement)
        return int(result.scalar_one())

    async def count_active_by_institution(self, institution_id: str) -> int:
        statement = (
            select(func.count(Enrollment.id))
            .join(Course, Course.id == Enrollment.course_id)
            .where(
                Course.institution_id == institution_id,
                Enrollment.is_active == True,  # noqa: E712
            )
        )
        result = await self.session.execute(statement)
        return int(result.scalar_one())

    async def access_method_counts(self, course_id: str) -> Dict[str, int]:
        statement = (
            select(Enrollment.access_method, func.count(Enrollment.id))
            .where(
                Enrollment.course_id == course_id,
                Enrollment.is_active == True,  # noqa: E712
            )
            .group_by(Enrollment.access_method)
        )
        result = await self.session.execute(statement)
        return {
            (method.value if hasattr(method, "value") else str(method)): int(count)
            for method, count in result.all()
        }

    async def count_subscription_enrollments(self, course_id: str) -> int:
        statement = select(func.count(Enrollment.id)).where(
            Enrollment.course_id == course_id,
            Enrollment.subscription_id.is_not(None),
        )
        result = await self.session.execute(statement)
        return int(result.scalar_one())

    async def list_active_platform_by_student(self, student_id: str) -> List[Enrollment]:
        statement = (
            select(Enrollment)
            .where(
                Enrollment.student_id == student_id,
                Enrollment.is_platform_course == True,  # noqa: E712
                Enrollment.is_active == True,  # noqa: E712
            )
            .order_by(Enrollment.start_date.desc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def count_all(
        self, status: Optional[EnrollmentStatus] = None, active_only: bool = False
    ) -> int:
        statement = select(func.count(Enrollment.id))
        if status:
            statement = statement.where(Enrollment.status == status)
        if active_only:
            statement = statement.where(Enrollment.is_active == True)  # noqa: E712
        result = await self.session.execute(statement)
        return int(result.scalar_one())

    async def top_courses_by_active_enrollment(self, limit: int) -> List[Tuple[str, int]]:
        enrolled = func.count(Enrollment.id)
        statement = (
            select(Enrollment.course_id, enrolled)
            .where(Enrollment.is_active == True)  # noqa: E712
            .group_by(Enrollment.course_id)
            .order_by(enrolled.desc(), Enrollment.course_id.asc())
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return [(course_id, int(count)) for course_id, count in result.all()]
