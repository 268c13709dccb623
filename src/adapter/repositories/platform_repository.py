"""SQLAlchemy Platform Repository Implementations"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import update, or_, case, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.platform_repository import (
    UserRepository,
    InstitutionRepository,
    CourseRepository,
)
from src.domain.platform import User, UserRole, Institution, Course


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str) -> Optional[User]:
        statement = select(User).where(User.id == user_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_ids(self, user_ids: List[str]) -> List[User]:
        if not user_ids:
            return []
        statement = select(User).where(User.id.in_(user_ids))
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def count_by_role(self, role: UserRole) -> int:
        statement = select(func.count(User.id)).where(User.role == role)
        result = await self.session.execute(statement)
        return int(result.scalar_one())


class SqlAlchemyInstitutionRepository(InstitutionRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, institution_id: str) -> Optional[Institution]:
        statement = select(Institution).where(Institution.id == institution_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_ids(self, institution_ids: List[str]) -> List[Institution]:
        if not institution_ids:
            return []
        statement = select(Institution).where(Institution.id.in_(institution_ids))
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list_all(self) -> List[Institution]:
        statement = select(Institution).order_by(Institution.name.asc())
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def set_commission_rate(self, institution_id: str, commission_rate: Decimal) -> None:
        statement = (
            update(Institution)
            .where(Institution.id == institution_id)
            .values(commission_rate=commission_rate, updated_at=datetime.utcnow())
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(statement)


class SqlAlchemyCourseRepository(CourseRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, course_id: str) -> Optional[Course]:
        statement = select(Course).where(Course.id == course_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list_by_institution(self, institution_id: str) -> List[Course]:
        statement = (
            select(Course)
            .where(Course.institution_id == institution_id)
            .order_by(Course.created_at.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def try_increment_enrollment(self, course_id: str) -> bool:
        statement = (
            update(Course)
            .where(
                Course.id == course_id,
                or_(
                    Course.max_students.is_(None),
                    Course.current_enrollments < Course.max_students,
                ),
            )
            .values(current_enrollments=Course.current_enrollments + 1)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(statement)
        return result.rowcount == 1

    async def decrement_enrollment(self, course_id: str) -> None:
        statement = (
            update(Course)
            .where(Course.id == course_id)
            .values(
                current_enrollments=case(
                    (Course.current_enrollments > 0, Course.current_enrollments - 1),
                    else_=0,
                )
            )
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(statement)
