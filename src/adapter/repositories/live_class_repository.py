"""SQLAlchemy Live Class Repository Implementation"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.live_class_repository import LiveClassRepository
from src.domain.live_class import (
    LiveClassSession,
    SessionParticipant,
    SessionStatus,
    BLOCKING_STATUSES,
)


class SqlAlchemyLiveClassRepository(LiveClassRepository):
    """
    SQLAlchemy implementation of LiveClassRepository

    Overlap queries use the half-open test start < other_end AND end > other_start.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: str) -> Optional[LiveClassSession]:
        statement = select(LiveClassSession).where(LiveClassSession.id == session_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def create(self, session: LiveClassSession) -> LiveClassSession:
        self.session.add(session)
        await self.session.flush()
        await self.session.refresh(session)
        return session

    async def update(self, session: LiveClassSession) -> LiveClassSession:
        session.updated_at = datetime.utcnow()
        self.session.add(session)
        await self.session.flush()
        await self.session.refresh(session)
        return session

    async def find_instructor_conflicts(
        self,
        instructor_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_session_id: Optional[str] = None,
    ) -> List[LiveClassSession]:
        statement = select(LiveClassSession).where(
            LiveClassSession.instructor_id == instructor_id,
            LiveClassSession.status.in_(BLOCKING_STATUSES),
            LiveClassSession.start_time < end_time,
            LiveClassSession.end_time > start_time,
        )

        if exclude_session_id:
            statement = statement.where(LiveClassSession.id != exclude_session_id)

        statement = statement.order_by(LiveClassSession.start_time.asc())
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def find_course_conflicts(
        self, course_id: str, start_time: datetime, end_time: datetime
    ) -> List[LiveClassSession]:
        statement = (
            select(LiveClassSession)
            .where(
                LiveClassSession.course_id == course_id,
                LiveClassSession.status.in_(BLOCKING_STATUSES),
                LiveClassSession.start_time < end_time,
                LiveClassSession.end_time > start_time,
            )
            .order_by(LiveClassSession.start_time.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def count_upcoming_for_instructor(self, instructor_id: str, now: datetime) -> int:
        statement = select(func.count(LiveClassSession.id)).where(
            LiveClassSession.instructor_id == instructor_id,
            LiveClassSession.status.in_(BLOCKING_STATUSES),
            LiveClassSession.end_time > now,
        )
        result = await self.session.execute(statement)
        return int(result.scalar_one())

    async def list_upcoming_for_instructor(
        self, instructor_id: str, from_time: datetime
    ) -> List[LiveClassSession]:
        statement = (
            select(LiveClassSession)
            .where(
                LiveClassSession.instructor_id == instructor_id,
                LiveClassSession.status.in_(BLOCKING_STATUSES),
                LiveClassSession.end_time > from_time,
            )
            .order_by(LiveClassSession.start_time.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list_scheduled_from(
        self, instructor_id: str, from_date: datetime
    ) -> List[LiveClassSession]:
        statement = (
            select(LiveClassSession)
            .where(
                LiveClassSession.instructor_id == instructor_id,
                LiveClassSession.status == SessionStatus.SCHEDULED,
                LiveClassSession.start_time >= from_date,
            )
            .order_by(LiveClassSession.start_time.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def status_counts_for_instructor(self, instructor_id: str) -> Dict[str, int]:
        statement = (
            select(LiveClassSession.status, func.count(LiveClassSession.id))
            .where(LiveClassSession.instructor_id == instructor_id)
            .group_by(LiveClassSession.status)
        )
        result = await self.session.execute(statement)
        return {
            (status.value if hasattr(status, "value") else str(status)): int(count)
            for status, count in result.all()
        }

    async def count_by_institution(self, institution_id: str) -> int:
        statement = select(func.count(LiveClassSession.id)).where(
            LiveClassSession.institution_id == institution_id
        )
        result = await self.session.execute(statement)
        return int(result.scalar_one())

    async def count_by_course(self, course_id: str) -> int:
        statement = select(func.count(LiveClassSession.id)).where(
            LiveClassSession.course_id == course_id
        )
        result = await self.session.execute(statement)
        return int(result.scalar_one())

    async def add_participant(self, participant: SessionParticipant) -> SessionParticipant:
        self.session.add(participant)
        await self.session.flush()
        await self.session.refresh(participant)
        return participant

    async def get_participant(self, session_id: str, user_id: str) -> Optional[SessionParticipant]:
        statement = select(SessionParticipant).where(
            SessionParticipant.session_id == session_id,
            SessionParticipant.user_id == user_id,
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def count_participants(self, session_id: str) -> int:
        statement = select(func.count(SessionParticipant.id)).where(
            SessionParticipant.session_id == session_id
        )
        result = await self.session.execute(statement)
        return int(result.scalar_one())

    async def list_participants(self, session_id: str) -> List[SessionParticipant]:
        statement = (
            select(SessionParticipant)
            .where(SessionParticipant.session_id == session_id)
            .order_by(SessionParticipant.joined_at.asc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def count_participants_for_instructor(self, instructor_id: str) -> int:
        statement = (
            select(func.count(SessionParticipant.id))
            .join(LiveClassSession, LiveClassSession.id == SessionParticipant.session_id)
            .where(LiveClassSession.instructor_id == instructor_id)
        )
        result = await self.session.execute(statement)
        return int(result.scalar_one())

    async def count_by_statuses(self, statuses: Sequence[SessionStatus]) -> int:
        statement = select(func.count(LiveClassSession.id)).where(
            LiveClassSession.status.in_(list(statuses))
        )
        result = await self.session.execute(statement)
        return int(result.scalar_one())

    async def list_attendance_between(
        self,
        start: datetime,
        end: datetime,
        user_id: Optional[str] = None,
    ) -> List[Tuple[SessionParticipant, LiveClassSession]]:
        statement = (
            select(SessionParticipant, LiveClassSession)
            .join(LiveClassSession, LiveClassSession.id == SessionParticipant.session_id)
            .where(
                LiveClassSession.start_time >= start,
                LiveClassSession.start_time < end,
            )
        )

        if user_id:
            statement = statement.where(SessionParticipant.user_id == user_id)

        statement = statement.order_by(SessionParticipant.joined_at.asc())
        result = await self.session.execute(statement)
        return [(participant, session) for participant, session in result.all()]
