"""Live Class Repository Interface

Defines the contract for live class sessions and their participants.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
from src.domain.live_class import LiveClassSession, SessionParticipant, SessionStatus


class LiveClassRepository(ABC):
    """
    Repository interface for LiveClassSession and SessionParticipant
    """

    @abstractmethod
    async def get_by_id(self, session_id: str) -> Optional[LiveClassSession]:
        pass

    @abstractmethod
    async def create(self, session: LiveClassSession) -> LiveClassSession:
        pass

    @abstractmethod
    async def update(self, session: LiveClassSession) -> LiveClassSession:
        pass

    @abstractmethod
    async def find_instructor_conflicts(
        self,
        instructor_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_session_id: Optional[str] = None,
    ) -> List[LiveClassSession]:
        """
        Find the instructor's SCHEDULED/ACTIVE sessions overlapping [start, end)

        Args:
            instructor_id: Instructor identifier
            start_time: Proposed start
            end_time: Proposed end
            exclude_session_id: Session to ignore (when rescheduling)

        Returns:
            Overlapping sessions ordered by start time
        """
        pass

    @abstractmethod
    async def find_course_conflicts(
        self, course_id: str, start_time: datetime, end_time: datetime
    ) -> List[LiveClassSession]:
        """SCHEDULED/ACTIVE sessions of the course overlapping [start, end)"""
        pass

    @abstractmethod
    async def count_upcoming_for_instructor(self, instructor_id: str, now: datetime) -> int:
        """
        Count the instructor's SCHEDULED/ACTIVE sessions that have not ended

        Args:
            instructor_id: Instructor identifier
            now: Reference time

        Returns:
            Number of upcoming sessions
        """
        pass

    @abstractmethod
    async def list_upcoming_for_instructor(
        self, instructor_id: str, from_time: datetime
    ) -> List[LiveClassSession]:
        """SCHEDULED/ACTIVE sessions ending after from_time, ordered by start"""
        pass

    @abstractmethod
    async def list_scheduled_from(
        self, instructor_id: str, from_date: datetime
    ) -> List[LiveClassSession]:
        """SCHEDULED sessions of the instructor starting at or after from_date"""
        pass

    @abstractmethod
    async def status_counts_for_instructor(self, instructor_id: str) -> Dict[str, int]:
        """Session counts grouped by status value"""
        pass

    @abstractmethod
    async def count_by_institution(self, institution_id: str) -> int:
        pass

    @abstractmethod
    async def count_by_course(self, course_id: str) -> int:
        pass

    @abstractmethod
    async def add_participant(self, participant: SessionParticipant) -> SessionParticipant:
        pass

    @abstractmethod
    async def get_participant(self, session_id: str, user_id: str) -> Optional[SessionParticipant]:
        pass

    @abstractmethod
    async def count_participants(self, session_id: str) -> int:
        pass

    @abstractmethod
    async def count_participants_for_instructor(self, instructor_id: str) -> int:
        """Participants across all of the instructor's sessions"""
        pass

    @abstractmethod
    async def list_participants(self, session_id: str) -> List[SessionParticipant]:
        pass

    @abstractmethod
    async def count_by_statuses(self, statuses: Sequence[SessionStatus]) -> int:
        pass

    @abstractmethod
    async def list_attendance_between(
        self,
        start: datetime,
        end: datetime,
        user_id: Optional[str] = None,
    ) -> List[Tuple[SessionParticipant, LiveClassSession]]:
        """
        Participations in sessions starting within [start, end)

        Args:
            start: Inclusive lower bound on session start_time
            end: Exclusive upper bound on session start_time
            user_id: Restrict to one attendee when given

        Returns:
            (participant, session) pairs ordered by join time
        """
        pass
