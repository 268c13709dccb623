"""Live Class Domain Entities

Scheduled video sessions and their participants.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Set
from sqlmodel import Field, Column, Index
from sqlalchemy import String, Text, UniqueConstraint
from src.domain.base import BaseModel, generate_uuid


class SessionStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


ALLOWED_TRANSITIONS: Dict[SessionStatus, Set[SessionStatus]] = {
    SessionStatus.SCHEDULED: {SessionStatus.ACTIVE, SessionStatus.CANCELLED},
    SessionStatus.ACTIVE: {SessionStatus.COMPLETED, SessionStatus.CANCELLED},
    SessionStatus.COMPLETED: set(),
    SessionStatus.CANCELLED: set(),
}

# Sessions that occupy the instructor's calendar
BLOCKING_STATUSES = (SessionStatus.SCHEDULED, SessionStatus.ACTIVE)

INSTRUCTOR_UNAVAILABLE_REASON = "Instructor unavailable"


class LiveClassSession(BaseModel, table=True):
    """
    LiveClassSession - A scheduled live video class

    Domain Rules:
    - SCHEDULED -> ACTIVE -> COMPLETED, SCHEDULED/ACTIVE -> CANCELLED
    - An instructor's SCHEDULED/ACTIVE sessions never overlap
    """

    __tablename__ = "live_class_sessions"
    __table_args__ = (
        Index('ix_live_class_sessions_instructor_start', 'instructor_id', 'start_time'),
        Index('ix_live_class_sessions_course_id', 'course_id'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    title: str = Field(sa_column=Column(String(255), nullable=False))
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    instructor_id: str
    institution_id: Optional[str] = Field(default=None)
    course_id: Optional[str] = Field(default=None)

    start_time: datetime
    end_time: datetime

    status: SessionStatus = Field(default=SessionStatus.SCHEDULED)

    max_participants: int = Field(default=10)

    cancellation_reason: Optional[str] = Field(default=None)
    cancelled_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def can_transition_to(self, new_status: SessionStatus) -> bool:
        return new_status in ALLOWED_TRANSITIONS[self.status]


class SessionParticipant(BaseModel, table=True):
    """SessionParticipant - A user who joined a live class"""

    __tablename__ = "session_participants"
    __table_args__ = (
        UniqueConstraint('session_id', 'user_id', name='uq_session_participants_session_user'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    session_id: str = Field(foreign_key="live_class_sessions.id")
    user_id: str

    subscription_id: Optional[str] = Field(default=None)

    quota_used: bool = Field(
        default=False,
        description="Attendance counted against a limited subscription quota"
    )

    joined_at: datetime = Field(default_factory=datetime.utcnow)
