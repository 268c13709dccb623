"""Data Transfer Objects for Live Class Use Cases"""

from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from src.domain.live_class import LiveClassSession, SessionStatus


class LiveClassSessionDTO(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    instructor_id: str
    institution_id: Optional[str] = None
    course_id: Optional[str] = None
    start_time: datetime
    end_time: datetime
    status: str
    max_participants: int
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, session: LiveClassSession) -> "LiveClassSessionDTO":
        return cls(
            id=session.id,
            title=session.title,
            description=session.description,
            instructor_id=session.instructor_id,
            institution_id=session.institution_id,
            course_id=session.course_id,
            start_time=session.start_time,
            end_time=session.end_time,
            status=session.status.value,
            max_participants=session.max_participants,
            cancellation_reason=session.cancellation_reason,
            cancelled_at=session.cancelled_at,
        )


class LiveClassValidationCommandDTO(BaseModel):
    """Proposed session checked by ValidateLiveClassCreation"""

    instructor_id: str
    start_time: datetime
    end_time: datetime
    max_participants: int = Field(default=10)
    institution_id: Optional[str] = None
    course_id: Optional[str] = None


class CreateLiveClassCommandDTO(LiveClassValidationCommandDTO):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class LiveClassValidationDTO(BaseModel):
    """Passed validation; warnings never block creation"""

    valid: bool = True
    warnings: List[str] = Field(default_factory=list)


class LiveClassCreatedDTO(BaseModel):
    session: LiveClassSessionDTO
    warnings: List[str] = Field(default_factory=list)


class SessionSlotDTO(BaseModel):
    id: str
    title: str
    start_time: datetime
    end_time: datetime
    status: str


class InstructorAvailabilityDTO(BaseModel):
    is_available: bool
    conflicts: List[SessionSlotDTO] = Field(default_factory=list)
    next_available_slot: Optional[datetime] = Field(
        default=None,
        description="Latest end time among the conflicting sessions"
    )


class JoinLiveClassResponseDTO(BaseModel):
    participant_id: str
    session_id: str
    user_id: str
    joined_at: datetime
    monthly_attendance: int
    attendance_quota: int
    alert_raised: bool = False


class UpdateLiveClassStatusCommandDTO(BaseModel):
    session_id: str
    status: SessionStatus
    reason: Optional[str] = Field(default=None, description="Cancellation reason")


class InstructorUnavailabilityResultDTO(BaseModel):
    affected_sessions: int
    cancelled_session_ids: List[str] = Field(default_factory=list)
    notified_participants: int = 0
    failed_notifications: int = 0


class InstructorLiveClassStatsDTO(BaseModel):
    instructor_id: str
    total_sessions: int
    scheduled_sessions: int
    active_sessions: int
    completed_sessions: int
    cancelled_sessions: int
    total_participants: int
    completion_rate: float
    cancellation_rate: float


class AttendedSessionDTO(BaseModel):
    session_id: str
    title: str
    start_time: datetime
    duration_minutes: int
    duration_hours: float
    quota_used: bool
    joined_at: datetime


class UserAttendedSessionsDTO(BaseModel):
    """Sessions a user joined that started within one calendar month"""

    user_id: str
    month: str = Field(..., description="YYYY-MM")
    sessions: List[AttendedSessionDTO] = Field(default_factory=list)
    total_hours: float
    last_attendance: Optional[datetime] = None


class TopAttendeeDTO(BaseModel):
    user_id: str
    user_name: str
    hours_used: float
    sessions_attended: int


class LiveClassSubscriptionStatsDTO(BaseModel):
    """Live class consumption by subscribers for one calendar month"""

    month: str
    total_students: int
    active_users: int = Field(..., description="Users who joined at least one session")
    total_hours_used: float
    average_hours_used: float
    subscription_distribution: Dict[str, int] = Field(default_factory=dict)
    top_users: List[TopAttendeeDTO] = Field(default_factory=list)
