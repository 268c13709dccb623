"""Request schemas for Live Class API"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from src.domain.live_class import SessionStatus


class LiveClassSchema(BaseModel):
    """
    Proposed live class

    Used for POST /live-classes/validate; creation adds a title.
    """

    instructor_id: str = Field(..., min_length=1)
    start_time: datetime
    end_time: datetime
    max_participants: int = 10
    institution_id: Optional[str] = None
    course_id: Optional[str] = None


class CreateLiveClassSchema(LiveClassSchema):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class JoinLiveClassSchema(BaseModel):
    user_id: str = Field(..., min_length=1)


class UpdateStatusSchema(BaseModel):
    status: SessionStatus
    reason: Optional[str] = None


class InstructorUnavailableSchema(BaseModel):
    from_date: datetime
