"""Enrollment Domain Entity"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import text
from sqlmodel import Field, Index
from src.domain.base import BaseModel, generate_uuid
from src.domain.tier import StudentPlanType


class EnrollmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class AccessMethod(str, Enum):
    """How a student gained access to a course"""
    DIRECT = "DIRECT"
    SUBSCRIPTION = "SUBSCRIPTION"
    INSTITUTION = "INSTITUTION"
    NONE = "NONE"


class Enrollment(BaseModel, table=True):
    """
    Enrollment - Links a student to a course

    Domain Rules:
    - At most one active enrollment per (student, course), enforced by a
      partial unique index
    - Subscription enrollments carry subscription_id and consume quota
    - Cancelling sets is_active False, status CANCELLED and end_date
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        Index(
            'ux_enrollments_active_student_course',
            'student_id',
            'course_id',
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
        Index('ix_enrollments_course_id', 'course_id'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    student_id: str
    course_id: str

    is_active: bool = Field(default=True)

    status: EnrollmentStatus = Field(default=EnrollmentStatus.ACTIVE)

    access_method: AccessMethod = Field(default=AccessMethod.DIRECT)

    subscription_id: Optional[str] = Field(default=None)
    subscription_tier: Optional[StudentPlanType] = Field(default=None)

    enrollment_quota_used: bool = Field(default=False)

    is_platform_course: bool = Field(default=False)

    start_date: datetime = Field(default_factory=datetime.utcnow)
    end_date: Optional[datetime] = Field(default=None)
    access_expiry: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
