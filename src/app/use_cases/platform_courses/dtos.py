"""Data Transfer Objects for Platform Course Use Cases"""

from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from src.domain.enrollment import AccessMethod, Enrollment, EnrollmentStatus
from src.domain.tier import StudentPlanType


class PlatformEnrollmentCommandDTO(BaseModel):
    user_id: str
    course_id: str
    access_method: Optional[AccessMethod] = Field(
        default=None,
        description="Recorded access method; defaults to SUBSCRIPTION or DIRECT by enrollment path",
    )


class PlatformEnrollmentValidationDTO(BaseModel):
    """Validation outcome with informational warnings"""

    allowed: bool
    code: Optional[str] = None
    reason: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    requires_subscription: bool = False


class PlatformEnrollmentDTO(BaseModel):
    enrollment_id: str
    user_id: str
    course_id: str
    access_method: AccessMethod
    subscription_id: Optional[str] = None
    subscription_tier: Optional[StudentPlanType] = None
    enrollment_quota_used: bool = False
    start_date: datetime
    alert_raised: bool = False

    @classmethod
    def from_entity(cls, enrollment: Enrollment, alert_raised: bool = False) -> "PlatformEnrollmentDTO":
        return cls(
            enrollment_id=enrollment.id,
            user_id=enrollment.student_id,
            course_id=enrollment.course_id,
            access_method=enrollment.access_method,
            subscription_id=enrollment.subscription_id,
            subscription_tier=enrollment.subscription_tier,
            enrollment_quota_used=enrollment.enrollment_quota_used,
            start_date=enrollment.start_date,
            alert_raised=alert_raised,
        )


class PlatformCourseAccessDTO(BaseModel):
    """
    Resolved access to a platform course

    An INSTITUTION access method is informational: has_access stays False.
    """

    has_access: bool
    access_method: AccessMethod = AccessMethod.NONE
    reason: Optional[str] = None
    subscription_tier: Optional[StudentPlanType] = None
    enrollment_status: Optional[EnrollmentStatus] = None
    access_expiry: Optional[datetime] = None
    institution_id: Optional[str] = None


class CancelPlatformEnrollmentDTO(BaseModel):
    enrollment_id: str
    course_id: str
    cancelled_at: datetime
    released_subscription_quota: bool


class PlatformCourseStatsDTO(BaseModel):
    course_id: str
    total_enrollments: int
    active_enrollments: int
    completed_enrollments: int
    completion_rate: float
    enrollment_by_method: Dict[str, int]
    subscription_enrollments: int
