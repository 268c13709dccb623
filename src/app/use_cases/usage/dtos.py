"""Data Transfer Objects for Quota and Usage Use Cases"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class EligibilityDTO(BaseModel):
    """Admission decision; a denial carries the blocking reason"""

    allowed: bool
    code: Optional[str] = Field(default=None, description="Error code of the failed check")
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "EligibilityDTO":
        return cls(allowed=True)

    @classmethod
    def deny(cls, code: str, reason: str) -> "EligibilityDTO":
        return cls(allowed=False, code=code, reason=reason)


class TrackUsageResponseDTO(BaseModel):
    """Counter state after a successful tracking call"""

    subscription_id: str
    used: int
    quota: int
    usage_percentage: float
    alert_raised: bool = False
    alert_id: Optional[str] = None


class ResetMonthlyQuotasResponseDTO(BaseModel):
    reset_count: int
    reset_at: datetime


class UsageMetricsDTO(BaseModel):
    """Quota usage for one subscriber"""

    user_id: str
    subscription_id: str
    current_enrollments: int
    max_enrollments: int
    monthly_enrollments: int
    monthly_attendance: int
    max_monthly_attendance: int
    usage_percentage: float = Field(..., description="Highest of enrollment and attendance usage")
    is_approaching_limit: bool
    days_until_reset: int


class ApproachingLimitsResponseDTO(BaseModel):
    threshold: float
    users: List[UsageMetricsDTO] = Field(default_factory=list)
    failed: int = 0


class CourseReportDTO(BaseModel):
    course_id: str
    title: str
    total_enrollments: int
    completed_enrollments: int
    completion_rate: float
    live_classes: int


class InstitutionReportDTO(BaseModel):
    institution_id: str
    total_courses: int
    total_enrollments: int
    total_live_classes: int
    total_revenue: Decimal
    course_stats: List[CourseReportDTO] = Field(default_factory=list)
    average_completion_rate: float


class TopCourseDTO(BaseModel):
    course_id: str
    title: str
    enrollments: int = Field(..., description="Active enrollments")
    completion_rate: float


class PlatformUsageStatsDTO(BaseModel):
    """Platform-wide dashboard counters"""

    total_students: int
    active_subscriptions: int
    active_enrollments: int
    total_live_classes: int = Field(..., description="SCHEDULED, ACTIVE and COMPLETED sessions")
    average_completion_rate: float
    top_courses: List[TopCourseDTO] = Field(default_factory=list)
    subscription_distribution: Dict[str, int] = Field(default_factory=dict)


class FeatureAccessDTO(BaseModel):
    institution_id: str
    feature: str
    enabled: bool
    subscription_status: Optional[str] = None


class InstitutionUsageStatsDTO(BaseModel):
    institution_id: str
    active_students: int
    total_courses: int
    revenue_generated: Decimal
