"""Quota, usage tracking and usage analytics use cases"""
from .alerts import UsageAlertPublisher
from .check_eligibility import CheckEnrollmentEligibility, CheckLiveClassEligibility
from .track_usage import TrackEnrollmentUsage, TrackAttendanceUsage
from .reset_monthly_quotas import ResetMonthlyQuotas
from .get_usage_metrics import GetUserUsageMetrics, GetUsersApproachingLimits
from .generate_institution_report import GenerateInstitutionReport
from .get_platform_usage_stats import GetPlatformUsageStats
from .institution_usage import CheckInstitutionFeatureAccess, GetInstitutionUsageStats
from .dtos import (
    EligibilityDTO,
    TrackUsageResponseDTO,
    ResetMonthlyQuotasResponseDTO,
    UsageMetricsDTO,
    ApproachingLimitsResponseDTO,
    CourseReportDTO,
    InstitutionReportDTO,
    TopCourseDTO,
    PlatformUsageStatsDTO,
    FeatureAccessDTO,
    InstitutionUsageStatsDTO,
)

__all__ = [
    "UsageAlertPublisher",
    "CheckEnrollmentEligibility",
    "CheckLiveClassEligibility",
    "TrackEnrollmentUsage",
    "TrackAttendanceUsage",
    "ResetMonthlyQuotas",
    "GetUserUsageMetrics",
    "GetUsersApproachingLimits",
    "GenerateInstitutionReport",
    "GetPlatformUsageStats",
    "CheckInstitutionFeatureAccess",
    "GetInstitutionUsageStats",
    "EligibilityDTO",
    "TrackUsageResponseDTO",
    "ResetMonthlyQuotasResponseDTO",
    "UsageMetricsDTO",
    "ApproachingLimitsResponseDTO",
    "CourseReportDTO",
    "InstitutionReportDTO",
    "TopCourseDTO",
    "PlatformUsageStatsDTO",
    "FeatureAccessDTO",
    "InstitutionUsageStatsDTO",
]
