"""Platform course governance use cases"""
from .validate_enrollment import ValidatePlatformCourseEnrollment
from .enroll import EnrollInPlatformCourse
from .check_access import CheckPlatformCourseAccess
from .cancel_enrollment import CancelPlatformCourseEnrollment
from .get_stats import GetPlatformCourseStats, ListUserPlatformEnrollments
from .dtos import (
    PlatformEnrollmentCommandDTO,
    PlatformEnrollmentValidationDTO,
    PlatformEnrollmentDTO,
    PlatformCourseAccessDTO,
    CancelPlatformEnrollmentDTO,
    PlatformCourseStatsDTO,
)

__all__ = [
    "ValidatePlatformCourseEnrollment",
    "EnrollInPlatformCourse",
    "CheckPlatformCourseAccess",
    "CancelPlatformCourseEnrollment",
    "GetPlatformCourseStats",
    "ListUserPlatformEnrollments",
    "PlatformEnrollmentCommandDTO",
    "PlatformEnrollmentValidationDTO",
    "PlatformEnrollmentDTO",
    "PlatformCourseAccessDTO",
    "CancelPlatformEnrollmentDTO",
    "PlatformCourseStatsDTO",
]
