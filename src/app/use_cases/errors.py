"""Error code categories

Every error code returned by a use case belongs to one category. The API
layer maps categories to HTTP status codes.
"""

from enum import Enum
from typing import Dict


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    CONFLICT = "CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL = "INTERNAL"


ERROR_KINDS: Dict[str, ErrorKind] = {
    # Not found
    "SUBSCRIPTION_NOT_FOUND": ErrorKind.NOT_FOUND,
    "TIER_NOT_FOUND": ErrorKind.NOT_FOUND,
    "COMMISSION_TIER_NOT_FOUND": ErrorKind.NOT_FOUND,
    "PAYMENT_NOT_FOUND": ErrorKind.NOT_FOUND,
    "ENROLLMENT_NOT_FOUND": ErrorKind.NOT_FOUND,
    "COURSE_NOT_FOUND": ErrorKind.NOT_FOUND,
    "INSTITUTION_NOT_FOUND": ErrorKind.NOT_FOUND,
    "USER_NOT_FOUND": ErrorKind.NOT_FOUND,
    "INSTRUCTOR_NOT_FOUND": ErrorKind.NOT_FOUND,
    "SESSION_NOT_FOUND": ErrorKind.NOT_FOUND,
    # Invalid state
    "PAYMENT_NOT_COMPLETED": ErrorKind.INVALID_STATE,
    "SUBSCRIPTION_NOT_ACTIVE": ErrorKind.INVALID_STATE,
    "SUBSCRIPTION_NOT_CANCELLED": ErrorKind.INVALID_STATE,
    "TRIAL_NOT_EXPIRED": ErrorKind.INVALID_STATE,
    "NO_PENDING_COMMISSIONS": ErrorKind.INVALID_STATE,
    "INVALID_STATUS_TRANSITION": ErrorKind.INVALID_STATE,
    "SESSION_NOT_ACTIVE": ErrorKind.INVALID_STATE,
    "ENROLLMENT_NOT_ACTIVE": ErrorKind.INVALID_STATE,
    "INVALID_INSTRUCTOR_ROLE": ErrorKind.INVALID_STATE,
    "NOT_A_PLATFORM_COURSE": ErrorKind.INVALID_STATE,
    "TIER_MISMATCH": ErrorKind.INVALID_STATE,
    # Capacity exceeded
    "ENROLLMENT_QUOTA_EXCEEDED": ErrorKind.CAPACITY_EXCEEDED,
    "ATTENDANCE_QUOTA_EXCEEDED": ErrorKind.CAPACITY_EXCEEDED,
    "DOWNGRADE_EXCEEDS_QUOTA": ErrorKind.CAPACITY_EXCEEDED,
    "PAYOUT_EXCEEDS_PENDING": ErrorKind.CAPACITY_EXCEEDED,
    "SESSION_FULL": ErrorKind.CAPACITY_EXCEEDED,
    "COURSE_FULL": ErrorKind.CAPACITY_EXCEEDED,
    "LIVE_CLASS_LIMIT_REACHED": ErrorKind.CAPACITY_EXCEEDED,
    # Conflict
    "INSTRUCTOR_SCHEDULE_CONFLICT": ErrorKind.CONFLICT,
    "ALREADY_ENROLLED": ErrorKind.CONFLICT,
    "ALREADY_JOINED": ErrorKind.CONFLICT,
    "INSTRUCTOR_NOT_IN_INSTITUTION": ErrorKind.CONFLICT,
    "COURSE_INSTITUTION_MISMATCH": ErrorKind.CONFLICT,
    # Validation
    "VALIDATION_ERROR": ErrorKind.VALIDATION_ERROR,
    "INSUFFICIENT_ADVANCE_NOTICE": ErrorKind.VALIDATION_ERROR,
    "INVALID_TIME_RANGE": ErrorKind.VALIDATION_ERROR,
    "SESSION_TOO_LONG": ErrorKind.VALIDATION_ERROR,
    "INVALID_PARTICIPANT_LIMIT": ErrorKind.VALIDATION_ERROR,
    "INVALID_DATE_RANGE": ErrorKind.VALIDATION_ERROR,
    "INVALID_MONTH": ErrorKind.VALIDATION_ERROR,
}


def error_kind(code: str) -> ErrorKind:
    """Category of an error code; unknown codes are internal failures"""
    return ERROR_KINDS.get(code, ErrorKind.INTERNAL)
