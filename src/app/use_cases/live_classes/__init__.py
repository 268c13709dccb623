"""Live class governance use cases"""
from .validate_live_class import (
    ValidateLiveClassCreation,
    CheckInstructorAvailability,
    validate_time_constraints,
)
from .create_live_class import CreateLiveClass
from .join_live_class import ValidateUserCanJoinLiveClass, JoinLiveClass
from .update_live_class_status import UpdateLiveClassStatus
from .handle_instructor_unavailability import HandleInstructorUnavailability
from .get_instructor_stats import GetInstructorLiveClassStats
from .attendance_stats import ListUserAttendedSessions, GetLiveClassSubscriptionStatistics
from .dtos import (
    LiveClassSessionDTO,
    LiveClassValidationCommandDTO,
    CreateLiveClassCommandDTO,
    LiveClassValidationDTO,
    LiveClassCreatedDTO,
    SessionSlotDTO,
    InstructorAvailabilityDTO,
    JoinLiveClassResponseDTO,
    UpdateLiveClassStatusCommandDTO,
    InstructorUnavailabilityResultDTO,
    InstructorLiveClassStatsDTO,
    AttendedSessionDTO,
    UserAttendedSessionsDTO,
    TopAttendeeDTO,
    LiveClassSubscriptionStatsDTO,
)

__all__ = [
    "ValidateLiveClassCreation",
    "CheckInstructorAvailability",
    "validate_time_constraints",
    "CreateLiveClass",
    "ValidateUserCanJoinLiveClass",
    "JoinLiveClass",
    "UpdateLiveClassStatus",
    "HandleInstructorUnavailability",
    "GetInstructorLiveClassStats",
    "ListUserAttendedSessions",
    "GetLiveClassSubscriptionStatistics",
    "LiveClassSessionDTO",
    "LiveClassValidationCommandDTO",
    "CreateLiveClassCommandDTO",
    "LiveClassValidationDTO",
    "LiveClassCreatedDTO",
    "SessionSlotDTO",
    "InstructorAvailabilityDTO",
    "JoinLiveClassResponseDTO",
    "UpdateLiveClassStatusCommandDTO",
    "InstructorUnavailabilityResultDTO",
    "InstructorLiveClassStatsDTO",
    "AttendedSessionDTO",
    "UserAttendedSessionsDTO",
    "TopAttendeeDTO",
    "LiveClassSubscriptionStatsDTO",
]
