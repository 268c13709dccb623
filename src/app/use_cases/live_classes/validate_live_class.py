"""Live class creation checks

ValidateLiveClassCreation runs an ordered gate and stops at the first
failure:

1. instructor exists with role INSTRUCTOR or INSTITUTION_STAFF
2. no overlap with the instructor's SCHEDULED/ACTIVE sessions
3. institution exists and the instructor belongs to it (when given)
4. course exists and belongs to the same institution (when given)
5. instructor's tier max_live_classes not reached
6. advance notice, end after start, maximum duration
7. max_participants within bounds

Overlap with other sessions of the same course only produces a warning.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.live_class_repository import LiveClassRepository
from src.app.repositories.platform_repository import UserRepository, InstitutionRepository, CourseRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.tier_repository import TierRepository
from src.domain.live_class import LiveClassSession
from src.domain.platform import HOST_ROLES
from src.domain.policy import GovernancePolicy
from src.domain.subscription import SubscriptionStatus, quota_available
from .dtos import (
    LiveClassValidationCommandDTO,
    LiveClassValidationDTO,
    InstructorAvailabilityDTO,
    SessionSlotDTO,
)

logger = logging.getLogger(__name__)


def _slot(session: LiveClassSession) -> SessionSlotDTO:
    return SessionSlotDTO(
        id=session.id,
        title=session.title,
        start_time=session.start_time,
        end_time=session.end_time,
        status=session.status.value,
    )


def validate_time_constraints(
    start_time: datetime, end_time: datetime, now: datetime, policy: GovernancePolicy
) -> Optional[Error]:
    """Gate 6; returns the first violated constraint or None"""
    if start_time <= now:
        return Error(
            code="INSUFFICIENT_ADVANCE_NOTICE",
            message="Start time must be in the future",
        )

    if start_time - now < timedelta(minutes=policy.min_advance_notice_minutes):
        return Error(
            code="INSUFFICIENT_ADVANCE_NOTICE",
            message=(
                f"Live class must be scheduled at least "
                f"{policy.min_advance_notice_minutes} minutes in advance"
            ),
        )

    if end_time <= start_time:
        return Error(code="INVALID_TIME_RANGE", message="End time must be after start time")

    if end_time - start_time > timedelta(hours=policy.max_session_duration_hours):
        return Error(
            code="SESSION_TOO_LONG",
            message=f"Live class duration cannot exceed {policy.max_session_duration_hours} hours",
        )

    return None


class CheckInstructorAvailability:
    """
    Use Case: Is the instructor free for [start, end)?

    Adjacent sessions (one ending exactly when the other starts) do not conflict.
    """

    def __init__(self, live_class_repo: LiveClassRepository):
        self.live_class_repo = live_class_repo

    async def execute(
        self,
        instructor_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_session_id: Optional[str] = None,
    ) -> Result[InstructorAvailabilityDTO]:
        try:
            conflicts = await self.live_class_repo.find_instructor_conflicts(
                instructor_id, start_time, end_time, exclude_session_id=exclude_session_id
            )
            next_slot = max((c.end_time for c in conflicts), default=None)

            return Return.ok(
                InstructorAvailabilityDTO(
                    is_available=not conflicts,
                    conflicts=[_slot(c) for c in conflicts],
                    next_available_slot=next_slot,
                )
            )

        except Exception as e:
            logger.error(f"Error checking availability for instructor {instructor_id}: {e}")
            return Return.err(
                Error(
                    code="AVAILABILITY_CHECK_FAILED",
                    message="Failed to check instructor availability",
                    reason=str(e),
                )
            )


class ValidateLiveClassCreation:
    """
    Use Case: Decide whether a proposed live class may be created

    Returns an error for the first failed gate; warnings are collected only
    once every gate has passed.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        institution_repo: InstitutionRepository,
        course_repo: CourseRepository,
        live_class_repo: LiveClassRepository,
        subscription_repo: StudentSubscriptionRepository,
        tier_repo: TierRepository,
        policy: GovernancePolicy,
    ):
        self.user_repo = user_repo
        self.institution_repo = institution_repo
        self.course_repo = course_repo
        self.live_class_repo = live_class_repo
        self.subscription_repo = subscription_repo
        self.tier_repo = tier_repo
        self.policy = policy

    async def execute(
        self, command: LiveClassValidationCommandDTO, now: Optional[datetime] = None
    ) -> Result[LiveClassValidationDTO]:
        try:
            now = now or datetime.utcnow()

            # Gate 1: Instructor identity and role
            instructor = await self.user_repo.get_by_id(command.instructor_id)
            if not instructor:
                return Return.err(
                    Error(
                        code="INSTRUCTOR_NOT_FOUND",
                        message=f"Instructor not found: {command.instructor_id}",
                    )
                )
            if instructor.role not in HOST_ROLES:
                return Return.err(
                    Error(
                        code="INVALID_INSTRUCTOR_ROLE",
                        message="User is not authorized as an instructor",
                        reason=f"role={instructor.role.value}",
                    )
                )

            # Gate 2: Instructor double-booking
            conflicts = await self.live_class_repo.find_instructor_conflicts(
                command.instructor_id, command.start_time, command.end_time
            )
            if conflicts:
                return Return.err(
                    Error(
                        code="INSTRUCTOR_SCHEDULE_CONFLICT",
                        message="Instructor has conflicting sessions: "
                        + ", ".join(c.title for c in conflicts),
                        reason=",".join(c.id for c in conflicts),
                    )
                )

            # Gate 3: Institution linkage
            if command.institution_id:
                institution = await self.institution_repo.get_by_id(command.institution_id)
                if not institution:
                    return Return.err(
                        Error(
                            code="INSTITUTION_NOT_FOUND",
                            message=f"Institution not found: {command.institution_id}",
                        )
                    )
                if instructor.institution_id != command.institution_id:
                    return Return.err(
                        Error(
                            code="INSTRUCTOR_NOT_IN_INSTITUTION",
                            message="Instructor does not belong to the specified institution",
                        )
                    )

            # Gate 4: Course linkage
            if command.course_id:
                course = await self.course_repo.get_by_id(command.course_id)
                if not course:
                    return Return.err(
                        Error(code="COURSE_NOT_FOUND", message=f"Course not found: {command.course_id}")
                    )
                if command.institution_id and course.institution_id != command.institution_id:
                    return Return.err(
                        Error(
                            code="COURSE_INSTITUTION_MISMATCH",
                            message="Course does not belong to the specified institution",
                        )
                    )

            # Gate 5: Tier-derived live class limit
            limit_error = await self._check_live_class_limit(command.instructor_id, now)
            if limit_error:
                return Return.err(limit_error)

            # Gate 6: Time constraints
            time_error = validate_time_constraints(command.start_time, command.end_time, now, self.policy)
            if time_error:
                return Return.err(time_error)

            # Gate 7: Participant bounds
            if not self.policy.min_participants <= command.max_participants <= self.policy.max_participants:
                return Return.err(
                    Error(
                        code="INVALID_PARTICIPANT_LIMIT",
                        message=(
                            f"Maximum participants must be between {self.policy.min_participants} "
                            f"and {self.policy.max_participants}"
                        ),
                    )
                )

            # Course overlap is advisory
            warnings = []
            if command.course_id:
                overlapping = await self.live_class_repo.find_course_conflicts(
                    command.course_id, command.start_time, command.end_time
                )
                if overlapping:
                    warnings.append(
                        f"Found {len(overlapping)} overlapping sessions in the same course"
                    )

            return Return.ok(LiveClassValidationDTO(valid=True, warnings=warnings))

        except Exception as e:
            logger.error(f"Error validating live class for instructor {command.instructor_id}: {e}")
            return Return.err(
                Error(
                    code="LIVE_CLASS_VALIDATION_FAILED",
                    message="Internal validation error",
                    reason=str(e),
                )
            )

    async def _check_live_class_limit(self, instructor_id: str, now: datetime) -> Optional[Error]:
        subscription = await self.subscription_repo.get_current(instructor_id)
        if not subscription or subscription.status != SubscriptionStatus.ACTIVE:
            return Error(
                code="SUBSCRIPTION_NOT_ACTIVE",
                message="Instructor has no active subscription",
            )

        tier = await self.tier_repo.get_student_tier(subscription.tier_id)
        if not tier:
            return Error(code="TIER_NOT_FOUND", message=f"Student tier not found: {subscription.tier_id}")

        current = await self.live_class_repo.count_upcoming_for_instructor(instructor_id, now)
        if not quota_available(current, tier.max_live_classes):
            return Error(
                code="LIVE_CLASS_LIMIT_REACHED",
                message=f"Instructor has reached live class limit: {current}/{tier.max_live_classes}",
            )
        return None
