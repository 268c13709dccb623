"""ValidatePlatformCourseEnrollment Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.platform_repository import CourseRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.enrollment_repository import EnrollmentRepository
from src.domain.platform import Course
from src.domain.subscription import SubscriptionStatus, quota_available
from .dtos import PlatformEnrollmentValidationDTO

logger = logging.getLogger(__name__)


def _deny(code: str, reason: str, *warnings: str, requires_subscription: bool = False):
    return PlatformEnrollmentValidationDTO(
        allowed=False,
        code=code,
        reason=reason,
        warnings=[w for w in warnings if w],
        requires_subscription=requires_subscription,
    )


class ValidatePlatformCourseEnrollment:
    """
    Use Case: May a user enroll in a platform course?

    Subscription-gated courses (requires_subscription):
    1. Current subscription is ACTIVE
    2. Plan type matches course.subscription_tier when one is set
    3. current_enrollments and monthly_enrollments are below quota
    4. No active enrollment in the course

    Other platform courses:
    1. No active enrollment in the course
    2. current_enrollments < max_students (unset max is uncapped)
    """

    def __init__(
        self,
        course_repo: CourseRepository,
        subscription_repo: StudentSubscriptionRepository,
        enrollment_repo: EnrollmentRepository,
    ):
        self.course_repo = course_repo
        self.subscription_repo = subscription_repo
        self.enrollment_repo = enrollment_repo

    async def execute(self, user_id: str, course_id: str) -> Result[PlatformEnrollmentValidationDTO]:
        try:
            course = await self.course_repo.get_by_id(course_id)
            if not course:
                return Return.ok(_deny("COURSE_NOT_FOUND", "Course not found"))

            if not course.is_platform_course:
                return Return.ok(_deny("NOT_A_PLATFORM_COURSE", "This is not a platform course"))

            if course.requires_subscription:
                return Return.ok(await self._validate_subscription_path(user_id, course))

            return Return.ok(await self._validate_basic_path(user_id, course))

        except Exception as e:
            logger.error(f"Error validating platform enrollment for user {user_id} in {course_id}: {e}")
            return Return.err(
                Error(
                    code="PLATFORM_ENROLLMENT_VALIDATION_FAILED",
                    message="Failed to validate platform course enrollment",
                    reason=str(e),
                )
            )

    async def _validate_subscription_path(
        self, user_id: str, course: Course
    ) -> PlatformEnrollmentValidationDTO:
        required = f"Required tier: {course.subscription_tier.value}" if course.subscription_tier else ""

        subscription = await self.subscription_repo.get_current(user_id)
        if not subscription or subscription.status != SubscriptionStatus.ACTIVE:
            return _deny(
                "SUBSCRIPTION_NOT_ACTIVE",
                "Active subscription required for this course",
                required,
                requires_subscription=True,
            )

        if course.subscription_tier and subscription.plan_type != course.subscription_tier:
            return _deny(
                "TIER_MISMATCH",
                f"Subscription tier {course.subscription_tier.value} required",
                f"Current tier: {subscription.plan_type.value}",
                requires_subscription=True,
            )

        quota = subscription.enrollment_quota
        if not quota_available(subscription.current_enrollments, quota):
            return _deny(
                "ENROLLMENT_QUOTA_EXCEEDED",
                "Enrollment limit reached",
                f"Quota: {quota} (Used: {subscription.current_enrollments})",
                requires_subscription=True,
            )

        if not quota_available(subscription.monthly_enrollments, quota):
            return _deny(
                "ENROLLMENT_QUOTA_EXCEEDED",
                "Monthly enrollment quota exceeded",
                f"Quota: {quota} (Used: {subscription.monthly_enrollments})",
                requires_subscription=True,
            )

        if await self.enrollment_repo.get_active(user_id, course.id):
            return _deny(
                "ALREADY_ENROLLED", "Already enrolled in this course", requires_subscription=True
            )

        warnings = []
        if quota >= 0:
            warnings.append(f"Quota remaining: {quota - subscription.current_enrollments}")
        return PlatformEnrollmentValidationDTO(
            allowed=True, warnings=warnings, requires_subscription=True
        )

    async def _validate_basic_path(
        self, user_id: str, course: Course
    ) -> PlatformEnrollmentValidationDTO:
        if await self.enrollment_repo.get_active(user_id, course.id):
            return _deny("ALREADY_ENROLLED", "Already enrolled in this course")

        if course.max_students is not None and course.current_enrollments >= course.max_students:
            return _deny(
                "COURSE_FULL",
                "Course is at maximum capacity",
                f"Capacity: {course.max_students}",
            )

        return PlatformEnrollmentValidationDTO(allowed=True)
