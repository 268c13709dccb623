"""CheckPlatformCourseAccess Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.platform_repository import UserRepository, CourseRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.enrollment_repository import EnrollmentRepository
from src.domain.enrollment import AccessMethod
from src.domain.subscription import SubscriptionStatus
from .dtos import PlatformCourseAccessDTO

logger = logging.getLogger(__name__)


class CheckPlatformCourseAccess:
    """
    Use Case: Resolve how, if at all, a user reaches a platform course

    Priority:
    1. Active enrollment row (access method recorded on the enrollment)
    2. ACTIVE subscription matching the course's required tier
    3. Institution membership, reported without granting access
    4. None
    """

    def __init__(
        self,
        user_repo: UserRepository,
        course_repo: CourseRepository,
        subscription_repo: StudentSubscriptionRepository,
        enrollment_repo: EnrollmentRepository,
    ):
        self.user_repo = user_repo
        self.course_repo = course_repo
        self.subscription_repo = subscription_repo
        self.enrollment_repo = enrollment_repo

    async def execute(self, user_id: str, course_id: str) -> Result[PlatformCourseAccessDTO]:
        try:
            course = await self.course_repo.get_by_id(course_id)
            if not course or not course.is_platform_course:
                return Return.ok(
                    PlatformCourseAccessDTO(
                        has_access=False,
                        reason="Course not found or not a platform course",
                    )
                )

            enrollment = await self.enrollment_repo.get_active(user_id, course_id)
            if enrollment:
                return Return.ok(
                    PlatformCourseAccessDTO(
                        has_access=True,
                        access_method=enrollment.access_method,
                        enrollment_status=enrollment.status,
                        access_expiry=enrollment.access_expiry,
                        subscription_tier=enrollment.subscription_tier,
                    )
                )

            if course.requires_subscription:
                subscription = await self.subscription_repo.get_current(user_id)
                if (
                    subscription
                    and subscription.status == SubscriptionStatus.ACTIVE
                    and (
                        course.subscription_tier is None
                        or subscription.plan_type == course.subscription_tier
                    )
                ):
                    return Return.ok(
                        PlatformCourseAccessDTO(
                            has_access=True,
                            access_method=AccessMethod.SUBSCRIPTION,
                            subscription_tier=subscription.plan_type,
                        )
                    )

            user = await self.user_repo.get_by_id(user_id)
            if user and user.institution_id:
                return Return.ok(
                    PlatformCourseAccessDTO(
                        has_access=False,
                        access_method=AccessMethod.INSTITUTION,
                        institution_id=user.institution_id,
                    )
                )

            return Return.ok(
                PlatformCourseAccessDTO(
                    has_access=False,
                    access_method=AccessMethod.NONE,
                    reason="No access found",
                )
            )

        except Exception as e:
            logger.error(f"Error checking platform course access for user {user_id}: {e}")
            return Return.err(
                Error(
                    code="ACCESS_CHECK_FAILED",
                    message="Failed to check platform course access",
                    reason=str(e),
                )
            )
