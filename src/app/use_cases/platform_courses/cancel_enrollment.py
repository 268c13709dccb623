"""CancelPlatformCourseEnrollment Use Case"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.platform_repository import CourseRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.enrollment_repository import EnrollmentRepository
from src.domain.enrollment import EnrollmentStatus
from .dtos import CancelPlatformEnrollmentDTO

logger = logging.getLogger(__name__)


class CancelPlatformCourseEnrollment:
    """
    Use Case: Cancel a user's active platform-course enrollment

    Business Rules:
    1. The enrollment is marked CANCELLED, inactive, with an end date
    2. Subscription enrollments release one current_enrollments slot
    3. Other enrollments release one course seat
    4. Counters never go below zero; monthly counters are not refunded
    """

    def __init__(
        self,
        uow: UnitOfWork,
        enrollment_repo: EnrollmentRepository,
        subscription_repo: StudentSubscriptionRepository,
        course_repo: CourseRepository,
    ):
        self.uow = uow
        self.enrollment_repo = enrollment_repo
        self.subscription_repo = subscription_repo
        self.course_repo = course_repo

    async def execute(self, user_id: str, course_id: str) -> Result[CancelPlatformEnrollmentDTO]:
        try:
            enrollment = await self.enrollment_repo.get_active(user_id, course_id)
            if not enrollment:
                return Return.err(
                    Error(
                        code="ENROLLMENT_NOT_FOUND",
                        message=f"No active enrollment for user {user_id} in course {course_id}",
                    )
                )

            now = datetime.utcnow()
            enrollment.is_active = False
            enrollment.status = EnrollmentStatus.CANCELLED
            enrollment.end_date = now
            enrollment = await self.enrollment_repo.update(enrollment)

            if enrollment.subscription_id:
                await self.subscription_repo.decrement_enrollment(enrollment.subscription_id)
            else:
                await self.course_repo.decrement_enrollment(course_id)

            await self.uow.commit()

            logger.info(f"User {user_id} cancelled enrollment in platform course {course_id}")

            return Return.ok(
                CancelPlatformEnrollmentDTO(
                    enrollment_id=enrollment.id,
                    course_id=course_id,
                    cancelled_at=now,
                    released_subscription_quota=enrollment.subscription_id is not None,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error cancelling enrollment for user {user_id} in course {course_id}: {e}")
            return Return.err(
                Error(
                    code="CANCEL_ENROLLMENT_FAILED",
                    message="Failed to cancel enrollment",
                    reason=str(e),
                )
            )
