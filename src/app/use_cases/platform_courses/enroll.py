"""EnrollInPlatformCourse Use Case"""

import logging
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.platform_repository import CourseRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.enrollment_repository import EnrollmentRepository
from src.app.use_cases.usage.alerts import UsageAlertPublisher
from src.domain.enrollment import AccessMethod, Enrollment, EnrollmentStatus
from src.domain.usage_alert import UsageAlertType
from .validate_enrollment import ValidatePlatformCourseEnrollment
from .dtos import PlatformEnrollmentCommandDTO, PlatformEnrollmentDTO

logger = logging.getLogger(__name__)


class EnrollInPlatformCourse:
    """
    Use Case: Enroll a user in a platform course

    Flow:
    1. Run ValidatePlatformCourseEnrollment
    2. Take the slot with a conditional UPDATE: subscription quota for
       subscription-gated courses, course seat otherwise
    3. Create the enrollment; the active (student, course) index rejects duplicates
    4. Commit, then publish a usage alert when the threshold is crossed
    """

    def __init__(
        self,
        uow: UnitOfWork,
        validator: ValidatePlatformCourseEnrollment,
        course_repo: CourseRepository,
        subscription_repo: StudentSubscriptionRepository,
        enrollment_repo: EnrollmentRepository,
        alert_publisher: UsageAlertPublisher,
    ):
        self.uow = uow
        self.validator = validator
        self.course_repo = course_repo
        self.subscription_repo = subscription_repo
        self.enrollment_repo = enrollment_repo
        self.alert_publisher = alert_publisher

    async def execute(self, command: PlatformEnrollmentCommandDTO) -> Result[PlatformEnrollmentDTO]:
        # Step 1: Validate
        validation = await self.validator.execute(command.user_id, command.course_id)
        if validation.is_err():
            return Return.err(validation.error)
        if not validation.value.allowed:
            return Return.err(
                Error(
                    code=validation.value.code,
                    message=validation.value.reason,
                    reason="; ".join(validation.value.warnings) or None,
                )
            )

        try:
            enrollment = Enrollment(
                student_id=command.user_id,
                course_id=command.course_id,
                status=EnrollmentStatus.ACTIVE,
                is_active=True,
                is_platform_course=True,
            )
            subscription = None

            # Step 2: Take the slot
            if validation.value.requires_subscription:
                subscription = await self.subscription_repo.get_current(command.user_id)
                subscription_id = subscription.id
                if not await self.subscription_repo.try_increment_enrollment(subscription_id):
                    return Return.err(
                        Error(code="ENROLLMENT_QUOTA_EXCEEDED", message="Enrollment limit reached")
                    )
                subscription = await self.subscription_repo.get_by_id(subscription_id)
                enrollment.access_method = command.access_method or AccessMethod.SUBSCRIPTION
                enrollment.subscription_id = subscription_id
                enrollment.subscription_tier = subscription.plan_type
                enrollment.enrollment_quota_used = True
            else:
                if not await self.course_repo.try_increment_enrollment(command.course_id):
                    return Return.err(
                        Error(code="COURSE_FULL", message="Course is at maximum capacity")
                    )
                enrollment.access_method = command.access_method or AccessMethod.DIRECT

            # Step 3: Enrollment row
            try:
                enrollment = await self.enrollment_repo.create(enrollment)
            except IntegrityError:
                await self.uow.rollback()
                return Return.err(
                    Error(code="ALREADY_ENROLLED", message="Already enrolled in this course")
                )

            alert = None
            if subscription:
                alert = await self.alert_publisher.record(
                    subscription, UsageAlertType.ENROLLMENT_LIMIT_APPROACHING
                )

            # Step 4: Commit and notify
            await self.uow.commit()
            if alert:
                await self.alert_publisher.publish(alert)
                await self.uow.commit()

            logger.info(f"User {command.user_id} enrolled in platform course {command.course_id}")

            return Return.ok(PlatformEnrollmentDTO.from_entity(enrollment, alert_raised=alert is not None))

        except Exception as e:
            await self.uow.rollback()
            logger.error(
                f"Error enrolling user {command.user_id} in platform course {command.course_id}: {e}"
            )
            return Return.err(
                Error(
                    code="PLATFORM_ENROLLMENT_FAILED",
                    message="Failed to enroll in course",
                    reason=str(e),
                )
            )
