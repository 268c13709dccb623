"""Admission checks for course enrollment and live class attendance"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.enrollment_repository import EnrollmentRepository
from src.app.repositories.live_class_repository import LiveClassRepository
from src.domain.subscription import SubscriptionStatus, quota_available
from .dtos import EligibilityDTO

logger = logging.getLogger(__name__)


class CheckEnrollmentEligibility:
    """
    Use Case: Can a student enroll in a course right now?

    Admission Rules:
    1. The current subscription must be ACTIVE
    2. current_enrollments < enrollment_quota
    3. monthly_enrollments < enrollment_quota
    4. No active enrollment in the same course

    A negative quota is unlimited.
    """

    def __init__(
        self,
        subscription_repo: StudentSubscriptionRepository,
        enrollment_repo: EnrollmentRepository,
    ):
        self.subscription_repo = subscription_repo
        self.enrollment_repo = enrollment_repo

    async def execute(self, user_id: str, course_id: str) -> Result[EligibilityDTO]:
        try:
            subscription = await self.subscription_repo.get_current(user_id)
            if not subscription:
                return Return.ok(
                    EligibilityDTO.deny("SUBSCRIPTION_NOT_FOUND", "No subscription found")
                )

            if subscription.status != SubscriptionStatus.ACTIVE:
                return Return.ok(
                    EligibilityDTO.deny(
                        "SUBSCRIPTION_NOT_ACTIVE",
                        f"Subscription is {subscription.status.value}",
                    )
                )

            quota = subscription.enrollment_quota
            if not quota_available(subscription.current_enrollments, quota):
                return Return.ok(
                    EligibilityDTO.deny(
                        "ENROLLMENT_QUOTA_EXCEEDED",
                        f"Enrollment quota reached ({subscription.current_enrollments}/{quota})",
                    )
                )

            if not quota_available(subscription.monthly_enrollments, quota):
                return Return.ok(
                    EligibilityDTO.deny(
                        "ENROLLMENT_QUOTA_EXCEEDED",
                        f"Monthly enrollment quota reached ({subscription.monthly_enrollments}/{quota})",
                    )
                )

            existing = await self.enrollment_repo.get_active(user_id, course_id)
            if existing:
                return Return.ok(
                    EligibilityDTO.deny("ALREADY_ENROLLED", "Already enrolled in this course")
                )

            return Return.ok(EligibilityDTO.allow())

        except Exception as e:
            logger.error(f"Error checking enrollment eligibility for user {user_id}: {e}")
            return Return.err(
                Error(
                    code="ELIGIBILITY_CHECK_FAILED",
                    message="Failed to check enrollment eligibility",
                    reason=str(e),
                )
            )


class CheckLiveClassEligibility:
    """
    Use Case: Does a student's subscription admit them to a live class?

    Admission Rules:
    1. The current subscription must be ACTIVE
    2. monthly_attendance < attendance_quota
    3. Not already a participant of the session
    """

    def __init__(
        self,
        subscription_repo: StudentSubscriptionRepository,
        live_class_repo: LiveClassRepository,
    ):
        self.subscription_repo = subscription_repo
        self.live_class_repo = live_class_repo

    async def execute(self, user_id: str, session_id: str) -> Result[EligibilityDTO]:
        try:
            subscription = await self.subscription_repo.get_current(user_id)
            if not subscription:
                return Return.ok(
                    EligibilityDTO.deny("SUBSCRIPTION_NOT_FOUND", "No subscription found")
                )

            if subscription.status != SubscriptionStatus.ACTIVE:
                return Return.ok(
                    EligibilityDTO.deny(
                        "SUBSCRIPTION_NOT_ACTIVE",
                        f"Subscription is {subscription.status.value}",
                    )
                )

            quota = subscription.attendance_quota
            if not quota_available(subscription.monthly_attendance, quota):
                return Return.ok(
                    EligibilityDTO.deny(
                        "ATTENDANCE_QUOTA_EXCEEDED",
                        f"Monthly live class quota reached ({subscription.monthly_attendance}/{quota})",
                    )
                )

            participant = await self.live_class_repo.get_participant(session_id, user_id)
            if participant:
                return Return.ok(
                    EligibilityDTO.deny("ALREADY_JOINED", "Already joined this live class")
                )

            return Return.ok(EligibilityDTO.allow())

        except Exception as e:
            logger.error(f"Error checking live class eligibility for user {user_id}: {e}")
            return Return.err(
                Error(
                    code="ELIGIBILITY_CHECK_FAILED",
                    message="Failed to check live class eligibility",
                    reason=str(e),
                )
            )
