"""Joining live classes"""

import logging
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.live_class_repository import LiveClassRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.use_cases.usage.alerts import UsageAlertPublisher
from src.app.use_cases.usage.check_eligibility import CheckLiveClassEligibility
from src.app.use_cases.usage.dtos import EligibilityDTO
from src.domain.live_class import SessionParticipant, SessionStatus
from src.domain.usage_alert import UsageAlertType
from .dtos import JoinLiveClassResponseDTO

logger = logging.getLogger(__name__)


class ValidateUserCanJoinLiveClass:
    """
    Use Case: May a user join a live class now?

    Rules, in order:
    1. Subscription admits the user (ACTIVE, attendance quota left, not joined)
    2. Session exists and is ACTIVE
    3. Participant count below max_participants
    """

    def __init__(
        self,
        eligibility: CheckLiveClassEligibility,
        live_class_repo: LiveClassRepository,
    ):
        self.eligibility = eligibility
        self.live_class_repo = live_class_repo

    async def execute(self, user_id: str, session_id: str) -> Result[EligibilityDTO]:
        result = await self.eligibility.execute(user_id, session_id)
        if result.is_err() or not result.value.allowed:
            return result

        try:
            session = await self.live_class_repo.get_by_id(session_id)
            if not session:
                return Return.ok(EligibilityDTO.deny("SESSION_NOT_FOUND", "Live class not found"))

            if session.status != SessionStatus.ACTIVE:
                return Return.ok(
                    EligibilityDTO.deny("SESSION_NOT_ACTIVE", f"Live class is {session.status.value}")
                )

            participants = await self.live_class_repo.count_participants(session_id)
            if participants >= session.max_participants:
                return Return.ok(
                    EligibilityDTO.deny(
                        "SESSION_FULL",
                        f"Live class is full ({participants}/{session.max_participants})",
                    )
                )

            return Return.ok(EligibilityDTO.allow())

        except Exception as e:
            logger.error(f"Error validating join for user {user_id} in session {session_id}: {e}")
            return Return.err(
                Error(
                    code="ELIGIBILITY_CHECK_FAILED",
                    message="Failed to validate live class join",
                    reason=str(e),
                )
            )


class JoinLiveClass:
    """
    Use Case: Add a user to an ACTIVE live class

    Flow:
    1. Run ValidateUserCanJoinLiveClass
    2. Consume one attendance with a conditional UPDATE
    3. Record the participant (unique per session and user)
    4. Commit, then publish a usage alert when the threshold is crossed
    """

    def __init__(
        self,
        uow: UnitOfWork,
        validator: ValidateUserCanJoinLiveClass,
        subscription_repo: StudentSubscriptionRepository,
        live_class_repo: LiveClassRepository,
        alert_publisher: UsageAlertPublisher,
    ):
        self.uow = uow
        self.validator = validator
        self.subscription_repo = subscription_repo
        self.live_class_repo = live_class_repo
        self.alert_publisher = alert_publisher

    async def execute(self, user_id: str, session_id: str) -> Result[JoinLiveClassResponseDTO]:
        # Step 1: Validate
        validation = await self.validator.execute(user_id, session_id)
        if validation.is_err():
            return Return.err(validation.error)
        if not validation.value.allowed:
            return Return.err(
                Error(code=validation.value.code, message=validation.value.reason)
            )

        try:
            subscription = await self.subscription_repo.get_current(user_id)
            subscription_id = subscription.id

            # Step 2: Consume attendance
            if not await self.subscription_repo.try_increment_attendance(subscription_id):
                return Return.err(
                    Error(
                        code="ATTENDANCE_QUOTA_EXCEEDED",
                        message="Monthly live class quota exceeded",
                    )
                )
            subscription = await self.subscription_repo.get_by_id(subscription_id)

            # Step 3: Participant row
            try:
                participant = await self.live_class_repo.add_participant(
                    SessionParticipant(
                        session_id=session_id,
                        user_id=user_id,
                        subscription_id=subscription_id,
                        quota_used=subscription.attendance_quota >= 0,
                    )
                )
            except IntegrityError:
                await self.uow.rollback()
                return Return.err(
                    Error(code="ALREADY_JOINED", message="Already joined this live class")
                )

            alert = await self.alert_publisher.record(
                subscription, UsageAlertType.ATTENDANCE_LIMIT_APPROACHING
            )

            # Step 4: Commit and notify
            await self.uow.commit()
            if alert:
                await self.alert_publisher.publish(alert)
                await self.uow.commit()

            logger.info(f"User {user_id} joined live class {session_id}")

            return Return.ok(
                JoinLiveClassResponseDTO(
                    participant_id=participant.id,
                    session_id=session_id,
                    user_id=user_id,
                    joined_at=participant.joined_at,
                    monthly_attendance=subscription.monthly_attendance,
                    attendance_quota=subscription.attendance_quota,
                    alert_raised=alert is not None,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error joining live class {session_id} for user {user_id}: {e}")
            return Return.err(
                Error(
                    code="JOIN_LIVE_CLASS_FAILED",
                    message="Failed to join live class",
                    reason=str(e),
                )
            )
