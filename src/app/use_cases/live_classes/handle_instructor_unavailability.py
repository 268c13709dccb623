"""HandleInstructorUnavailability Use Case"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.repositories.live_class_repository import LiveClassRepository
from src.domain.live_class import SessionStatus, INSTRUCTOR_UNAVAILABLE_REASON
from .dtos import InstructorUnavailabilityResultDTO

logger = logging.getLogger(__name__)


class HandleInstructorUnavailability:
    """
    Use Case: Cancel an instructor's SCHEDULED sessions from a date onward

    Business Rules:
    1. Only SCHEDULED sessions starting at or after from_date are affected
    2. Each is CANCELLED with reason "Instructor unavailable" and a timestamp
    3. Every participant of a cancelled session is notified after commit;
       delivery failures are counted, not raised
    """

    def __init__(
        self,
        uow: UnitOfWork,
        live_class_repo: LiveClassRepository,
        notification_service: NotificationService,
    ):
        self.uow = uow
        self.live_class_repo = live_class_repo
        self.notification_service = notification_service

    async def execute(
        self, instructor_id: str, from_date: datetime
    ) -> Result[InstructorUnavailabilityResultDTO]:
        try:
            # Step 1: Cancel affected sessions
            sessions = await self.live_class_repo.list_scheduled_from(instructor_id, from_date)
            now = datetime.utcnow()

            cancelled = []
            for session in sessions:
                session.status = SessionStatus.CANCELLED
                session.cancellation_reason = INSTRUCTOR_UNAVAILABLE_REASON
                session.cancelled_at = now
                cancelled.append(await self.live_class_repo.update(session))

            await self.uow.commit()

            # Step 2: Notify participants
            notified = 0
            failed = 0
            for session in cancelled:
                for participant in await self.live_class_repo.list_participants(session.id):
                    logger.info(
                        f"Notifying participant {participant.user_id} about cancelled session {session.id}"
                    )
                    if await self.notification_service.send_session_cancelled(session, participant.user_id):
                        notified += 1
                    else:
                        failed += 1

            logger.info(f"Handled instructor unavailability for {len(cancelled)} sessions")

            return Return.ok(
                InstructorUnavailabilityResultDTO(
                    affected_sessions=len(cancelled),
                    cancelled_session_ids=[s.id for s in cancelled],
                    notified_participants=notified,
                    failed_notifications=failed,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error handling unavailability for instructor {instructor_id}: {e}")
            return Return.err(
                Error(
                    code="INSTRUCTOR_UNAVAILABILITY_FAILED",
                    message="Failed to cancel instructor sessions",
                    reason=str(e),
                )
            )
