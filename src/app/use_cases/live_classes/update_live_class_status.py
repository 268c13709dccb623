"""UpdateLiveClassStatus Use Case"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.repositories.live_class_repository import LiveClassRepository
from src.domain.live_class import SessionStatus
from .dtos import UpdateLiveClassStatusCommandDTO, LiveClassSessionDTO

logger = logging.getLogger(__name__)


class UpdateLiveClassStatus:
    """
    Use Case: Move a session through its state machine

    SCHEDULED -> ACTIVE -> COMPLETED, SCHEDULED/ACTIVE -> CANCELLED.
    COMPLETED and CANCELLED are terminal. Participants are notified of a
    cancellation after commit.
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

    async def execute(self, command: UpdateLiveClassStatusCommandDTO) -> Result[LiveClassSessionDTO]:
        try:
            session = await self.live_class_repo.get_by_id(command.session_id)
            if not session:
                return Return.err(
                    Error(code="SESSION_NOT_FOUND", message=f"Live class not found: {command.session_id}")
                )

            if not session.can_transition_to(command.status):
                return Return.err(
                    Error(
                        code="INVALID_STATUS_TRANSITION",
                        message=f"Cannot move live class from {session.status.value} to {command.status.value}",
                    )
                )

            session.status = command.status
            if command.status == SessionStatus.CANCELLED:
                session.cancellation_reason = command.reason
                session.cancelled_at = datetime.utcnow()

            session = await self.live_class_repo.update(session)
            await self.uow.commit()

            logger.info(f"Live class {session.id} moved to {session.status.value}")

            if command.status == SessionStatus.CANCELLED:
                for participant in await self.live_class_repo.list_participants(session.id):
                    await self.notification_service.send_session_cancelled(session, participant.user_id)

            return Return.ok(LiveClassSessionDTO.from_entity(session))

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error updating live class {command.session_id}: {e}")
            return Return.err(
                Error(
                    code="UPDATE_LIVE_CLASS_FAILED",
                    message="Failed to update live class status",
                    reason=str(e),
                )
            )
