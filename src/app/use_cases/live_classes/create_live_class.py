"""CreateLiveClass Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.live_class_repository import LiveClassRepository
from src.domain.live_class import LiveClassSession, SessionStatus
from .validate_live_class import ValidateLiveClassCreation
from .dtos import CreateLiveClassCommandDTO, LiveClassCreatedDTO, LiveClassSessionDTO

logger = logging.getLogger(__name__)


class CreateLiveClass:
    """
    Use Case: Validate and persist a new SCHEDULED live class

    Validation errors are returned unchanged; course-overlap warnings are
    passed back with the created session.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        live_class_repo: LiveClassRepository,
        validator: ValidateLiveClassCreation,
    ):
        self.uow = uow
        self.live_class_repo = live_class_repo
        self.validator = validator

    async def execute(self, command: CreateLiveClassCommandDTO) -> Result[LiveClassCreatedDTO]:
        validation = await self.validator.execute(command)
        if validation.is_err():
            return Return.err(validation.error)

        try:
            session = await self.live_class_repo.create(
                LiveClassSession(
                    title=command.title,
                    description=command.description,
                    instructor_id=command.instructor_id,
                    institution_id=command.institution_id,
                    course_id=command.course_id,
                    start_time=command.start_time,
                    end_time=command.end_time,
                    status=SessionStatus.SCHEDULED,
                    max_participants=command.max_participants,
                )
            )
            await self.uow.commit()

            logger.info(f"Live class created: {session.id} for instructor {command.instructor_id}")

            return Return.ok(
                LiveClassCreatedDTO(
                    session=LiveClassSessionDTO.from_entity(session),
                    warnings=validation.value.warnings,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error creating live class for instructor {command.instructor_id}: {e}")
            return Return.err(
                Error(
                    code="CREATE_LIVE_CLASS_FAILED",
                    message="Failed to create live class",
                    reason=str(e),
                )
            )
