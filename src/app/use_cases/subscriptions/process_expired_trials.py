"""ProcessExpiredTrials Use Case

Batch sweep converting every expired trial into its fallback plan.
"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.institution_subscription_repository import InstitutionSubscriptionRepository
from .trial_expiration import HandleStudentTrialExpiration, HandleInstitutionTrialExpiration
from .dtos import ProcessExpiredTrialsResultDTO

logger = logging.getLogger(__name__)


class ProcessExpiredTrials:
    """
    Use Case: Create fallback plans for all expired trials

    Each trial is handled independently; a failure is logged, counted and
    skipped. There is no retry.
    """

    def __init__(
        self,
        student_subscription_repo: StudentSubscriptionRepository,
        institution_subscription_repo: InstitutionSubscriptionRepository,
        student_handler: HandleStudentTrialExpiration,
        institution_handler: HandleInstitutionTrialExpiration,
    ):
        self.student_subscription_repo = student_subscription_repo
        self.institution_subscription_repo = institution_subscription_repo
        self.student_handler = student_handler
        self.institution_handler = institution_handler

    async def execute(self) -> Result[ProcessExpiredTrialsResultDTO]:
        try:
            now = datetime.utcnow()
            response = ProcessExpiredTrialsResultDTO()

            student_trials = await self.student_subscription_repo.get_expired_trials(now)
            logger.info(f"Found {len(student_trials)} expired student trials")

            # Handler rollbacks expire loaded rows
            student_ids = [(trial.id, trial.student_id) for trial in student_trials]
            for trial_id, student_id in student_ids:
                result = await self.student_handler.execute(student_id)
                if result.is_ok():
                    response.student_processed += 1
                else:
                    response.student_failed += 1
                    response.errors.append(f"student {student_id}: {result.error.message}")
                    logger.error(f"Failed to process student trial {trial_id}: {result.error.message}")

            institution_trials = await self.institution_subscription_repo.get_expired_trials(now)
            logger.info(f"Found {len(institution_trials)} expired institution trials")

            institution_ids = [(trial.id, trial.institution_id) for trial in institution_trials]
            for trial_id, institution_id in institution_ids:
                result = await self.institution_handler.execute(institution_id)
                if result.is_ok():
                    response.institution_processed += 1
                else:
                    response.institution_failed += 1
                    response.errors.append(f"institution {institution_id}: {result.error.message}")
                    logger.error(f"Failed to process institution trial {trial_id}: {result.error.message}")

            logger.info(
                f"Created {response.student_processed} student fallbacks and "
                f"{response.institution_processed} institution fallbacks"
            )
            return Return.ok(response)

        except Exception as e:
            return Return.err(
                Error(
                    code="PROCESS_EXPIRED_TRIALS_FAILED",
                    message="Failed to process expired trials",
                    reason=str(e),
                )
            )
