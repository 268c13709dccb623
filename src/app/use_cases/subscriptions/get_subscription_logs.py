"""GetSubscriptionLogs Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.subscription_log_repository import SubscriptionLogRepository
from src.domain.subscription_log import SubjectType
from .dtos import SubscriptionLogDTO, SubscriptionLogsResponseDTO


class GetSubscriptionLogs:
    """Newest-first audit trail of lifecycle actions for one subject"""

    def __init__(self, log_repo: SubscriptionLogRepository):
        self.log_repo = log_repo

    async def execute(
        self, subject_type: SubjectType, subject_id: str, limit: int = 50
    ) -> Result[SubscriptionLogsResponseDTO]:
        try:
            logs = await self.log_repo.list_logs(subject_type, subject_id, limit=limit)
            return Return.ok(
                SubscriptionLogsResponseDTO(
                    subject_type=subject_type.value,
                    subject_id=subject_id,
                    logs=[SubscriptionLogDTO.from_entity(log) for log in logs],
                )
            )
        except Exception as e:
            return Return.err(
                Error(
                    code="GET_SUBSCRIPTION_LOGS_FAILED",
                    message="Failed to load subscription logs",
                    reason=str(e),
                )
            )
