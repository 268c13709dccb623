"""GetInstructorLiveClassStats Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.live_class_repository import LiveClassRepository
from src.domain.live_class import SessionStatus
from .dtos import InstructorLiveClassStatsDTO

logger = logging.getLogger(__name__)


class GetInstructorLiveClassStats:
    """Session counts by status plus completion and cancellation rates"""

    def __init__(self, live_class_repo: LiveClassRepository):
        self.live_class_repo = live_class_repo

    async def execute(self, instructor_id: str) -> Result[InstructorLiveClassStatsDTO]:
        try:
            counts = await self.live_class_repo.status_counts_for_instructor(instructor_id)
            participants = await self.live_class_repo.count_participants_for_instructor(instructor_id)

            total = sum(counts.values())
            completed = counts.get(SessionStatus.COMPLETED.value, 0)
            cancelled = counts.get(SessionStatus.CANCELLED.value, 0)

            return Return.ok(
                InstructorLiveClassStatsDTO(
                    instructor_id=instructor_id,
                    total_sessions=total,
                    scheduled_sessions=counts.get(SessionStatus.SCHEDULED.value, 0),
                    active_sessions=counts.get(SessionStatus.ACTIVE.value, 0),
                    completed_sessions=completed,
                    cancelled_sessions=cancelled,
                    total_participants=participants,
                    completion_rate=round(completed / total * 100, 2) if total else 0.0,
                    cancellation_rate=round(cancelled / total * 100, 2) if total else 0.0,
                )
            )

        except Exception as e:
            logger.error(f"Error getting live class stats for instructor {instructor_id}: {e}")
            return Return.err(
                Error(
                    code="LIVE_CLASS_STATS_FAILED",
                    message="Failed to get instructor live class stats",
                    reason=str(e),
                )
            )
