"""Platform course reporting"""

import logging
from typing import List
from libs.result import Result, Return, Error
from src.app.repositories.enrollment_repository import EnrollmentRepository
from src.domain.enrollment import EnrollmentStatus
from .dtos import PlatformCourseStatsDTO, PlatformEnrollmentDTO

logger = logging.getLogger(__name__)


class GetPlatformCourseStats:
    def __init__(self, enrollment_repo: EnrollmentRepository):
        self.enrollment_repo = enrollment_repo

    async def execute(self, course_id: str) -> Result[PlatformCourseStatsDTO]:
        try:
            total = await self.enrollment_repo.count_by_course(course_id)
            active = await self.enrollment_repo.count_by_course(course_id, EnrollmentStatus.ACTIVE)
            completed = await self.enrollment_repo.count_by_course(
                course_id, EnrollmentStatus.COMPLETED
            )

            return Return.ok(
                PlatformCourseStatsDTO(
                    course_id=course_id,
                    total_enrollments=total,
                    active_enrollments=active,
                    completed_enrollments=completed,
                    completion_rate=round(completed / total * 100, 2) if total else 0.0,
                    enrollment_by_method=await self.enrollment_repo.access_method_counts(course_id),
                    subscription_enrollments=await self.enrollment_repo.count_subscription_enrollments(
                        course_id
                    ),
                )
            )

        except Exception as e:
            logger.error(f"Error getting platform course stats for {course_id}: {e}")
            return Return.err(
                Error(
                    code="PLATFORM_COURSE_STATS_FAILED",
                    message="Failed to get platform course stats",
                    reason=str(e),
                )
            )


class ListUserPlatformEnrollments:
    """Active platform-course enrollments of one user, newest first"""

    def __init__(self, enrollment_repo: EnrollmentRepository):
        self.enrollment_repo = enrollment_repo

    async def execute(self, user_id: str) -> Result[List[PlatformEnrollmentDTO]]:
        try:
            enrollments = await self.enrollment_repo.list_active_platform_by_student(user_id)
            return Return.ok([PlatformEnrollmentDTO.from_entity(e) for e in enrollments])

        except Exception as e:
            logger.error(f"Error listing platform enrollments for user {user_id}: {e}")
            return Return.err(
                Error(
                    code="LIST_ENROLLMENTS_FAILED",
                    message="Failed to list platform course enrollments",
                    reason=str(e),
                )
            )
