"""GetPlatformUsageStats Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.platform_repository import UserRepository, CourseRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.enrollment_repository import EnrollmentRepository
from src.app.repositories.live_class_repository import LiveClassRepository
from src.domain.enrollment import EnrollmentStatus
from src.domain.live_class import SessionStatus
from src.domain.platform import UserRole
from .dtos import PlatformUsageStatsDTO, TopCourseDTO

logger = logging.getLogger(__name__)

TOP_COURSES_LIMIT = 10

COUNTED_SESSION_STATUSES = (
    SessionStatus.SCHEDULED,
    SessionStatus.ACTIVE,
    SessionStatus.COMPLETED,
)


def completion_rate(completed: int, total: int) -> float:
    return round(completed / total * 100, 2) if total else 0.0


class GetPlatformUsageStats:
    """
    Use Case: Platform-wide usage dashboard

    Counts students, ACTIVE subscriptions, active enrollments and
    non-cancelled live classes. Top courses are ranked by active
    enrollments; their completion rate is COMPLETED over all enrollments
    of the course. Courses that no longer exist are reported as
    "Unknown Course".
    """

    def __init__(
        self,
        user_repo: UserRepository,
        course_repo: CourseRepository,
        subscription_repo: StudentSubscriptionRepository,
        enrollment_repo: EnrollmentRepository,
        live_class_repo: LiveClassRepository,
    ):
        self.user_repo = user_repo
        self.course_repo = course_repo
        self.subscription_repo = subscription_repo
        self.enrollment_repo = enrollment_repo
        self.live_class_repo = live_class_repo

    async def execute(self) -> Result[PlatformUsageStatsDTO]:
        try:
            # Step 1: Headline counters
            total_students = await self.user_repo.count_by_role(UserRole.STUDENT)
            distribution = await self.subscription_repo.active_plan_counts()
            active_enrollments = await self.enrollment_repo.count_all(active_only=True)
            total_live_classes = await self.live_class_repo.count_by_statuses(
                COUNTED_SESSION_STATUSES
            )

            # Step 2: Top courses
            top_courses = []
            ranked = await self.enrollment_repo.top_courses_by_active_enrollment(TOP_COURSES_LIMIT)
            for course_id, enrollments in ranked:
                total = await self.enrollment_repo.count_by_course(course_id)
                completed = await self.enrollment_repo.count_by_course(
                    course_id, status=EnrollmentStatus.COMPLETED
                )
                course = await self.course_repo.get_by_id(course_id)
                top_courses.append(
                    TopCourseDTO(
                        course_id=course_id,
                        title=course.title if course else "Unknown Course",
                        enrollments=enrollments,
                        completion_rate=completion_rate(completed, total),
                    )
                )

            # Step 3: Platform completion rate
            all_enrollments = await self.enrollment_repo.count_all()
            all_completed = await self.enrollment_repo.count_all(status=EnrollmentStatus.COMPLETED)

            return Return.ok(
                PlatformUsageStatsDTO(
                    total_students=total_students,
                    active_subscriptions=sum(distribution.values()),
                    active_enrollments=active_enrollments,
                    total_live_classes=total_live_classes,
                    average_completion_rate=completion_rate(all_completed, all_enrollments),
                    top_courses=top_courses,
                    subscription_distribution=distribution,
                )
            )

        except Exception as e:
            logger.error(f"Error getting platform usage stats: {e}")
            return Return.err(
                Error(
                    code="PLATFORM_USAGE_STATS_FAILED",
                    message="Failed to get platform usage stats",
                    reason=str(e),
                )
            )
