"""GenerateInstitutionReport Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.platform_repository import InstitutionRepository, CourseRepository
from src.app.repositories.enrollment_repository import EnrollmentRepository
from src.app.repositories.live_class_repository import LiveClassRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.enrollment import EnrollmentStatus
from .dtos import CourseReportDTO, InstitutionReportDTO

logger = logging.getLogger(__name__)


class GenerateInstitutionReport:
    """
    Use Case: Course, enrollment, live class and revenue totals for an institution

    Completion rate per course = COMPLETED enrollments / all enrollments.
    Revenue is the sum of COMPLETED payments for the institution's courses.
    """

    def __init__(
        self,
        institution_repo: InstitutionRepository,
        course_repo: CourseRepository,
        enrollment_repo: EnrollmentRepository,
        live_class_repo: LiveClassRepository,
        payment_repo: PaymentRepository,
    ):
        self.institution_repo = institution_repo
        self.course_repo = course_repo
        self.enrollment_repo = enrollment_repo
        self.live_class_repo = live_class_repo
        self.payment_repo = payment_repo

    async def execute(self, institution_id: str) -> Result[InstitutionReportDTO]:
        try:
            institution = await self.institution_repo.get_by_id(institution_id)
            if not institution:
                return Return.err(
                    Error(
                        code="INSTITUTION_NOT_FOUND",
                        message=f"Institution not found: {institution_id}",
                    )
                )

            courses = await self.course_repo.list_by_institution(institution_id)
            total_enrollments = await self.enrollment_repo.count_active_by_institution(institution_id)
            total_live_classes = await self.live_class_repo.count_by_institution(institution_id)
            total_revenue = await self.payment_repo.sum_completed_for_institution(institution_id)

            course_stats = []
            for course in courses:
                enrolled = await self.enrollment_repo.count_by_course(course.id)
                completed = await self.enrollment_repo.count_by_course(
                    course.id, status=EnrollmentStatus.COMPLETED
                )
                course_stats.append(
                    CourseReportDTO(
                        course_id=course.id,
                        title=course.title,
                        total_enrollments=enrolled,
                        completed_enrollments=completed,
                        completion_rate=round(completed / enrolled * 100, 2) if enrolled else 0.0,
                        live_classes=await self.live_class_repo.count_by_course(course.id),
                    )
                )

            average = (
                round(sum(c.completion_rate for c in course_stats) / len(course_stats), 2)
                if course_stats
                else 0.0
            )

            return Return.ok(
                InstitutionReportDTO(
                    institution_id=institution_id,
                    total_courses=len(courses),
                    total_enrollments=total_enrollments,
                    total_live_classes=total_live_classes,
                    total_revenue=total_revenue,
                    course_stats=course_stats,
                    average_completion_rate=average,
                )
            )

        except Exception as e:
            logger.error(f"Error generating report for institution {institution_id}: {e}")
            return Return.err(
                Error(
                    code="INSTITUTION_REPORT_FAILED",
                    message="Failed to generate institution report",
                    reason=str(e),
                )
            )
