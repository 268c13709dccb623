"""Platform Course API Routes"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.error import unwrap
from src.api.schemas.platform_course_request import PlatformEnrollmentSchema, UserCourseSchema
from src.adapter.repositories import (
    SqlAlchemyCourseRepository,
    SqlAlchemyEnrollmentRepository,
    SqlAlchemyStudentSubscriptionRepository,
    SqlAlchemyUsageAlertRepository,
    SqlAlchemyUserRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.use_cases.platform_courses import (
    CancelPlatformCourseEnrollment,
    CheckPlatformCourseAccess,
    EnrollInPlatformCourse,
    GetPlatformCourseStats,
    ListUserPlatformEnrollments,
    ValidatePlatformCourseEnrollment,
    PlatformEnrollmentCommandDTO,
)
from src.app.use_cases.usage import UsageAlertPublisher
from src.depends import get_session, get_policy, get_notification_service
from src.domain.policy import GovernancePolicy

router = APIRouter(prefix="/platform-courses", tags=["Platform Courses"])


def _validator(session: AsyncSession) -> ValidatePlatformCourseEnrollment:
    return ValidatePlatformCourseEnrollment(
        SqlAlchemyCourseRepository(session),
        SqlAlchemyStudentSubscriptionRepository(session),
        SqlAlchemyEnrollmentRepository(session),
    )


@router.get("/{course_id}/can-enroll")
async def can_enroll(
    course_id: str,
    user_id: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
):
    return unwrap(await _validator(session).execute(user_id, course_id))


@router.post("/{course_id}/enroll", status_code=status.HTTP_201_CREATED)
async def enroll(
    course_id: str,
    request: PlatformEnrollmentSchema,
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """
    Enroll a user in a platform course.

    Subscription-gated courses consume enrollment quota; other courses take
    a seat from max_students.

    **Returns:**
    - 201: Enrolled
    - 404: Course not found
    - 409: Not a platform course, inactive or mismatched subscription,
      quota or capacity exhausted, or already enrolled
    """
    use_case = EnrollInPlatformCourse(
        uow=SqlAlchemyUnitOfWork(session),
        validator=_validator(session),
        course_repo=SqlAlchemyCourseRepository(session),
        subscription_repo=SqlAlchemyStudentSubscriptionRepository(session),
        enrollment_repo=SqlAlchemyEnrollmentRepository(session),
        alert_publisher=UsageAlertPublisher(
            SqlAlchemyUsageAlertRepository(session), notification_service, policy
        ),
    )
    command = PlatformEnrollmentCommandDTO(course_id=course_id, **request.model_dump())
    return unwrap(await use_case.execute(command))


@router.get("/{course_id}/access")
async def check_access(
    course_id: str,
    user_id: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
):
    use_case = CheckPlatformCourseAccess(
        SqlAlchemyUserRepository(session),
        SqlAlchemyCourseRepository(session),
        SqlAlchemyStudentSubscriptionRepository(session),
        SqlAlchemyEnrollmentRepository(session),
    )
    return unwrap(await use_case.execute(user_id, course_id))


@router.post("/{course_id}/cancel")
async def cancel_enrollment(
    course_id: str,
    request: UserCourseSchema,
    session: AsyncSession = Depends(get_session),
):
    use_case = CancelPlatformCourseEnrollment(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyEnrollmentRepository(session),
        SqlAlchemyStudentSubscriptionRepository(session),
        SqlAlchemyCourseRepository(session),
    )
    return unwrap(await use_case.execute(request.user_id, course_id))


@router.get("/{course_id}/stats")
async def get_stats(course_id: str, session: AsyncSession = Depends(get_session)):
    return unwrap(await GetPlatformCourseStats(SqlAlchemyEnrollmentRepository(session)).execute(course_id))


@router.get("/users/{user_id}/enrollments")
async def list_user_enrollments(user_id: str, session: AsyncSession = Depends(get_session)):
    use_case = ListUserPlatformEnrollments(SqlAlchemyEnrollmentRepository(session))
    return unwrap(await use_case.execute(user_id))
