"""Usage API Routes

Admission checks, usage tracking, quota resets and usage analytics.
"""

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.error import unwrap
from src.adapter.repositories import (
    SqlAlchemyCourseRepository,
    SqlAlchemyEnrollmentRepository,
    SqlAlchemyInstitutionRepository,
    SqlAlchemyInstitutionSubscriptionRepository,
    SqlAlchemyLiveClassRepository,
    SqlAlchemyPaymentRepository,
    SqlAlchemyStudentSubscriptionRepository,
    SqlAlchemyUsageAlertRepository,
    SqlAlchemyUserRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.use_cases.usage import (
    CheckEnrollmentEligibility,
    CheckInstitutionFeatureAccess,
    CheckLiveClassEligibility,
    GenerateInstitutionReport,
    GetInstitutionUsageStats,
    GetPlatformUsageStats,
    GetUserUsageMetrics,
    GetUsersApproachingLimits,
    ResetMonthlyQuotas,
    TrackAttendanceUsage,
    TrackEnrollmentUsage,
    UsageAlertPublisher,
)
from src.depends import get_session, get_policy, get_notification_service
from src.domain.policy import GovernancePolicy

router = APIRouter(prefix="/usage", tags=["Usage"])


@router.get("/users/{user_id}/can-enroll")
async def can_enroll(
    user_id: str,
    course_id: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
):
    use_case = CheckEnrollmentEligibility(
        SqlAlchemyStudentSubscriptionRepository(session), SqlAlchemyEnrollmentRepository(session)
    )
    return unwrap(await use_case.execute(user_id, course_id))


@router.get("/users/{user_id}/can-attend")
async def can_attend(
    user_id: str,
    session_id: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
):
    use_case = CheckLiveClassEligibility(
        SqlAlchemyStudentSubscriptionRepository(session), SqlAlchemyLiveClassRepository(session)
    )
    return unwrap(await use_case.execute(user_id, session_id))


@router.post("/users/{user_id}/enrollments")
async def track_enrollment(
    user_id: str,
    course_id: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """
    Consume one enrollment from the user's quota.

    **Returns:**
    - 200: Counters after the increment
    - 409: Subscription inactive or quota exhausted
    """
    use_case = TrackEnrollmentUsage(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyStudentSubscriptionRepository(session),
        UsageAlertPublisher(SqlAlchemyUsageAlertRepository(session), notification_service, policy),
    )
    return unwrap(await use_case.execute(user_id, course_id))


@router.post("/users/{user_id}/attendance")
async def track_attendance(
    user_id: str,
    session_id: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
    notification_service: NotificationService = Depends(get_notification_service),
):
    use_case = TrackAttendanceUsage(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyStudentSubscriptionRepository(session),
        UsageAlertPublisher(SqlAlchemyUsageAlertRepository(session), notification_service, policy),
    )
    return unwrap(await use_case.execute(user_id, session_id))


@router.get("/users/{user_id}/metrics")
async def get_usage_metrics(
    user_id: str,
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    use_case = GetUserUsageMetrics(
        SqlAlchemyStudentSubscriptionRepository(session),
        SqlAlchemyEnrollmentRepository(session),
        policy,
    )
    return unwrap(await use_case.execute(user_id))


@router.get("/approaching-limits")
async def get_approaching_limits(
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    use_case = GetUsersApproachingLimits(
        SqlAlchemyStudentSubscriptionRepository(session),
        SqlAlchemyEnrollmentRepository(session),
        policy,
    )
    return unwrap(await use_case.execute())


@router.post("/monthly-reset")
async def reset_monthly_quotas(session: AsyncSession = Depends(get_session)):
    use_case = ResetMonthlyQuotas(
        SqlAlchemyUnitOfWork(session), SqlAlchemyStudentSubscriptionRepository(session)
    )
    return unwrap(await use_case.execute())


@router.get("/institutions/{institution_id}/report")
async def get_institution_report(institution_id: str, session: AsyncSession = Depends(get_session)):
    use_case = GenerateInstitutionReport(
        institution_repo=SqlAlchemyInstitutionRepository(session),
        course_repo=SqlAlchemyCourseRepository(session),
        enrollment_repo=SqlAlchemyEnrollmentRepository(session),
        live_class_repo=SqlAlchemyLiveClassRepository(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
    )
    return unwrap(await use_case.execute(institution_id))


@router.get("/institutions/{institution_id}/stats")
async def get_institution_usage_stats(institution_id: str, session: AsyncSession = Depends(get_session)):
    use_case = GetInstitutionUsageStats(
        institution_repo=SqlAlchemyInstitutionRepository(session),
        course_repo=SqlAlchemyCourseRepository(session),
        enrollment_repo=SqlAlchemyEnrollmentRepository(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
    )
    return unwrap(await use_case.execute(institution_id))


@router.get("/institutions/{institution_id}/features/{feature}")
async def check_feature_access(
    institution_id: str, feature: str, session: AsyncSession = Depends(get_session)
):
    use_case = CheckInstitutionFeatureAccess(SqlAlchemyInstitutionSubscriptionRepository(session))
    return unwrap(await use_case.execute(institution_id, feature))


@router.get("/platform")
async def get_platform_usage_stats(session: AsyncSession = Depends(get_session)):
    """Platform dashboard: students, subscriptions, enrollments, live classes and top courses"""
    use_case = GetPlatformUsageStats(
        user_repo=SqlAlchemyUserRepository(session),
        course_repo=SqlAlchemyCourseRepository(session),
        subscription_repo=SqlAlchemyStudentSubscriptionRepository(session),
        enrollment_repo=SqlAlchemyEnrollmentRepository(session),
        live_class_repo=SqlAlchemyLiveClassRepository(session),
    )
    return unwrap(await use_case.execute())
