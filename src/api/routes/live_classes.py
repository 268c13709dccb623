"""Live Class API Routes

FastAPI routes for live class scheduling, joining and lifecycle.
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.error import unwrap
from src.api.schemas.live_class_request import (
    LiveClassSchema,
    CreateLiveClassSchema,
    JoinLiveClassSchema,
    UpdateStatusSchema,
    InstructorUnavailableSchema,
)
from src.adapter.repositories import (
    SqlAlchemyCourseRepository,
    SqlAlchemyInstitutionRepository,
    SqlAlchemyLiveClassRepository,
    SqlAlchemyStudentSubscriptionRepository,
    SqlAlchemyTierRepository,
    SqlAlchemyUsageAlertRepository,
    SqlAlchemyUserRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.use_cases.live_classes import (
    CheckInstructorAvailability,
    CreateLiveClass,
    GetInstructorLiveClassStats,
    GetLiveClassSubscriptionStatistics,
    HandleInstructorUnavailability,
    JoinLiveClass,
    ListUserAttendedSessions,
    UpdateLiveClassStatus,
    ValidateLiveClassCreation,
    ValidateUserCanJoinLiveClass,
    CreateLiveClassCommandDTO,
    LiveClassValidationCommandDTO,
    UpdateLiveClassStatusCommandDTO,
)
from src.app.use_cases.usage import CheckLiveClassEligibility, UsageAlertPublisher
from src.depends import get_session, get_policy, get_notification_service
from src.domain.policy import GovernancePolicy

router = APIRouter(prefix="/live-classes", tags=["Live Classes"])


def _validator(session: AsyncSession, policy: GovernancePolicy) -> ValidateLiveClassCreation:
    return ValidateLiveClassCreation(
        user_repo=SqlAlchemyUserRepository(session),
        institution_repo=SqlAlchemyInstitutionRepository(session),
        course_repo=SqlAlchemyCourseRepository(session),
        live_class_repo=SqlAlchemyLiveClassRepository(session),
        subscription_repo=SqlAlchemyStudentSubscriptionRepository(session),
        tier_repo=SqlAlchemyTierRepository(session),
        policy=policy,
    )


def _join_validator(session: AsyncSession) -> ValidateUserCanJoinLiveClass:
    live_class_repo = SqlAlchemyLiveClassRepository(session)
    return ValidateUserCanJoinLiveClass(
        CheckLiveClassEligibility(SqlAlchemyStudentSubscriptionRepository(session), live_class_repo),
        live_class_repo,
    )


@router.post("/validate")
async def validate_live_class(
    request: LiveClassSchema,
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    """
    Check a proposed live class without creating it.

    Gates run in order: instructor role, schedule conflicts, institution
    membership, course ownership, live class limit, time window and
    participant bounds. The first failure is returned.
    """
    command = LiveClassValidationCommandDTO(**request.model_dump())
    return unwrap(await _validator(session, policy).execute(command))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_live_class(
    request: CreateLiveClassSchema,
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    """
    Validate and schedule a live class.

    **Returns:**
    - 201: Session created (warnings list course overlaps)
    - 400: Time window or participant limit invalid
    - 404: Instructor, institution or course not found
    - 409: Instructor double-booked or live class limit reached
    """
    use_case = CreateLiveClass(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyLiveClassRepository(session),
        _validator(session, policy),
    )
    return unwrap(await use_case.execute(CreateLiveClassCommandDTO(**request.model_dump())))


@router.get("/instructors/{instructor_id}/availability")
async def check_availability(
    instructor_id: str,
    start_time: datetime = Query(...),
    end_time: datetime = Query(...),
    exclude_session_id: Optional[str] = Query(default=None),
    session: AsyncSession = Depends(get_session),
):
    use_case = CheckInstructorAvailability(SqlAlchemyLiveClassRepository(session))
    return unwrap(
        await use_case.execute(instructor_id, start_time, end_time, exclude_session_id=exclude_session_id)
    )


@router.get("/instructors/{instructor_id}/stats")
async def get_instructor_stats(instructor_id: str, session: AsyncSession = Depends(get_session)):
    use_case = GetInstructorLiveClassStats(SqlAlchemyLiveClassRepository(session))
    return unwrap(await use_case.execute(instructor_id))


@router.post("/instructors/{instructor_id}/unavailable")
async def instructor_unavailable(
    instructor_id: str,
    request: InstructorUnavailableSchema,
    session: AsyncSession = Depends(get_session),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """Cancel the instructor's scheduled sessions from a date and notify participants"""
    use_case = HandleInstructorUnavailability(
        SqlAlchemyUnitOfWork(session), SqlAlchemyLiveClassRepository(session), notification_service
    )
    return unwrap(await use_case.execute(instructor_id, request.from_date))


@router.get("/users/{user_id}/attended")
async def list_attended_sessions(
    user_id: str,
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    session: AsyncSession = Depends(get_session),
):
    use_case = ListUserAttendedSessions(SqlAlchemyLiveClassRepository(session))
    return unwrap(await use_case.execute(user_id, month))


@router.get("/subscription-statistics")
async def get_subscription_statistics(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    session: AsyncSession = Depends(get_session),
):
    use_case = GetLiveClassSubscriptionStatistics(
        live_class_repo=SqlAlchemyLiveClassRepository(session),
        user_repo=SqlAlchemyUserRepository(session),
        subscription_repo=SqlAlchemyStudentSubscriptionRepository(session),
    )
    return unwrap(await use_case.execute(month))


@router.get("/{session_id}/can-join")
async def can_join(
    session_id: str,
    user_id: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
):
    return unwrap(await _join_validator(session).execute(user_id, session_id))


@router.post("/{session_id}/join")
async def join_live_class(
    session_id: str,
    request: JoinLiveClassSchema,
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """
    Join an ACTIVE live class, consuming one attendance.

    **Returns:**
    - 200: Joined
    - 409: Subscription inactive, quota exhausted, session full or already joined
    """
    use_case = JoinLiveClass(
        uow=SqlAlchemyUnitOfWork(session),
        validator=_join_validator(session),
        subscription_repo=SqlAlchemyStudentSubscriptionRepository(session),
        live_class_repo=SqlAlchemyLiveClassRepository(session),
        alert_publisher=UsageAlertPublisher(
            SqlAlchemyUsageAlertRepository(session), notification_service, policy
        ),
    )
    return unwrap(await use_case.execute(request.user_id, session_id))


@router.post("/{session_id}/status")
async def update_status(
    session_id: str,
    request: UpdateStatusSchema,
    session: AsyncSession = Depends(get_session),
    notification_service: NotificationService = Depends(get_notification_service),
):
    use_case = UpdateLiveClassStatus(
        SqlAlchemyUnitOfWork(session), SqlAlchemyLiveClassRepository(session), notification_service
    )
    command = UpdateLiveClassStatusCommandDTO(session_id=session_id, **request.model_dump())
    return unwrap(await use_case.execute(command))
