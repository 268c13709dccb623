"""Subscription API Routes

FastAPI routes for student and institution subscription lifecycle, trial
expiry and the tier catalog.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.error import unwrap
from src.api.schemas.subscription_request import (
    CreateStudentSubscriptionSchema,
    CreateInstitutionSubscriptionSchema,
    UpgradeSchema,
    DowngradeSchema,
    CancelSchema,
    ReactivateSchema,
)
from src.adapter.repositories import (
    SqlAlchemyEnrollmentRepository,
    SqlAlchemyInstitutionRepository,
    SqlAlchemyInstitutionSubscriptionRepository,
    SqlAlchemyStudentSubscriptionRepository,
    SqlAlchemySubscriptionLogRepository,
    SqlAlchemyTierRepository,
    SqlAlchemyUserRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.catalog import ListTiers, SeedTierCatalog
from src.app.use_cases.subscriptions import (
    CreateStudentSubscription,
    CreateInstitutionSubscription,
    UpgradeSubscription,
    DowngradeSubscription,
    CancelStudentSubscription,
    CancelInstitutionSubscription,
    ReactivateStudentSubscription,
    ReactivateInstitutionSubscription,
    HandleStudentTrialExpiration,
    HandleInstitutionTrialExpiration,
    ProcessExpiredTrials,
    GetGracePeriod,
    GetSubscriptionLogs,
    GetStudentSubscriptionStatus,
    GetInstitutionSubscriptionStatus,
    CreateStudentSubscriptionCommandDTO,
    CreateInstitutionSubscriptionCommandDTO,
    UpgradeCommandDTO,
    DowngradeCommandDTO,
    CancelSubscriptionCommandDTO,
    ReactivateSubscriptionCommandDTO,
)
from src.depends import get_session, get_policy
from src.domain.policy import GovernancePolicy
from src.domain.subscription_log import SubjectType

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.get("/tiers")
async def list_tiers(session: AsyncSession = Depends(get_session)):
    """Active student tiers and commission tiers"""
    return unwrap(await ListTiers(SqlAlchemyTierRepository(session)).execute())


@router.post("/tiers/seed")
async def seed_tiers(session: AsyncSession = Depends(get_session)):
    """Install or refresh the default tier catalog"""
    use_case = SeedTierCatalog(SqlAlchemyUnitOfWork(session), SqlAlchemyTierRepository(session))
    return unwrap(await use_case.execute())


@router.post("/students", status_code=status.HTTP_201_CREATED)
async def create_student_subscription(
    request: CreateStudentSubscriptionSchema,
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    """
    Subscribe a student to a tier, or start a trial.

    An existing current subscription is replaced in place.

    **Returns:**
    - 201: Subscription created or replaced
    - 404: Student or tier not found
    """
    use_case = CreateStudentSubscription(
        uow=SqlAlchemyUnitOfWork(session),
        user_repo=SqlAlchemyUserRepository(session),
        tier_repo=SqlAlchemyTierRepository(session),
        subscription_repo=SqlAlchemyStudentSubscriptionRepository(session),
        log_repo=SqlAlchemySubscriptionLogRepository(session),
        policy=policy,
    )
    command = CreateStudentSubscriptionCommandDTO(**request.model_dump())
    return unwrap(await use_case.execute(command))


@router.post("/institutions", status_code=status.HTTP_201_CREATED)
async def create_institution_subscription(
    request: CreateInstitutionSubscriptionSchema,
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    use_case = CreateInstitutionSubscription(
        uow=SqlAlchemyUnitOfWork(session),
        institution_repo=SqlAlchemyInstitutionRepository(session),
        tier_repo=SqlAlchemyTierRepository(session),
        subscription_repo=SqlAlchemyInstitutionSubscriptionRepository(session),
        log_repo=SqlAlchemySubscriptionLogRepository(session),
        policy=policy,
    )
    command = CreateInstitutionSubscriptionCommandDTO(**request.model_dump())
    return unwrap(await use_case.execute(command))


@router.get("/students/{user_id}/status")
async def get_student_status(user_id: str, session: AsyncSession = Depends(get_session)):
    use_case = GetStudentSubscriptionStatus(
        user_repo=SqlAlchemyUserRepository(session),
        tier_repo=SqlAlchemyTierRepository(session),
        subscription_repo=SqlAlchemyStudentSubscriptionRepository(session),
        log_repo=SqlAlchemySubscriptionLogRepository(session),
    )
    return unwrap(await use_case.execute(user_id))


@router.get("/institutions/{institution_id}/status")
async def get_institution_status(
    institution_id: str,
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    use_case = GetInstitutionSubscriptionStatus(
        institution_repo=SqlAlchemyInstitutionRepository(session),
        tier_repo=SqlAlchemyTierRepository(session),
        subscription_repo=SqlAlchemyInstitutionSubscriptionRepository(session),
        log_repo=SqlAlchemySubscriptionLogRepository(session),
        policy=policy,
    )
    return unwrap(await use_case.execute(institution_id))


@router.post("/students/{user_id}/upgrade")
async def upgrade_subscription(
    user_id: str,
    request: UpgradeSchema,
    session: AsyncSession = Depends(get_session),
):
    """
    Upgrade a student's plan.

    Immediate upgrades swap tier and quotas now and return the prorated
    amount; scheduled upgrades only log the change for the period end.
    """
    use_case = UpgradeSubscription(
        uow=SqlAlchemyUnitOfWork(session),
        tier_repo=SqlAlchemyTierRepository(session),
        subscription_repo=SqlAlchemyStudentSubscriptionRepository(session),
        log_repo=SqlAlchemySubscriptionLogRepository(session),
    )
    command = UpgradeCommandDTO(user_id=user_id, **request.model_dump())
    return unwrap(await use_case.execute(command))


@router.post("/students/{user_id}/downgrade")
async def downgrade_subscription(
    user_id: str,
    request: DowngradeSchema,
    session: AsyncSession = Depends(get_session),
):
    """
    Schedule a downgrade.

    **Returns:**
    - 200: Downgrade scheduled
    - 409: Active enrollments exceed the target tier's quota
    """
    use_case = DowngradeSubscription(
        uow=SqlAlchemyUnitOfWork(session),
        tier_repo=SqlAlchemyTierRepository(session),
        subscription_repo=SqlAlchemyStudentSubscriptionRepository(session),
        enrollment_repo=SqlAlchemyEnrollmentRepository(session),
        log_repo=SqlAlchemySubscriptionLogRepository(session),
    )
    command = DowngradeCommandDTO(user_id=user_id, **request.model_dump())
    return unwrap(await use_case.execute(command))


@router.post("/students/{user_id}/cancel")
async def cancel_student_subscription(
    user_id: str,
    request: CancelSchema,
    session: AsyncSession = Depends(get_session),
):
    use_case = CancelStudentSubscription(
        uow=SqlAlchemyUnitOfWork(session),
        subscription_repo=SqlAlchemyStudentSubscriptionRepository(session),
        log_repo=SqlAlchemySubscriptionLogRepository(session),
    )
    command = CancelSubscriptionCommandDTO(subject_id=user_id, **request.model_dump())
    return unwrap(await use_case.execute(command))


@router.post("/institutions/{institution_id}/cancel")
async def cancel_institution_subscription(
    institution_id: str,
    request: CancelSchema,
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    use_case = CancelInstitutionSubscription(
        uow=SqlAlchemyUnitOfWork(session),
        institution_repo=SqlAlchemyInstitutionRepository(session),
        subscription_repo=SqlAlchemyInstitutionSubscriptionRepository(session),
        log_repo=SqlAlchemySubscriptionLogRepository(session),
        policy=policy,
    )
    command = CancelSubscriptionCommandDTO(subject_id=institution_id, **request.model_dump())
    return unwrap(await use_case.execute(command))


@router.post("/students/{user_id}/reactivate")
async def reactivate_student_subscription(
    user_id: str,
    request: ReactivateSchema,
    session: AsyncSession = Depends(get_session),
):
    use_case = ReactivateStudentSubscription(
        uow=SqlAlchemyUnitOfWork(session),
        subscription_repo=SqlAlchemyStudentSubscriptionRepository(session),
        log_repo=SqlAlchemySubscriptionLogRepository(session),
    )
    command = ReactivateSubscriptionCommandDTO(subject_id=user_id, **request.model_dump())
    return unwrap(await use_case.execute(command))


@router.post("/institutions/{institution_id}/reactivate")
async def reactivate_institution_subscription(
    institution_id: str,
    request: ReactivateSchema,
    session: AsyncSession = Depends(get_session),
):
    use_case = ReactivateInstitutionSubscription(
        uow=SqlAlchemyUnitOfWork(session),
        institution_repo=SqlAlchemyInstitutionRepository(session),
        tier_repo=SqlAlchemyTierRepository(session),
        subscription_repo=SqlAlchemyInstitutionSubscriptionRepository(session),
        log_repo=SqlAlchemySubscriptionLogRepository(session),
    )
    command = ReactivateSubscriptionCommandDTO(subject_id=institution_id, **request.model_dump())
    return unwrap(await use_case.execute(command))


@router.get("/students/{user_id}/grace-period")
async def get_grace_period(user_id: str, session: AsyncSession = Depends(get_session)):
    use_case = GetGracePeriod(
        tier_repo=SqlAlchemyTierRepository(session),
        subscription_repo=SqlAlchemyStudentSubscriptionRepository(session),
    )
    return unwrap(await use_case.execute(user_id))


@router.get("/{subject_type}/{subject_id}/logs")
async def get_subscription_logs(
    subject_type: SubjectType,
    subject_id: str,
    limit: int = Query(default=50, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
):
    use_case = GetSubscriptionLogs(SqlAlchemySubscriptionLogRepository(session))
    return unwrap(await use_case.execute(subject_type, subject_id, limit=limit))


@router.post("/students/{user_id}/trial/expire")
async def expire_student_trial(
    user_id: str,
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    """Replace an expired student trial with the FREE fallback plan"""
    use_case = HandleStudentTrialExpiration(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyTierRepository(session),
        SqlAlchemyStudentSubscriptionRepository(session),
        SqlAlchemySubscriptionLogRepository(session),
        policy,
    )
    return unwrap(await use_case.execute(user_id))


@router.post("/institutions/{institution_id}/trial/expire")
async def expire_institution_trial(
    institution_id: str,
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    """Replace an expired institution trial with the DEFAULT fallback plan"""
    use_case = HandleInstitutionTrialExpiration(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInstitutionRepository(session),
        SqlAlchemyInstitutionSubscriptionRepository(session),
        SqlAlchemySubscriptionLogRepository(session),
        policy,
    )
    return unwrap(await use_case.execute(institution_id))


@router.post("/trials/process")
async def process_expired_trials(
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    """Sweep every expired trial; per-item failures are reported, not raised"""
    uow = SqlAlchemyUnitOfWork(session)
    student_repo = SqlAlchemyStudentSubscriptionRepository(session)
    institution_repo = SqlAlchemyInstitutionSubscriptionRepository(session)
    log_repo = SqlAlchemySubscriptionLogRepository(session)

    use_case = ProcessExpiredTrials(
        student_subscription_repo=student_repo,
        institution_subscription_repo=institution_repo,
        student_handler=HandleStudentTrialExpiration(
            uow, SqlAlchemyTierRepository(session), student_repo, log_repo, policy
        ),
        institution_handler=HandleInstitutionTrialExpiration(
            uow, SqlAlchemyInstitutionRepository(session), institution_repo, log_repo, policy
        ),
    )
    return unwrap(await use_case.execute())
