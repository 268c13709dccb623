"""Commission API Routes

FastAPI routes for commission calculation, payouts and reporting.
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.error import unwrap
from src.api.schemas.commission_request import RecalculateSchema, PayoutSchema
from src.adapter.repositories import (
    SqlAlchemyCommissionRepository,
    SqlAlchemyCourseRepository,
    SqlAlchemyEnrollmentRepository,
    SqlAlchemyInstitutionRepository,
    SqlAlchemyInstitutionSubscriptionRepository,
    SqlAlchemyPaymentRepository,
    SqlAlchemyTierRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.commissions import (
    CalculateCommissionForPayment,
    CalculatePendingCommissions,
    RecalculateCommissions,
    ProcessCommissionPayout,
    GetCommissionRate,
    GetCommissionSummary,
    GetCommissionAnalytics,
    GenerateDailyCommissionReport,
    RecalculateCommissionsCommandDTO,
    PayoutCommandDTO,
)
from src.depends import get_session, get_policy
from src.domain.policy import GovernancePolicy

router = APIRouter(prefix="/commissions", tags=["Commissions"])


def _calculator(session: AsyncSession) -> CalculateCommissionForPayment:
    return CalculateCommissionForPayment(
        uow=SqlAlchemyUnitOfWork(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
        enrollment_repo=SqlAlchemyEnrollmentRepository(session),
        course_repo=SqlAlchemyCourseRepository(session),
        subscription_repo=SqlAlchemyInstitutionSubscriptionRepository(session),
        tier_repo=SqlAlchemyTierRepository(session),
        commission_repo=SqlAlchemyCommissionRepository(session),
    )


@router.post("/payments/{payment_id}/calculate")
async def calculate_commission(payment_id: str, session: AsyncSession = Depends(get_session)):
    """
    Calculate (or recalculate) the commission for one completed payment.

    Idempotent: a second call updates the same commission record.

    **Returns:**
    - 200: Commission record
    - 404: Payment, enrollment, course, institution or commission tier not found
    - 409: Payment not completed or institution subscription not active
    """
    return unwrap(await _calculator(session).execute(payment_id))


@router.post("/calculate-pending")
async def calculate_pending(session: AsyncSession = Depends(get_session)):
    use_case = CalculatePendingCommissions(SqlAlchemyPaymentRepository(session), _calculator(session))
    return unwrap(await use_case.execute())


@router.post("/recalculate")
async def recalculate(request: RecalculateSchema, session: AsyncSession = Depends(get_session)):
    use_case = RecalculateCommissions(SqlAlchemyPaymentRepository(session), _calculator(session))
    return unwrap(await use_case.execute(RecalculateCommissionsCommandDTO(**request.model_dump())))


@router.post("/institutions/{institution_id}/payouts")
async def process_payout(
    institution_id: str,
    request: PayoutSchema,
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    """
    Pay out an institution's pending commissions.

    **Returns:**
    - 200: Payout created and pending commissions marked PAID
    - 409: No pending commissions, or amount exceeds the pending total
    """
    use_case = ProcessCommissionPayout(
        SqlAlchemyUnitOfWork(session), SqlAlchemyCommissionRepository(session), policy
    )
    command = PayoutCommandDTO(institution_id=institution_id, **request.model_dump())
    return unwrap(await use_case.execute(command))


@router.get("/institutions/{institution_id}/rate")
async def get_commission_rate(
    institution_id: str,
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    use_case = GetCommissionRate(
        institution_repo=SqlAlchemyInstitutionRepository(session),
        subscription_repo=SqlAlchemyInstitutionSubscriptionRepository(session),
        tier_repo=SqlAlchemyTierRepository(session),
        policy=policy,
    )
    return unwrap(await use_case.execute(institution_id))


@router.get("/institutions/{institution_id}/summary")
async def get_commission_summary(
    institution_id: str,
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    session: AsyncSession = Depends(get_session),
    policy: GovernancePolicy = Depends(get_policy),
):
    use_case = GetCommissionSummary(
        institution_repo=SqlAlchemyInstitutionRepository(session),
        subscription_repo=SqlAlchemyInstitutionSubscriptionRepository(session),
        tier_repo=SqlAlchemyTierRepository(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
        commission_repo=SqlAlchemyCommissionRepository(session),
        policy=policy,
    )
    return unwrap(await use_case.execute(institution_id, start_date, end_date))


@router.get("/analytics")
async def get_commission_analytics(session: AsyncSession = Depends(get_session)):
    use_case = GetCommissionAnalytics(
        commission_repo=SqlAlchemyCommissionRepository(session),
        institution_repo=SqlAlchemyInstitutionRepository(session),
        course_repo=SqlAlchemyCourseRepository(session),
    )
    return unwrap(await use_case.execute())


@router.get("/reports/daily")
async def get_daily_report(
    day: Optional[datetime] = Query(default=None),
    session: AsyncSession = Depends(get_session),
):
    use_case = GenerateDailyCommissionReport(
        institution_repo=SqlAlchemyInstitutionRepository(session),
        subscription_repo=SqlAlchemyInstitutionSubscriptionRepository(session),
        commission_repo=SqlAlchemyCommissionRepository(session),
    )
    return unwrap(await use_case.execute(day))
