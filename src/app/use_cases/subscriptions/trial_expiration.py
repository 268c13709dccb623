"""Trial Expiration Use Cases

Replace an unpaid, expired trial with a zero-cost fallback subscription.
The trial row is kept (EXPIRED) and cross-referenced with the new row.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.tier_repository import TierRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.institution_subscription_repository import InstitutionSubscriptionRepository
from src.app.repositories.subscription_log_repository import SubscriptionLogRepository
from src.app.repositories.platform_repository import InstitutionRepository
from src.domain.policy import GovernancePolicy
from src.domain.subscription import (
    StudentSubscription,
    InstitutionSubscription,
    SubscriptionStatus,
    SubscriptionOrigin,
)
from src.domain.subscription_log import (
    SubscriptionLog,
    SubjectType,
    SubscriptionAction,
    SYSTEM_ACTOR,
)
from src.domain.tier import BillingCycle, FALLBACK_STUDENT_PLAN, FALLBACK_INSTITUTION_PLAN
from .dtos import TrialExpirationResultDTO

logger = logging.getLogger(__name__)


class HandleStudentTrialExpiration:
    """
    Use Case: Move a student from an expired trial to the FREE plan

    Business Rules:
    1. Applies only when the current subscription is TRIAL and end_date <= now
    2. A new ACTIVE FALLBACK subscription on the FREE tier is created for
       policy.fallback_period_days on ANNUAL billing at zero cost
    3. The trial row becomes EXPIRED and points at the fallback row
    4. A FALLBACK_CREATED log entry is written by SYSTEM
    """

    def __init__(
        self,
        uow: UnitOfWork,
        tier_repo: TierRepository,
        subscription_repo: StudentSubscriptionRepository,
        log_repo: SubscriptionLogRepository,
        policy: GovernancePolicy,
    ):
        self.uow = uow
        self.tier_repo = tier_repo
        self.subscription_repo = subscription_repo
        self.log_repo = log_repo
        self.policy = policy

    async def execute(self, student_id: str) -> Result[TrialExpirationResultDTO]:
        try:
            # Step 1: Locate the expired trial
            now = datetime.utcnow()
            trial = await self.subscription_repo.get_current(student_id)
            if not trial:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"No subscription found for student {student_id}",
                    )
                )

            if trial.status != SubscriptionStatus.TRIAL or trial.end_date > now:
                return Return.err(
                    Error(
                        code="TRIAL_NOT_EXPIRED",
                        message=f"Student {student_id} has no expired trial",
                        reason=f"status={trial.status.value}, end_date={trial.end_date.isoformat()}",
                    )
                )

            fallback_tier = await self.tier_repo.get_student_tier_by_plan(FALLBACK_STUDENT_PLAN)
            if not fallback_tier:
                return Return.err(
                    Error(
                        code="TIER_NOT_FOUND",
                        message=f"Fallback tier {FALLBACK_STUDENT_PLAN.value} is not configured",
                    )
                )

            # Step 2: Create the fallback subscription
            fallback = await self.subscription_repo.create(
                StudentSubscription(
                    student_id=student_id,
                    tier_id=fallback_tier.id,
                    plan_type=fallback_tier.plan_type,
                    status=SubscriptionStatus.ACTIVE,
                    origin=SubscriptionOrigin.FALLBACK,
                    start_date=now,
                    end_date=now + timedelta(days=self.policy.fallback_period_days),
                    billing_cycle=BillingCycle.ANNUAL,
                    amount=Decimal("0.00"),
                    currency=trial.currency,
                    enrollment_quota=fallback_tier.enrollment_quota,
                    attendance_quota=fallback_tier.attendance_quota,
                    original_subscription_id=trial.id,
                )
            )

            # Step 3: Expire the trial and cross-reference
            trial.status = SubscriptionStatus.EXPIRED
            trial.replaced_by_id = fallback.id
            await self.subscription_repo.update(trial)

            # Step 4: Log
            await self.log_repo.add_log(
                SubscriptionLog(
                    subject_type=SubjectType.STUDENT,
                    subject_id=student_id,
                    subscription_id=fallback.id,
                    action=SubscriptionAction.FALLBACK_CREATED,
                    old_plan=trial.plan_type.value,
                    new_plan=fallback.plan_type.value,
                    old_amount=trial.amount,
                    new_amount=Decimal("0.00"),
                    old_billing_cycle=trial.billing_cycle,
                    new_billing_cycle=BillingCycle.ANNUAL,
                    reason="Trial expired, fallback free plan created",
                    actor_id=SYSTEM_ACTOR,
                    details={"original_subscription_id": trial.id},
                )
            )

            await self.uow.commit()
            logger.info(f"Created fallback subscription {fallback.id} for student {student_id}")

            return Return.ok(
                TrialExpirationResultDTO(
                    subject_id=student_id,
                    original_subscription_id=trial.id,
                    fallback_subscription_id=fallback.id,
                    fallback_plan=fallback.plan_type.value,
                    fallback_end_date=fallback.end_date,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error handling student trial expiration for {student_id}: {e}")
            return Return.err(
                Error(
                    code="TRIAL_EXPIRATION_FAILED",
                    message="Failed to handle student trial expiration",
                    reason=str(e),
                )
            )


class HandleInstitutionTrialExpiration:
    """
    Use Case: Move an institution from an expired trial to the DEFAULT plan

    Business Rules:
    1. Applies only when the current subscription is TRIAL and end_date <= now
    2. A new ACTIVE FALLBACK subscription on the DEFAULT plan is created for
       policy.fallback_period_days on ANNUAL billing at zero cost
    3. Institution commission_rate is set to policy.fallback_commission_rate
    4. The trial row becomes EXPIRED and points at the fallback row
    """

    def __init__(
        self,
        uow: UnitOfWork,
        institution_repo: InstitutionRepository,
        subscription_repo: InstitutionSubscriptionRepository,
        log_repo: SubscriptionLogRepository,
        policy: GovernancePolicy,
    ):
        self.uow = uow
        self.institution_repo = institution_repo
        self.subscription_repo = subscription_repo
        self.log_repo = log_repo
        self.policy = policy

    async def execute(self, institution_id: str) -> Result[TrialExpirationResultDTO]:
        try:
            # Step 1: Locate the expired trial
            now = datetime.utcnow()
            institution = await self.institution_repo.get_by_id(institution_id)
            if not institution:
                return Return.err(
                    Error(
                        code="INSTITUTION_NOT_FOUND",
                        message=f"Institution not found: {institution_id}",
                    )
                )
            previous_rate = institution.commission_rate

            trial = await self.subscription_repo.get_current(institution_id)
            if not trial or trial.status != SubscriptionStatus.TRIAL or trial.end_date > now:
                return Return.err(
                    Error(
                        code="TRIAL_NOT_EXPIRED",
                        message=f"Institution {institution_id} has no expired trial",
                    )
                )

            # Step 2: Create the fallback subscription
            fallback = await self.subscription_repo.create(
                InstitutionSubscription(
                    institution_id=institution_id,
                    commission_tier_id=None,
                    plan_type=FALLBACK_INSTITUTION_PLAN,
                    status=SubscriptionStatus.ACTIVE,
                    origin=SubscriptionOrigin.FALLBACK,
                    start_date=now,
                    end_date=now + timedelta(days=self.policy.fallback_period_days),
                    billing_cycle=BillingCycle.ANNUAL,
                    amount=Decimal("0.00"),
                    currency=trial.currency,
                    features={
                        "commission_rate": str(self.policy.fallback_commission_rate),
                        "analytics": "basic",
                    },
                    original_subscription_id=trial.id,
                )
            )

            # Step 3: Fallback commission rate
            await self.institution_repo.set_commission_rate(
                institution_id, self.policy.fallback_commission_rate
            )

            # Step 4: Expire the trial and cross-reference
            trial.status = SubscriptionStatus.EXPIRED
            trial.replaced_by_id = fallback.id
            await self.subscription_repo.update(trial)

            # Step 5: Log
            await self.log_repo.add_log(
                SubscriptionLog(
                    subject_type=SubjectType.INSTITUTION,
                    subject_id=institution_id,
                    subscription_id=fallback.id,
                    action=SubscriptionAction.FALLBACK_CREATED,
                    old_plan=trial.plan_type.value,
                    new_plan=fallback.plan_type.value,
                    old_amount=trial.amount,
                    new_amount=Decimal("0.00"),
                    old_billing_cycle=trial.billing_cycle,
                    new_billing_cycle=BillingCycle.ANNUAL,
                    reason="Trial expired, fallback plan with default commission created",
                    actor_id=SYSTEM_ACTOR,
                    details={
                        "original_subscription_id": trial.id,
                        "original_commission_rate": str(previous_rate),
                    },
                )
            )

            await self.uow.commit()
            logger.info(f"Created fallback subscription {fallback.id} for institution {institution_id}")

            return Return.ok(
                TrialExpirationResultDTO(
                    subject_id=institution_id,
                    original_subscription_id=trial.id,
                    fallback_subscription_id=fallback.id,
                    fallback_plan=fallback.plan_type.value,
                    fallback_end_date=fallback.end_date,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error handling institution trial expiration for {institution_id}: {e}")
            return Return.err(
                Error(
                    code="TRIAL_EXPIRATION_FAILED",
                    message="Failed to handle institution trial expiration",
                    reason=str(e),
                )
            )
