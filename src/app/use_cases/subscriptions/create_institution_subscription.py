"""CreateInstitutionSubscription Use Case

Starts an institution's first trial or paid plan, or replaces the plan on
the institution's current subscription, and aligns the institution's
stored commission rate with the chosen commission tier.
"""

import logging
from datetime import datetime, timedelta
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.tier_repository import TierRepository
from src.app.repositories.institution_subscription_repository import InstitutionSubscriptionRepository
from src.app.repositories.subscription_log_repository import SubscriptionLogRepository
from src.app.repositories.platform_repository import InstitutionRepository
from src.domain.policy import GovernancePolicy
from src.domain.subscription import (
    InstitutionSubscription,
    SubscriptionStatus,
    SubscriptionOrigin,
    billing_period_end,
)
from src.domain.subscription_log import (
    SubscriptionLog,
    BillingHistory,
    SubjectType,
    SubscriptionAction,
    BillingStatus,
    SYSTEM_ACTOR,
    generate_invoice_number,
)
from src.domain.tier import BillingCycle
from .dtos import CreateInstitutionSubscriptionCommandDTO, InstitutionSubscriptionDTO

logger = logging.getLogger(__name__)


class CreateInstitutionSubscription:
    """
    Use Case: Create or replace an institution subscription

    Business Rules:
    1. The institution and the commission tier must exist
    2. Trials last policy.institution_trial_days; paid plans one billing cycle
    3. Institution commission_rate is set to the tier's rate
    4. Every call appends one log entry and one billing history row
    """

    def __init__(
        self,
        uow: UnitOfWork,
        institution_repo: InstitutionRepository,
        tier_repo: TierRepository,
        subscription_repo: InstitutionSubscriptionRepository,
        log_repo: SubscriptionLogRepository,
        policy: GovernancePolicy,
    ):
        self.uow = uow
        self.institution_repo = institution_repo
        self.tier_repo = tier_repo
        self.subscription_repo = subscription_repo
        self.log_repo = log_repo
        self.policy = policy

    async def execute(
        self, command: CreateInstitutionSubscriptionCommandDTO
    ) -> Result[InstitutionSubscriptionDTO]:
        try:
            # Step 1: Validate institution and tier
            institution = await self.institution_repo.get_by_id(command.institution_id)
            if not institution:
                return Return.err(
                    Error(
                        code="INSTITUTION_NOT_FOUND",
                        message=f"Institution not found: {command.institution_id}",
                    )
                )

            tier = await self.tier_repo.get_commission_tier(command.commission_tier_id)
            if not tier or not tier.is_active:
                return Return.err(
                    Error(
                        code="COMMISSION_TIER_NOT_FOUND",
                        message=f"Commission tier not found: {command.commission_tier_id}",
                    )
                )

            # Step 2: Compute window and amount
            now = datetime.utcnow()
            if command.start_trial:
                end_date = now + timedelta(days=self.policy.institution_trial_days)
            else:
                end_date = billing_period_end(now, command.billing_cycle)

            if command.amount is not None:
                amount = command.amount
            elif command.billing_cycle == BillingCycle.ANNUAL and tier.annual_price is not None:
                amount = tier.annual_price
            else:
                amount = tier.price

            status = SubscriptionStatus.TRIAL if command.start_trial else SubscriptionStatus.ACTIVE
            origin = SubscriptionOrigin.TRIAL if command.start_trial else SubscriptionOrigin.REGULAR

            # Step 3: Create or replace
            existing = await self.subscription_repo.get_current(command.institution_id)
            old_plan = existing.plan_type.value if existing else None
            old_amount = existing.amount if existing else None
            old_cycle = existing.billing_cycle if existing else None

            if existing:
                existing.commission_tier_id = tier.id
                existing.plan_type = tier.plan_type
                existing.status = status
                existing.origin = origin
                existing.end_date = end_date
                existing.billing_cycle = command.billing_cycle
                existing.amount = amount
                existing.currency = tier.currency
                existing.features = dict(tier.features or {})
                existing.auto_renew = True
                existing.cancellation_reason = None
                existing.cancelled_at = None
                subscription = await self.subscription_repo.update(existing)
                action = SubscriptionAction.UPGRADE
                reason = "Plan upgrade"
            else:
                subscription = await self.subscription_repo.create(
                    InstitutionSubscription(
                        institution_id=command.institution_id,
                        commission_tier_id=tier.id,
                        plan_type=tier.plan_type,
                        status=status,
                        origin=origin,
                        start_date=now,
                        end_date=end_date,
                        billing_cycle=command.billing_cycle,
                        amount=amount,
                        currency=tier.currency,
                        features=dict(tier.features or {}),
                    )
                )
                action = SubscriptionAction.CREATE
                reason = "Trial subscription created" if command.start_trial else "New subscription created"

            # Step 4: Audit trail
            await self.log_repo.add_log(
                SubscriptionLog(
                    subject_type=SubjectType.INSTITUTION,
                    subject_id=command.institution_id,
                    subscription_id=subscription.id,
                    action=action,
                    old_plan=old_plan,
                    new_plan=tier.plan_type.value,
                    old_amount=old_amount,
                    new_amount=amount,
                    old_billing_cycle=old_cycle,
                    new_billing_cycle=command.billing_cycle,
                    reason=reason,
                    actor_id=command.actor_id or SYSTEM_ACTOR,
                )
            )

            await self.log_repo.add_billing(
                BillingHistory(
                    subject_type=SubjectType.INSTITUTION,
                    subject_id=command.institution_id,
                    subscription_id=subscription.id,
                    billing_date=now,
                    amount=amount,
                    currency=tier.currency,
                    status=BillingStatus.TRIAL if command.start_trial else BillingStatus.PAID,
                    payment_method=command.payment_method,
                    transaction_id=command.transaction_id,
                    invoice_number=generate_invoice_number(SubjectType.INSTITUTION, now),
                    description=(
                        f"Trial subscription for {tier.plan_type.value} plan"
                        if command.start_trial
                        else f"Initial payment for {tier.plan_type.value} plan"
                    ),
                )
            )

            # Step 5: Align stored commission rate
            await self.institution_repo.set_commission_rate(
                command.institution_id, tier.commission_rate
            )

            # Step 6: Commit
            await self.uow.commit()

            logger.info(
                f"Institution subscription {action.value} for {command.institution_id}: "
                f"{old_plan or '-'} -> {tier.plan_type.value} at {tier.commission_rate}% commission"
            )

            return Return.ok(InstitutionSubscriptionDTO.from_entity(subscription))

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to create subscription for institution {command.institution_id}: {e}")
            return Return.err(
                Error(
                    code="CREATE_SUBSCRIPTION_FAILED",
                    message="Failed to create institution subscription",
                    reason=str(e),
                )
            )
