"""UpgradeSubscription Use Case

Moves a student to a higher tier, either immediately with proration or
scheduled for the end of the current period.
"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.tier_repository import TierRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.subscription_log_repository import SubscriptionLogRepository
from src.domain.subscription import calculate_prorated_amount
from src.domain.subscription_log import (
    SubscriptionLog,
    BillingHistory,
    SubjectType,
    SubscriptionAction,
    BillingStatus,
    generate_invoice_number,
)
from .dtos import UpgradeCommandDTO, PlanChangeResponseDTO

logger = logging.getLogger(__name__)


class UpgradeSubscription:
    """
    Use Case: Upgrade a student subscription

    Business Rules:
    1. A current subscription and the target tier must exist
    2. Immediate: prorated = new_daily * days_remaining - current_daily * days_remaining
       (floored at 0); tier, plan and quotas are swapped in place
    3. The prorated amount is recorded as a PENDING billing row; it is not captured here
    4. Scheduled: only an UPGRADE_SCHEDULED log entry effective at end_date

    Flow:
    1. Load subscription and tiers
    2. Immediate: compute proration, update row, log UPGRADE, record billing
       Scheduled: log UPGRADE_SCHEDULED
    3. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        tier_repo: TierRepository,
        subscription_repo: StudentSubscriptionRepository,
        log_repo: SubscriptionLogRepository,
    ):
        self.uow = uow
        self.tier_repo = tier_repo
        self.subscription_repo = subscription_repo
        self.log_repo = log_repo

    async def execute(self, command: UpgradeCommandDTO) -> Result[PlanChangeResponseDTO]:
        try:
            # Step 1: Load current subscription and tiers
            subscription = await self.subscription_repo.get_current(command.user_id)
            if not subscription:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"No subscription found for user {command.user_id}",
                    )
                )

            new_tier = await self.tier_repo.get_student_tier(command.new_tier_id)
            if not new_tier:
                return Return.err(
                    Error(
                        code="TIER_NOT_FOUND",
                        message=f"Student tier not found: {command.new_tier_id}",
                    )
                )

            current_tier = await self.tier_repo.get_student_tier(subscription.tier_id)
            current_price = current_tier.price if current_tier else subscription.amount
            old_plan = subscription.plan_type.value

            if not command.immediate:
                # Step 2b: Scheduled upgrade is a log entry only
                await self.log_repo.add_log(
                    SubscriptionLog(
                        subject_type=SubjectType.STUDENT,
                        subject_id=command.user_id,
                        subscription_id=subscription.id,
                        action=SubscriptionAction.UPGRADE_SCHEDULED,
                        old_plan=old_plan,
                        new_plan=new_tier.plan_type.value,
                        old_amount=current_price,
                        new_amount=new_tier.price,
                        effective_date=subscription.end_date,
                        reason=command.reason or "User requested scheduled upgrade",
                        actor_id=command.user_id,
                        details={"scheduled_upgrade": True},
                    )
                )
                await self.uow.commit()

                return Return.ok(
                    PlanChangeResponseDTO(
                        subscription_id=subscription.id,
                        action=SubscriptionAction.UPGRADE_SCHEDULED.value,
                        old_plan=old_plan,
                        new_plan=new_tier.plan_type.value,
                        effective_date=subscription.end_date,
                        message="Upgrade scheduled for next billing cycle",
                    )
                )

            # Step 2a: Immediate upgrade with proration
            now = datetime.utcnow()
            prorated_amount = calculate_prorated_amount(
                current_price=current_price,
                new_price=new_tier.price,
                start_date=subscription.start_date,
                end_date=subscription.end_date,
                now=now,
            )

            subscription.tier_id = new_tier.id
            subscription.plan_type = new_tier.plan_type
            subscription.enrollment_quota = new_tier.enrollment_quota
            subscription.attendance_quota = new_tier.attendance_quota
            subscription.amount = new_tier.price
            subscription = await self.subscription_repo.update(subscription)

            await self.log_repo.add_log(
                SubscriptionLog(
                    subject_type=SubjectType.STUDENT,
                    subject_id=command.user_id,
                    subscription_id=subscription.id,
                    action=SubscriptionAction.UPGRADE,
                    old_plan=old_plan,
                    new_plan=new_tier.plan_type.value,
                    old_amount=current_price,
                    new_amount=new_tier.price,
                    effective_date=now,
                    reason=command.reason or "User requested upgrade",
                    actor_id=command.user_id,
                    details={"prorated_amount": str(prorated_amount), "immediate": True},
                )
            )

            if prorated_amount > 0:
                await self.log_repo.add_billing(
                    BillingHistory(
                        subject_type=SubjectType.STUDENT,
                        subject_id=command.user_id,
                        subscription_id=subscription.id,
                        billing_date=now,
                        amount=prorated_amount,
                        currency=subscription.currency,
                        status=BillingStatus.PENDING,
                        invoice_number=generate_invoice_number(SubjectType.STUDENT, now),
                        description=f"Prorated upgrade from {old_plan} to {new_tier.plan_type.value}",
                    )
                )

            # Step 3: Commit
            await self.uow.commit()

            logger.info(
                f"Subscription upgraded for user {command.user_id} from {old_plan} "
                f"to {new_tier.plan_type.value} (prorated {prorated_amount})"
            )

            return Return.ok(
                PlanChangeResponseDTO(
                    subscription_id=subscription.id,
                    action=SubscriptionAction.UPGRADE.value,
                    old_plan=old_plan,
                    new_plan=new_tier.plan_type.value,
                    effective_date=now,
                    prorated_amount=prorated_amount,
                    message="Subscription upgraded successfully",
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error upgrading subscription for user {command.user_id}: {e}")
            return Return.err(
                Error(
                    code="UPGRADE_FAILED",
                    message="Failed to upgrade subscription",
                    reason=str(e),
                )
            )
