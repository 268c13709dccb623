"""DowngradeSubscription Use Case

Schedules a student's move to a lower tier without stranding them over
the new tier's enrollment quota.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.tier_repository import TierRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.subscription_log_repository import SubscriptionLogRepository
from src.app.repositories.enrollment_repository import EnrollmentRepository
from src.domain.subscription_log import SubscriptionLog, SubjectType, SubscriptionAction
from .dtos import DowngradeCommandDTO, PlanChangeResponseDTO

logger = logging.getLogger(__name__)


class DowngradeSubscription:
    """
    Use Case: Schedule a student downgrade

    Business Rules:
    1. A current subscription and the target tier must exist
    2. Active enrollments and current_enrollments must both fit the new
       tier's enrollment_quota, otherwise DOWNGRADE_EXCEEDS_QUOTA
    3. The subscription row is not modified; a DOWNGRADE_SCHEDULED log
       entry records the change effective at end_date or the given date
    """

    def __init__(
        self,
        uow: UnitOfWork,
        tier_repo: TierRepository,
        subscription_repo: StudentSubscriptionRepository,
        enrollment_repo: EnrollmentRepository,
        log_repo: SubscriptionLogRepository,
    ):
        self.uow = uow
        self.tier_repo = tier_repo
        self.subscription_repo = subscription_repo
        self.enrollment_repo = enrollment_repo
        self.log_repo = log_repo

    async def execute(self, command: DowngradeCommandDTO) -> Result[PlanChangeResponseDTO]:
        try:
            # Step 1: Load current subscription and target tier
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

            # Step 2: Capacity checks against the new quota
            if not new_tier.has_unlimited_enrollments:
                active_enrollments = await self.enrollment_repo.count_active_by_student(command.user_id)
                if active_enrollments > new_tier.enrollment_quota:
                    return Return.err(
                        Error(
                            code="DOWNGRADE_EXCEEDS_QUOTA",
                            message=(
                                f"Cannot downgrade: {active_enrollments} active enrollments exceed "
                                f"new limit of {new_tier.enrollment_quota}"
                            ),
                            reason=f"active_enrollments={active_enrollments}, quota={new_tier.enrollment_quota}",
                        )
                    )

                if subscription.current_enrollments > new_tier.enrollment_quota:
                    return Return.err(
                        Error(
                            code="DOWNGRADE_EXCEEDS_QUOTA",
                            message=(
                                f"Cannot downgrade: {subscription.current_enrollments} current enrollments "
                                f"exceed new limit of {new_tier.enrollment_quota}"
                            ),
                            reason=(
                                f"current_enrollments={subscription.current_enrollments}, "
                                f"quota={new_tier.enrollment_quota}"
                            ),
                        )
                    )

            # Step 3: Log the scheduled downgrade
            current_tier = await self.tier_repo.get_student_tier(subscription.tier_id)
            effective_date = command.effective_date or subscription.end_date
            old_plan = subscription.plan_type.value

            await self.log_repo.add_log(
                SubscriptionLog(
                    subject_type=SubjectType.STUDENT,
                    subject_id=command.user_id,
                    subscription_id=subscription.id,
                    action=SubscriptionAction.DOWNGRADE_SCHEDULED,
                    old_plan=old_plan,
                    new_plan=new_tier.plan_type.value,
                    old_amount=current_tier.price if current_tier else subscription.amount,
                    new_amount=new_tier.price,
                    effective_date=effective_date,
                    reason=command.reason or "User requested downgrade",
                    actor_id=command.user_id,
                    details={"grace_period_days": new_tier.grace_period_days},
                )
            )

            # Step 4: Commit
            await self.uow.commit()

            logger.info(
                f"Subscription downgrade scheduled for user {command.user_id} "
                f"from {old_plan} to {new_tier.plan_type.value}"
            )

            return Return.ok(
                PlanChangeResponseDTO(
                    subscription_id=subscription.id,
                    action=SubscriptionAction.DOWNGRADE_SCHEDULED.value,
                    old_plan=old_plan,
                    new_plan=new_tier.plan_type.value,
                    effective_date=effective_date,
                    grace_period_days=new_tier.grace_period_days,
                    message="Downgrade scheduled successfully",
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error downgrading subscription for user {command.user_id}: {e}")
            return Return.err(
                Error(
                    code="DOWNGRADE_FAILED",
                    message="Failed to downgrade subscription",
                    reason=str(e),
                )
            )
