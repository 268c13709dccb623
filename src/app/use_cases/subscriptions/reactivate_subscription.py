"""Reactivate Subscription Use Cases

Restores a CANCELLED student or institution subscription with a fresh
billing window starting now.
"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.tier_repository import TierRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.institution_subscription_repository import InstitutionSubscriptionRepository
from src.app.repositories.subscription_log_repository import SubscriptionLogRepository
from src.app.repositories.platform_repository import InstitutionRepository
from src.domain.subscription import SubscriptionStatus, billing_period_end
from src.domain.subscription_log import SubscriptionLog, SubjectType, SubscriptionAction, SYSTEM_ACTOR
from .dtos import ReactivateSubscriptionCommandDTO, StudentSubscriptionDTO, InstitutionSubscriptionDTO

logger = logging.getLogger(__name__)


class ReactivateStudentSubscription:
    """
    Use Case: Reactivate a cancelled student subscription

    Business Rules:
    1. The current subscription must be CANCELLED
    2. New window: start now, end one billing cycle later
    3. Status ACTIVE, auto_renew on, cancellation fields cleared
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: StudentSubscriptionRepository,
        log_repo: SubscriptionLogRepository,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.log_repo = log_repo

    async def execute(
        self, command: ReactivateSubscriptionCommandDTO
    ) -> Result[StudentSubscriptionDTO]:
        try:
            subscription = await self.subscription_repo.get_current(command.subject_id)
            if not subscription:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"No subscription found for user {command.subject_id}",
                    )
                )

            if subscription.status != SubscriptionStatus.CANCELLED:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_CANCELLED",
                        message="No cancelled subscription found",
                        reason=f"status={subscription.status.value}",
                    )
                )

            now = datetime.utcnow()
            subscription.status = SubscriptionStatus.ACTIVE
            subscription.start_date = now
            subscription.end_date = billing_period_end(now, subscription.billing_cycle)
            subscription.auto_renew = True
            subscription.cancellation_reason = None
            subscription.cancelled_at = None
            subscription = await self.subscription_repo.update(subscription)

            await self.log_repo.add_log(
                SubscriptionLog(
                    subject_type=SubjectType.STUDENT,
                    subject_id=command.subject_id,
                    subscription_id=subscription.id,
                    action=SubscriptionAction.REACTIVATE,
                    new_plan=subscription.plan_type.value,
                    new_amount=subscription.amount,
                    new_billing_cycle=subscription.billing_cycle,
                    reason="Subscription reactivated",
                    actor_id=command.actor_id or command.subject_id,
                )
            )

            await self.uow.commit()
            logger.info(f"Student subscription {subscription.id} reactivated for {command.subject_id}")

            return Return.ok(StudentSubscriptionDTO.from_entity(subscription))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="REACTIVATE_SUBSCRIPTION_FAILED",
                    message="Failed to reactivate subscription",
                    reason=str(e),
                )
            )


class ReactivateInstitutionSubscription:
    """
    Use Case: Reactivate a cancelled institution subscription

    Business Rules:
    1. The current subscription must be CANCELLED
    2. New window: start now, end one billing cycle later
    3. Institution commission_rate restored from the plan's commission tier
    """

    def __init__(
        self,
        uow: UnitOfWork,
        institution_repo: InstitutionRepository,
        tier_repo: TierRepository,
        subscription_repo: InstitutionSubscriptionRepository,
        log_repo: SubscriptionLogRepository,
    ):
        self.uow = uow
        self.institution_repo = institution_repo
        self.tier_repo = tier_repo
        self.subscription_repo = subscription_repo
        self.log_repo = log_repo

    async def execute(
        self, command: ReactivateSubscriptionCommandDTO
    ) -> Result[InstitutionSubscriptionDTO]:
        try:
            subscription = await self.subscription_repo.get_current(command.subject_id)
            if not subscription:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"No subscription found for institution {command.subject_id}",
                    )
                )

            if subscription.status != SubscriptionStatus.CANCELLED:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_CANCELLED",
                        message="No cancelled subscription found",
                        reason=f"status={subscription.status.value}",
                    )
                )

            now = datetime.utcnow()
            subscription.status = SubscriptionStatus.ACTIVE
            subscription.start_date = now
            subscription.end_date = billing_period_end(now, subscription.billing_cycle)
            subscription.auto_renew = True
            subscription.cancellation_reason = None
            subscription.cancelled_at = None
            subscription = await self.subscription_repo.update(subscription)

            await self.log_repo.add_log(
                SubscriptionLog(
                    subject_type=SubjectType.INSTITUTION,
                    subject_id=command.subject_id,
                    subscription_id=subscription.id,
                    action=SubscriptionAction.REACTIVATE,
                    new_plan=subscription.plan_type.value,
                    new_amount=subscription.amount,
                    new_billing_cycle=subscription.billing_cycle,
                    reason="Subscription reactivated",
                    actor_id=command.actor_id or SYSTEM_ACTOR,
                )
            )

            commission_tier = await self.tier_repo.get_commission_tier_by_plan(subscription.plan_type)
            if commission_tier:
                await self.institution_repo.set_commission_rate(
                    command.subject_id, commission_tier.commission_rate
                )

            await self.uow.commit()
            logger.info(f"Institution subscription {subscription.id} reactivated for {command.subject_id}")

            return Return.ok(InstitutionSubscriptionDTO.from_entity(subscription))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="REACTIVATE_SUBSCRIPTION_FAILED",
                    message="Failed to reactivate subscription",
                    reason=str(e),
                )
            )
