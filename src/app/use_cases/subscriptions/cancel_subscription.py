"""Cancel Subscription Use Cases

Stops renewal of a student or institution subscription. Cancelling an
institution resets its stored commission rate to the cancelled-plan rate.
"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.institution_subscription_repository import InstitutionSubscriptionRepository
from src.app.repositories.subscription_log_repository import SubscriptionLogRepository
from src.app.repositories.platform_repository import InstitutionRepository
from src.domain.policy import GovernancePolicy
from src.domain.subscription import SubscriptionStatus
from src.domain.subscription_log import SubscriptionLog, SubjectType, SubscriptionAction, SYSTEM_ACTOR
from .dtos import CancelSubscriptionCommandDTO, StudentSubscriptionDTO, InstitutionSubscriptionDTO

logger = logging.getLogger(__name__)


class CancelStudentSubscription:
    """
    Use Case: Cancel a student subscription

    Business Rules:
    1. Only an ACTIVE subscription can be cancelled
    2. Status becomes CANCELLED, auto_renew stops, reason and time recorded
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

    async def execute(self, command: CancelSubscriptionCommandDTO) -> Result[StudentSubscriptionDTO]:
        try:
            subscription = await self.subscription_repo.get_current(command.subject_id)
            if not subscription:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"No subscription found for user {command.subject_id}",
                    )
                )

            if subscription.status != SubscriptionStatus.ACTIVE:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_ACTIVE",
                        message="No active subscription found",
                        reason=f"status={subscription.status.value}",
                    )
                )

            subscription.status = SubscriptionStatus.CANCELLED
            subscription.auto_renew = False
            subscription.cancellation_reason = command.reason
            subscription.cancelled_at = datetime.utcnow()
            subscription = await self.subscription_repo.update(subscription)

            await self.log_repo.add_log(
                SubscriptionLog(
                    subject_type=SubjectType.STUDENT,
                    subject_id=command.subject_id,
                    subscription_id=subscription.id,
                    action=SubscriptionAction.CANCEL,
                    old_plan=subscription.plan_type.value,
                    old_amount=subscription.amount,
                    old_billing_cycle=subscription.billing_cycle,
                    reason=command.reason or "Subscription cancelled",
                    actor_id=command.actor_id or command.subject_id,
                )
            )

            await self.uow.commit()
            logger.info(f"Student subscription {subscription.id} cancelled for {command.subject_id}")

            return Return.ok(StudentSubscriptionDTO.from_entity(subscription))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CANCEL_SUBSCRIPTION_FAILED",
                    message="Failed to cancel subscription",
                    reason=str(e),
                )
            )


class CancelInstitutionSubscription:
    """
    Use Case: Cancel an institution subscription

    Business Rules:
    1. Only an ACTIVE subscription can be cancelled
    2. Status becomes CANCELLED, auto_renew stops, reason and time recorded
    3. Institution commission_rate resets to policy.cancelled_commission_rate
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

    async def execute(
        self, command: CancelSubscriptionCommandDTO
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

            if subscription.status != SubscriptionStatus.ACTIVE:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_ACTIVE",
                        message="No active subscription found",
                        reason=f"status={subscription.status.value}",
                    )
                )

            subscription.status = SubscriptionStatus.CANCELLED
            subscription.auto_renew = False
            subscription.cancellation_reason = command.reason
            subscription.cancelled_at = datetime.utcnow()
            subscription = await self.subscription_repo.update(subscription)

            await self.log_repo.add_log(
                SubscriptionLog(
                    subject_type=SubjectType.INSTITUTION,
                    subject_id=command.subject_id,
                    subscription_id=subscription.id,
                    action=SubscriptionAction.CANCEL,
                    old_plan=subscription.plan_type.value,
                    old_amount=subscription.amount,
                    old_billing_cycle=subscription.billing_cycle,
                    reason=command.reason or "Subscription cancelled",
                    actor_id=command.actor_id or SYSTEM_ACTOR,
                )
            )

            await self.institution_repo.set_commission_rate(
                command.subject_id, self.policy.cancelled_commission_rate
            )

            await self.uow.commit()
            logger.info(
                f"Institution subscription {subscription.id} cancelled for {command.subject_id}; "
                f"commission rate reset to {self.policy.cancelled_commission_rate}%"
            )

            return Return.ok(InstitutionSubscriptionDTO.from_entity(subscription))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CANCEL_SUBSCRIPTION_FAILED",
                    message="Failed to cancel subscription",
                    reason=str(e),
                )
            )
