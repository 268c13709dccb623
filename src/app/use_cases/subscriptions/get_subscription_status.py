"""Subscription Status Use Cases

Read-only summaries combining the current subscription, its tier and the
most recent billing rows.
"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.tier_repository import TierRepository
from src.app.repositories.student_subscription_repository import StudentSubscriptionRepository
from src.app.repositories.institution_subscription_repository import InstitutionSubscriptionRepository
from src.app.repositories.subscription_log_repository import SubscriptionLogRepository
from src.app.repositories.platform_repository import UserRepository, InstitutionRepository
from src.domain.commission import resolve_reporting_rate
from src.domain.policy import GovernancePolicy
from src.domain.subscription import LIVE_STATUSES, SubscriptionStatus
from src.domain.subscription_log import SubjectType
from src.domain.tier import StudentPlanType, InstitutionPlanType
from .dtos import (
    StudentSubscriptionDTO,
    InstitutionSubscriptionDTO,
    BillingHistoryDTO,
    StudentSubscriptionStatusDTO,
    InstitutionSubscriptionStatusDTO,
)

logger = logging.getLogger(__name__)

BILLING_HISTORY_LIMIT = 10


class GetStudentSubscriptionStatus:
    """
    Use Case: Summarise a student's subscription

    - Active means ACTIVE, TRIAL or PAST_DUE
    - Fallback plans can be neither upgraded, downgraded nor cancelled
    - PRO cannot be upgraded, BASIC cannot be downgraded
    """

    def __init__(
        self,
        user_repo: UserRepository,
        tier_repo: TierRepository,
        subscription_repo: StudentSubscriptionRepository,
        log_repo: SubscriptionLogRepository,
    ):
        self.user_repo = user_repo
        self.tier_repo = tier_repo
        self.subscription_repo = subscription_repo
        self.log_repo = log_repo

    async def execute(self, user_id: str) -> Result[StudentSubscriptionStatusDTO]:
        try:
            user = await self.user_repo.get_by_id(user_id)
            if not user:
                return Return.err(
                    Error(code="USER_NOT_FOUND", message=f"User not found: {user_id}")
                )

            subscription = await self.subscription_repo.get_current(user_id)
            if not subscription:
                return Return.ok(
                    StudentSubscriptionStatusDTO(
                        has_active_subscription=False,
                        can_upgrade=False,
                        can_downgrade=False,
                        can_cancel=False,
                        is_fallback=False,
                    )
                )

            tier = await self.tier_repo.get_student_tier(subscription.tier_id)
            billing = await self.log_repo.list_billing(
                SubjectType.STUDENT, user_id, limit=BILLING_HISTORY_LIMIT
            )

            is_active = subscription.status in LIVE_STATUSES
            is_fallback = subscription.is_fallback

            return Return.ok(
                StudentSubscriptionStatusDTO(
                    has_active_subscription=is_active,
                    current_plan=subscription.plan_type.value,
                    features=list(tier.features) if tier else [],
                    subscription_end_date=subscription.end_date,
                    next_billing_date=subscription.end_date,
                    can_upgrade=not is_fallback and is_active
                    and subscription.plan_type != StudentPlanType.PRO,
                    can_downgrade=not is_fallback and is_active
                    and subscription.plan_type != StudentPlanType.BASIC,
                    can_cancel=is_active and not is_fallback,
                    is_fallback=is_fallback,
                    subscription=StudentSubscriptionDTO.from_entity(subscription),
                    billing_history=[BillingHistoryDTO.from_entity(b) for b in billing],
                )
            )

        except Exception as e:
            logger.error(f"Error getting subscription status for user {user_id}: {e}")
            return Return.err(
                Error(
                    code="GET_SUBSCRIPTION_STATUS_FAILED",
                    message="Failed to get subscription status",
                    reason=str(e),
                )
            )


class GetInstitutionSubscriptionStatus:
    """
    Use Case: Summarise an institution's subscription

    The commission rate shown here is the lenient reporting rate: the active
    tier's rate, else the institution's stored rate, else the policy default.
    """

    def __init__(
        self,
        institution_repo: InstitutionRepository,
        tier_repo: TierRepository,
        subscription_repo: InstitutionSubscriptionRepository,
        log_repo: SubscriptionLogRepository,
        policy: GovernancePolicy,
    ):
        self.institution_repo = institution_repo
        self.tier_repo = tier_repo
        self.subscription_repo = subscription_repo
        self.log_repo = log_repo
        self.policy = policy

    async def execute(self, institution_id: str) -> Result[InstitutionSubscriptionStatusDTO]:
        try:
            institution = await self.institution_repo.get_by_id(institution_id)
            if not institution:
                return Return.err(
                    Error(
                        code="INSTITUTION_NOT_FOUND",
                        message=f"Institution not found: {institution_id}",
                    )
                )

            subscription = await self.subscription_repo.get_current(institution_id)
            tier = None
            if subscription and subscription.commission_tier_id:
                tier = await self.tier_repo.get_commission_tier(subscription.commission_tier_id)

            commission_rate = resolve_reporting_rate(
                stored_rate=institution.commission_rate,
                subscription_active=bool(subscription) and subscription.status == SubscriptionStatus.ACTIVE,
                tier_rate=tier.commission_rate if tier else None,
                default_rate=self.policy.default_commission_rate,
            )

            if not subscription:
                return Return.ok(
                    InstitutionSubscriptionStatusDTO(
                        has_active_subscription=False,
                        commission_rate=commission_rate,
                        can_upgrade=False,
                        can_downgrade=False,
                        can_cancel=False,
                        is_fallback=False,
                    )
                )

            billing = await self.log_repo.list_billing(
                SubjectType.INSTITUTION, institution_id, limit=BILLING_HISTORY_LIMIT
            )

            is_active = subscription.status in LIVE_STATUSES
            is_fallback = subscription.is_fallback
            features = dict(tier.features) if tier and tier.features else dict(subscription.features or {})

            return Return.ok(
                InstitutionSubscriptionStatusDTO(
                    has_active_subscription=is_active,
                    current_plan=subscription.plan_type.value,
                    commission_rate=commission_rate,
                    features=features,
                    subscription_end_date=subscription.end_date,
                    next_billing_date=subscription.end_date,
                    can_upgrade=not is_fallback and is_active
                    and subscription.plan_type != InstitutionPlanType.ENTERPRISE,
                    can_downgrade=not is_fallback and is_active
                    and subscription.plan_type != InstitutionPlanType.STARTER,
                    can_cancel=is_active and not is_fallback,
                    is_fallback=is_fallback,
                    subscription=InstitutionSubscriptionDTO.from_entity(subscription),
                    billing_history=[BillingHistoryDTO.from_entity(b) for b in billing],
                )
            )

        except Exception as e:
            logger.error(f"Error getting subscription status for institution {institution_id}: {e}")
            return Return.err(
                Error(
                    code="GET_SUBSCRIPTION_STATUS_FAILED",
                    message="Failed to get institution subscription status",
                    reason=str(e),
                )
            )
