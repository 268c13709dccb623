"""Institution feature access and usage use cases"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.institution_subscription_repository import InstitutionSubscriptionRepository
from src.app.repositories.platform_repository import InstitutionRepository, CourseRepository
from src.app.repositories.enrollment_repository import EnrollmentRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.subscription import SubscriptionStatus
from .dtos import FeatureAccessDTO, InstitutionUsageStatsDTO

logger = logging.getLogger(__name__)


class CheckInstitutionFeatureAccess:
    """
    Use Case: Whether an institution's plan enables a feature

    Only an ACTIVE subscription grants features, and only a feature flag
    set to exactly true counts as enabled.
    """

    def __init__(self, subscription_repo: InstitutionSubscriptionRepository):
        self.subscription_repo = subscription_repo

    async def execute(self, institution_id: str, feature: str) -> Result[FeatureAccessDTO]:
        try:
            subscription = await self.subscription_repo.get_current(institution_id)
            if not subscription:
                return Return.ok(
                    FeatureAccessDTO(institution_id=institution_id, feature=feature, enabled=False)
                )

            features = subscription.features or {}
            enabled = (
                subscription.status == SubscriptionStatus.ACTIVE
                and features.get(feature) is True
            )
            return Return.ok(
                FeatureAccessDTO(
                    institution_id=institution_id,
                    feature=feature,
                    enabled=enabled,
                    subscription_status=subscription.status.value,
                )
            )

        except Exception as e:
            logger.error(f"Error checking feature {feature} for institution {institution_id}: {e}")
            return Return.err(
                Error(
                    code="FEATURE_ACCESS_CHECK_FAILED",
                    message="Failed to check feature access",
                    reason=str(e),
                )
            )


class GetInstitutionUsageStats:
    """Active students, course count and completed-payment revenue for one institution"""

    def __init__(
        self,
        institution_repo: InstitutionRepository,
        course_repo: CourseRepository,
        enrollment_repo: EnrollmentRepository,
        payment_repo: PaymentRepository,
    ):
        self.institution_repo = institution_repo
        self.course_repo = course_repo
        self.enrollment_repo = enrollment_repo
        self.payment_repo = payment_repo

    async def execute(self, institution_id: str) -> Result[InstitutionUsageStatsDTO]:
        try:
            institution = await self.institution_repo.get_by_id(institution_id)
            if not institution:
                return Return.err(
                    Error(
                        code="INSTITUTION_NOT_FOUND",
                        message=f"Institution not found: {institution_id}",
                    )
                )

            courses = await self.course_repo.list_by_institution(institution_id)
            active_students = await self.enrollment_repo.count_active_by_institution(institution_id)
            revenue = await self.payment_repo.sum_completed_for_institution(institution_id)

            return Return.ok(
                InstitutionUsageStatsDTO(
                    institution_id=institution_id,
                    active_students=active_students,
                    total_courses=len(courses),
                    revenue_generated=revenue,
                )
            )

        except Exception as e:
            logger.error(f"Error getting usage stats for institution {institution_id}: {e}")
            return Return.err(
                Error(
                    code="INSTITUTION_USAGE_STATS_FAILED",
                    message="Failed to get institution usage stats",
                    reason=str(e),
                )
            )
