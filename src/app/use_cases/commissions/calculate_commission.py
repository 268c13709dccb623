"""CalculateCommissionForPayment Use Case

Strict per-payment commission calculation. No default rate is applied here:
every missing link in payment -> enrollment -> course -> institution ->
subscription -> commission tier is reported as its own error.
"""

import logging
from datetime import datetime
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.payment_repository import PaymentRepository
from src.app.repositories.enrollment_repository import EnrollmentRepository
from src.app.repositories.platform_repository import CourseRepository
from src.app.repositories.institution_subscription_repository import InstitutionSubscriptionRepository
from src.app.repositories.tier_repository import TierRepository
from src.app.repositories.commission_repository import CommissionRepository
from src.domain.commission import InstitutionCommission, calculate_commission_amount
from src.domain.platform import PaymentStatus
from src.domain.subscription import SubscriptionStatus
from .dtos import CommissionCalculationDTO

logger = logging.getLogger(__name__)


class CalculateCommissionForPayment:
    """
    Use Case: Record the platform commission owed on a completed payment

    Business Rules:
    1. Payment must exist and be COMPLETED
    2. The course's institution must have an ACTIVE subscription
    3. A commission tier must exist for the subscription's plan type
    4. commission = amount x rate / 100, institution share = amount - commission
    5. Idempotent: an existing record for the payment is updated, never duplicated

    Flow:
    1. Resolve payment, enrollment, course and institution subscription
    2. Look up the commission tier
    3. Upsert the commission record
    4. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        payment_repo: PaymentRepository,
        enrollment_repo: EnrollmentRepository,
        course_repo: CourseRepository,
        subscription_repo: InstitutionSubscriptionRepository,
        tier_repo: TierRepository,
        commission_repo: CommissionRepository,
    ):
        self.uow = uow
        self.payment_repo = payment_repo
        self.enrollment_repo = enrollment_repo
        self.course_repo = course_repo
        self.subscription_repo = subscription_repo
        self.tier_repo = tier_repo
        self.commission_repo = commission_repo

    async def execute(self, payment_id: str) -> Result[CommissionCalculationDTO]:
        try:
            # Step 1: Resolve payment chain
            payment = await self.payment_repo.get_by_id(payment_id)
            if not payment:
                return Return.err(
                    Error(code="PAYMENT_NOT_FOUND", message=f"Payment not found: {payment_id}")
                )

            if payment.status != PaymentStatus.COMPLETED:
                return Return.err(
                    Error(
                        code="PAYMENT_NOT_COMPLETED",
                        message=f"Payment {payment_id} is not completed",
                        reason=f"status={payment.status.value}",
                    )
                )

            enrollment = (
                await self.enrollment_repo.get_by_id(payment.enrollment_id)
                if payment.enrollment_id
                else None
            )
            if not enrollment:
                return Return.err(
                    Error(
                        code="ENROLLMENT_NOT_FOUND",
                        message=f"Enrollment not found for payment {payment_id}",
                    )
                )

            course = await self.course_repo.get_by_id(enrollment.course_id)
            if not course:
                return Return.err(
                    Error(code="COURSE_NOT_FOUND", message=f"Course not found: {enrollment.course_id}")
                )

            if not course.institution_id:
                return Return.err(
                    Error(
                        code="INSTITUTION_NOT_FOUND",
                        message=f"Course {course.id} does not belong to an institution",
                    )
                )

            subscription = await self.subscription_repo.get_current(course.institution_id)
            if not subscription or subscription.status != SubscriptionStatus.ACTIVE:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_ACTIVE",
                        message="Institution does not have an active subscription",
                        reason=f"institution_id={course.institution_id}",
                    )
                )

            # Step 2: Commission tier for the plan
            tier = await self.tier_repo.get_commission_tier_by_plan(subscription.plan_type)
            if not tier:
                return Return.err(
                    Error(
                        code="COMMISSION_TIER_NOT_FOUND",
                        message=f"Commission tier not found for plan: {subscription.plan_type.value}",
                    )
                )

            # Step 3: Upsert
            commission_rate = Decimal(tier.commission_rate)
            commission_amount = calculate_commission_amount(payment.amount, commission_rate)
            institution_share = Decimal(payment.amount) - commission_amount

            commission = await self.commission_repo.get_by_payment_id(payment.id)
            created = commission is None
            if created:
                commission = await self.commission_repo.create(
                    InstitutionCommission(
                        institution_id=course.institution_id,
                        payment_id=payment.id,
                        amount=commission_amount,
                        commission_rate=commission_rate,
                        currency=payment.currency,
                    )
                )
            else:
                commission.amount = commission_amount
                commission.commission_rate = commission_rate
                commission = await self.commission_repo.update(commission)

            # Step 4: Commit
            await self.uow.commit()

            logger.info(
                f"Commission {commission_amount} ({commission_rate}%) recorded for payment {payment.id}"
            )

            return Return.ok(
                CommissionCalculationDTO(
                    commission_id=commission.id,
                    payment_id=payment.id,
                    enrollment_id=enrollment.id,
                    institution_id=course.institution_id,
                    student_id=enrollment.student_id,
                    course_id=course.id,
                    payment_amount=payment.amount,
                    commission_rate=commission_rate,
                    commission_amount=commission_amount,
                    institution_share=institution_share,
                    currency=payment.currency,
                    calculated_at=datetime.utcnow(),
                    created=created,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error calculating commission for payment {payment_id}: {e}")
            return Return.err(
                Error(
                    code="CALCULATE_COMMISSION_FAILED",
                    message="Failed to calculate commission",
                    reason=str(e),
                )
            )
