"""Data Transfer Objects for Subscription Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from src.domain.subscription import StudentSubscription, InstitutionSubscription
from src.domain.subscription_log import SubscriptionLog, BillingHistory
from src.domain.tier import BillingCycle


class StudentSubscriptionDTO(BaseModel):
    """Student subscription snapshot"""

    id: str
    student_id: str
    tier_id: str
    plan_type: str
    status: str
    origin: str
    start_date: datetime
    end_date: datetime
    billing_cycle: str
    amount: Decimal
    currency: str
    enrollment_quota: int
    attendance_quota: int
    current_enrollments: int
    monthly_enrollments: int
    monthly_attendance: int
    auto_renew: bool
    original_subscription_id: Optional[str] = None
    replaced_by_id: Optional[str] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, subscription: StudentSubscription) -> "StudentSubscriptionDTO":
        return cls(
            id=subscription.id,
            student_id=subscription.student_id,
            tier_id=subscription.tier_id,
            plan_type=subscription.plan_type.value,
            status=subscription.status.value,
            origin=subscription.origin.value,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
            billing_cycle=subscription.billing_cycle.value,
            amount=subscription.amount,
            currency=subscription.currency,
            enrollment_quota=subscription.enrollment_quota,
            attendance_quota=subscription.attendance_quota,
            current_enrollments=subscription.current_enrollments,
            monthly_enrollments=subscription.monthly_enrollments,
            monthly_attendance=subscription.monthly_attendance,
            auto_renew=subscription.auto_renew,
            original_subscription_id=subscription.original_subscription_id,
            replaced_by_id=subscription.replaced_by_id,
            cancelled_at=subscription.cancelled_at,
        )


class InstitutionSubscriptionDTO(BaseModel):
    """Institution subscription snapshot"""

    id: str
    institution_id: str
    commission_tier_id: Optional[str] = None
    plan_type: str
    status: str
    origin: str
    start_date: datetime
    end_date: datetime
    billing_cycle: str
    amount: Decimal
    currency: str
    features: Dict[str, Any] = Field(default_factory=dict)
    auto_renew: bool
    original_subscription_id: Optional[str] = None
    replaced_by_id: Optional[str] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, subscription: InstitutionSubscription) -> "InstitutionSubscriptionDTO":
        return cls(
            id=subscription.id,
            institution_id=subscription.institution_id,
            commission_tier_id=subscription.commission_tier_id,
            plan_type=subscription.plan_type.value,
            status=subscription.status.value,
            origin=subscription.origin.value,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
            billing_cycle=subscription.billing_cycle.value,
            amount=subscription.amount,
            currency=subscription.currency,
            features=subscription.features or {},
            auto_renew=subscription.auto_renew,
            original_subscription_id=subscription.original_subscription_id,
            replaced_by_id=subscription.replaced_by_id,
            cancelled_at=subscription.cancelled_at,
        )


class CreateStudentSubscriptionCommandDTO(BaseModel):
    """
    Command DTO for starting or replacing a student plan

    Used as input to CreateStudentSubscription use case.
    """

    student_id: str = Field(..., description="Student (user) identifier")
    tier_id: str = Field(..., description="Student tier to subscribe to")
    billing_cycle: BillingCycle = Field(default=BillingCycle.MONTHLY)
    start_trial: bool = Field(default=False, description="Start a free trial instead of a paid period")
    amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Custom amount overriding tier pricing"
    )
    payment_method: Optional[str] = Field(default="MANUAL")
    transaction_id: Optional[str] = Field(default=None)
    actor_id: Optional[str] = Field(default=None, description="User performing the action")


class CreateInstitutionSubscriptionCommandDTO(BaseModel):
    """
    Command DTO for starting or replacing an institution plan

    Used as input to CreateInstitutionSubscription use case.
    """

    institution_id: str = Field(..., description="Institution identifier")
    commission_tier_id: str = Field(..., description="Commission tier to subscribe to")
    billing_cycle: BillingCycle = Field(default=BillingCycle.MONTHLY)
    start_trial: bool = Field(default=False)
    amount: Optional[Decimal] = Field(default=None, ge=0)
    payment_method: Optional[str] = Field(default="MANUAL")
    transaction_id: Optional[str] = Field(default=None)
    actor_id: Optional[str] = Field(default=None)


class UpgradeCommandDTO(BaseModel):
    """Command DTO for UpgradeSubscription"""

    user_id: str = Field(..., description="Student (user) identifier")
    new_tier_id: str = Field(..., description="Target student tier")
    immediate: bool = Field(
        default=True,
        description="Apply now with proration instead of at the end of the period"
    )
    reason: Optional[str] = Field(default=None)


class DowngradeCommandDTO(BaseModel):
    """Command DTO for DowngradeSubscription"""

    user_id: str = Field(..., description="Student (user) identifier")
    new_tier_id: str = Field(..., description="Target student tier")
    reason: Optional[str] = Field(default=None)
    effective_date: Optional[datetime] = Field(
        default=None,
        description="When the downgrade applies (defaults to the current end_date)"
    )


class PlanChangeResponseDTO(BaseModel):
    """Outcome of an upgrade or downgrade request"""

    subscription_id: str
    action: str = Field(..., description="UPGRADE, UPGRADE_SCHEDULED or DOWNGRADE_SCHEDULED")
    old_plan: str
    new_plan: str
    effective_date: datetime
    prorated_amount: Optional[Decimal] = Field(
        default=None,
        description="Amount owed for an immediate upgrade (not captured)"
    )
    grace_period_days: Optional[int] = None
    message: str


class CancelSubscriptionCommandDTO(BaseModel):
    subject_id: str = Field(..., description="Student or institution identifier")
    reason: Optional[str] = Field(default=None)
    actor_id: Optional[str] = Field(default=None)


class ReactivateSubscriptionCommandDTO(BaseModel):
    subject_id: str = Field(..., description="Student or institution identifier")
    actor_id: Optional[str] = Field(default=None)


class TrialExpirationResultDTO(BaseModel):
    """Result of replacing an expired trial with its fallback plan"""

    subject_id: str
    original_subscription_id: str
    fallback_subscription_id: str
    fallback_plan: str
    fallback_end_date: datetime


class ProcessExpiredTrialsResultDTO(BaseModel):
    """Counts from one trial-expiry sweep"""

    student_processed: int = 0
    student_failed: int = 0
    institution_processed: int = 0
    institution_failed: int = 0
    errors: List[str] = Field(default_factory=list)


class GracePeriodDTO(BaseModel):
    is_in_grace_period: bool
    days_remaining: int
    expiry_date: Optional[datetime] = None


class SubscriptionLogDTO(BaseModel):
    id: str
    subscription_id: str
    action: str
    old_plan: Optional[str] = None
    new_plan: Optional[str] = None
    old_amount: Optional[Decimal] = None
    new_amount: Optional[Decimal] = None
    old_billing_cycle: Optional[str] = None
    new_billing_cycle: Optional[str] = None
    effective_date: Optional[datetime] = None
    reason: Optional[str] = None
    actor_id: str
    details: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @classmethod
    def from_entity(cls, log: SubscriptionLog) -> "SubscriptionLogDTO":
        return cls(
            id=log.id,
            subscription_id=log.subscription_id,
            action=log.action.value,
            old_plan=log.old_plan,
            new_plan=log.new_plan,
            old_amount=log.old_amount,
            new_amount=log.new_amount,
            old_billing_cycle=log.old_billing_cycle.value if log.old_billing_cycle else None,
            new_billing_cycle=log.new_billing_cycle.value if log.new_billing_cycle else None,
            effective_date=log.effective_date,
            reason=log.reason,
            actor_id=log.actor_id,
            details=log.details or {},
            created_at=log.created_at,
        )


class BillingHistoryDTO(BaseModel):
    id: str
    billing_date: datetime
    amount: Decimal
    currency: str
    status: str
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    invoice_number: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_entity(cls, billing: BillingHistory) -> "BillingHistoryDTO":
        return cls(
            id=billing.id,
            billing_date=billing.billing_date,
            amount=billing.amount,
            currency=billing.currency,
            status=billing.status.value,
            payment_method=billing.payment_method,
            transaction_id=billing.transaction_id,
            invoice_number=billing.invoice_number,
            description=billing.description,
        )


class SubscriptionLogsResponseDTO(BaseModel):
    subject_type: str
    subject_id: str
    logs: List[SubscriptionLogDTO]


class StudentSubscriptionStatusDTO(BaseModel):
    """Subscription summary shown to a student"""

    has_active_subscription: bool
    current_plan: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    subscription_end_date: Optional[datetime] = None
    next_billing_date: Optional[datetime] = None
    can_upgrade: bool
    can_downgrade: bool
    can_cancel: bool
    is_fallback: bool
    subscription: Optional[StudentSubscriptionDTO] = None
    billing_history: List[BillingHistoryDTO] = Field(default_factory=list)


class InstitutionSubscriptionStatusDTO(BaseModel):
    """Subscription summary shown to institution staff"""

    has_active_subscription: bool
    current_plan: Optional[str] = None
    commission_rate: Decimal
    features: Dict[str, Any] = Field(default_factory=dict)
    subscription_end_date: Optional[datetime] = None
    next_billing_date: Optional[datetime] = None
    can_upgrade: bool
    can_downgrade: bool
    can_cancel: bool
    is_fallback: bool
    subscription: Optional[InstitutionSubscriptionDTO] = None
    billing_history: List[BillingHistoryDTO] = Field(default_factory=list)


class ExpiringSubscriptionDTO(BaseModel):
    subscription_id: str
    institution_id: str
    plan_type: str
    end_date: datetime
    days_remaining: int


class SubscriptionStatusCheckDTO(BaseModel):
    """Result of the periodic institution subscription check"""

    checked_at: datetime
    expiring_soon: List[ExpiringSubscriptionDTO] = Field(default_factory=list)
    expired_count: int = 0
