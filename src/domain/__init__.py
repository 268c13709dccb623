from .base import BaseModel, generate_uuid
from .tier import (
    StudentTier,
    CommissionTier,
    StudentPlanType,
    InstitutionPlanType,
    BillingCycle,
)
from .platform import User, UserRole, Institution, Course, Payment, PaymentStatus
from .subscription import (
    StudentSubscription,
    InstitutionSubscription,
    SubscriptionStatus,
    SubscriptionOrigin,
)
from .subscription_log import (
    SubscriptionLog,
    BillingHistory,
    SubjectType,
    SubscriptionAction,
    BillingStatus,
)
from .commission import InstitutionCommission, InstitutionPayout, CommissionStatus, PayoutStatus
from .enrollment import Enrollment, EnrollmentStatus, AccessMethod
from .live_class import LiveClassSession, SessionParticipant, SessionStatus
from .usage_alert import UsageAlert, UsageAlertType
from .policy import GovernancePolicy

__all__ = [
    "BaseModel",
    "generate_uuid",
    "StudentTier",
    "CommissionTier",
    "StudentPlanType",
    "InstitutionPlanType",
    "BillingCycle",
    "User",
    "UserRole",
    "Institution",
    "Course",
    "Payment",
    "PaymentStatus",
    "StudentSubscription",
    "InstitutionSubscription",
    "SubscriptionStatus",
    "SubscriptionOrigin",
    "SubscriptionLog",
    "BillingHistory",
    "SubjectType",
    "SubscriptionAction",
    "BillingStatus",
    "InstitutionCommission",
    "InstitutionPayout",
    "CommissionStatus",
    "PayoutStatus",
    "Enrollment",
    "EnrollmentStatus",
    "AccessMethod",
    "LiveClassSession",
    "SessionParticipant",
    "SessionStatus",
    "UsageAlert",
    "UsageAlertType",
    "GovernancePolicy",
]
