from .tier_repository import TierRepository
from .student_subscription_repository import StudentSubscriptionRepository
from .institution_subscription_repository import InstitutionSubscriptionRepository
from .subscription_log_repository import SubscriptionLogRepository
from .commission_repository import CommissionRepository
from .payment_repository import PaymentRepository
from .enrollment_repository import EnrollmentRepository
from .live_class_repository import LiveClassRepository
from .platform_repository import UserRepository, InstitutionRepository, CourseRepository
from .usage_alert_repository import UsageAlertRepository

__all__ = [
    "TierRepository",
    "StudentSubscriptionRepository",
    "InstitutionSubscriptionRepository",
    "SubscriptionLogRepository",
    "CommissionRepository",
    "PaymentRepository",
    "EnrollmentRepository",
    "LiveClassRepository",
    "UserRepository",
    "InstitutionRepository",
    "CourseRepository",
    "UsageAlertRepository",
]
