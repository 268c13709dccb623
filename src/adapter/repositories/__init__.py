from .tier_repository import SqlAlchemyTierRepository
from .student_subscription_repository import SqlAlchemyStudentSubscriptionRepository
from .institution_subscription_repository import SqlAlchemyInstitutionSubscriptionRepository
from .subscription_log_repository import SqlAlchemySubscriptionLogRepository
from .commission_repository import SqlAlchemyCommissionRepository
from .payment_repository import SqlAlchemyPaymentRepository
from .enrollment_repository import SqlAlchemyEnrollmentRepository
from .live_class_repository import SqlAlchemyLiveClassRepository
from .platform_repository import (
    SqlAlchemyUserRepository,
    SqlAlchemyInstitutionRepository,
    SqlAlchemyCourseRepository,
)
from .usage_alert_repository import SqlAlchemyUsageAlertRepository

__all__ = [
    "SqlAlchemyTierRepository",
    "SqlAlchemyStudentSubscriptionRepository",
    "SqlAlchemyInstitutionSubscriptionRepository",
    "SqlAlchemySubscriptionLogRepository",
    "SqlAlchemyCommissionRepository",
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyEnrollmentRepository",
    "SqlAlchemyLiveClassRepository",
    "SqlAlchemyUserRepository",
    "SqlAlchemyInstitutionRepository",
    "SqlAlchemyCourseRepository",
    "SqlAlchemyUsageAlertRepository",
]
