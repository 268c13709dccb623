"""Subscription lifecycle use cases"""
from .create_student_subscription import CreateStudentSubscription
from .create_institution_subscription import CreateInstitutionSubscription
from .upgrade_subscription import UpgradeSubscription
from .downgrade_subscription import DowngradeSubscription
from .cancel_subscription import CancelStudentSubscription, CancelInstitutionSubscription
from .reactivate_subscription import ReactivateStudentSubscription, ReactivateInstitutionSubscription
from .trial_expiration import HandleStudentTrialExpiration, HandleInstitutionTrialExpiration
from .process_expired_trials import ProcessExpiredTrials
from .get_grace_period import GetGracePeriod
from .get_subscription_logs import GetSubscriptionLogs
from .get_subscription_status import GetStudentSubscriptionStatus, GetInstitutionSubscriptionStatus
from .check_subscription_status import CheckSubscriptionStatus
from .dtos import (
    StudentSubscriptionDTO,
    InstitutionSubscriptionDTO,
    CreateStudentSubscriptionCommandDTO,
    CreateInstitutionSubscriptionCommandDTO,
    UpgradeCommandDTO,
    DowngradeCommandDTO,
    PlanChangeResponseDTO,
    CancelSubscriptionCommandDTO,
    ReactivateSubscriptionCommandDTO,
    TrialExpirationResultDTO,
    ProcessExpiredTrialsResultDTO,
    GracePeriodDTO,
    SubscriptionLogDTO,
    BillingHistoryDTO,
    SubscriptionLogsResponseDTO,
    StudentSubscriptionStatusDTO,
    InstitutionSubscriptionStatusDTO,
    ExpiringSubscriptionDTO,
    SubscriptionStatusCheckDTO,
)

__all__ = [
    "CreateStudentSubscription",
    "CreateInstitutionSubscription",
    "UpgradeSubscription",
    "DowngradeSubscription",
    "CancelStudentSubscription",
    "CancelInstitutionSubscription",
    "ReactivateStudentSubscription",
    "ReactivateInstitutionSubscription",
    "HandleStudentTrialExpiration",
    "HandleInstitutionTrialExpiration",
    "ProcessExpiredTrials",
    "GetGracePeriod",
    "GetSubscriptionLogs",
    "GetStudentSubscriptionStatus",
    "GetInstitutionSubscriptionStatus",
    "CheckSubscriptionStatus",
    "StudentSubscriptionDTO",
    "InstitutionSubscriptionDTO",
    "CreateStudentSubscriptionCommandDTO",
    "CreateInstitutionSubscriptionCommandDTO",
    "UpgradeCommandDTO",
    "DowngradeCommandDTO",
    "PlanChangeResponseDTO",
    "CancelSubscriptionCommandDTO",
    "ReactivateSubscriptionCommandDTO",
    "TrialExpirationResultDTO",
    "ProcessExpiredTrialsResultDTO",
    "GracePeriodDTO",
    "SubscriptionLogDTO",
    "BillingHistoryDTO",
    "SubscriptionLogsResponseDTO",
    "StudentSubscriptionStatusDTO",
    "InstitutionSubscriptionStatusDTO",
    "ExpiringSubscriptionDTO",
    "SubscriptionStatusCheckDTO",
]
