"""Background workers for governance service"""
from .commission_cron import CommissionCronWorker
from .subscription_maintenance import SubscriptionMaintenanceWorker

__all__ = ["CommissionCronWorker", "SubscriptionMaintenanceWorker"]
