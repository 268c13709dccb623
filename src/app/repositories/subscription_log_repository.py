"""Subscription Log Repository Interface

Append-only access to subscription logs and billing history.
"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.subscription_log import SubscriptionLog, BillingHistory, SubjectType


class SubscriptionLogRepository(ABC):
    """
    Repository interface for the subscription audit trail

    Rows are only ever inserted; there are no update or delete operations.
    """

    @abstractmethod
    async def add_log(self, log: SubscriptionLog) -> SubscriptionLog:
        """
        Append a lifecycle log entry

        Args:
            log: SubscriptionLog to persist

        Returns:
            Persisted SubscriptionLog
        """
        pass

    @abstractmethod
    async def add_billing(self, billing: BillingHistory) -> BillingHistory:
        """Append a billing history row"""
        pass

    @abstractmethod
    async def list_logs(
        self, subject_type: SubjectType, subject_id: str, limit: int = 50
    ) -> List[SubscriptionLog]:
        """Newest-first log entries for a subject"""
        pass

    @abstractmethod
    async def list_billing(
        self, subject_type: SubjectType, subject_id: str, limit: int = 10
    ) -> List[BillingHistory]:
        """Newest-first billing rows for a subject"""
        pass
