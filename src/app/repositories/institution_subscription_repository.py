"""Institution Subscription Repository Interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from src.domain.subscription import InstitutionSubscription


class InstitutionSubscriptionRepository(ABC):
    """
    Repository interface for InstitutionSubscription persistence
    """

    @abstractmethod
    async def get_by_id(self, subscription_id: str) -> Optional[InstitutionSubscription]:
        pass

    @abstractmethod
    async def get_current(self, institution_id: str) -> Optional[InstitutionSubscription]:
        """
        Retrieve an institution's current subscription

        Args:
            institution_id: Institution identifier

        Returns:
            Newest subscription whose status is not EXPIRED, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, subscription: InstitutionSubscription) -> InstitutionSubscription:
        pass

    @abstractmethod
    async def update(self, subscription: InstitutionSubscription) -> InstitutionSubscription:
        pass

    @abstractmethod
    async def get_expired_trials(self, now: datetime) -> List[InstitutionSubscription]:
        """Subscriptions with status TRIAL and end_date <= now"""
        pass

    @abstractmethod
    async def get_expiring_between(
        self, start: datetime, end: datetime
    ) -> List[InstitutionSubscription]:
        """
        Retrieve ACTIVE subscriptions ending inside a window

        Args:
            start: Window start (inclusive)
            end: Window end (inclusive)

        Returns:
            Subscriptions ordered by end_date
        """
        pass

    @abstractmethod
    async def get_overdue_active(self, now: datetime) -> List[InstitutionSubscription]:
        """ACTIVE subscriptions whose end_date has passed"""
        pass
