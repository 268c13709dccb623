"""Usage Alert Repository Interface"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.usage_alert import UsageAlert


class UsageAlertRepository(ABC):
    """
    Repository interface for UsageAlert persistence
    """

    @abstractmethod
    async def create(self, alert: UsageAlert) -> UsageAlert:
        pass

    @abstractmethod
    async def mark_notified(self, alert_id: str) -> None:
        """Set notified_at to now"""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str, limit: int = 20) -> List[UsageAlert]:
        """Newest-first alerts for a user"""
        pass
