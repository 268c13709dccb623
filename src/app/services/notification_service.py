"""Notification Service Interface

Defines the contract for notifying users about usage alerts and
cancelled live classes.
"""

from abc import ABC, abstractmethod
from src.domain.usage_alert import UsageAlert
from src.domain.live_class import LiveClassSession


class NotificationService(ABC):
    """
    Abstract notification service for sending user-facing alerts

    Implementations can send notifications via:
    - Logging
    - Webhook (HTTP POST)
    """

    @abstractmethod
    async def send_usage_alert(self, alert: UsageAlert) -> bool:
        """
        Send an approaching-limit alert

        Args:
            alert: UsageAlert to deliver

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass

    @abstractmethod
    async def send_session_cancelled(self, session: LiveClassSession, user_id: str) -> bool:
        """
        Tell a participant that a live class was cancelled

        Args:
            session: Cancelled session
            user_id: Participant to notify

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass
