"""Notification Service Implementations

Provides concrete implementations for sending notifications.
"""

import logging
from typing import Any, Dict, Optional
import httpx
from src.app.services.notification_service import NotificationService
from src.domain.usage_alert import UsageAlert
from src.domain.live_class import LiveClassSession

logger = logging.getLogger(__name__)


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs alerts

    Useful for development and testing, or as a fallback.
    """

    async def send_usage_alert(self, alert: UsageAlert) -> bool:
        logger.warning(
            f"[USAGE ALERT] User: {alert.user_id}, "
            f"Type: {alert.alert_type.value}, "
            f"Usage: {alert.used}/{alert.quota} ({alert.usage_percentage}%)"
        )
        return True

    async def send_session_cancelled(self, session: LiveClassSession, user_id: str) -> bool:
        logger.info(
            f"[SESSION CANCELLED] User: {user_id}, Session: {session.id} "
            f"({session.title}) at {session.start_time.isoformat()}, "
            f"Reason: {session.cancellation_reason}"
        )
        return True


class WebhookNotificationService(NotificationService):
    """
    Notification service that sends alerts via HTTP webhook

    Sends JSON payload to configured webhook URL.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Initialize webhook notification service

        Args:
            webhook_url: URL to POST notifications to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def send_usage_alert(self, alert: UsageAlert) -> bool:
        payload = {
            "type": "usage_alert",
            "alert_id": alert.id,
            "user_id": alert.user_id,
            "subscription_id": alert.subscription_id,
            "alert_type": alert.alert_type.value,
            "message": alert.message,
            "used": alert.used,
            "quota": alert.quota,
            "usage_percentage": alert.usage_percentage,
            "created_at": alert.created_at.isoformat(),
        }
        return await self._post(payload, f"usage alert {alert.id}")

    async def send_session_cancelled(self, session: LiveClassSession, user_id: str) -> bool:
        payload = {
            "type": "session_cancelled",
            "session_id": session.id,
            "user_id": user_id,
            "title": session.title,
            "start_time": session.start_time.isoformat(),
            "reason": session.cancellation_reason,
        }
        return await self._post(payload, f"cancellation of session {session.id}")

    async def _post(self, payload: Dict[str, Any], label: str) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.info(f"Webhook notification sent for {label} to {self.webhook_url}")
                return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to send webhook notification for {label}: {e}")
            return False


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Useful for sending to multiple channels (e.g., log + webhook).
    """

    def __init__(self, services: list[NotificationService]):
        self.services = services

    async def send_usage_alert(self, alert: UsageAlert) -> bool:
        success = False
        for service in self.services:
            try:
                if await service.send_usage_alert(alert):
                    success = True
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
        return success

    async def send_session_cancelled(self, session: LiveClassSession, user_id: str) -> bool:
        success = False
        for service in self.services:
            try:
                if await service.send_session_cancelled(session, user_id):
                    success = True
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
        return success


def create_notification_service(webhook_url: Optional[str] = None) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        webhook_url: Optional webhook URL. If provided, creates composite
                     service with logging + webhook. Otherwise, just logging.

    Returns:
        Configured NotificationService
    """
    services: list[NotificationService] = [LoggingNotificationService()]

    if webhook_url:
        services.append(WebhookNotificationService(webhook_url))

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)
