"""Usage Alert Domain Entity

Records advisory alerts raised when a subscriber approaches a quota.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Text
from src.domain.base import BaseModel, generate_uuid


class UsageAlertType(str, Enum):
    ENROLLMENT_LIMIT_APPROACHING = "ENROLLMENT_LIMIT_APPROACHING"
    ATTENDANCE_LIMIT_APPROACHING = "ATTENDANCE_LIMIT_APPROACHING"


class UsageAlert(BaseModel, table=True):
    """
    UsageAlert - Advisory alert for a subscriber nearing a quota

    Domain Rules:
    - Alerts never block admission; only exceeding the quota does
    - notified_at is set once the notification service accepted the alert
    """

    __tablename__ = "usage_alerts"
    __table_args__ = (
        Index('ix_usage_alerts_user_created', 'user_id', 'created_at'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    user_id: str
    subscription_id: str

    alert_type: UsageAlertType

    message: str = Field(sa_column=Column(Text, nullable=False))

    used: int
    quota: int
    usage_percentage: float

    created_at: datetime = Field(default_factory=datetime.utcnow)
    notified_at: Optional[datetime] = Field(default=None)


def build_alert_message(alert_type: UsageAlertType, used: int, quota: int, percentage: float) -> str:
    if alert_type == UsageAlertType.ENROLLMENT_LIMIT_APPROACHING:
        return (
            f"You have used {used} of {quota} course enrollments ({percentage:.0f}%). "
            f"Consider upgrading your plan for more enrollments."
        )
    return (
        f"You have attended {used} of {quota} live classes this month ({percentage:.0f}%). "
        f"Consider upgrading your plan for more live classes."
    )
