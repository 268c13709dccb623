"""Subscription Log and Billing History Domain Entities

Append-only audit trail of lifecycle actions and billed amounts.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, Numeric, Text
from src.domain.base import BaseModel, generate_uuid
from src.domain.tier import BillingCycle

SYSTEM_ACTOR = "SYSTEM"


class SubjectType(str, Enum):
    """Owner kind of a subscription"""
    STUDENT = "STUDENT"
    INSTITUTION = "INSTITUTION"


class SubscriptionAction(str, Enum):
    """Lifecycle actions recorded in the subscription log"""
    CREATE = "CREATE"
    UPGRADE = "UPGRADE"
    UPGRADE_SCHEDULED = "UPGRADE_SCHEDULED"
    DOWNGRADE_SCHEDULED = "DOWNGRADE_SCHEDULED"
    CANCEL = "CANCEL"
    REACTIVATE = "REACTIVATE"
    EXPIRE = "EXPIRE"
    FALLBACK_CREATED = "FALLBACK_CREATED"


class BillingStatus(str, Enum):
    PAID = "PAID"
    PENDING = "PENDING"
    TRIAL = "TRIAL"
    FREE = "FREE"


class SubscriptionLog(BaseModel, table=True):
    """
    SubscriptionLog - Immutable record of one lifecycle action

    Domain Rules:
    - Rows are never updated or deleted
    - old_* / new_* capture the plan before and after the action
    - actor_id is the requesting user or SYSTEM for automated transitions
    """

    __tablename__ = "subscription_logs"
    __table_args__ = (
        Index('ix_subscription_logs_subject', 'subject_type', 'subject_id', 'created_at'),
        Index('ix_subscription_logs_subscription_id', 'subscription_id'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    subject_type: SubjectType
    subject_id: str = Field(description="Student or institution id")
    subscription_id: str

    action: SubscriptionAction

    old_plan: Optional[str] = Field(default=None)
    new_plan: Optional[str] = Field(default=None)

    old_amount: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(12, 2), nullable=True),
    )
    new_amount: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(12, 2), nullable=True),
    )

    old_billing_cycle: Optional[BillingCycle] = Field(default=None)
    new_billing_cycle: Optional[BillingCycle] = Field(default=None)

    effective_date: Optional[datetime] = Field(
        default=None,
        description="When a scheduled change takes effect"
    )

    reason: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    actor_id: str = Field(default=SYSTEM_ACTOR)

    details: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="Action specific data such as prorated_amount"
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)


class BillingHistory(BaseModel, table=True):
    """
    BillingHistory - Immutable record of an amount billed to a subscription

    Payment capture happens elsewhere; PENDING rows record amounts owed.
    """

    __tablename__ = "billing_history"
    __table_args__ = (
        Index('ix_billing_history_subscription', 'subject_type', 'subscription_id', 'billing_date'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    subject_type: SubjectType
    subject_id: str
    subscription_id: str

    billing_date: datetime = Field(default_factory=datetime.utcnow)

    amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    currency: str = Field(default="USD", max_length=3)

    status: BillingStatus

    payment_method: Optional[str] = Field(default=None)
    transaction_id: Optional[str] = Field(default=None)
    invoice_number: Optional[str] = Field(default=None)

    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)


def generate_invoice_number(subject_type: SubjectType, now: Optional[datetime] = None) -> str:
    """Invoice number in the INV-<millis> / STU-INV-<millis> format"""
    now = now or datetime.utcnow()
    stamp = int(now.timestamp() * 1000)
    if subject_type == SubjectType.STUDENT:
        return f"STU-INV-{stamp}"
    return f"INV-{stamp}"
