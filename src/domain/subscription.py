"""Subscription Domain Entities

Per-student and per-institution subscription records plus the pure
date and proration rules applied to them.
"""

import calendar
import math
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, Numeric
from src.domain.base import BaseModel, generate_uuid
from src.domain.tier import BillingCycle, StudentPlanType, InstitutionPlanType


class SubscriptionStatus(str, Enum):
    """Subscription status types"""
    TRIAL = "TRIAL"
    ACTIVE = "ACTIVE"
    PAST_DUE = "PAST_DUE"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class SubscriptionOrigin(str, Enum):
    """How a subscription row came to exist"""
    REGULAR = "REGULAR"    # Paid purchase
    TRIAL = "TRIAL"        # Free trial window
    FALLBACK = "FALLBACK"  # Zero-cost plan created when a trial expired unpaid


# Statuses that count as "has a subscription" in status reports
LIVE_STATUSES = (
    SubscriptionStatus.ACTIVE,
    SubscriptionStatus.TRIAL,
    SubscriptionStatus.PAST_DUE,
)


class StudentSubscription(BaseModel, table=True):
    """
    StudentSubscription - A student's plan, window and usage counters

    Domain Rules:
    - The current subscription is the newest row whose status is not EXPIRED
    - current_enrollments and monthly_enrollments never exceed enrollment_quota
    - Quotas are copied from the tier when the plan changes
    - Trial fallback adds a new FALLBACK row; the trial row becomes EXPIRED
    """

    __tablename__ = "student_subscriptions"
    __table_args__ = (
        Index('ix_student_subscriptions_student_id', 'student_id'),
        Index('ix_student_subscriptions_status_end', 'status', 'end_date'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    student_id: str = Field(description="Owning student (user) id")

    tier_id: str = Field(foreign_key="student_tiers.id")

    plan_type: StudentPlanType = Field(description="Plan type copied from the tier")

    status: SubscriptionStatus = Field(default=SubscriptionStatus.ACTIVE)

    origin: SubscriptionOrigin = Field(default=SubscriptionOrigin.REGULAR)

    start_date: datetime
    end_date: datetime

    billing_cycle: BillingCycle = Field(default=BillingCycle.MONTHLY)

    amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Amount charged per billing cycle"
    )

    currency: str = Field(default="USD", max_length=3)

    enrollment_quota: int = Field(description="Copied from tier (-1 = unlimited)")
    attendance_quota: int = Field(description="Copied from tier (-1 = unlimited)")

    current_enrollments: int = Field(default=0)
    monthly_enrollments: int = Field(default=0)
    monthly_attendance: int = Field(default=0)

    auto_renew: bool = Field(default=True)

    original_subscription_id: Optional[str] = Field(
        default=None,
        description="Trial subscription this fallback replaced"
    )

    replaced_by_id: Optional[str] = Field(
        default=None,
        description="Fallback subscription that superseded this row"
    )

    cancellation_reason: Optional[str] = Field(default=None)
    cancelled_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_fallback(self) -> bool:
        return self.origin == SubscriptionOrigin.FALLBACK

    @property
    def is_trial(self) -> bool:
        return self.origin == SubscriptionOrigin.TRIAL


class InstitutionSubscription(BaseModel, table=True):
    """
    InstitutionSubscription - An institution's plan and commission tier link

    Domain Rules:
    - The current subscription is the newest row whose status is not EXPIRED
    - commission_tier_id is None only for the DEFAULT fallback plan
    """

    __tablename__ = "institution_subscriptions"
    __table_args__ = (
        Index('ix_institution_subscriptions_institution_id', 'institution_id'),
        Index('ix_institution_subscriptions_status_end', 'status', 'end_date'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    institution_id: str = Field(foreign_key="institutions.id")

    commission_tier_id: Optional[str] = Field(default=None, foreign_key="commission_tiers.id")

    plan_type: InstitutionPlanType

    status: SubscriptionStatus = Field(default=SubscriptionStatus.ACTIVE)

    origin: SubscriptionOrigin = Field(default=SubscriptionOrigin.REGULAR)

    start_date: datetime
    end_date: datetime

    billing_cycle: BillingCycle = Field(default=BillingCycle.MONTHLY)

    amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    currency: str = Field(default="USD", max_length=3)

    features: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )

    auto_renew: bool = Field(default=True)

    original_subscription_id: Optional[str] = Field(default=None)
    replaced_by_id: Optional[str] = Field(default=None)

    cancellation_reason: Optional[str] = Field(default=None)
    cancelled_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_fallback(self) -> bool:
        return self.origin == SubscriptionOrigin.FALLBACK


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length"""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def billing_period_end(start: datetime, billing_cycle: BillingCycle) -> datetime:
    """End of one billing period starting at ``start``"""
    if billing_cycle == BillingCycle.ANNUAL:
        return add_months(start, 12)
    return add_months(start, 1)


def days_between_ceil(start: datetime, end: datetime) -> int:
    """Whole days from start to end, rounding partial days up"""
    return math.ceil((end - start).total_seconds() / 86400)


def calculate_prorated_amount(
    current_price: Decimal,
    new_price: Decimal,
    start_date: datetime,
    end_date: datetime,
    now: datetime,
) -> Decimal:
    """
    Prorated charge for switching plans mid-period

    new_daily_rate * days_remaining - current_daily_rate * days_remaining,
    floored at zero and rounded to cents.
    """
    total_days = days_between_ceil(start_date, end_date)
    if total_days <= 0:
        return Decimal("0.00")

    days_remaining = max(0, days_between_ceil(now, end_date))
    new_cost = Decimal(new_price) / total_days * days_remaining
    current_cost = Decimal(current_price) / total_days * days_remaining
    prorated = max(Decimal("0"), new_cost - current_cost)
    return prorated.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def grace_period_end(end_date: datetime, grace_period_days: int) -> datetime:
    return end_date + timedelta(days=grace_period_days)


def quota_available(used: int, quota: int) -> bool:
    """True if one more unit fits under the quota (negative quota = unlimited)"""
    return quota < 0 or used < quota


def usage_percentage(used: int, quota: int) -> float:
    if quota < 0:
        return 0.0
    if quota == 0:
        return 100.0
    return round(used / quota * 100, 2)
