"""Tier Catalog Domain Entities

Student subscription tiers and institution commission tiers.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, Numeric, String
from src.domain.base import BaseModel, generate_uuid

UNLIMITED = -1


class StudentPlanType(str, Enum):
    """Student plan types (FREE is the trial fallback plan)"""
    FREE = "FREE"
    BASIC = "BASIC"
    PREMIUM = "PREMIUM"
    PRO = "PRO"


class InstitutionPlanType(str, Enum):
    """Institution plan types (DEFAULT is the trial fallback plan)"""
    STARTER = "STARTER"
    PROFESSIONAL = "PROFESSIONAL"
    ENTERPRISE = "ENTERPRISE"
    DEFAULT = "DEFAULT"


class BillingCycle(str, Enum):
    MONTHLY = "MONTHLY"
    ANNUAL = "ANNUAL"


class StudentTier(BaseModel, table=True):
    """
    StudentTier - Priced student plan with usage quotas

    Domain Rules:
    - One row per plan type
    - A negative quota means unlimited
    - grace_period_days extends access after end_date
    """

    __tablename__ = "student_tiers"
    __table_args__ = (
        Index('ix_student_tiers_plan_type', 'plan_type', unique=True),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    plan_type: StudentPlanType = Field(
        description="Plan type (FREE, BASIC, PREMIUM, PRO)"
    )

    name: str = Field(
        sa_column=Column(String(100), nullable=False),
        description="Display name"
    )

    price: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Price per billing cycle"
    )

    annual_price: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(12, 2), nullable=True),
        description="Price when billed annually"
    )

    currency: str = Field(default="USD", max_length=3)

    billing_cycle: BillingCycle = Field(default=BillingCycle.MONTHLY)

    features: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Feature list shown to subscribers"
    )

    enrollment_quota: int = Field(
        description="Maximum concurrent/monthly course enrollments (-1 = unlimited)"
    )

    attendance_quota: int = Field(
        description="Maximum live class attendances per month (-1 = unlimited)"
    )

    grace_period_days: int = Field(default=0)

    max_live_classes: int = Field(
        default=0,
        description="Maximum upcoming live classes an instructor on this tier may host"
    )

    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def has_unlimited_enrollments(self) -> bool:
        return self.enrollment_quota < 0


class CommissionTier(BaseModel, table=True):
    """
    CommissionTier - Institution plan with the platform commission rate

    Domain Rules:
    - Exactly one row per institution plan type (unique index)
    - commission_rate is a percentage taken from each completed payment
    """

    __tablename__ = "commission_tiers"
    __table_args__ = (
        Index('ix_commission_tiers_plan_type', 'plan_type', unique=True),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    plan_type: InstitutionPlanType = Field(
        description="Plan type (STARTER, PROFESSIONAL, ENTERPRISE)"
    )

    name: str = Field(sa_column=Column(String(100), nullable=False))

    price: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    annual_price: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(12, 2), nullable=True),
    )

    currency: str = Field(default="USD", max_length=3)

    billing_cycle: BillingCycle = Field(default=BillingCycle.MONTHLY)

    commission_rate: Decimal = Field(
        sa_column=Column(Numeric(5, 2), nullable=False),
        description="Platform commission percentage (e.g. 25.00)"
    )

    features: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )

    max_students: int = Field(default=UNLIMITED)
    max_courses: int = Field(default=UNLIMITED)

    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


# Default catalog used by SeedTierCatalog
DEFAULT_STUDENT_TIERS: List[Dict[str, Any]] = [
    {
        "plan_type": StudentPlanType.FREE,
        "name": "Free",
        "price": Decimal("0.00"),
        "annual_price": Decimal("0.00"),
        "features": ["Basic course access", "Community support"],
        "enrollment_quota": 2,
        "attendance_quota": 2,
        "grace_period_days": 0,
        "max_live_classes": 0,
    },
    {
        "plan_type": StudentPlanType.BASIC,
        "name": "Basic",
        "price": Decimal("12.99"),
        "annual_price": Decimal("129.90"),
        "features": ["Platform courses", "Live classes", "Email support"],
        "enrollment_quota": 5,
        "attendance_quota": 5,
        "grace_period_days": 3,
        "max_live_classes": 1,
    },
    {
        "plan_type": StudentPlanType.PREMIUM,
        "name": "Premium",
        "price": Decimal("24.99"),
        "annual_price": Decimal("249.90"),
        "features": ["Platform courses", "Live classes", "Certificates", "Priority support"],
        "enrollment_quota": 20,
        "attendance_quota": 20,
        "grace_period_days": 7,
        "max_live_classes": 5,
    },
    {
        "plan_type": StudentPlanType.PRO,
        "name": "Pro",
        "price": Decimal("49.99"),
        "annual_price": Decimal("499.90"),
        "features": ["All courses", "Unlimited live classes", "1:1 tutoring", "Certificates"],
        "enrollment_quota": 50,
        "attendance_quota": 100,
        "grace_period_days": 14,
        "max_live_classes": 20,
    },
]

DEFAULT_COMMISSION_TIERS: List[Dict[str, Any]] = [
    {
        "plan_type": InstitutionPlanType.STARTER,
        "name": "Starter",
        "price": Decimal("99.00"),
        "annual_price": Decimal("990.00"),
        "commission_rate": Decimal("25.00"),
        "features": {"analytics": "basic", "support": "email"},
        "max_students": 100,
        "max_courses": 10,
    },
    {
        "plan_type": InstitutionPlanType.PROFESSIONAL,
        "name": "Professional",
        "price": Decimal("299.00"),
        "annual_price": Decimal("2990.00"),
        "commission_rate": Decimal("15.00"),
        "features": {"analytics": "advanced", "support": "priority", "custom_branding": True},
        "max_students": 1000,
        "max_courses": 100,
    },
    {
        "plan_type": InstitutionPlanType.ENTERPRISE,
        "name": "Enterprise",
        "price": Decimal("799.00"),
        "annual_price": Decimal("7990.00"),
        "commission_rate": Decimal("10.00"),
        "features": {"analytics": "advanced", "support": "dedicated", "custom_branding": True, "api_access": True},
        "max_students": UNLIMITED,
        "max_courses": UNLIMITED,
    },
]

FALLBACK_STUDENT_PLAN = StudentPlanType.FREE
FALLBACK_INSTITUTION_PLAN = InstitutionPlanType.DEFAULT
