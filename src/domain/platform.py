"""Platform Domain Entities

Users, institutions, courses and payments referenced by governance rules.
These tables are owned by the wider platform; this service reads them and
updates the few columns it governs (institution commission rate, course
enrollment counter, payment status).
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String
from src.domain.base import BaseModel, generate_uuid
from src.domain.tier import StudentPlanType


class UserRole(str, Enum):
    STUDENT = "STUDENT"
    INSTRUCTOR = "INSTRUCTOR"
    INSTITUTION_STAFF = "INSTITUTION_STAFF"
    ADMIN = "ADMIN"


# Roles allowed to host live classes
HOST_ROLES = (UserRole.INSTRUCTOR, UserRole.INSTITUTION_STAFF)


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class User(BaseModel, table=True):
    __tablename__ = "users"
    __table_args__ = (
        Index('ix_users_institution_id', 'institution_id'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    name: str = Field(sa_column=Column(String(255), nullable=False))
    email: str = Field(sa_column=Column(String(255), nullable=False, unique=True))
    role: UserRole = Field(default=UserRole.STUDENT)
    institution_id: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Institution(BaseModel, table=True):
    """
    Institution - Course provider paying commission to the platform

    commission_rate is the stored rate used by reporting when no active
    commission tier applies.
    """

    __tablename__ = "institutions"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    name: str = Field(sa_column=Column(String(255), nullable=False))
    commission_rate: Decimal = Field(
        default=Decimal("20.00"),
        sa_column=Column(Numeric(5, 2), nullable=False),
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Course(BaseModel, table=True):
    """
    Course - Institution course or platform-wide course

    Platform courses with requires_subscription admit students through an
    ACTIVE subscription (optionally of a specific plan); other platform
    courses are capacity limited by max_students.
    """

    __tablename__ = "courses"
    __table_args__ = (
        Index('ix_courses_institution_id', 'institution_id'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    title: str = Field(sa_column=Column(String(255), nullable=False))
    institution_id: Optional[str] = Field(default=None)
    is_platform_course: bool = Field(default=False)
    requires_subscription: bool = Field(default=False)
    subscription_tier: Optional[StudentPlanType] = Field(default=None)
    max_students: Optional[int] = Field(default=None)
    current_enrollments: int = Field(default=0)
    price: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Payment(BaseModel, table=True):
    __tablename__ = "payments"
    __table_args__ = (
        Index('ix_payments_status_created', 'status', 'created_at'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    enrollment_id: Optional[str] = Field(default=None)
    amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    currency: str = Field(default="USD", max_length=3)
    status: PaymentStatus = Field(default=PaymentStatus.PENDING)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    paid_at: Optional[datetime] = Field(default=None)
