"""Commission Domain Entities

Per-payment commission ledger entries and institution payouts.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String
from src.domain.base import BaseModel, generate_uuid


class CommissionStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"


class PayoutStatus(str, Enum):
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class InstitutionCommission(BaseModel, table=True):
    """
    InstitutionCommission - Platform commission owed on one payment

    Domain Rules:
    - At most one commission per payment_id (unique index)
    - Recalculation updates amount and rate in place
    - PENDING -> PAID when swept into a payout
    """

    __tablename__ = "institution_commissions"
    __table_args__ = (
        Index('ix_institution_commissions_payment_id', 'payment_id', unique=True),
        Index('ix_institution_commissions_institution_status', 'institution_id', 'status'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    institution_id: str

    payment_id: str

    amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Commission amount (payment amount x rate / 100)"
    )

    commission_rate: Decimal = Field(
        sa_column=Column(Numeric(5, 2), nullable=False),
        description="Rate snapshot at calculation time"
    )

    currency: str = Field(default="USD", max_length=3)

    status: CommissionStatus = Field(default=CommissionStatus.PENDING)

    payout_id: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class InstitutionPayout(BaseModel, table=True):
    """
    InstitutionPayout - One transfer covering an institution's pending commissions
    """

    __tablename__ = "institution_payouts"
    __table_args__ = (
        Index('ix_institution_payouts_institution_id', 'institution_id'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    institution_id: str

    amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    currency: str = Field(default="USD", max_length=3)

    status: PayoutStatus = Field(default=PayoutStatus.PROCESSING)

    payout_method: str = Field(sa_column=Column(String(50), nullable=False))

    reference: str = Field(sa_column=Column(String(255), nullable=False))

    created_at: datetime = Field(default_factory=datetime.utcnow)


def calculate_commission_amount(payment_amount: Decimal, commission_rate: Decimal) -> Decimal:
    """payment_amount x rate / 100, rounded half-up to cents"""
    amount = Decimal(payment_amount) * Decimal(commission_rate) / Decimal("100")
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def resolve_reporting_rate(
    stored_rate: Optional[Decimal],
    subscription_active: bool,
    tier_rate: Optional[Decimal],
    default_rate: Decimal,
) -> Decimal:
    """
    Lenient commission rate used for display and reporting

    Priority: active subscription's tier rate, then the institution's
    stored rate, then the policy default.
    """
    if subscription_active and tier_rate is not None:
        return Decimal(tier_rate)
    if stored_rate is not None:
        return Decimal(stored_rate)
    return Decimal(default_rate)
