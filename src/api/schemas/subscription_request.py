"""Request schemas for Subscription API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field
from src.domain.tier import BillingCycle


class CreateStudentSubscriptionSchema(BaseModel):
    """
    Request schema for subscribing a student

    Used for POST /subscriptions/students endpoint.
    """

    student_id: str = Field(..., min_length=1)
    tier_id: str = Field(..., min_length=1)
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    start_trial: bool = False
    amount: Optional[Decimal] = Field(default=None, ge=0)
    payment_method: Optional[str] = "MANUAL"
    transaction_id: Optional[str] = None
    actor_id: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "student_id": "user_123",
                "tier_id": "tier_basic",
                "billing_cycle": "MONTHLY",
                "start_trial": False,
            }
        }


class CreateInstitutionSubscriptionSchema(BaseModel):
    institution_id: str = Field(..., min_length=1)
    commission_tier_id: str = Field(..., min_length=1)
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    start_trial: bool = False
    amount: Optional[Decimal] = Field(default=None, ge=0)
    payment_method: Optional[str] = "MANUAL"
    transaction_id: Optional[str] = None
    actor_id: Optional[str] = None


class UpgradeSchema(BaseModel):
    new_tier_id: str = Field(..., min_length=1)
    immediate: bool = True
    reason: Optional[str] = None


class DowngradeSchema(BaseModel):
    new_tier_id: str = Field(..., min_length=1)
    reason: Optional[str] = None
    effective_date: Optional[datetime] = None


class CancelSchema(BaseModel):
    reason: Optional[str] = None
    actor_id: Optional[str] = None


class ReactivateSchema(BaseModel):
    actor_id: Optional[str] = None
