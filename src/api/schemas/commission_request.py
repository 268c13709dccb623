"""Request schemas for Commission API"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class RecalculateSchema(BaseModel):
    start_date: datetime
    end_date: datetime
    institution_id: Optional[str] = None


class PayoutSchema(BaseModel):
    """
    Request schema for paying out an institution's pending commissions

    Used for POST /commissions/institutions/{institution_id}/payouts endpoint.
    """

    amount: Decimal = Field(..., gt=0, description="Requested payout amount (must be > 0)")
    payout_method: str = Field(..., min_length=1, description="e.g. BANK_TRANSFER")
    reference: str = Field(..., min_length=1, description="External transfer reference")

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v.as_tuple().exponent < -2:
            raise ValueError("Amount must have at most 2 decimal places")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "175.00",
                "payout_method": "BANK_TRANSFER",
                "reference": "ref1",
            }
        }
