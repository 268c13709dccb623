"""Data Transfer Objects for Commission Use Cases"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field


class CommissionCalculationDTO(BaseModel):
    """Outcome of calculating the commission on one payment"""

    commission_id: str
    payment_id: str
    enrollment_id: str
    institution_id: str
    student_id: str
    course_id: str
    payment_amount: Decimal
    commission_rate: Decimal
    commission_amount: Decimal
    institution_share: Decimal
    currency: str
    calculated_at: datetime
    created: bool = Field(..., description="False when an existing record was updated")


class CommissionBatchResultDTO(BaseModel):
    """Successes and failures of a batch calculation"""

    calculations: List[CommissionCalculationDTO] = Field(default_factory=list)
    processed: int = 0
    failed: int = 0
    total_commission: Decimal = Decimal("0.00")
    errors: List[str] = Field(default_factory=list)


class RecalculateCommissionsCommandDTO(BaseModel):
    start_date: datetime
    end_date: datetime
    institution_id: Optional[str] = None


class PayoutCommandDTO(BaseModel):
    """Command DTO for ProcessCommissionPayout"""

    institution_id: str = Field(..., description="Institution receiving the payout")
    amount: Decimal = Field(..., gt=0, description="Requested payout amount")
    payout_method: str = Field(..., min_length=1, max_length=50, description="e.g. BANK")
    reference: str = Field(..., min_length=1, max_length=255, description="External transfer reference")


class PayoutResponseDTO(BaseModel):
    payout_id: str
    institution_id: str
    amount: Decimal
    currency: str
    status: str
    payout_method: str
    reference: str
    commissions_paid: int
    pending_total: Decimal = Field(..., description="Pending commission total at request time")
    created_at: datetime


class CommissionRateDTO(BaseModel):
    institution_id: str
    commission_rate: Decimal
    source: str = Field(..., description="TIER, INSTITUTION or DEFAULT")


class CommissionSummaryDTO(BaseModel):
    institution_id: str
    institution_name: str
    total_revenue: Decimal
    total_commission: Decimal
    total_institution_share: Decimal
    commission_rate: Decimal
    period_start: datetime
    period_end: datetime
    payment_count: int


class CommissionTotalDTO(BaseModel):
    total: Decimal
    count: int


class TopInstitutionDTO(BaseModel):
    id: str
    name: str
    commission_amount: Decimal
    course_count: int


class CommissionAnalyticsDTO(BaseModel):
    monthly: CommissionTotalDTO
    yearly: CommissionTotalDTO
    all_time: CommissionTotalDTO
    top_institutions: List[TopInstitutionDTO] = Field(default_factory=list)


class DailyInstitutionCommissionDTO(BaseModel):
    institution_id: str
    name: str
    plan_type: str
    commission_rate: Decimal
    daily_commissions: Decimal


class DailyCommissionReportDTO(BaseModel):
    date: date
    total_institutions: int
    active_subscriptions: int
    total_commissions: Decimal
    institutions: List[DailyInstitutionCommissionDTO] = Field(default_factory=list)
