"""Data Transfer Objects for Tier Catalog Use Cases"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel
from src.domain.tier import (
    BillingCycle,
    CommissionTier,
    InstitutionPlanType,
    StudentPlanType,
    StudentTier,
)


class StudentTierDTO(BaseModel):
    id: str
    plan_type: StudentPlanType
    name: str
    price: Decimal
    annual_price: Optional[Decimal] = None
    currency: str
    billing_cycle: BillingCycle
    features: List[str]
    enrollment_quota: int
    attendance_quota: int
    grace_period_days: int
    max_live_classes: int

    @classmethod
    def from_entity(cls, tier: StudentTier) -> "StudentTierDTO":
        return cls(
            id=tier.id,
            plan_type=tier.plan_type,
            name=tier.name,
            price=tier.price,
            annual_price=tier.annual_price,
            currency=tier.currency,
            billing_cycle=tier.billing_cycle,
            features=list(tier.features or []),
            enrollment_quota=tier.enrollment_quota,
            attendance_quota=tier.attendance_quota,
            grace_period_days=tier.grace_period_days,
            max_live_classes=tier.max_live_classes,
        )


class CommissionTierDTO(BaseModel):
    id: str
    plan_type: InstitutionPlanType
    name: str
    price: Decimal
    annual_price: Optional[Decimal] = None
    currency: str
    billing_cycle: BillingCycle
    commission_rate: Decimal
    features: Dict[str, Any]
    max_students: int
    max_courses: int

    @classmethod
    def from_entity(cls, tier: CommissionTier) -> "CommissionTierDTO":
        return cls(
            id=tier.id,
            plan_type=tier.plan_type,
            name=tier.name,
            price=tier.price,
            annual_price=tier.annual_price,
            currency=tier.currency,
            billing_cycle=tier.billing_cycle,
            commission_rate=tier.commission_rate,
            features=dict(tier.features or {}),
            max_students=tier.max_students,
            max_courses=tier.max_courses,
        )


class TierCatalogDTO(BaseModel):
    student_tiers: List[StudentTierDTO]
    commission_tiers: List[CommissionTierDTO]


class SeedTierCatalogResponseDTO(BaseModel):
    created: int
    updated: int
