"""Tier Repository Interface

Defines the contract for the tier catalog.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.tier import StudentTier, CommissionTier, StudentPlanType, InstitutionPlanType


class TierRepository(ABC):
    """
    Repository interface for student tiers and institution commission tiers
    """

    @abstractmethod
    async def get_student_tier(self, tier_id: str) -> Optional[StudentTier]:
        """
        Retrieve a student tier by ID

        Args:
            tier_id: Tier identifier

        Returns:
            StudentTier if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_student_tier_by_plan(self, plan_type: StudentPlanType) -> Optional[StudentTier]:
        """Retrieve the student tier for a plan type"""
        pass

    @abstractmethod
    async def list_student_tiers(self, active_only: bool = True) -> List[StudentTier]:
        """List student tiers ordered by price"""
        pass

    @abstractmethod
    async def get_commission_tier(self, tier_id: str) -> Optional[CommissionTier]:
        pass

    @abstractmethod
    async def get_commission_tier_by_plan(
        self, plan_type: InstitutionPlanType, active_only: bool = True
    ) -> Optional[CommissionTier]:
        """
        Retrieve the commission tier for an institution plan type

        Args:
            plan_type: Institution plan type
            active_only: Ignore deactivated tiers

        Returns:
            CommissionTier if one exists for the plan type, None otherwise
        """
        pass

    @abstractmethod
    async def list_commission_tiers(self, active_only: bool = True) -> List[CommissionTier]:
        """List commission tiers ordered by commission rate ascending"""
        pass

    @abstractmethod
    async def save_student_tier(self, tier: StudentTier) -> StudentTier:
        pass

    @abstractmethod
    async def save_commission_tier(self, tier: CommissionTier) -> CommissionTier:
        pass
