"""Commission Repository Interface

Defines the contract for commission ledger and payout persistence.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from src.domain.commission import InstitutionCommission, InstitutionPayout


class CommissionRepository(ABC):
    """
    Repository interface for InstitutionCommission and InstitutionPayout
    """

    @abstractmethod
    async def get_by_payment_id(self, payment_id: str) -> Optional[InstitutionCommission]:
        """
        Retrieve the commission recorded for a payment

        Args:
            payment_id: Payment identifier

        Returns:
            InstitutionCommission if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, commission: InstitutionCommission) -> InstitutionCommission:
        pass

    @abstractmethod
    async def update(self, commission: InstitutionCommission) -> InstitutionCommission:
        pass

    @abstractmethod
    async def list_pending(
        self, institution_id: str, for_update: bool = False
    ) -> List[InstitutionCommission]:
        """
        Retrieve an institution's PENDING commissions

        Args:
            institution_id: Institution identifier
            for_update: If True, lock rows (SELECT FOR UPDATE)

        Returns:
            Pending commissions ordered by creation time
        """
        pass

    @abstractmethod
    async def mark_paid(self, commission_ids: List[str], payout_id: str) -> int:
        """
        Flip commissions to PAID and stamp them with a payout

        Returns:
            Number of commissions updated
        """
        pass

    @abstractmethod
    async def create_payout(self, payout: InstitutionPayout) -> InstitutionPayout:
        pass

    @abstractmethod
    async def list_for_period(
        self, institution_id: str, start: datetime, end: datetime
    ) -> List[InstitutionCommission]:
        """Commissions for one institution created inside [start, end]"""
        pass

    @abstractmethod
    async def sum_for_period(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        institution_id: Optional[str] = None,
    ) -> Tuple[Decimal, int]:
        """
        Total commission amount and count, optionally bounded

        Returns:
            Tuple of (total amount, number of commissions)
        """
        pass

    @abstractmethod
    async def totals_by_institution(
        self, start: datetime, end: datetime, limit: Optional[int] = None
    ) -> List[Tuple[str, Decimal]]:
        """
        Commission totals grouped by institution, largest first

        Args:
            start: Period start
            end: Period end
            limit: Optional maximum number of institutions

        Returns:
            List of (institution_id, total amount)
        """
        pass
