"""Payment Repository Interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from src.domain.platform import Payment


class PaymentRepository(ABC):
    """
    Read access to platform payments
    """

    @abstractmethod
    async def get_by_id(self, payment_id: str) -> Optional[Payment]:
        pass

    @abstractmethod
    async def list_completed_without_commission(self) -> List[Payment]:
        """
        Retrieve COMPLETED payments that have no commission record yet

        Returns:
            Payments ordered by creation time
        """
        pass

    @abstractmethod
    async def list_completed_between(
        self, start: datetime, end: datetime, institution_id: Optional[str] = None
    ) -> List[Payment]:
        """
        Retrieve COMPLETED payments created inside [start, end]

        Args:
            start: Period start
            end: Period end
            institution_id: Restrict to payments for this institution's courses

        Returns:
            Payments ordered by creation time
        """
        pass

    @abstractmethod
    async def sum_completed_for_institution(self, institution_id: str) -> Decimal:
        """Total of COMPLETED payments for an institution's courses"""
        pass
