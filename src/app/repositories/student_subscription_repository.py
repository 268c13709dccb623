"""Student Subscription Repository Interface

Defines the contract for student subscription persistence, including the
atomic quota counters used for admission.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional
from src.domain.subscription import StudentSubscription


class StudentSubscriptionRepository(ABC):
    """
    Repository interface for StudentSubscription persistence

    Counter methods perform a single conditional UPDATE so that concurrent
    requests can never push a counter past its quota.
    """

    @abstractmethod
    async def get_by_id(self, subscription_id: str) -> Optional[StudentSubscription]:
        pass

    @abstractmethod
    async def get_current(self, student_id: str) -> Optional[StudentSubscription]:
        """
        Retrieve a student's current subscription

        Args:
            student_id: Student (user) identifier

        Returns:
            Newest subscription whose status is not EXPIRED, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, subscription: StudentSubscription) -> StudentSubscription:
        pass

    @abstractmethod
    async def update(self, subscription: StudentSubscription) -> StudentSubscription:
        pass

    @abstractmethod
    async def get_expired_trials(self, now: datetime) -> List[StudentSubscription]:
        """
        Retrieve trials whose window has closed

        Args:
            now: Reference time

        Returns:
            Subscriptions with status TRIAL and end_date <= now
        """
        pass

    @abstractmethod
    async def list_active(self) -> List[StudentSubscription]:
        """Retrieve all ACTIVE subscriptions"""
        pass

    @abstractmethod
    async def try_increment_enrollment(self, subscription_id: str) -> bool:
        """
        Atomically consume one enrollment

        Increments current_enrollments and monthly_enrollments only if the
        subscription is ACTIVE and both counters are below enrollment_quota
        (or the quota is unlimited).

        Args:
            subscription_id: Subscription identifier

        Returns:
            True if the counters were incremented, False if the quota is exhausted
        """
        pass

    @abstractmethod
    async def decrement_enrollment(self, subscription_id: str) -> None:
        """Release one current enrollment, never going below zero"""
        pass

    @abstractmethod
    async def try_increment_attendance(self, subscription_id: str) -> bool:
        """
        Atomically consume one live class attendance

        Returns:
            True if monthly_attendance was incremented, False if the quota is exhausted
        """
        pass

    @abstractmethod
    async def reset_monthly_counters(self) -> int:
        """
        Zero monthly_enrollments and monthly_attendance on every ACTIVE subscription

        Returns:
            Number of subscriptions reset
        """
        pass

    @abstractmethod
    async def active_plan_counts(self) -> Dict[str, int]:
        """ACTIVE subscriptions grouped by plan type value"""
        pass
