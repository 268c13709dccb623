"""Platform Repository Interfaces

Users, institutions and courses are owned by the wider platform; these
interfaces expose the reads and the few writes governance needs.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional
from src.domain.platform import User, UserRole, Institution, Course


class UserRepository(ABC):
    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_ids(self, user_ids: List[str]) -> List[User]:
        pass

    @abstractmethod
    async def count_by_role(self, role: UserRole) -> int:
        pass


class InstitutionRepository(ABC):
    @abstractmethod
    async def get_by_id(self, institution_id: str) -> Optional[Institution]:
        pass

    @abstractmethod
    async def get_by_ids(self, institution_ids: List[str]) -> List[Institution]:
        pass

    @abstractmethod
    async def list_all(self) -> List[Institution]:
        pass

    @abstractmethod
    async def set_commission_rate(self, institution_id: str, commission_rate: Decimal) -> None:
        """Overwrite the institution's stored commission rate"""
        pass


class CourseRepository(ABC):
    @abstractmethod
    async def get_by_id(self, course_id: str) -> Optional[Course]:
        pass

    @abstractmethod
    async def list_by_institution(self, institution_id: str) -> List[Course]:
        pass

    @abstractmethod
    async def try_increment_enrollment(self, course_id: str) -> bool:
        """
        Atomically take one seat in a course

        Increments current_enrollments only if max_students is unset or the
        course still has capacity.

        Returns:
            True if a seat was taken, False if the course is full
        """
        pass

    @abstractmethod
    async def decrement_enrollment(self, course_id: str) -> None:
        """Release one seat, never going below zero"""
        pass
