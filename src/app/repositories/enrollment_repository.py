"""Enrollment Repository Interface"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple
from src.domain.enrollment import Enrollment, EnrollmentStatus


class EnrollmentRepository(ABC):
    """
    Repository interface for Enrollment persistence

    The active (student, course) uniqueness rule is enforced by the database;
    create raises IntegrityError on a duplicate active enrollment.
    """

    @abstractmethod
    async def get_by_id(self, enrollment_id: str) -> Optional[Enrollment]:
        pass

    @abstractmethod
    async def get_active(self, student_id: str, course_id: str) -> Optional[Enrollment]:
        """
        Retrieve the active enrollment for a student and course

        Returns:
            Enrollment with is_active True if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, enrollment: Enrollment) -> Enrollment:
        pass

    @abstractmethod
    async def update(self, enrollment: Enrollment) -> Enrollment:
        pass

    @abstractmethod
    async def count_active_by_student(self, student_id: str) -> int:
        pass

    @abstractmethod
    async def count_by_course(
        self, course_id: str, status: Optional[EnrollmentStatus] = None
    ) -> int:
        """Count enrollments for a course, optionally filtered by status"""
        pass

    @abstractmethod
    async def count_active_by_institution(self, institution_id: str) -> int:
        pass

    @abstractmethod
    async def access_method_counts(self, course_id: str) -> Dict[str, int]:
        """
        Active enrollment counts grouped by access method

        Args:
            course_id: Course identifier

        Returns:
            Mapping of access method value to count
        """
        pass

    @abstractmethod
    async def count_subscription_enrollments(self, course_id: str) -> int:
        """Count enrollments for a course that were admitted through a subscription"""
        pass

    @abstractmethod
    async def list_active_platform_by_student(self, student_id: str) -> List[Enrollment]:
        """Active platform-course enrollments for a student, newest first"""
        pass

    @abstractmethod
    async def count_all(
        self, status: Optional[EnrollmentStatus] = None, active_only: bool = False
    ) -> int:
        """Platform-wide enrollment count, optionally filtered by status or is_active"""
        pass

    @abstractmethod
    async def top_courses_by_active_enrollment(self, limit: int) -> List[Tuple[str, int]]:
        """
        Courses with the most active enrollments

        Returns:
            (course_id, active enrollment count) pairs, highest count first
        """
        pass
