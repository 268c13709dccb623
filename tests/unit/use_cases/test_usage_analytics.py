"""Unit tests for platform and institution usage analytics

Tests cover:
- Platform dashboard counters, top courses and completion rates
- Institution feature flags gated on an ACTIVE subscription
- Institution student, course and revenue totals
"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.usage import (
    GetPlatformUsageStats,
    CheckInstitutionFeatureAccess,
    GetInstitutionUsageStats,
)
from src.domain.enrollment import EnrollmentStatus
from src.domain.live_class import SessionStatus
from src.domain.platform import Course, Institution, UserRole
from src.domain.subscription import InstitutionSubscription, SubscriptionStatus
from src.domain.tier import InstitutionPlanType


def make_institution_subscription(**overrides) -> InstitutionSubscription:
    now = datetime.utcnow()
    values = dict(
        id="isub_1",
        institution_id="inst_1",
        plan_type=InstitutionPlanType.PROFESSIONAL,
        status=SubscriptionStatus.ACTIVE,
        start_date=now - timedelta(days=3),
        end_date=now + timedelta(days=27),
        amount=Decimal("99.00"),
        features={"live_classes": True, "analytics": "yes", "custom_branding": False},
    )
    values.update(overrides)
    return InstitutionSubscription(**values)


@pytest.fixture
def platform_repos():
    user_repo = MagicMock()
    user_repo.count_by_role = AsyncMock(return_value=42)

    course_repo = MagicMock()
    courses = {"course_a": Course(id="course_a", title="Spanish A1")}
    course_repo.get_by_id = AsyncMock(side_effect=lambda course_id: courses.get(course_id))

    subscription_repo = MagicMock()
    subscription_repo.active_plan_counts = AsyncMock(return_value={"BASIC": 7, "PREMIUM": 3})

    totals = {"course_a": 8, "course_gone": 2}
    completed = {"course_a": 2, "course_gone": 0}

    async def count_by_course(course_id, status=None):
        return completed[course_id] if status == EnrollmentStatus.COMPLETED else totals[course_id]

    async def count_all(status=None, active_only=False):
        if active_only:
            return 9
        return 4 if status == EnrollmentStatus.COMPLETED else 16

    enrollment_repo = MagicMock()
    enrollment_repo.count_all = AsyncMock(side_effect=count_all)
    enrollment_repo.count_by_course = AsyncMock(side_effect=count_by_course)
    enrollment_repo.top_courses_by_active_enrollment = AsyncMock(
        return_value=[("course_a", 6), ("course_gone", 2)]
    )

    live_class_repo = MagicMock()
    live_class_repo.count_by_statuses = AsyncMock(return_value=5)

    return user_repo, course_repo, subscription_repo, enrollment_repo, live_class_repo


@pytest.mark.asyncio
class TestGetPlatformUsageStats:
    async def test_dashboard_counters_and_top_courses(self, platform_repos):
        """
        Given: 42 students, 10 ACTIVE subscriptions and two ranked courses
        When: Platform usage stats are requested
        Then: Counters are summed and completion rates computed per course
        """
        user_repo, course_repo, subscription_repo, enrollment_repo, live_class_repo = platform_repos
        use_case = GetPlatformUsageStats(
            user_repo, course_repo, subscription_repo, enrollment_repo, live_class_repo
        )

        result = await use_case.execute()

        assert result.is_ok()
        stats = result.value
        assert stats.total_students == 42
        assert stats.active_subscriptions == 10
        assert stats.subscription_distribution == {"BASIC": 7, "PREMIUM": 3}
        assert stats.active_enrollments == 9
        assert stats.total_live_classes == 5
        assert stats.average_completion_rate == 25.0
        assert [c.course_id for c in stats.top_courses] == ["course_a", "course_gone"]
        assert stats.top_courses[0].title == "Spanish A1"
        assert stats.top_courses[0].enrollments == 6
        assert stats.top_courses[0].completion_rate == 25.0
        assert stats.top_courses[1].title == "Unknown Course"
        assert stats.top_courses[1].completion_rate == 0.0

        user_repo.count_by_role.assert_called_once_with(UserRole.STUDENT)
        enrollment_repo.top_courses_by_active_enrollment.assert_called_once_with(10)
        counted = live_class_repo.count_by_statuses.call_args[0][0]
        assert SessionStatus.CANCELLED not in counted
        assert set(counted) == {SessionStatus.SCHEDULED, SessionStatus.ACTIVE, SessionStatus.COMPLETED}

    async def test_empty_platform(self, platform_repos):
        user_repo, course_repo, subscription_repo, enrollment_repo, live_class_repo = platform_repos
        user_repo.count_by_role = AsyncMock(return_value=0)
        subscription_repo.active_plan_counts = AsyncMock(return_value={})
        enrollment_repo.count_all = AsyncMock(return_value=0)
        enrollment_repo.top_courses_by_active_enrollment = AsyncMock(return_value=[])

        result = await GetPlatformUsageStats(
            user_repo, course_repo, subscription_repo, enrollment_repo, live_class_repo
        ).execute()

        assert result.is_ok()
        assert result.value.active_subscriptions == 0
        assert result.value.average_completion_rate == 0.0
        assert result.value.top_courses == []

    async def test_repository_failure(self, platform_repos):
        user_repo, course_repo, subscription_repo, enrollment_repo, live_class_repo = platform_repos
        user_repo.count_by_role = AsyncMock(side_effect=Exception("connection lost"))

        result = await GetPlatformUsageStats(
            user_repo, course_repo, subscription_repo, enrollment_repo, live_class_repo
        ).execute()

        assert result.is_err()
        assert result.error.code == "PLATFORM_USAGE_STATS_FAILED"


@pytest.mark.asyncio
class TestCheckInstitutionFeatureAccess:
    async def test_enabled_feature_on_active_subscription(self):
        repo = MagicMock()
        repo.get_current = AsyncMock(return_value=make_institution_subscription())

        result = await CheckInstitutionFeatureAccess(repo).execute("inst_1", "live_classes")

        assert result.is_ok()
        assert result.value.enabled is True
        assert result.value.subscription_status == "ACTIVE"

    async def test_only_literal_true_enables(self):
        """
        Given: Flags set to False, a truthy string, and one missing
        When: Each is checked
        Then: None of them is enabled
        """
        repo = MagicMock()
        repo.get_current = AsyncMock(return_value=make_institution_subscription())
        use_case = CheckInstitutionFeatureAccess(repo)

        for feature in ("custom_branding", "analytics", "white_label"):
            result = await use_case.execute("inst_1", feature)
            assert result.is_ok()
            assert result.value.enabled is False

    async def test_trial_subscription_grants_nothing(self):
        repo = MagicMock()
        repo.get_current = AsyncMock(
            return_value=make_institution_subscription(status=SubscriptionStatus.TRIAL)
        )

        result = await CheckInstitutionFeatureAccess(repo).execute("inst_1", "live_classes")

        assert result.is_ok()
        assert result.value.enabled is False
        assert result.value.subscription_status == "TRIAL"

    async def test_no_subscription(self):
        repo = MagicMock()
        repo.get_current = AsyncMock(return_value=None)

        result = await CheckInstitutionFeatureAccess(repo).execute("inst_9", "live_classes")

        assert result.is_ok()
        assert result.value.enabled is False
        assert result.value.subscription_status is None


@pytest.mark.asyncio
class TestGetInstitutionUsageStats:
    async def test_totals(self):
        institution_repo = MagicMock()
        institution_repo.get_by_id = AsyncMock(return_value=Institution(id="inst_1", name="Lingua School"))
        course_repo = MagicMock()
        course_repo.list_by_institution = AsyncMock(
            return_value=[Course(id="c1", title="French A1"), Course(id="c2", title="French A2")]
        )
        enrollment_repo = MagicMock()
        enrollment_repo.count_active_by_institution = AsyncMock(return_value=11)
        payment_repo = MagicMock()
        payment_repo.sum_completed_for_institution = AsyncMock(return_value=Decimal("450.00"))

        result = await GetInstitutionUsageStats(
            institution_repo, course_repo, enrollment_repo, payment_repo
        ).execute("inst_1")

        assert result.is_ok()
        assert result.value.active_students == 11
        assert result.value.total_courses == 2
        assert result.value.revenue_generated == Decimal("450.00")

    async def test_unknown_institution(self):
        institution_repo = MagicMock()
        institution_repo.get_by_id = AsyncMock(return_value=None)

        result = await GetInstitutionUsageStats(
            institution_repo, MagicMock(), MagicMock(), MagicMock()
        ).execute("missing")

        assert result.is_err()
        assert result.error.code == "INSTITUTION_NOT_FOUND"
