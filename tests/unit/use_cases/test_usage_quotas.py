"""Unit tests for quota admission, usage tracking and usage metrics

Tests cover:
- Enrollment and live class admission checks
- Atomic counter increments with advisory alerts
- Monthly reset sweep
- Usage metrics and approaching-limit listing
"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.usage import (
    UsageAlertPublisher,
    CheckEnrollmentEligibility,
    CheckLiveClassEligibility,
    TrackEnrollmentUsage,
    TrackAttendanceUsage,
    ResetMonthlyQuotas,
    GetUserUsageMetrics,
    GetUsersApproachingLimits,
)
from src.app.use_cases.usage.get_usage_metrics import days_until_monthly_reset
from src.domain.enrollment import Enrollment
from src.domain.live_class import SessionParticipant
from src.domain.subscription import StudentSubscription, SubscriptionStatus
from src.domain.tier import StudentPlanType
from src.domain.usage_alert import UsageAlertType


def make_subscription(**overrides) -> StudentSubscription:
    now = datetime.utcnow()
    values = dict(
        id="sub_1",
        student_id="user_1",
        tier_id="tier_starter",
        plan_type=StudentPlanType.BASIC,
        status=SubscriptionStatus.ACTIVE,
        start_date=now - timedelta(days=10),
        end_date=now + timedelta(days=20),
        amount=Decimal("12.99"),
        enrollment_quota=5,
        attendance_quota=5,
    )
    values.update(overrides)
    return StudentSubscription(**values)


@pytest.fixture
def subscription_repo():
    repo = MagicMock()
    repo.get_current = AsyncMock(return_value=make_subscription())
    return repo


@pytest.fixture
def enrollment_repo():
    repo = MagicMock()
    repo.get_active = AsyncMock(return_value=None)
    repo.count_active_by_student = AsyncMock(return_value=0)
    return repo


@pytest.fixture
def alert_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda a: a)
    repo.mark_notified = AsyncMock()
    return repo


@pytest.fixture
def notification_service():
    service = MagicMock()
    service.send_usage_alert = AsyncMock(return_value=True)
    return service


@pytest.fixture
def alert_publisher(alert_repo, notification_service, policy):
    return UsageAlertPublisher(alert_repo, notification_service, policy)


@pytest.mark.asyncio
class TestCheckEnrollmentEligibility:
    async def test_allows_within_quota(self, subscription_repo, enrollment_repo):
        subscription_repo.get_current.return_value = make_subscription(
            current_enrollments=2, monthly_enrollments=2
        )

        result = await CheckEnrollmentEligibility(subscription_repo, enrollment_repo).execute("user_1", "course_1")

        assert result.is_ok()
        assert result.value.allowed is True
        assert result.value.code is None

    async def test_quota_reached_denies(self, subscription_repo, enrollment_repo):
        """
        Given: A quota-5 subscription with current_enrollments=5
        When: Eligibility for a new course is checked
        Then: Denied with ENROLLMENT_QUOTA_EXCEEDED
        """
        subscription_repo.get_current.return_value = make_subscription(
            current_enrollments=5, monthly_enrollments=5
        )

        result = await CheckEnrollmentEligibility(subscription_repo, enrollment_repo).execute("user_1", "course_1")

        assert result.is_ok()
        assert result.value.allowed is False
        assert result.value.code == "ENROLLMENT_QUOTA_EXCEEDED"
        assert "5/5" in result.value.reason

    async def test_monthly_counter_also_gates(self, subscription_repo, enrollment_repo):
        subscription_repo.get_current.return_value = make_subscription(
            current_enrollments=1, monthly_enrollments=5
        )

        result = await CheckEnrollmentEligibility(subscription_repo, enrollment_repo).execute("user_1", "course_1")

        assert result.value.allowed is False
        assert result.value.code == "ENROLLMENT_QUOTA_EXCEEDED"

    async def test_unlimited_quota_always_admits(self, subscription_repo, enrollment_repo):
        subscription_repo.get_current.return_value = make_subscription(
            enrollment_quota=-1, current_enrollments=500, monthly_enrollments=500
        )

        result = await CheckEnrollmentEligibility(subscription_repo, enrollment_repo).execute("user_1", "course_1")

        assert result.value.allowed is True

    async def test_trial_is_not_admitted(self, subscription_repo, enrollment_repo):
        subscription_repo.get_current.return_value = make_subscription(status=SubscriptionStatus.TRIAL)

        result = await CheckEnrollmentEligibility(subscription_repo, enrollment_repo).execute("user_1", "course_1")

        assert result.value.allowed is False
        assert result.value.code == "SUBSCRIPTION_NOT_ACTIVE"

    async def test_already_enrolled(self, subscription_repo, enrollment_repo):
        enrollment_repo.get_active = AsyncMock(
            return_value=Enrollment(id="enr_1", student_id="user_1", course_id="course_1")
        )

        result = await CheckEnrollmentEligibility(subscription_repo, enrollment_repo).execute("user_1", "course_1")

        assert result.value.allowed is False
        assert result.value.code == "ALREADY_ENROLLED"

    async def test_no_subscription(self, subscription_repo, enrollment_repo):
        subscription_repo.get_current.return_value = None

        result = await CheckEnrollmentEligibility(subscription_repo, enrollment_repo).execute("user_1", "course_1")

        assert result.value.allowed is False
        assert result.value.code == "SUBSCRIPTION_NOT_FOUND"


@pytest.mark.asyncio
class TestCheckLiveClassEligibility:
    @pytest.fixture
    def live_class_repo(self):
        repo = MagicMock()
        repo.get_participant = AsyncMock(return_value=None)
        return repo

    async def test_attendance_quota_reached(self, subscription_repo, live_class_repo):
        subscription_repo.get_current.return_value = make_subscription(monthly_attendance=5)

        result = await CheckLiveClassEligibility(subscription_repo, live_class_repo).execute("user_1", "sess_1")

        assert result.value.allowed is False
        assert result.value.code == "ATTENDANCE_QUOTA_EXCEEDED"

    async def test_already_joined(self, subscription_repo, live_class_repo):
        live_class_repo.get_participant = AsyncMock(
            return_value=SessionParticipant(session_id="sess_1", user_id="user_1")
        )

        result = await CheckLiveClassEligibility(subscription_repo, live_class_repo).execute("user_1", "sess_1")

        assert result.value.allowed is False
        assert result.value.code == "ALREADY_JOINED"

    async def test_allowed(self, subscription_repo, live_class_repo):
        result = await CheckLiveClassEligibility(subscription_repo, live_class_repo).execute("user_1", "sess_1")

        assert result.value.allowed is True


@pytest.mark.asyncio
class TestTrackEnrollmentUsage:
    async def test_increment_below_threshold(self, mock_uow, subscription_repo, alert_publisher, alert_repo):
        """
        Given: A quota-5 subscription at 1 enrollment
        When: One enrollment is tracked
        Then: Counters move to 2 (40%) and no alert is raised
        """
        subscription_repo.try_increment_enrollment = AsyncMock(return_value=True)
        subscription_repo.get_by_id = AsyncMock(
            return_value=make_subscription(current_enrollments=2, monthly_enrollments=2)
        )

        result = await TrackEnrollmentUsage(mock_uow, subscription_repo, alert_publisher).execute("user_1", "course_1")

        assert result.is_ok()
        assert result.value.used == 2
        assert result.value.usage_percentage == 40.0
        assert result.value.alert_raised is False
        subscription_repo.try_increment_enrollment.assert_called_once_with("sub_1")
        alert_repo.create.assert_not_called()
        mock_uow.commit.assert_called_once()

    async def test_crossing_threshold_raises_alert(
        self, mock_uow, subscription_repo, alert_publisher, alert_repo, notification_service
    ):
        """
        Given: A quota-5 subscription at 3 enrollments
        When: One enrollment is tracked (4/5 = 80%)
        Then: The increment succeeds and an advisory alert is recorded and delivered
        """
        subscription_repo.try_increment_enrollment = AsyncMock(return_value=True)
        subscription_repo.get_by_id = AsyncMock(
            return_value=make_subscription(current_enrollments=4, monthly_enrollments=4)
        )

        result = await TrackEnrollmentUsage(mock_uow, subscription_repo, alert_publisher).execute("user_1", "course_1")

        assert result.is_ok()
        assert result.value.alert_raised is True
        alert = alert_repo.create.call_args[0][0]
        assert alert.alert_type == UsageAlertType.ENROLLMENT_LIMIT_APPROACHING
        assert alert.usage_percentage == 80.0
        assert "4 of 5" in alert.message
        notification_service.send_usage_alert.assert_called_once_with(alert)
        alert_repo.mark_notified.assert_called_once_with(alert.id)

    async def test_undelivered_alert_keeps_usage(
        self, mock_uow, subscription_repo, alert_publisher, alert_repo, notification_service
    ):
        subscription_repo.try_increment_enrollment = AsyncMock(return_value=True)
        subscription_repo.get_by_id = AsyncMock(
            return_value=make_subscription(current_enrollments=5, monthly_enrollments=5)
        )
        notification_service.send_usage_alert = AsyncMock(return_value=False)

        result = await TrackEnrollmentUsage(mock_uow, subscription_repo, alert_publisher).execute("user_1", "course_1")

        assert result.is_ok()
        assert result.value.alert_raised is True
        alert_repo.mark_notified.assert_not_called()
        mock_uow.rollback.assert_not_called()

    async def test_quota_exceeded_is_rejected(self, mock_uow, subscription_repo, alert_publisher):
        subscription_repo.try_increment_enrollment = AsyncMock(return_value=False)
        subscription_repo.get_by_id = AsyncMock()

        result = await TrackEnrollmentUsage(mock_uow, subscription_repo, alert_publisher).execute("user_1", "course_1")

        assert result.is_err()
        assert result.error.code == "ENROLLMENT_QUOTA_EXCEEDED"
        subscription_repo.get_by_id.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_inactive_subscription(self, mock_uow, subscription_repo, alert_publisher):
        subscription_repo.get_current.return_value = make_subscription(status=SubscriptionStatus.CANCELLED)

        result = await TrackEnrollmentUsage(mock_uow, subscription_repo, alert_publisher).execute("user_1", "course_1")

        assert result.is_err()
        assert result.error.code == "SUBSCRIPTION_NOT_ACTIVE"


@pytest.mark.asyncio
class TestTrackAttendanceUsage:
    async def test_attendance_alert_at_threshold(self, mock_uow, subscription_repo, alert_publisher, alert_repo):
        subscription_repo.try_increment_attendance = AsyncMock(return_value=True)
        subscription_repo.get_by_id = AsyncMock(return_value=make_subscription(monthly_attendance=4))

        result = await TrackAttendanceUsage(mock_uow, subscription_repo, alert_publisher).execute("user_1", "sess_1")

        assert result.is_ok()
        assert result.value.used == 4
        assert alert_repo.create.call_args[0][0].alert_type == UsageAlertType.ATTENDANCE_LIMIT_APPROACHING

    async def test_attendance_quota_exceeded(self, mock_uow, subscription_repo, alert_publisher):
        subscription_repo.try_increment_attendance = AsyncMock(return_value=False)

        result = await TrackAttendanceUsage(mock_uow, subscription_repo, alert_publisher).execute("user_1", "sess_1")

        assert result.is_err()
        assert result.error.code == "ATTENDANCE_QUOTA_EXCEEDED"


@pytest.mark.asyncio
class TestUsageAlertPublisher:
    async def test_unlimited_quota_never_alerts(self, alert_publisher, alert_repo):
        subscription = make_subscription(enrollment_quota=-1, current_enrollments=100)

        alert = await alert_publisher.record(subscription, UsageAlertType.ENROLLMENT_LIMIT_APPROACHING)

        assert alert is None
        alert_repo.create.assert_not_called()


@pytest.mark.asyncio
class TestResetMonthlyQuotas:
    async def test_reset_sweep(self, mock_uow, subscription_repo):
        subscription_repo.reset_monthly_counters = AsyncMock(return_value=12)

        result = await ResetMonthlyQuotas(mock_uow, subscription_repo).execute()

        assert result.is_ok()
        assert result.value.reset_count == 12
        mock_uow.commit.assert_called_once()

    async def test_reset_failure_rolls_back(self, mock_uow, subscription_repo):
        subscription_repo.reset_monthly_counters = AsyncMock(side_effect=Exception("deadlock"))

        result = await ResetMonthlyQuotas(mock_uow, subscription_repo).execute()

        assert result.is_err()
        assert result.error.code == "RESET_QUOTAS_FAILED"
        mock_uow.rollback.assert_called_once()


@pytest.mark.asyncio
class TestUsageMetrics:
    async def test_metrics_use_highest_percentage(self, subscription_repo, enrollment_repo, policy):
        """
        Given: 2 of 5 active enrollments and 4 of 5 attendances
        When: Usage metrics are requested
        Then: usage_percentage is 80.0 and the user is approaching the limit
        """
        subscription_repo.get_current.return_value = make_subscription(monthly_attendance=4)
        enrollment_repo.count_active_by_student = AsyncMock(return_value=2)

        result = await GetUserUsageMetrics(subscription_repo, enrollment_repo, policy).execute("user_1")

        assert result.is_ok()
        metrics = result.value
        assert metrics.current_enrollments == 2
        assert metrics.usage_percentage == 80.0
        assert metrics.is_approaching_limit is True
        assert 1 <= metrics.days_until_reset <= 31

    async def test_approaching_limits_sorted_and_filtered(self, subscription_repo, enrollment_repo, policy):
        subscription_repo.list_active = AsyncMock(
            return_value=[
                make_subscription(id="s1", student_id="u1", monthly_attendance=4),
                make_subscription(id="s2", student_id="u2", monthly_attendance=1),
                make_subscription(id="s3", student_id="u3", monthly_attendance=5),
            ]
        )

        result = await GetUsersApproachingLimits(subscription_repo, enrollment_repo, policy).execute()

        assert result.is_ok()
        assert [m.user_id for m in result.value.users] == ["u3", "u1"]
        assert result.value.threshold == 80.0


class TestDaysUntilReset:
    def test_counts_to_first_of_next_month(self):
        assert days_until_monthly_reset(datetime(2024, 2, 28, 12, 0)) == 2
        assert days_until_monthly_reset(datetime(2024, 12, 31)) == 1
