"""Unit tests for platform course enrollment and access"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import IntegrityError
from src.app.use_cases.platform_courses import (
    ValidatePlatformCourseEnrollment,
    EnrollInPlatformCourse,
    CheckPlatformCourseAccess,
    CancelPlatformCourseEnrollment,
    GetPlatformCourseStats,
    PlatformEnrollmentCommandDTO,
)
from src.app.use_cases.usage import UsageAlertPublisher
from src.domain.enrollment import AccessMethod, Enrollment, EnrollmentStatus
from src.domain.platform import Course, User
from src.domain.subscription import StudentSubscription, SubscriptionStatus
from src.domain.tier import StudentPlanType


def gated_course(**overrides) -> Course:
    values = dict(
        id="course_p",
        title="Business English",
        is_platform_course=True,
        requires_subscription=True,
        subscription_tier=StudentPlanType.PREMIUM,
    )
    values.update(overrides)
    return Course(**values)


def open_course(**overrides) -> Course:
    values = dict(
        id="course_o",
        title="Pronunciation basics",
        is_platform_course=True,
        requires_subscription=False,
        max_students=30,
        current_enrollments=10,
    )
    values.update(overrides)
    return Course(**values)


def premium_subscription(**overrides) -> StudentSubscription:
    now = datetime.utcnow()
    values = dict(
        id="sub_1",
        student_id="user_1",
        tier_id="tier_premium",
        plan_type=StudentPlanType.PREMIUM,
        status=SubscriptionStatus.ACTIVE,
        start_date=now - timedelta(days=3),
        end_date=now + timedelta(days=27),
        amount=Decimal("24.99"),
        enrollment_quota=20,
        attendance_quota=20,
        current_enrollments=3,
        monthly_enrollments=3,
    )
    values.update(overrides)
    return StudentSubscription(**values)


@pytest.fixture
def course_repo():
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=gated_course())
    repo.try_increment_enrollment = AsyncMock(return_value=True)
    repo.decrement_enrollment = AsyncMock()
    return repo


@pytest.fixture
def subscription_repo():
    repo = MagicMock()
    repo.get_current = AsyncMock(return_value=premium_subscription())
    repo.try_increment_enrollment = AsyncMock(return_value=True)
    repo.get_by_id = AsyncMock(return_value=premium_subscription(current_enrollments=4, monthly_enrollments=4))
    repo.decrement_enrollment = AsyncMock()
    return repo


@pytest.fixture
def enrollment_repo():
    repo = MagicMock()
    repo.get_active = AsyncMock(return_value=None)
    repo.create = AsyncMock(side_effect=lambda e: e)
    repo.update = AsyncMock(side_effect=lambda e: e)
    return repo


@pytest.fixture
def validator(course_repo, subscription_repo, enrollment_repo):
    return ValidatePlatformCourseEnrollment(course_repo, subscription_repo, enrollment_repo)


@pytest.fixture
def alert_publisher(policy):
    alert_repo = MagicMock()
    alert_repo.create = AsyncMock(side_effect=lambda a: a)
    alert_repo.mark_notified = AsyncMock()
    notifications = MagicMock()
    notifications.send_usage_alert = AsyncMock(return_value=True)
    return UsageAlertPublisher(alert_repo, notifications, policy)


@pytest.fixture
def enroll(mock_uow, validator, course_repo, subscription_repo, enrollment_repo, alert_publisher):
    return EnrollInPlatformCourse(
        uow=mock_uow,
        validator=validator,
        course_repo=course_repo,
        subscription_repo=subscription_repo,
        enrollment_repo=enrollment_repo,
        alert_publisher=alert_publisher,
    )


@pytest.mark.asyncio
class TestValidatePlatformCourseEnrollment:
    async def test_subscription_course_allowed_with_quota_warning(self, validator):
        result = await validator.execute("user_1", "course_p")

        assert result.is_ok()
        assert result.value.allowed is True
        assert result.value.requires_subscription is True
        assert result.value.warnings == ["Quota remaining: 17"]

    async def test_tier_mismatch(self, validator, subscription_repo):
        """
        Given: A PREMIUM-only course and a BASIC subscriber
        When: Enrollment is validated
        Then: Denied with TIER_MISMATCH naming the current tier
        """
        subscription_repo.get_current.return_value = premium_subscription(plan_type=StudentPlanType.BASIC)

        result = await validator.execute("user_1", "course_p")

        assert result.value.allowed is False
        assert result.value.code == "TIER_MISMATCH"
        assert "Current tier: BASIC" in result.value.warnings

    async def test_inactive_subscription(self, validator, subscription_repo):
        subscription_repo.get_current.return_value = premium_subscription(status=SubscriptionStatus.PAST_DUE)

        result = await validator.execute("user_1", "course_p")

        assert result.value.allowed is False
        assert result.value.code == "SUBSCRIPTION_NOT_ACTIVE"
        assert result.value.warnings == ["Required tier: PREMIUM"]

    async def test_monthly_quota_exhausted(self, validator, subscription_repo):
        subscription_repo.get_current.return_value = premium_subscription(monthly_enrollments=20)

        result = await validator.execute("user_1", "course_p")

        assert result.value.allowed is False
        assert result.value.code == "ENROLLMENT_QUOTA_EXCEEDED"
        assert result.value.reason == "Monthly enrollment quota exceeded"

    async def test_open_course_full(self, validator, course_repo):
        course_repo.get_by_id.return_value = open_course(current_enrollments=30)

        result = await validator.execute("user_1", "course_o")

        assert result.value.allowed is False
        assert result.value.code == "COURSE_FULL"

    async def test_open_course_without_cap(self, validator, course_repo):
        course_repo.get_by_id.return_value = open_course(max_students=None, current_enrollments=10_000)

        result = await validator.execute("user_1", "course_o")

        assert result.value.allowed is True
        assert result.value.requires_subscription is False

    async def test_institution_course_rejected(self, validator, course_repo):
        course_repo.get_by_id.return_value = open_course(is_platform_course=False, institution_id="inst_1")

        result = await validator.execute("user_1", "course_o")

        assert result.value.allowed is False
        assert result.value.code == "NOT_A_PLATFORM_COURSE"


@pytest.mark.asyncio
class TestEnrollInPlatformCourse:
    async def test_subscription_enrollment_consumes_quota(
        self, enroll, subscription_repo, course_repo, enrollment_repo, mock_uow
    ):
        """
        Given: A PREMIUM subscriber at 3 of 20 enrollments
        When: They enroll in a PREMIUM platform course
        Then: The subscription counter is incremented, the course seat counter is untouched
        And: The enrollment records SUBSCRIPTION access with the subscription link
        """
        result = await enroll.execute(PlatformEnrollmentCommandDTO(user_id="user_1", course_id="course_p"))

        assert result.is_ok()
        dto = result.value
        assert dto.access_method == AccessMethod.SUBSCRIPTION
        assert dto.subscription_id == "sub_1"
        assert dto.subscription_tier == StudentPlanType.PREMIUM
        assert dto.enrollment_quota_used is True
        assert dto.alert_raised is False
        subscription_repo.try_increment_enrollment.assert_called_once_with("sub_1")
        course_repo.try_increment_enrollment.assert_not_called()
        created = enrollment_repo.create.call_args[0][0]
        assert created.is_platform_course is True
        mock_uow.commit.assert_called_once()

    async def test_open_course_takes_a_seat(self, enroll, course_repo, subscription_repo):
        course_repo.get_by_id.return_value = open_course()

        result = await enroll.execute(PlatformEnrollmentCommandDTO(user_id="user_1", course_id="course_o"))

        assert result.is_ok()
        assert result.value.access_method == AccessMethod.DIRECT
        assert result.value.subscription_id is None
        course_repo.try_increment_enrollment.assert_called_once_with("course_o")
        subscription_repo.try_increment_enrollment.assert_not_called()

    async def test_last_seat_race_lost(self, enroll, course_repo, enrollment_repo):
        course_repo.get_by_id.return_value = open_course(current_enrollments=29)
        course_repo.try_increment_enrollment = AsyncMock(return_value=False)

        result = await enroll.execute(PlatformEnrollmentCommandDTO(user_id="user_1", course_id="course_o"))

        assert result.is_err()
        assert result.error.code == "COURSE_FULL"
        enrollment_repo.create.assert_not_called()

    async def test_duplicate_insert_is_already_enrolled(self, enroll, enrollment_repo, mock_uow):
        enrollment_repo.create = AsyncMock(side_effect=IntegrityError("insert", {}, Exception("unique")))

        result = await enroll.execute(PlatformEnrollmentCommandDTO(user_id="user_1", course_id="course_p"))

        assert result.is_err()
        assert result.error.code == "ALREADY_ENROLLED"
        mock_uow.rollback.assert_called_once()

    async def test_denial_is_returned_as_error(self, enroll, subscription_repo):
        subscription_repo.get_current.return_value = None

        result = await enroll.execute(PlatformEnrollmentCommandDTO(user_id="user_1", course_id="course_p"))

        assert result.is_err()
        assert result.error.code == "SUBSCRIPTION_NOT_ACTIVE"
        subscription_repo.try_increment_enrollment.assert_not_called()

    async def test_alert_raised_near_quota(self, enroll, subscription_repo):
        subscription_repo.get_by_id = AsyncMock(
            return_value=premium_subscription(current_enrollments=16, monthly_enrollments=16)
        )

        result = await enroll.execute(PlatformEnrollmentCommandDTO(user_id="user_1", course_id="course_p"))

        assert result.is_ok()
        assert result.value.alert_raised is True


@pytest.mark.asyncio
class TestCheckPlatformCourseAccess:
    @pytest.fixture
    def user_repo(self):
        repo = MagicMock()
        repo.get_by_id = AsyncMock(return_value=User(id="user_1", name="Ana", email="ana@example.com"))
        return repo

    @pytest.fixture
    def use_case(self, user_repo, course_repo, subscription_repo, enrollment_repo):
        return CheckPlatformCourseAccess(user_repo, course_repo, subscription_repo, enrollment_repo)

    async def test_enrollment_wins(self, use_case, enrollment_repo):
        enrollment_repo.get_active = AsyncMock(
            return_value=Enrollment(
                student_id="user_1", course_id="course_p", access_method=AccessMethod.DIRECT
            )
        )

        result = await use_case.execute("user_1", "course_p")

        assert result.value.has_access is True
        assert result.value.access_method == AccessMethod.DIRECT
        assert result.value.enrollment_status == EnrollmentStatus.ACTIVE

    async def test_matching_subscription_grants_access(self, use_case):
        result = await use_case.execute("user_1", "course_p")

        assert result.value.has_access is True
        assert result.value.access_method == AccessMethod.SUBSCRIPTION

    async def test_institution_membership_does_not_grant_access(self, use_case, subscription_repo, user_repo):
        subscription_repo.get_current.return_value = None
        user_repo.get_by_id.return_value.institution_id = "inst_1"

        result = await use_case.execute("user_1", "course_p")

        assert result.value.has_access is False
        assert result.value.access_method == AccessMethod.INSTITUTION
        assert result.value.institution_id == "inst_1"

    async def test_no_access(self, use_case, subscription_repo):
        subscription_repo.get_current.return_value = premium_subscription(plan_type=StudentPlanType.BASIC)

        result = await use_case.execute("user_1", "course_p")

        assert result.value.has_access is False
        assert result.value.access_method == AccessMethod.NONE


@pytest.mark.asyncio
class TestCancelPlatformCourseEnrollment:
    async def test_subscription_enrollment_releases_quota(
        self, mock_uow, enrollment_repo, subscription_repo, course_repo
    ):
        enrollment = Enrollment(
            id="enr_1",
            student_id="user_1",
            course_id="course_p",
            access_method=AccessMethod.SUBSCRIPTION,
            subscription_id="sub_1",
            enrollment_quota_used=True,
        )
        enrollment_repo.get_active = AsyncMock(return_value=enrollment)

        result = await CancelPlatformCourseEnrollment(
            mock_uow, enrollment_repo, subscription_repo, course_repo
        ).execute("user_1", "course_p")

        assert result.is_ok()
        assert result.value.released_subscription_quota is True
        assert enrollment.is_active is False
        assert enrollment.status == EnrollmentStatus.CANCELLED
        assert enrollment.end_date is not None
        subscription_repo.decrement_enrollment.assert_called_once_with("sub_1")
        course_repo.decrement_enrollment.assert_not_called()

    async def test_direct_enrollment_releases_seat(self, mock_uow, enrollment_repo, subscription_repo, course_repo):
        enrollment_repo.get_active = AsyncMock(
            return_value=Enrollment(id="enr_2", student_id="user_1", course_id="course_o")
        )

        result = await CancelPlatformCourseEnrollment(
            mock_uow, enrollment_repo, subscription_repo, course_repo
        ).execute("user_1", "course_o")

        assert result.is_ok()
        assert result.value.released_subscription_quota is False
        course_repo.decrement_enrollment.assert_called_once_with("course_o")

    async def test_no_active_enrollment(self, mock_uow, enrollment_repo, subscription_repo, course_repo):
        result = await CancelPlatformCourseEnrollment(
            mock_uow, enrollment_repo, subscription_repo, course_repo
        ).execute("user_1", "course_o")

        assert result.is_err()
        assert result.error.code == "ENROLLMENT_NOT_FOUND"


@pytest.mark.asyncio
class TestPlatformCourseStats:
    async def test_completion_rate(self, enrollment_repo):
        enrollment_repo.count_by_course = AsyncMock(side_effect=[8, 5, 3])
        enrollment_repo.access_method_counts = AsyncMock(return_value={"SUBSCRIPTION": 6, "DIRECT": 2})
        enrollment_repo.count_subscription_enrollments = AsyncMock(return_value=6)

        result = await GetPlatformCourseStats(enrollment_repo).execute("course_p")

        assert result.is_ok()
        assert result.value.completion_rate == 37.5
        assert result.value.enrollment_by_method == {"SUBSCRIPTION": 6, "DIRECT": 2}
        assert result.value.subscription_enrollments == 6
