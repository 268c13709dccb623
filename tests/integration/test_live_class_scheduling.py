"""Integration tests for live class scheduling

Tests cover:
- Half-open overlap: overlapping windows rejected in either order, adjacent windows accepted
- Minimum advance notice against a real clock
"""

import pytest
from datetime import datetime, timedelta

from sqlmodel.ext.asyncio.session import AsyncSession
from src.adapter.repositories import (
    SqlAlchemyCourseRepository,
    SqlAlchemyInstitutionRepository,
    SqlAlchemyLiveClassRepository,
    SqlAlchemyStudentSubscriptionRepository,
    SqlAlchemyUserRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.live_classes import (
    CreateLiveClass,
    CreateLiveClassCommandDTO,
    LiveClassValidationCommandDTO,
    ValidateLiveClassCreation,
)
from src.domain.live_class import LiveClassSession, SessionStatus
from src.domain.platform import User, UserRole
from src.domain.policy import GovernancePolicy
from src.domain.subscription import StudentSubscription, SubscriptionStatus
from src.domain.tier import StudentPlanType

NOW = datetime(2030, 6, 3, 8, 0)
TEN = datetime(2030, 6, 3, 10, 0)


async def _instructor(db_session: AsyncSession, tier_repo, email: str) -> str:
    premium = await tier_repo.get_student_tier_by_plan(StudentPlanType.PREMIUM)
    instructor = User(name="Ana Ruiz", email=email, role=UserRole.INSTRUCTOR)
    db_session.add(instructor)
    await db_session.flush()

    db_session.add(
        StudentSubscription(
            student_id=instructor.id,
            tier_id=premium.id,
            plan_type=premium.plan_type,
            status=SubscriptionStatus.ACTIVE,
            start_date=NOW - timedelta(days=5),
            end_date=NOW + timedelta(days=25),
            amount=premium.price,
            enrollment_quota=premium.enrollment_quota,
            attendance_quota=premium.attendance_quota,
        )
    )
    await db_session.commit()
    return instructor.id


def _validator(db_session: AsyncSession, tier_repo) -> ValidateLiveClassCreation:
    return ValidateLiveClassCreation(
        user_repo=SqlAlchemyUserRepository(db_session),
        institution_repo=SqlAlchemyInstitutionRepository(db_session),
        course_repo=SqlAlchemyCourseRepository(db_session),
        live_class_repo=SqlAlchemyLiveClassRepository(db_session),
        subscription_repo=SqlAlchemyStudentSubscriptionRepository(db_session),
        tier_repo=tier_repo,
        policy=GovernancePolicy(),
    )


@pytest.mark.asyncio
class TestInstructorOverlapIntegration:
    async def test_overlap_rejected_and_adjacent_accepted(self, db_session: AsyncSession, tier_repo):
        """
        Given: A SCHEDULED session from 10:00 to 11:00
        When: 10:30-11:30 and 11:00-12:00 are validated for the same instructor
        Then: The first conflicts, the adjacent slot is accepted
        """
        instructor_id = await _instructor(db_session, tier_repo, "ana@example.com")
        db_session.add(
            LiveClassSession(
                title="Conversation hour",
                instructor_id=instructor_id,
                start_time=TEN,
                end_time=TEN + timedelta(hours=1),
                status=SessionStatus.SCHEDULED,
            )
        )
        await db_session.commit()
        validator = _validator(db_session, tier_repo)

        overlapping = await validator.execute(
            LiveClassValidationCommandDTO(
                instructor_id=instructor_id,
                start_time=TEN + timedelta(minutes=30),
                end_time=TEN + timedelta(minutes=90),
            ),
            now=NOW,
        )
        adjacent = await validator.execute(
            LiveClassValidationCommandDTO(
                instructor_id=instructor_id,
                start_time=TEN + timedelta(hours=1),
                end_time=TEN + timedelta(hours=2),
            ),
            now=NOW,
        )

        assert overlapping.is_err()
        assert overlapping.error.code == "INSTRUCTOR_SCHEDULE_CONFLICT"
        assert adjacent.is_ok()
        assert adjacent.value.valid is True

    async def test_earlier_request_overlapping_later_session_rejected(
        self, db_session: AsyncSession, tier_repo
    ):
        """
        Given: A SCHEDULED session from 10:30 to 11:30
        When: 10:00-11:00 is validated for the same instructor
        Then: The request conflicts even though it starts first
        """
        instructor_id = await _instructor(db_session, tier_repo, "ivy@example.com")
        db_session.add(
            LiveClassSession(
                title="Listening lab",
                instructor_id=instructor_id,
                start_time=TEN + timedelta(minutes=30),
                end_time=TEN + timedelta(minutes=90),
                status=SessionStatus.SCHEDULED,
            )
        )
        await db_session.commit()

        result = await _validator(db_session, tier_repo).execute(
            LiveClassValidationCommandDTO(
                instructor_id=instructor_id,
                start_time=TEN,
                end_time=TEN + timedelta(hours=1),
            ),
            now=NOW,
        )

        assert result.is_err()
        assert result.error.code == "INSTRUCTOR_SCHEDULE_CONFLICT"

    async def test_contained_and_enclosing_requests_rejected(
        self, db_session: AsyncSession, tier_repo
    ):
        """
        Given: An ACTIVE session from 10:00 to 12:00
        When: 10:30-11:30 (inside) and 09:00-13:00 (around) are validated
        Then: Both conflict
        """
        instructor_id = await _instructor(db_session, tier_repo, "kai@example.com")
        db_session.add(
            LiveClassSession(
                title="Writing workshop",
                instructor_id=instructor_id,
                start_time=TEN,
                end_time=TEN + timedelta(hours=2),
                status=SessionStatus.ACTIVE,
            )
        )
        await db_session.commit()
        validator = _validator(db_session, tier_repo)

        contained = await validator.execute(
            LiveClassValidationCommandDTO(
                instructor_id=instructor_id,
                start_time=TEN + timedelta(minutes=30),
                end_time=TEN + timedelta(minutes=90),
            ),
            now=NOW,
        )
        enclosing = await validator.execute(
            LiveClassValidationCommandDTO(
                instructor_id=instructor_id,
                start_time=TEN - timedelta(hours=1),
                end_time=TEN + timedelta(hours=3),
            ),
            now=NOW,
        )

        assert contained.is_err()
        assert contained.error.code == "INSTRUCTOR_SCHEDULE_CONFLICT"
        assert enclosing.is_err()
        assert enclosing.error.code == "INSTRUCTOR_SCHEDULE_CONFLICT"

    async def test_cancelled_session_does_not_block(self, db_session: AsyncSession, tier_repo):
        instructor_id = await _instructor(db_session, tier_repo, "leo@example.com")
        db_session.add(
            LiveClassSession(
                title="Cancelled grammar clinic",
                instructor_id=instructor_id,
                start_time=TEN,
                end_time=TEN + timedelta(hours=1),
                status=SessionStatus.CANCELLED,
            )
        )
        await db_session.commit()

        result = await _validator(db_session, tier_repo).execute(
            LiveClassValidationCommandDTO(
                instructor_id=instructor_id,
                start_time=TEN,
                end_time=TEN + timedelta(hours=1),
            ),
            now=NOW,
        )

        assert result.is_ok()


@pytest.mark.asyncio
class TestCreateLiveClassIntegration:
    async def test_advance_notice_then_create(self, db_session: AsyncSession, tier_repo):
        """
        Given: An instructor with an ACTIVE PREMIUM subscription
        When: A class is created 10 minutes out, then 31 minutes out for one hour
        Then: The first fails advance notice, the second is stored as SCHEDULED
        """
        instructor_id = await _instructor(db_session, tier_repo, "mia@example.com")
        use_case = CreateLiveClass(
            uow=SqlAlchemyUnitOfWork(db_session),
            live_class_repo=SqlAlchemyLiveClassRepository(db_session),
            validator=_validator(db_session, tier_repo),
        )
        now = datetime.utcnow()

        too_soon = await use_case.execute(
            CreateLiveClassCommandDTO(
                title="Pronunciation drill",
                instructor_id=instructor_id,
                start_time=now + timedelta(minutes=10),
                end_time=now + timedelta(minutes=70),
            )
        )
        start = now + timedelta(minutes=31)
        created = await use_case.execute(
            CreateLiveClassCommandDTO(
                title="Pronunciation drill",
                instructor_id=instructor_id,
                start_time=start,
                end_time=start + timedelta(hours=1),
            )
        )

        assert too_soon.is_err()
        assert too_soon.error.code == "INSUFFICIENT_ADVANCE_NOTICE"
        assert created.is_ok()

        stored = await SqlAlchemyLiveClassRepository(db_session).get_by_id(created.value.session.id)
        assert stored is not None
        assert stored.status == SessionStatus.SCHEDULED
        assert stored.instructor_id == instructor_id
