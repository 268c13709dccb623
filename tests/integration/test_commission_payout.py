"""Integration tests for the commission ledger

Tests cover:
- Idempotent commission calculation per payment
- Full payout sweep of pending commissions
- Oversized payout leaving the ledger untouched
"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.adapter.repositories import (
    SqlAlchemyCommissionRepository,
    SqlAlchemyCourseRepository,
    SqlAlchemyEnrollmentRepository,
    SqlAlchemyInstitutionSubscriptionRepository,
    SqlAlchemyPaymentRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.commissions import (
    CalculateCommissionForPayment,
    ProcessCommissionPayout,
    PayoutCommandDTO,
)
from src.domain.commission import InstitutionCommission, InstitutionPayout, CommissionStatus
from src.domain.enrollment import Enrollment
from src.domain.platform import Course, Institution, Payment, PaymentStatus
from src.domain.policy import GovernancePolicy
from src.domain.subscription import InstitutionSubscription, SubscriptionStatus
from src.domain.tier import InstitutionPlanType


async def _institution_with_payment(db_session: AsyncSession, tier_repo, amount: str):
    now = datetime.utcnow()
    tier = await tier_repo.get_commission_tier_by_plan(InstitutionPlanType.PROFESSIONAL)

    institution = Institution(name="Lingua Academy")
    db_session.add(institution)
    await db_session.flush()

    db_session.add(
        InstitutionSubscription(
            institution_id=institution.id,
            commission_tier_id=tier.id,
            plan_type=InstitutionPlanType.PROFESSIONAL,
            status=SubscriptionStatus.ACTIVE,
            start_date=now - timedelta(days=10),
            end_date=now + timedelta(days=20),
            amount=tier.price,
        )
    )
    course = Course(title="Spanish B1", institution_id=institution.id, price=Decimal(amount))
    db_session.add(course)
    await db_session.flush()

    enrollment = Enrollment(student_id="student_pay_1", course_id=course.id)
    db_session.add(enrollment)
    await db_session.flush()

    payment = Payment(
        enrollment_id=enrollment.id,
        amount=Decimal(amount),
        status=PaymentStatus.COMPLETED,
        paid_at=now,
    )
    db_session.add(payment)
    await db_session.commit()
    return institution, payment


async def _pending(db_session: AsyncSession, institution_id: str, *amounts: str):
    for i, amount in enumerate(amounts):
        db_session.add(
            InstitutionCommission(
                institution_id=institution_id,
                payment_id=f"{institution_id}_payment_{i}",
                amount=Decimal(amount),
                commission_rate=Decimal("15.00"),
                created_at=datetime.utcnow() - timedelta(hours=len(amounts) - i),
            )
        )
    await db_session.commit()


def _payout(db_session: AsyncSession) -> ProcessCommissionPayout:
    return ProcessCommissionPayout(
        uow=SqlAlchemyUnitOfWork(db_session),
        commission_repo=SqlAlchemyCommissionRepository(db_session),
        policy=GovernancePolicy(),
    )


@pytest.mark.asyncio
class TestCommissionCalculationIntegration:
    async def test_recalculation_keeps_one_record(self, db_session: AsyncSession, tier_repo):
        """
        Given: A completed 200.00 payment for a PROFESSIONAL (15%) institution
        When: The commission is calculated twice
        Then: Exactly one record of 30.00 exists for the payment
        """
        institution, payment = await _institution_with_payment(db_session, tier_repo, "200.00")

        use_case = CalculateCommissionForPayment(
            uow=SqlAlchemyUnitOfWork(db_session),
            payment_repo=SqlAlchemyPaymentRepository(db_session),
            enrollment_repo=SqlAlchemyEnrollmentRepository(db_session),
            course_repo=SqlAlchemyCourseRepository(db_session),
            subscription_repo=SqlAlchemyInstitutionSubscriptionRepository(db_session),
            tier_repo=tier_repo,
            commission_repo=SqlAlchemyCommissionRepository(db_session),
        )

        first = await use_case.execute(payment.id)
        second = await use_case.execute(payment.id)

        assert first.is_ok() and second.is_ok()
        assert first.value.created is True
        assert second.value.created is False
        assert second.value.commission_id == first.value.commission_id
        assert second.value.commission_amount == Decimal("30.00")
        assert second.value.institution_share == Decimal("170.00")

        rows = (
            await db_session.execute(
                select(InstitutionCommission).where(InstitutionCommission.payment_id == payment.id)
            )
        ).scalars().all()
        assert len(rows) == 1
        assert rows[0].institution_id == institution.id
        assert rows[0].status == CommissionStatus.PENDING


@pytest.mark.asyncio
class TestCommissionPayoutIntegration:
    async def test_full_payout_sweeps_all_pending(self, db_session: AsyncSession):
        """
        Given: 3 PENDING commissions of 100, 50 and 25
        When: A payout of 175 by BANK is processed
        Then: One payout of 175 exists and all three commissions are PAID against it
        """
        institution = Institution(name="Payout Institute")
        db_session.add(institution)
        await db_session.commit()
        institution_id = institution.id
        await _pending(db_session, institution_id, "100.00", "50.00", "25.00")

        result = await _payout(db_session).execute(
            PayoutCommandDTO(
                institution_id=institution_id,
                amount=Decimal("175.00"),
                payout_method="BANK",
                reference="ref1",
            )
        )

        assert result.is_ok()
        assert result.value.commissions_paid == 3
        assert result.value.pending_total == Decimal("175.00")

        payouts = (await db_session.execute(select(InstitutionPayout))).scalars().all()
        assert len(payouts) == 1
        assert payouts[0].amount == Decimal("175.00")

        commissions = (
            await db_session.execute(
                select(InstitutionCommission).where(
                    InstitutionCommission.institution_id == institution_id
                )
            )
        ).scalars().all()
        assert {c.status for c in commissions} == {CommissionStatus.PAID}
        assert {c.payout_id for c in commissions} == {payouts[0].id}

    async def test_payout_above_pending_changes_nothing(self, db_session: AsyncSession):
        """
        Given: PENDING commissions totalling 175
        When: A payout of 200 is requested
        Then: PAYOUT_EXCEEDS_PENDING, no payout row, every commission still PENDING
        """
        institution = Institution(name="Overdraw College")
        db_session.add(institution)
        await db_session.commit()
        institution_id = institution.id
        await _pending(db_session, institution_id, "100.00", "50.00", "25.00")

        result = await _payout(db_session).execute(
            PayoutCommandDTO(
                institution_id=institution_id,
                amount=Decimal("200.00"),
                payout_method="BANK",
                reference="ref2",
            )
        )

        assert result.is_err()
        assert result.error.code == "PAYOUT_EXCEEDS_PENDING"

        payouts = (await db_session.execute(select(InstitutionPayout))).scalars().all()
        assert payouts == []

        commissions = (
            await db_session.execute(
                select(InstitutionCommission).where(
                    InstitutionCommission.institution_id == institution_id
                )
            )
        ).scalars().all()
        assert len(commissions) == 3
        assert all(c.status == CommissionStatus.PENDING for c in commissions)
        assert all(c.payout_id is None for c in commissions)
