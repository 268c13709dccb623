"""Unit tests for CalculateCommissionForPayment and the commission batches

Tests cover:
- Commission recorded from the institution's commission tier rate
- Idempotent recalculation for the same payment
- Strict failures for incomplete chains
- Batch runs continue past per-payment failures
"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from libs.result import Return, Error
from src.app.use_cases.commissions import (
    CalculateCommissionForPayment,
    CalculatePendingCommissions,
    RecalculateCommissions,
    RecalculateCommissionsCommandDTO,
    CommissionCalculationDTO,
)
from src.domain.commission import InstitutionCommission
from src.domain.enrollment import Enrollment
from src.domain.platform import Course, Payment, PaymentStatus
from src.domain.subscription import InstitutionSubscription, SubscriptionStatus
from src.domain.tier import CommissionTier, InstitutionPlanType


@pytest.fixture
def repos():
    return {
        "payment_repo": MagicMock(),
        "enrollment_repo": MagicMock(),
        "course_repo": MagicMock(),
        "subscription_repo": MagicMock(),
        "tier_repo": MagicMock(),
        "commission_repo": MagicMock(),
    }


@pytest.fixture
def calculator(mock_uow, repos):
    return CalculateCommissionForPayment(uow=mock_uow, **repos)


@pytest.fixture
def payment():
    return Payment(
        id="pay_1",
        enrollment_id="enr_1",
        amount=Decimal("200.00"),
        currency="USD",
        status=PaymentStatus.COMPLETED,
    )


@pytest.fixture
def chain(repos, payment):
    """Payment -> enrollment -> course -> active PROFESSIONAL subscription -> 15% tier"""
    repos["payment_repo"].get_by_id = AsyncMock(return_value=payment)
    repos["enrollment_repo"].get_by_id = AsyncMock(
        return_value=Enrollment(id="enr_1", student_id="user_1", course_id="course_1")
    )
    repos["course_repo"].get_by_id = AsyncMock(
        return_value=Course(id="course_1", title="Spanish A1", institution_id="inst_1")
    )
    repos["subscription_repo"].get_current = AsyncMock(
        return_value=InstitutionSubscription(
            id="isub_1",
            institution_id="inst_1",
            plan_type=InstitutionPlanType.PROFESSIONAL,
            status=SubscriptionStatus.ACTIVE,
            start_date=datetime.utcnow() - timedelta(days=5),
            end_date=datetime.utcnow() + timedelta(days=25),
            amount=Decimal("299.00"),
        )
    )
    repos["tier_repo"].get_commission_tier_by_plan = AsyncMock(
        return_value=CommissionTier(
            id="ctier_pro",
            plan_type=InstitutionPlanType.PROFESSIONAL,
            name="Professional",
            price=Decimal("299.00"),
            commission_rate=Decimal("15.00"),
        )
    )
    return repos


@pytest.mark.asyncio
class TestCalculateCommissionSuccess:
    async def test_creates_commission_from_tier_rate(self, calculator, chain, mock_uow):
        """
        Given: A completed 200.00 payment for an institution on a 15% tier
        When: The commission is calculated
        Then: A 30.00 commission is created and committed
        """
        chain["commission_repo"].get_by_payment_id = AsyncMock(return_value=None)
        chain["commission_repo"].create = AsyncMock(side_effect=lambda c: c)

        result = await calculator.execute("pay_1")

        assert result.is_ok()
        dto = result.value
        assert dto.created is True
        assert dto.commission_rate == Decimal("15.00")
        assert dto.commission_amount == Decimal("30.00")
        assert dto.institution_share == Decimal("170.00")
        assert dto.institution_id == "inst_1"

        created = chain["commission_repo"].create.call_args[0][0]
        assert created.payment_id == "pay_1"
        assert created.amount == Decimal("30.00")
        mock_uow.commit.assert_called_once()

    async def test_recalculation_updates_existing_record(self, calculator, chain):
        """
        Given: A commission already exists for the payment
        When: The commission is calculated again
        Then: The same record is updated in place, none is created
        """
        existing = InstitutionCommission(
            id="comm_1",
            institution_id="inst_1",
            payment_id="pay_1",
            amount=Decimal("50.00"),
            commission_rate=Decimal("25.00"),
        )
        chain["commission_repo"].get_by_payment_id = AsyncMock(return_value=existing)
        chain["commission_repo"].create = AsyncMock()
        chain["commission_repo"].update = AsyncMock(side_effect=lambda c: c)

        result = await calculator.execute("pay_1")

        assert result.is_ok()
        assert result.value.created is False
        assert result.value.commission_id == "comm_1"
        assert existing.amount == Decimal("30.00")
        assert existing.commission_rate == Decimal("15.00")
        chain["commission_repo"].create.assert_not_called()


@pytest.mark.asyncio
class TestCalculateCommissionFailures:
    async def test_payment_not_found(self, calculator, repos):
        repos["payment_repo"].get_by_id = AsyncMock(return_value=None)

        result = await calculator.execute("missing")

        assert result.is_err()
        assert result.error.code == "PAYMENT_NOT_FOUND"

    async def test_payment_not_completed(self, calculator, chain, payment):
        payment.status = PaymentStatus.PENDING

        result = await calculator.execute("pay_1")

        assert result.is_err()
        assert result.error.code == "PAYMENT_NOT_COMPLETED"

    async def test_inactive_institution_subscription(self, calculator, chain):
        chain["subscription_repo"].get_current.return_value.status = SubscriptionStatus.CANCELLED

        result = await calculator.execute("pay_1")

        assert result.is_err()
        assert result.error.code == "SUBSCRIPTION_NOT_ACTIVE"

    async def test_missing_commission_tier_is_an_error(self, calculator, chain, mock_uow):
        """
        Given: No commission tier exists for the institution's plan
        When: The commission is calculated
        Then: COMMISSION_TIER_NOT_FOUND, no default rate is substituted
        """
        chain["tier_repo"].get_commission_tier_by_plan = AsyncMock(return_value=None)
        chain["commission_repo"].create = AsyncMock()

        result = await calculator.execute("pay_1")

        assert result.is_err()
        assert result.error.code == "COMMISSION_TIER_NOT_FOUND"
        chain["commission_repo"].create.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_repository_failure_rolls_back(self, calculator, chain, mock_uow):
        chain["commission_repo"].get_by_payment_id = AsyncMock(side_effect=Exception("db down"))

        result = await calculator.execute("pay_1")

        assert result.is_err()
        assert result.error.code == "CALCULATE_COMMISSION_FAILED"
        mock_uow.rollback.assert_called_once()


def _calculation(payment_id: str, amount: str) -> CommissionCalculationDTO:
    return CommissionCalculationDTO(
        commission_id=f"comm_{payment_id}",
        payment_id=payment_id,
        enrollment_id="enr_1",
        institution_id="inst_1",
        student_id="user_1",
        course_id="course_1",
        payment_amount=Decimal("100.00"),
        commission_rate=Decimal("25.00"),
        commission_amount=Decimal(amount),
        institution_share=Decimal("100.00") - Decimal(amount),
        currency="USD",
        calculated_at=datetime.utcnow(),
        created=True,
    )


@pytest.mark.asyncio
class TestCommissionBatches:
    async def test_pending_batch_continues_past_failures(self):
        """
        Given: Three completed payments, the second of which fails
        When: Pending commissions are calculated
        Then: Two are processed, one failed, and its error is reported
        """
        payment_repo = MagicMock()
        payment_repo.list_completed_without_commission = AsyncMock(
            return_value=[Payment(id=f"pay_{i}", amount=Decimal("100.00")) for i in range(3)]
        )
        calculator = MagicMock()
        calculator.execute = AsyncMock(
            side_effect=[
                Return.ok(_calculation("pay_0", "25.00")),
                Return.err(Error(code="SUBSCRIPTION_NOT_ACTIVE", message="inactive")),
                Return.ok(_calculation("pay_2", "25.00")),
            ]
        )

        result = await CalculatePendingCommissions(payment_repo, calculator).execute()

        assert result.is_ok()
        batch = result.value
        assert batch.processed == 2
        assert batch.failed == 1
        assert batch.total_commission == Decimal("50.00")
        assert len(batch.errors) == 1
        assert "pay_1" in batch.errors[0]

    async def test_recalculate_rejects_inverted_range(self):
        payment_repo = MagicMock()
        calculator = MagicMock()
        command = RecalculateCommissionsCommandDTO(
            start_date=datetime(2024, 2, 1), end_date=datetime(2024, 1, 1)
        )

        result = await RecalculateCommissions(payment_repo, calculator).execute(command)

        assert result.is_err()
        assert result.error.code == "INVALID_DATE_RANGE"
