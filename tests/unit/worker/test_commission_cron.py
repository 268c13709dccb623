"""Unit tests for CommissionCronWorker

Tests cover:
- Task dispatch and unknown tasks
- Commission batch followed by analytics
- Failure results turning into a failed run
- CLI exit codes
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

from libs.result import Return, Error
from src.app.use_cases.commissions import (
    CommissionBatchResultDTO,
    CommissionAnalyticsDTO,
    CommissionTotalDTO,
    TopInstitutionDTO,
    DailyCommissionReportDTO,
)
from src.domain.policy import GovernancePolicy
from src.worker.commission_cron import CommissionCronWorker, CommissionCronError, main


@pytest.fixture
def mock_session():
    """Mock async session"""
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return session


@pytest.fixture
def worker(mock_session):
    with patch("src.worker.commission_cron.create_async_engine") as mock_engine:
        mock_engine.return_value = MagicMock(dispose=AsyncMock())
        worker = CommissionCronWorker(db_uri="sqlite+aiosqlite://", policy=GovernancePolicy())
    worker.async_session_factory = MagicMock(return_value=mock_session)
    return worker


def _analytics(top_amount: str) -> CommissionAnalyticsDTO:
    return CommissionAnalyticsDTO(
        monthly=CommissionTotalDTO(total=Decimal(top_amount), count=3),
        yearly=CommissionTotalDTO(total=Decimal(top_amount), count=3),
        all_time=CommissionTotalDTO(total=Decimal(top_amount), count=3),
        top_institutions=[
            TopInstitutionDTO(id="inst_1", name="Lingua", commission_amount=Decimal(top_amount), course_count=4)
        ],
    )


@pytest.mark.asyncio
class TestRunCommissions:
    @patch("src.worker.commission_cron.GetCommissionAnalytics")
    @patch("src.worker.commission_cron.CalculatePendingCommissions")
    async def test_batch_then_analytics(self, mock_pending_cls, mock_analytics_cls, worker):
        """
        Given: Pending payments whose commissions calculate successfully
        When: The commissions task runs
        Then: The batch result is returned and analytics are computed afterwards
        """
        batch = CommissionBatchResultDTO(processed=3, total_commission=Decimal("75.00"))
        mock_pending_cls.return_value.execute = AsyncMock(return_value=Return.ok(batch))
        mock_analytics_cls.return_value.execute = AsyncMock(return_value=Return.ok(_analytics("1500.00")))

        result = await worker.run_commissions()

        assert result is batch
        mock_pending_cls.return_value.execute.assert_called_once()
        mock_analytics_cls.return_value.execute.assert_called_once()

    @patch("src.worker.commission_cron.GetCommissionAnalytics")
    @patch("src.worker.commission_cron.CalculatePendingCommissions")
    async def test_batch_error_raises(self, mock_pending_cls, mock_analytics_cls, worker):
        mock_pending_cls.return_value.execute = AsyncMock(
            return_value=Return.err(Error(code="CALCULATE_PENDING_COMMISSIONS_FAILED", message="db down"))
        )

        with pytest.raises(CommissionCronError):
            await worker.run_commissions()

        mock_analytics_cls.return_value.execute.assert_not_called()


@pytest.mark.asyncio
class TestRunDispatch:
    async def test_unknown_task_fails(self, worker):
        assert await worker.run("invoices") is False

    async def test_all_runs_every_task(self, worker):
        with patch.object(worker, "run_commissions", AsyncMock()) as commissions, \
                patch.object(worker, "run_report", AsyncMock()) as report, \
                patch.object(worker, "run_subscriptions", AsyncMock()) as subscriptions:
            ok = await worker.run("all")

        assert ok is True
        commissions.assert_called_once()
        report.assert_called_once()
        subscriptions.assert_called_once()

    async def test_single_task_only(self, worker):
        with patch.object(worker, "run_commissions", AsyncMock()) as commissions, \
                patch.object(worker, "run_report", AsyncMock()) as report:
            ok = await worker.run("report")

        assert ok is True
        report.assert_called_once()
        commissions.assert_not_called()

    async def test_task_failure_returns_false(self, worker):
        with patch.object(worker, "run_report", AsyncMock(side_effect=CommissionCronError("boom"))):
            assert await worker.run("report") is False

    @patch("src.worker.commission_cron.GenerateDailyCommissionReport")
    async def test_report_task(self, mock_report_cls, worker):
        report = DailyCommissionReportDTO(
            date=date(2024, 5, 20),
            total_institutions=2,
            active_subscriptions=1,
            total_commissions=Decimal("45.00"),
        )
        mock_report_cls.return_value.execute = AsyncMock(return_value=Return.ok(report))

        assert await worker.run_report() is report


@pytest.mark.asyncio
class TestMain:
    @patch("src.worker.commission_cron.CommissionCronWorker")
    async def test_exit_code_zero_on_success(self, mock_worker_cls):
        mock_worker_cls.return_value.run = AsyncMock(return_value=True)
        mock_worker_cls.return_value.shutdown = AsyncMock()

        assert await main(["commissions"]) == 0
        mock_worker_cls.return_value.run.assert_called_once_with("commissions")
        mock_worker_cls.return_value.shutdown.assert_called_once()

    @patch("src.worker.commission_cron.CommissionCronWorker")
    async def test_exit_code_one_on_failure(self, mock_worker_cls):
        mock_worker_cls.return_value.run = AsyncMock(return_value=False)
        mock_worker_cls.return_value.shutdown = AsyncMock()

        assert await main(["bogus"]) == 1
        mock_worker_cls.return_value.shutdown.assert_called_once()
