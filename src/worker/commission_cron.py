"""Commission Cron Worker

Batch entry point for commission calculation, the daily commission report
and institution subscription status checks. Invoked with a task argument:

    python -m src.worker.commission_cron [commissions|report|subscriptions|all]

Exits 0 on success and 1 on any failure or an unknown task.
"""

import asyncio
import logging
import sys
from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyCommissionRepository,
    SqlAlchemyCourseRepository,
    SqlAlchemyEnrollmentRepository,
    SqlAlchemyInstitutionRepository,
    SqlAlchemyInstitutionSubscriptionRepository,
    SqlAlchemyPaymentRepository,
    SqlAlchemyTierRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.commissions import (
    CalculateCommissionForPayment,
    CalculatePendingCommissions,
    GetCommissionAnalytics,
    GenerateDailyCommissionReport,
    CommissionBatchResultDTO,
    DailyCommissionReportDTO,
)
from src.app.use_cases.subscriptions import CheckSubscriptionStatus, SubscriptionStatusCheckDTO
from src.domain.policy import GovernancePolicy

logger = logging.getLogger(__name__)

TASKS = ("commissions", "report", "subscriptions", "all")


class CommissionCronError(Exception):
    """A cron task finished with an error result"""


class CommissionCronWorker:
    """
    Runs the periodic commission and subscription batches

    Each task opens its own session so a failed task leaves nothing pending
    for the next one.

    Usage:
        worker = CommissionCronWorker()
        ok = await worker.run("all")
        await worker.shutdown()
    """

    def __init__(self, db_uri: Optional[str] = None, policy: Optional[GovernancePolicy] = None):
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.policy = policy or GovernancePolicy.from_config(ApplicationConfig)

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

    async def run_commissions(self) -> CommissionBatchResultDTO:
        """Calculate commissions for completed payments, then log analytics"""
        started = datetime.utcnow()
        logger.info(f"Starting automated commission calculation at {started.isoformat()}")

        async with self.async_session_factory() as session:
            payment_repo = SqlAlchemyPaymentRepository(session)
            calculator = CalculateCommissionForPayment(
                uow=SqlAlchemyUnitOfWork(session),
                payment_repo=payment_repo,
                enrollment_repo=SqlAlchemyEnrollmentRepository(session),
                course_repo=SqlAlchemyCourseRepository(session),
                subscription_repo=SqlAlchemyInstitutionSubscriptionRepository(session),
                tier_repo=SqlAlchemyTierRepository(session),
                commission_repo=SqlAlchemyCommissionRepository(session),
            )

            # Step 1: Pending payments
            result = await CalculatePendingCommissions(payment_repo, calculator).execute()
            if result.is_err():
                raise CommissionCronError(result.error.message)
            batch = result.value
            logger.info(
                f"Completed {batch.processed} commission calculations "
                f"({batch.failed} failed), total {batch.total_commission}"
            )

            # Step 2: Analytics
            analytics_result = await GetCommissionAnalytics(
                commission_repo=SqlAlchemyCommissionRepository(session),
                institution_repo=SqlAlchemyInstitutionRepository(session),
                course_repo=SqlAlchemyCourseRepository(session),
            ).execute()
            if analytics_result.is_err():
                raise CommissionCronError(analytics_result.error.message)
            analytics = analytics_result.value
            logger.info(
                f"Commission analytics: monthly={analytics.monthly.total} "
                f"yearly={analytics.yearly.total} all_time={analytics.all_time.total} "
                f"top_institutions={len(analytics.top_institutions)}"
            )

            # Step 3: High-value institutions
            high_value = [
                inst
                for inst in analytics.top_institutions
                if inst.commission_amount > self.policy.high_value_commission_threshold
            ]
            if high_value:
                logger.info(
                    "High-value institutions detected: "
                    + ", ".join(f"{inst.name} ({inst.commission_amount})" for inst in high_value)
                )

        duration_ms = int((datetime.utcnow() - started).total_seconds() * 1000)
        logger.info(f"Automated commission calculation completed in {duration_ms}ms")
        return batch

    async def run_report(self) -> DailyCommissionReportDTO:
        async with self.async_session_factory() as session:
            result = await GenerateDailyCommissionReport(
                institution_repo=SqlAlchemyInstitutionRepository(session),
                subscription_repo=SqlAlchemyInstitutionSubscriptionRepository(session),
                commission_repo=SqlAlchemyCommissionRepository(session),
            ).execute()

        if result.is_err():
            raise CommissionCronError(result.error.message)

        report = result.value
        logger.info(
            f"Daily commission report for {report.date}: total={report.total_commissions} "
            f"active_subscriptions={report.active_subscriptions}"
        )
        return report

    async def run_subscriptions(self) -> SubscriptionStatusCheckDTO:
        async with self.async_session_factory() as session:
            result = await CheckSubscriptionStatus(
                uow=SqlAlchemyUnitOfWork(session),
                subscription_repo=SqlAlchemyInstitutionSubscriptionRepository(session),
                policy=self.policy,
            ).execute()

        if result.is_err():
            raise CommissionCronError(result.error.message)

        check = result.value
        logger.info(
            f"Subscription status check: {len(check.expiring_soon)} expiring soon, "
            f"{check.expired_count} expired"
        )
        return check

    async def run(self, task: str) -> bool:
        """
        Run one task, or every task for "all"

        Returns:
            True when every requested task succeeded
        """
        if task not in TASKS:
            logger.error(f"Unknown task '{task}'. Available tasks: {', '.join(TASKS)}")
            return False

        selected: List[str] = ["commissions", "report", "subscriptions"] if task == "all" else [task]
        try:
            for name in selected:
                if name == "commissions":
                    await self.run_commissions()
                elif name == "report":
                    await self.run_report()
                else:
                    await self.run_subscriptions()
            return True
        except Exception as e:
            logger.error(f"Commission cron task '{task}' failed: {e}")
            return False

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("CommissionCronWorker shutdown complete")


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for running the cron job as a standalone script

    Usage:
        python -m src.worker.commission_cron all
    """
    args = sys.argv[1:] if argv is None else argv
    task = args[0] if args else "all"

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    worker = CommissionCronWorker()
    try:
        ok = await worker.run(task)
    finally:
        await worker.shutdown()

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
