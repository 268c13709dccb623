"""Subscription Maintenance Worker

Expires closed trials into their fallback plans and resets monthly quota
counters. Can be run once per task or continuously.

    python -m src.worker.subscription_maintenance [trials|quotas|all] [--continuous]
"""

import asyncio
import logging
import sys
from typing import Dict, Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyInstitutionRepository,
    SqlAlchemyInstitutionSubscriptionRepository,
    SqlAlchemyStudentSubscriptionRepository,
    SqlAlchemySubscriptionLogRepository,
    SqlAlchemyTierRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.subscriptions import (
    HandleInstitutionTrialExpiration,
    HandleStudentTrialExpiration,
    ProcessExpiredTrials,
)
from src.app.use_cases.usage import ResetMonthlyQuotas
from src.domain.policy import GovernancePolicy

logger = logging.getLogger(__name__)


class SubscriptionMaintenanceWorker:
    """
    Background worker for subscription housekeeping

    Features:
    - Replaces expired TRIAL subscriptions with fallback plans
    - Resets monthly enrollment and attendance counters
    - Can run once or continuously

    Usage:
        # Run once
        worker = SubscriptionMaintenanceWorker()
        counts = await worker.run_once("all")

        # Run continuously
        await worker.run_forever("trials", interval_seconds=3600)
    """

    def __init__(self, db_uri: Optional[str] = None, policy: Optional[GovernancePolicy] = None):
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.policy = policy or GovernancePolicy.from_config(ApplicationConfig)

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        logger.info("SubscriptionMaintenanceWorker initialized")

    async def process_trials(self) -> int:
        """
        Expire every closed trial

        Returns:
            Number of trials replaced by a fallback plan
        """
        async with self.async_session_factory() as session:
            uow = SqlAlchemyUnitOfWork(session)
            student_repo = SqlAlchemyStudentSubscriptionRepository(session)
            institution_repo = SqlAlchemyInstitutionSubscriptionRepository(session)
            log_repo = SqlAlchemySubscriptionLogRepository(session)

            use_case = ProcessExpiredTrials(
                student_subscription_repo=student_repo,
                institution_subscription_repo=institution_repo,
                student_handler=HandleStudentTrialExpiration(
                    uow, SqlAlchemyTierRepository(session), student_repo, log_repo, self.policy
                ),
                institution_handler=HandleInstitutionTrialExpiration(
                    uow,
                    SqlAlchemyInstitutionRepository(session),
                    institution_repo,
                    log_repo,
                    self.policy,
                ),
            )
            result = await use_case.execute()

        if result.is_err():
            logger.error(f"Trial processing failed: {result.error.message}")
            return 0

        response = result.value
        for error in response.errors:
            logger.warning(f"Trial expiration error: {error}")
        return response.student_processed + response.institution_processed

    async def reset_quotas(self) -> int:
        """
        Reset monthly counters on every ACTIVE student subscription

        Returns:
            Number of subscriptions reset
        """
        async with self.async_session_factory() as session:
            result = await ResetMonthlyQuotas(
                SqlAlchemyUnitOfWork(session), SqlAlchemyStudentSubscriptionRepository(session)
            ).execute()

        if result.is_err():
            logger.error(f"Quota reset failed: {result.error.message}")
            return 0
        return result.value.reset_count

    async def run_once(self, task: str = "all") -> Dict[str, int]:
        counts: Dict[str, int] = {}
        if task in ("trials", "all"):
            counts["trials"] = await self.process_trials()
        if task in ("quotas", "all"):
            counts["quotas"] = await self.reset_quotas()
        return counts

    async def run_forever(self, task: str = "trials", interval_seconds: Optional[int] = None):
        """
        Run maintenance continuously at the specified interval

        Args:
            task: trials, quotas or all
            interval_seconds: Seconds between runs (defaults to config)
        """
        interval = interval_seconds or ApplicationConfig.MAINTENANCE_INTERVAL_SECONDS
        logger.info(f"Starting continuous subscription maintenance with {interval}s interval")

        while True:
            try:
                counts = await self.run_once(task)
                logger.info(f"Maintenance cycle complete: {counts}")
            except Exception as e:
                logger.error(f"Maintenance cycle failed: {e}")

            await asyncio.sleep(interval)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("SubscriptionMaintenanceWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        python -m src.worker.subscription_maintenance trials --continuous
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    task = args[0] if args else "all"
    if task not in ("trials", "quotas", "all"):
        logger.error(f"Unknown task '{task}'. Available tasks: trials, quotas, all")
        sys.exit(1)

    worker = SubscriptionMaintenanceWorker()

    if "--continuous" in sys.argv:
        try:
            await worker.run_forever(task)
        except KeyboardInterrupt:
            logger.info("Received shutdown signal")
        finally:
            await worker.shutdown()
    else:
        counts = await worker.run_once(task)
        print(f"Maintenance complete: {counts}")
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
