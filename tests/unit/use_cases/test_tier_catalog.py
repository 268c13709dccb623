"""Unit tests for the tier catalog use cases"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.catalog import ListTiers, SeedTierCatalog
from src.domain.tier import (
    StudentTier,
    CommissionTier,
    StudentPlanType,
    InstitutionPlanType,
    DEFAULT_STUDENT_TIERS,
    DEFAULT_COMMISSION_TIERS,
)


@pytest.fixture
def tier_repo():
    repo = MagicMock()
    repo.get_student_tier_by_plan = AsyncMock(return_value=None)
    repo.get_commission_tier_by_plan = AsyncMock(return_value=None)
    repo.save_student_tier = AsyncMock(side_effect=lambda t: t)
    repo.save_commission_tier = AsyncMock(side_effect=lambda t: t)
    return repo


@pytest.mark.asyncio
class TestSeedTierCatalog:
    async def test_empty_catalog_is_created(self, mock_uow, tier_repo):
        result = await SeedTierCatalog(mock_uow, tier_repo).execute()

        assert result.is_ok()
        assert result.value.created == len(DEFAULT_STUDENT_TIERS) + len(DEFAULT_COMMISSION_TIERS)
        assert result.value.updated == 0
        mock_uow.commit.assert_called_once()

    async def test_existing_plans_are_updated_in_place(self, mock_uow, tier_repo):
        """
        Given: A STARTER commission tier already stored with a stale rate
        When: The catalog is seeded
        Then: The stored row gets the catalog rate and no duplicate is created
        """
        stale = CommissionTier(
            id="ctier_starter",
            plan_type=InstitutionPlanType.STARTER,
            name="Starter",
            price=Decimal("79.00"),
            commission_rate=Decimal("30.00"),
        )

        async def by_plan(plan_type, active_only=True):
            return stale if plan_type == InstitutionPlanType.STARTER else None

        tier_repo.get_commission_tier_by_plan = AsyncMock(side_effect=by_plan)

        result = await SeedTierCatalog(mock_uow, tier_repo, student_tiers=[]).execute()

        assert result.is_ok()
        assert result.value.updated == 1
        assert result.value.created == len(DEFAULT_COMMISSION_TIERS) - 1
        assert stale.id == "ctier_starter"
        assert stale.commission_rate == Decimal("25.00")
        assert stale.price == Decimal("99.00")

    async def test_failure_rolls_back(self, mock_uow, tier_repo):
        tier_repo.save_student_tier = AsyncMock(side_effect=Exception("db down"))

        result = await SeedTierCatalog(mock_uow, tier_repo).execute()

        assert result.is_err()
        assert result.error.code == "SEED_CATALOG_FAILED"
        mock_uow.rollback.assert_called_once()


@pytest.mark.asyncio
class TestListTiers:
    async def test_lists_active_tiers(self, tier_repo):
        tier_repo.list_student_tiers = AsyncMock(
            return_value=[
                StudentTier(
                    id="t1",
                    plan_type=StudentPlanType.BASIC,
                    name="Basic",
                    price=Decimal("12.99"),
                    enrollment_quota=5,
                    attendance_quota=5,
                )
            ]
        )
        tier_repo.list_commission_tiers = AsyncMock(return_value=[])

        result = await ListTiers(tier_repo).execute()

        assert result.is_ok()
        assert result.value.student_tiers[0].plan_type == "BASIC"
        assert result.value.commission_tiers == []
        tier_repo.list_student_tiers.assert_called_once_with(active_only=True)
