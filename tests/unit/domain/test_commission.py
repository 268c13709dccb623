"""Unit tests for commission amount and reporting rate rules"""

from decimal import Decimal

from src.domain.commission import calculate_commission_amount, resolve_reporting_rate


class TestCommissionAmount:
    def test_amount_is_rate_percent_of_payment(self):
        assert calculate_commission_amount(Decimal("200.00"), Decimal("15.00")) == Decimal("30.00")

    def test_amount_rounds_half_up_to_cents(self):
        """
        Given: 33.33 at 25%
        When: The commission is calculated
        Then: 8.3325 rounds half-up to 8.33
        """
        assert calculate_commission_amount(Decimal("33.33"), Decimal("25")) == Decimal("8.33")
        assert calculate_commission_amount(Decimal("0.10"), Decimal("25")) == Decimal("0.03")


class TestReportingRate:
    def test_active_tier_rate_wins(self):
        rate = resolve_reporting_rate(
            stored_rate=Decimal("20.00"),
            subscription_active=True,
            tier_rate=Decimal("10.00"),
            default_rate=Decimal("20"),
        )
        assert rate == Decimal("10.00")

    def test_inactive_subscription_falls_back_to_stored_rate(self):
        rate = resolve_reporting_rate(
            stored_rate=Decimal("25.00"),
            subscription_active=False,
            tier_rate=Decimal("10.00"),
            default_rate=Decimal("20"),
        )
        assert rate == Decimal("25.00")

    def test_missing_everything_uses_default(self):
        rate = resolve_reporting_rate(
            stored_rate=None,
            subscription_active=True,
            tier_rate=None,
            default_rate=Decimal("20"),
        )
        assert rate == Decimal("20")
