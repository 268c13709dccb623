"""Unit tests for GovernancePolicy"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from src.domain.policy import GovernancePolicy


class TestGovernancePolicy:
    def test_defaults(self):
        policy = GovernancePolicy()

        assert policy.default_commission_rate == Decimal("20")
        assert policy.cancelled_commission_rate == Decimal("25")
        assert policy.usage_alert_threshold == 80.0
        assert policy.min_advance_notice_minutes == 30
        assert policy.max_session_duration_hours == 4

    def test_from_config(self):
        """
        Given: Config values loaded from env.yaml
        When: The policy is built from config
        Then: Numeric values are coerced to their policy types
        """
        config = MagicMock()
        config.DEFAULT_COMMISSION_RATE = 18
        config.CANCELLED_COMMISSION_RATE = 30
        config.FALLBACK_COMMISSION_RATE = 22.5
        config.HIGH_VALUE_COMMISSION_THRESHOLD = 5000
        config.USAGE_ALERT_THRESHOLD = 90
        config.LIVE_CLASS_MIN_ADVANCE_MINUTES = 60
        config.LIVE_CLASS_MAX_DURATION_HOURS = 2
        config.LIVE_CLASS_MIN_PARTICIPANTS = 2
        config.LIVE_CLASS_MAX_PARTICIPANTS = 50
        config.STUDENT_TRIAL_DAYS = 10
        config.INSTITUTION_TRIAL_DAYS = 30
        config.FALLBACK_PERIOD_DAYS = 180
        config.EXPIRING_SOON_DAYS = 14
        config.CURRENCY = "EUR"

        policy = GovernancePolicy.from_config(config)

        assert policy.default_commission_rate == Decimal("18")
        assert policy.fallback_commission_rate == Decimal("22.5")
        assert policy.usage_alert_threshold == 90.0
        assert policy.max_participants == 50
        assert policy.currency == "EUR"

    def test_policy_is_immutable(self):
        policy = GovernancePolicy()
        with pytest.raises(ValidationError):
            policy.usage_alert_threshold = 50.0
