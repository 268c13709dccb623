"""Governance Policy

Tunable constants for commission, quota, trial and live-class rules.
Built once from ApplicationConfig and passed to the use cases that need it.
"""

from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field


class GovernancePolicy(BaseModel):
    """Immutable set of governance constants"""

    model_config = ConfigDict(frozen=True)

    default_commission_rate: Decimal = Field(
        default=Decimal("20"),
        description="Rate reported when an institution has no active commission tier"
    )
    cancelled_commission_rate: Decimal = Field(
        default=Decimal("25"),
        description="Rate applied to an institution after it cancels"
    )
    fallback_commission_rate: Decimal = Field(
        default=Decimal("20"),
        description="Rate applied by the DEFAULT fallback plan"
    )
    high_value_commission_threshold: Decimal = Field(default=Decimal("1000"))

    usage_alert_threshold: float = Field(
        default=80.0,
        description="Quota usage percentage at which an advisory alert is raised"
    )

    min_advance_notice_minutes: int = 30
    max_session_duration_hours: int = 4
    min_participants: int = 1
    max_participants: int = 100

    student_trial_days: int = 7
    institution_trial_days: int = 14
    fallback_period_days: int = 365
    expiring_soon_days: int = 30

    currency: str = "USD"

    @classmethod
    def from_config(cls, config) -> "GovernancePolicy":
        return cls(
            default_commission_rate=Decimal(str(config.DEFAULT_COMMISSION_RATE)),
            cancelled_commission_rate=Decimal(str(config.CANCELLED_COMMISSION_RATE)),
            fallback_commission_rate=Decimal(str(config.FALLBACK_COMMISSION_RATE)),
            high_value_commission_threshold=Decimal(str(config.HIGH_VALUE_COMMISSION_THRESHOLD)),
            usage_alert_threshold=float(config.USAGE_ALERT_THRESHOLD),
            min_advance_notice_minutes=int(config.LIVE_CLASS_MIN_ADVANCE_MINUTES),
            max_session_duration_hours=int(config.LIVE_CLASS_MAX_DURATION_HOURS),
            min_participants=int(config.LIVE_CLASS_MIN_PARTICIPANTS),
            max_participants=int(config.LIVE_CLASS_MAX_PARTICIPANTS),
            student_trial_days=int(config.STUDENT_TRIAL_DAYS),
            institution_trial_days=int(config.INSTITUTION_TRIAL_DAYS),
            fallback_period_days=int(config.FALLBACK_PERIOD_DAYS),
            expiring_soon_days=int(config.EXPIRING_SOON_DAYS),
            currency=config.CURRENCY,
        )
