import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./governance.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    NOTIFICATION_WEBHOOK_URL = data.get("NOTIFICATION_WEBHOOK_URL", None)
    CURRENCY = data.get("CURRENCY", "USD")

    # Commission rates (percent)
    DEFAULT_COMMISSION_RATE = data.get("DEFAULT_COMMISSION_RATE", 20)
    CANCELLED_COMMISSION_RATE = data.get("CANCELLED_COMMISSION_RATE", 25)
    FALLBACK_COMMISSION_RATE = data.get("FALLBACK_COMMISSION_RATE", 20)
    HIGH_VALUE_COMMISSION_THRESHOLD = data.get("HIGH_VALUE_COMMISSION_THRESHOLD", 1000)

    # Quota alerts
    USAGE_ALERT_THRESHOLD = data.get("USAGE_ALERT_THRESHOLD", 80)  # Percent of quota

    # Live class scheduling
    LIVE_CLASS_MIN_ADVANCE_MINUTES = data.get("LIVE_CLASS_MIN_ADVANCE_MINUTES", 30)
    LIVE_CLASS_MAX_DURATION_HOURS = data.get("LIVE_CLASS_MAX_DURATION_HOURS", 4)
    LIVE_CLASS_MIN_PARTICIPANTS = data.get("LIVE_CLASS_MIN_PARTICIPANTS", 1)
    LIVE_CLASS_MAX_PARTICIPANTS = data.get("LIVE_CLASS_MAX_PARTICIPANTS", 100)

    # Subscription lifecycle
    STUDENT_TRIAL_DAYS = data.get("STUDENT_TRIAL_DAYS", 7)
    INSTITUTION_TRIAL_DAYS = data.get("INSTITUTION_TRIAL_DAYS", 14)
    FALLBACK_PERIOD_DAYS = data.get("FALLBACK_PERIOD_DAYS", 365)
    EXPIRING_SOON_DAYS = data.get("EXPIRING_SOON_DAYS", 30)

    # Maintenance worker
    MAINTENANCE_INTERVAL_SECONDS = data.get("MAINTENANCE_INTERVAL_SECONDS", 3600)
