import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_db_test"),
    "connection_timeout": 5,
    "statement_timeout_ms": 5000,
}

DEBUG = False
TESTING = True

ABSENCE_THRESHOLD_DAYS = 10
TENANT_TIMEZONE = "Africa/Nairobi"
SWEEP_CRON = "0 6 * * mon-fri"
NOTIFY_CRON = "0 8 * * mon-fri"

JOB_MAX_ATTEMPTS = 3
JOB_BACKOFF_BASE_SECONDS = 0
JOB_ALERT_AFTER_FAILURES = 2

SCHEDULER_ENABLED = False
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
