import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_db"),
    "connection_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
    "statement_timeout_ms": int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "30000")),
}

DEBUG = True

# Inactivity policy
ABSENCE_THRESHOLD_DAYS = int(os.getenv("ABSENCE_THRESHOLD_DAYS", "10"))
TENANT_TIMEZONE = os.getenv("TENANT_TIMEZONE", "Africa/Nairobi")

# Weekdays: sweep before business hours, warnings shortly after
SWEEP_CRON = os.getenv("SWEEP_CRON", "0 6 * * mon-fri")
NOTIFY_CRON = os.getenv("NOTIFY_CRON", "0 8 * * mon-fri")

JOB_MAX_ATTEMPTS = int(os.getenv("JOB_MAX_ATTEMPTS", "3"))
JOB_BACKOFF_BASE_SECONDS = float(os.getenv("JOB_BACKOFF_BASE_SECONDS", "2"))
JOB_ALERT_AFTER_FAILURES = int(os.getenv("JOB_ALERT_AFTER_FAILURES", "2"))

SWEEP_MAX_WORKERS = int(os.getenv("SWEEP_MAX_WORKERS", "1"))

# The dev server usually runs without the cron jobs; use run_worker() for them.
SCHEDULER_ENABLED = bool(int(os.getenv("SCHEDULER_ENABLED", "0")))

# If enabled, scripts/init_db.py style schema apply on startup (CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
