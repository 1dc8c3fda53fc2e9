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

DEBUG = False

ABSENCE_THRESHOLD_DAYS = int(os.getenv("ABSENCE_THRESHOLD_DAYS", "10"))
TENANT_TIMEZONE = os.getenv("TENANT_TIMEZONE", "Africa/Nairobi")
SWEEP_CRON = os.getenv("SWEEP_CRON", "0 6 * * mon-fri")
NOTIFY_CRON = os.getenv("NOTIFY_CRON", "0 8 * * mon-fri")

JOB_MAX_ATTEMPTS = int(os.getenv("JOB_MAX_ATTEMPTS", "3"))
JOB_BACKOFF_BASE_SECONDS = float(os.getenv("JOB_BACKOFF_BASE_SECONDS", "2"))
JOB_ALERT_AFTER_FAILURES = int(os.getenv("JOB_ALERT_AFTER_FAILURES", "2"))
JOB_STALE_WARNING_HOURS = int(os.getenv("JOB_STALE_WARNING_HOURS", "80"))
JOB_STALE_CRITICAL_HOURS = int(os.getenv("JOB_STALE_CRITICAL_HOURS", "128"))

SWEEP_MAX_WORKERS = int(os.getenv("SWEEP_MAX_WORKERS", "1"))
SCHEDULER_ENABLED = bool(int(os.getenv("SCHEDULER_ENABLED", "1")))
SYSTEM_ACTOR_EMAIL = os.getenv("SYSTEM_ACTOR_EMAIL", "system@cms.internal")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
