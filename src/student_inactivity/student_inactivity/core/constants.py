"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ABSENCE_THRESHOLD_DAYS = 10  # 2 weeks of school days (Mon-Fri)
DEFAULT_TENANT_TIMEZONE = "Africa/Nairobi"

DEFAULT_SWEEP_CRON = "0 6 * * mon-fri"
DEFAULT_NOTIFY_CRON = "0 8 * * mon-fri"

DEFAULT_JOB_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_BASE_SECONDS = 2
DEFAULT_ALERT_AFTER_FAILURES = 2
# Weekday jobs legitimately skip a weekend, so staleness is measured in days.
DEFAULT_STALE_WARNING_HOURS = 80
DEFAULT_STALE_CRITICAL_HOURS = 128

DEFAULT_HISTORY_SLICE = 5

SYSTEM_ACTOR_EMAIL = "system@cms.internal"
SYSTEM_ACTOR_NAME = "System - Attendance Monitor"

SWEEP_JOB_NAME = "student_inactivity_sweep"
NOTIFY_JOB_NAME = "student_at_risk_notifications"

DEACTIVATION_REASON = "Automatically marked inactive after {threshold} school days without attendance"
REACTIVATION_REASON = "Automatically reactivated - student attended school (attendance recorded)"
