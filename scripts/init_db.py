"""Create the database (if needed) and apply database/schema.sql.

Usage: APP_ENV=production python scripts/init_db.py
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.student_inactivity.student_inactivity.database.bootstrap import SCHEMA_PATH, apply_schema, list_tables
from src.student_inactivity.student_inactivity.main import configure_logging

REQUIRED_TABLES = {"branches", "users", "students", "student_status_history", "attendance_records", "notices"}

logger = logging.getLogger("init_db")


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(bool(getattr(settings, "DEBUG", False)))
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=SCHEMA_PATH)
    tables = set(list_tables(db_config))
    missing = sorted(REQUIRED_TABLES - tables)
    if missing:
        logger.error("Schema applied but tables are missing: %s", ", ".join(missing))
        return 1

    logger.info(
        "Applied %s -> %s@%s:%s/%s (tables=%s)",
        SCHEMA_PATH.name,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(tables),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
