"""Run the inactivity sweep or the at-risk notifier once, outside the scheduler.

Usage: python scripts/run_job.py sweep|notify [tenant_id]
"""

from __future__ import annotations

import importlib
import json
import sys
from pathlib import Path
from types import ModuleType

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.student_inactivity.student_inactivity.common.serialization import to_jsonable
from src.student_inactivity.student_inactivity.container import build_container
from src.student_inactivity.student_inactivity.core.settings import InactivitySettings
from src.student_inactivity.student_inactivity.main import configure_logging


def load_settings() -> ModuleType:
    # .env may set APP_ENV / SETTINGS_MODULE, so it is read first.
    load_dotenv(override=False)
    return importlib.import_module(get_settings_module())


def main(argv: list[str]) -> int:
    if not argv or argv[0] not in {"sweep", "notify"}:
        print(__doc__)
        return 2

    settings = load_settings()
    configure_logging(bool(getattr(settings, "DEBUG", False)))
    container = build_container(db_config=settings.DB_CONFIG, settings=InactivitySettings.from_module(settings))

    if argv[0] == "sweep":
        outcome = container.scheduler.run_sweep_now()
    elif len(argv) > 1:
        report = container.notifier.notify_at_risk(int(argv[1]))
        print(json.dumps(report.to_dict(), indent=2))
        return 0
    else:
        outcome = container.scheduler.run_notifier_now()

    print(json.dumps(to_jsonable(outcome), indent=2))
    return 0 if outcome.success else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
