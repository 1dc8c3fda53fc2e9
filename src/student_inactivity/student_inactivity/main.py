from __future__ import annotations

import atexit
import importlib
import logging
import signal
import threading
from types import ModuleType

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, build_container
from .core.settings import InactivitySettings
from .database.bootstrap import apply_schema, list_tables
from .inactivity.controller import register as register_inactivity

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    # Only show scheduler warnings and errors
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def _load_container() -> tuple[ModuleType, Container]:
    load_dotenv(override=False)
    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(bool(getattr(settings, "DEBUG", False)))

    inactivity_settings = InactivitySettings.from_module(settings)
    db_config = getattr(settings, "DB_CONFIG")
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config)
        logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
    logger.info(
        "settings=%s db=%s@%s:%s/%s threshold=%s tz=%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        inactivity_settings.absence_threshold_days,
        inactivity_settings.tenant_timezone,
    )
    return settings, build_container(db_config=db_config, settings=inactivity_settings)


def create_app() -> Flask:
    settings, container = _load_container()

    app = Flask(__name__)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.extensions["inactivity_container"] = container

    register_inactivity(app, container)

    if container.settings.scheduler_enabled:
        container.scheduler.start()
        atexit.register(container.scheduler.stop)

    return app


def run_worker() -> None:
    """Standalone scheduler process (no HTTP)."""

    _, container = _load_container()
    stop = threading.Event()

    def _handle_signal(signum, frame):
        logger.info("Received signal %s, shutting down", signum)
        stop.set()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    container.scheduler.start()
    try:
        stop.wait()
    finally:
        container.scheduler.stop()


if __name__ == "__main__":
    run_worker()
