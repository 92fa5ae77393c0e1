from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, build_container
from .coverage.controller import register as register_coverage
from .database.bootstrap import apply_schema, list_tables
from .imports.controller import register as register_imports
from .notifications.controller import register as register_notifications
from .requests.controller import register as register_requests
from .shifts.controller import register as register_shifts
from .timeclock.controller import register as register_timeclock

_logger = logging.getLogger(__name__)

_SETTING_NAMES = (
    "IMPORT_MAX_ROWS",
    "PROVISION_DENYLIST",
    "TICKET_UNASSIGNED_ATTENDANCE",
)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_UPLOAD_BYTES", 12 * 1024 * 1024))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        _logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            _logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            settings={name: getattr(settings, name) for name in _SETTING_NAMES if hasattr(settings, name)},
        )

    register_shifts(app, container)
    register_imports(app, container)
    register_coverage(app, container)
    register_timeclock(app, container)
    register_requests(app, container)
    register_notifications(app, container)

    app.extensions["shiftdesk"] = container
    return app
