from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .breaks.controller import register as register_breaks
from .container import build_container
from .core.constants import DEFAULT_TIMEZONE, DUPLICATE_PUNCH_WINDOW_MINUTES
from .database.bootstrap import apply_schema, list_tables

logger = logging.getLogger(__name__)


def create_app(container=None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=logging.DEBUG if app.config["DEBUG"] else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            default_timezone=getattr(settings, "DEFAULT_TIMEZONE", DEFAULT_TIMEZONE),
            duplicate_window_minutes=int(getattr(settings, "DUPLICATE_PUNCH_WINDOW_MINUTES", DUPLICATE_PUNCH_WINDOW_MINUTES)),
        )

    register_attendance(app, container)
    register_breaks(app, container)

    return app
