from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container_from_settings
from .database.bootstrap import apply_schema, list_tables
from .identity.controller import register as register_identity
from .reconciliation.controller import register as register_reconciliation

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings = importlib.import_module(get_settings_module())
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["ADMIN_TOKEN"] = getattr(settings, "ADMIN_TOKEN", None)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        container = build_container_from_settings(settings)
        if bool(getattr(settings, "AUTO_INIT_DB", False)) and container.conn is not None:
            apply_schema(container.conn, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(container.conn)))

    app.extensions["presence_container"] = container

    register_attendance(app, container)
    register_identity(app, container)
    register_reconciliation(app, container)

    return app
