"""Create the database and apply database/schema.sql.

    python scripts/init_db.py           # apply schema, then verify tables
    python scripts/init_db.py --check   # only verify tables

Exits non-zero when a required table is missing.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.presence_core.presence_core.database.bootstrap import apply_schema, list_tables
from src.presence_core.presence_core.database.connection import DatabaseConnection, DBConfig
from src.presence_core.presence_core.main import configure_logging

REQUIRED_TABLES = ("branches", "employees", "attendance_sessions")

logger = logging.getLogger("init_db")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--check", action="store_true", help="do not apply the schema, only verify it")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    conn = DatabaseConnection(DBConfig.from_dict(settings.DB_CONFIG))

    if not args.check:
        apply_schema(conn, schema_path=REPO_ROOT / "database" / "schema.sql")
        logger.info("Applied schema.sql to %s", conn.database)

    tables = set(list_tables(conn))
    missing = [t for t in REQUIRED_TABLES if t not in tables]
    if missing:
        logger.error("Missing tables in %s: %s", conn.database, ", ".join(missing))
        return 1
    logger.info("Database %s ready (tables=%d)", conn.database, len(tables))
    return 0


if __name__ == "__main__":
    sys.exit(main())
