"""Idempotent database setup from database/schema.sql."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, List, Union

import mysql.connector

from ..core.exceptions import ExternalServiceError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

# Quoted strings, '--' comments, statement separators, everything else.
_SQL_TOKEN = re.compile(
    r"""'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|--[^\n]*|;|[^'";-]+|.""",
    re.DOTALL,
)
_DB_SWITCH = re.compile(r"^\s*(CREATE\s+DATABASE|USE)\b", re.IGNORECASE)


def split_statements(sql: str) -> Iterator[str]:
    """Split a script on ';' outside quotes, dropping '--' comments."""
    buf: List[str] = []
    for token in _SQL_TOKEN.findall(sql):
        if token.startswith("--"):
            continue
        if token == ";":
            stmt = "".join(buf).strip()
            buf = []
            if stmt:
                yield stmt
            continue
        buf.append(token)
    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    _run(
        conn_factory,
        [
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        ],
        with_database=False,
    )


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: Union[str, Path]) -> None:
    """Create the database if needed and run every schema statement.

    CREATE DATABASE / USE lines in the file are skipped so the configured
    database name always wins.
    """
    ensure_database_exists(conn_factory)
    statements = [
        s for s in split_statements(Path(schema_path).read_text(encoding="utf-8")) if not _DB_SWITCH.match(s)
    ]
    _run(conn_factory, statements)
    logger.info("Applied %d schema statements to %s", len(statements), conn_factory.database)


def list_tables(conn_factory: DatabaseConnection) -> List[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def _run(conn_factory: DatabaseConnection, statements: List[str], *, with_database: bool = True) -> None:
    conn = conn_factory.connect(with_database=with_database)
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    except mysql.connector.Error as exc:
        conn.rollback()
        raise ExternalServiceError(f"Schema setup failed: {exc}") from exc
    finally:
        conn.close()
