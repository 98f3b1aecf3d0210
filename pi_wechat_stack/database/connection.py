# -*- coding: utf-8 -*-
"""
Database Connection Manager
=============================
Read-only access to the SQLite databases mirrored by EchoTrace
(message_0.db, contact.db, ...). The WeChat client owns these files,
so every connection is opened with mode=ro and nothing is ever written.

Usage:
    from database.connection import get_connection, execute_query

    with get_connection(settings.echotrace.message_db_path) as conn:
        rows = execute_query(conn, "SELECT name FROM sqlite_master")
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

# ---------------------------------------------------------------------------
# Logger: writes to stderr so stdout stays clean for JSON output
# ---------------------------------------------------------------------------
logger = logging.getLogger(__name__)


def open_readonly(db_path: Path | str) -> sqlite3.Connection:
    """
    Open a SQLite database file in read-only mode.

    Args:
        db_path: Path to the .db file.

    Returns:
        A sqlite3 connection whose rows behave like dicts.

    Raises:
        FileNotFoundError: If the database file does not exist.
    """
    path = Path(db_path)
    if not path.is_file():
        raise FileNotFoundError(f"Database file not found: {path}")

    conn = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)
    conn.row_factory = sqlite3.Row
    logger.debug("Opened read-only database: %s", path)
    return conn


@contextmanager
def get_connection(db_path: Path | str) -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager that opens a read-only connection, yields it,
    and always closes it.

    Errors raised inside the block are logged and re-raised.
    """
    conn = open_readonly(db_path)
    try:
        yield conn
    except sqlite3.Error:
        logger.exception("SQLite operation failed on %s", db_path)
        raise
    finally:
        conn.close()


def execute_query(
    conn: sqlite3.Connection,
    query: str,
    params: tuple | None = None,
) -> list[dict]:
    """
    Execute a single query and return all rows as dicts.

    Args:
        conn: Open connection (see get_connection).
        query: SQL query string with ? placeholders.
        params: Tuple of parameters for the query.

    Returns:
        List of dicts, one per row.
    """
    cur = conn.execute(query, params or ())
    try:
        return [dict(row) for row in cur.fetchall()]
    finally:
        cur.close()


def list_message_tables(conn: sqlite3.Connection) -> list[str]:
    """Return every per-conversation message table (Msg_<hash>) in the database."""
    rows = execute_query(
        conn,
        "SELECT name FROM sqlite_master WHERE type='table' AND name LIKE 'Msg_%'",
    )
    return [row["name"] for row in rows]
