from __future__ import annotations

import logging
import sqlite3

from ..constants import SCHEMA_VERSION, TABLE_SCHEMA_VERSION

_log = logging.getLogger(__name__)


def _ensure_table(conn: sqlite3.Connection) -> None:
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {TABLE_SCHEMA_VERSION}(
            id         INTEGER PRIMARY KEY CHECK (id=1),
            version    TEXT NOT NULL,
            applied_at TEXT NOT NULL DEFAULT (datetime('now','localtime'))
        );
    """)


def get_current_version(conn: sqlite3.Connection) -> str | None:
    _ensure_table(conn)
    row = conn.execute(f"SELECT version FROM {TABLE_SCHEMA_VERSION} WHERE id=1;").fetchone()
    return row[0] if row else None


def set_current_version(conn: sqlite3.Connection, version: str) -> None:
    _ensure_table(conn)
    conn.execute(
        f"""
        INSERT INTO {TABLE_SCHEMA_VERSION}(id, version) VALUES (1, ?)
        ON CONFLICT(id) DO UPDATE SET version = excluded.version,
                                      applied_at = datetime('now','localtime');
        """,
        (version,),
    )


def ensure_version(conn: sqlite3.Connection, expected: str = SCHEMA_VERSION) -> str:
    """
    Stamp a fresh ledger with `expected`. An existing ledger keeps its stamp;
    a mismatch is only logged since the schema script is additive.
    """
    current = get_current_version(conn)
    if current is None:
        set_current_version(conn, expected)
        _log.info("ledger schema stamped at version %s", expected)
        return expected
    if current != expected:
        _log.warning("ledger schema version %s differs from package version %s", current, expected)
    return current
