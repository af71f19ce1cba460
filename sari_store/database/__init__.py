# database/__init__.py
from __future__ import annotations

from contextlib import contextmanager
from itertools import count
from pathlib import Path
import logging
import sqlite3
from typing import Any, Callable, Iterator, Optional, Sequence, TypeVar, Union

from ..config import DB_PATH
from ..constants import SCHEMA_VERSION
from . import schema as schema_module
from .versioning import ensure_version

_log = logging.getLogger(__name__)

T = TypeVar("T")

Params = Union[Sequence[Any], dict[str, Any]]

_savepoints = count(1)


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """
    Returns a sqlite3.Connection with:
      - WAL mode (file databases)
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
    Ensures the schema and version row are applied idempotently.
    """
    target = Path(db_path) if db_path is not None else DB_PATH
    target.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(target)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute("PRAGMA journal_mode = WAL;")

    # Always apply the schema (idempotent: CREATE IF NOT EXISTS / DROP TRIGGER IF EXISTS)
    schema_module.apply_schema(conn)

    ensure_version(conn, SCHEMA_VERSION)

    conn.commit()
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    All-or-nothing scope for ledger writes.

    The outermost scope opens BEGIN IMMEDIATE and commits on success; nested
    scopes become SAVEPOINTs so a repo method can be called on its own or from
    inside a larger operation. Any exception rolls the scope back and
    propagates.
    """
    if conn.in_transaction:
        name = f"sp_{next(_savepoints)}"
        conn.execute(f"SAVEPOINT {name};")
        try:
            yield conn
        except BaseException:
            conn.execute(f"ROLLBACK TO SAVEPOINT {name};")
            conn.execute(f"RELEASE SAVEPOINT {name};")
            raise
        else:
            conn.execute(f"RELEASE SAVEPOINT {name};")
        return

    conn.execute("BEGIN IMMEDIATE;")
    try:
        yield conn
    except BaseException:
        _log.debug("rolling back ledger transaction")
        conn.rollback()
        raise
    else:
        conn.commit()


def run_in_transaction(conn: sqlite3.Connection, fn: Callable[[sqlite3.Connection], T]) -> T:
    """Call fn(conn) inside a transaction scope and return its result."""
    with transaction(conn):
        return fn(conn)


def execute(conn: sqlite3.Connection, sql: str, params: Params = ()) -> sqlite3.Cursor:
    return conn.execute(sql, params)


def query_all(conn: sqlite3.Connection, sql: str, params: Params = ()) -> list[sqlite3.Row]:
    return conn.execute(sql, params).fetchall()


def query_one(conn: sqlite3.Connection, sql: str, params: Params = ()) -> Optional[sqlite3.Row]:
    return conn.execute(sql, params).fetchone()


__all__ = [
    "get_connection",
    "transaction",
    "run_in_transaction",
    "execute",
    "query_all",
    "query_one",
]
