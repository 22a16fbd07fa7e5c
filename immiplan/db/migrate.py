"""Schema migrations keyed by the `schema_version` metadata entry.

Versions:
  1. costs / payments / metadata base tables
  2. costs.image_url and payments.currency (multi-currency payments); existing
     payments keep NULL and inherit the parent cost currency when loaded

Each step is idempotent and upgrades the SQLite file in place.
"""

from __future__ import annotations
from pathlib import Path
import logging
import sqlite3
from typing import Callable, Optional, Sequence, Tuple

from .schema import BASIC_UTC_NOW, ensure_indexes, init_db

SCHEMA_VERSION_KEY = "schema_version"

logger = logging.getLogger("immiplan.db")


def _column_exists(cur: sqlite3.Cursor, table: str, column: str) -> bool:
    cur.execute(f"PRAGMA table_info({table})")
    return any(row[1] == column for row in cur.fetchall())


def _add_column(cur: sqlite3.Cursor, table: str, column: str, decl: str) -> None:
    if not _column_exists(cur, table, column):
        cur.execute(f"ALTER TABLE {table} ADD COLUMN {column} {decl}")
        logger.info("added column %s.%s", table, column)


def _to_v2(cur: sqlite3.Cursor) -> None:
    _add_column(cur, "costs", "image_url", "TEXT")
    _add_column(cur, "payments", "currency", "TEXT")
    ensure_indexes(cur)


MIGRATIONS: Sequence[Tuple[int, Callable[[sqlite3.Cursor], None]]] = ((2, _to_v2),)
CURRENT_SCHEMA_VERSION = MIGRATIONS[-1][0]


def read_schema_version(conn: sqlite3.Connection) -> Optional[int]:
    try:
        row = conn.execute(
            "SELECT value FROM metadata WHERE key = ?", (SCHEMA_VERSION_KEY,)
        ).fetchone()
    except sqlite3.OperationalError:
        return None
    return int(row[0]) if row else None


def _write_schema_version(conn: sqlite3.Connection, version: int) -> None:
    conn.execute(
        "INSERT INTO metadata (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
        f"updated_at = ({BASIC_UTC_NOW})",
        (SCHEMA_VERSION_KEY, str(version)),
    )


def apply_migrations(db_path: Path) -> int:
    """Bring the database at `db_path` up to date; return the schema version."""
    init_db(db_path)
    conn = sqlite3.connect(db_path)
    try:
        version = read_schema_version(conn) or 1
        for target, step in MIGRATIONS:
            if version >= target:
                continue
            try:
                step(conn.cursor())
            except sqlite3.DatabaseError:
                conn.rollback()
                logger.exception("migration to schema v%d failed", target)
                raise
            version = target
            logger.info("migrated %s to schema version %d", db_path, version)
        _write_schema_version(conn, version)
        conn.commit()
        return version
    finally:
        conn.close()
