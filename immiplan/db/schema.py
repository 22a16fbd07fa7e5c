"""Database schema DDL definitions and initialization utilities.

Tables:
  - costs: cost line items, priced in their own (home) currency
  - payments: partial payments owned by a cost (cascade on delete); the
    currency column is nullable for rows written before payments carried one
  - metadata: key/value store (schema version, display currency, rate settings)
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

COSTS_DDL = f"""
CREATE TABLE IF NOT EXISTS costs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT,
    image_url TEXT,
    category TEXT NOT NULL,
    currency TEXT NOT NULL, -- 'BRL' | 'USD' | 'EUR'
    quantity INTEGER NOT NULL CHECK (quantity > 0),
    unit_value REAL NOT NULL CHECK (unit_value > 0),
    tax REAL,
    fee REAL,
    delivery_fee REAL,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

PAYMENTS_DDL = f"""
CREATE TABLE IF NOT EXISTS payments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    cost_id INTEGER NOT NULL,
    amount REAL NOT NULL CHECK (amount > 0),
    currency TEXT, -- NULL on legacy rows: falls back to the cost currency
    date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    description TEXT,
    receipt TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (cost_id) REFERENCES costs(id) ON DELETE CASCADE
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

COSTS_CATEGORY_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_costs_category ON costs(category);"
)
PAYMENTS_COST_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_payments_cost_date ON payments(cost_id, date);"
)

DDL_ORDER: Sequence[str] = (
    COSTS_DDL,
    PAYMENTS_DDL,
    METADATA_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        ensure_indexes(cur)
        conn.commit()
    finally:
        conn.close()


def ensure_indexes(cur: sqlite3.Cursor) -> None:
    """Create indexes, tolerating legacy schemas missing indexed columns."""
    for ddl in (COSTS_CATEGORY_INDEX_DDL, PAYMENTS_COST_INDEX_DDL):
        try:
            cur.execute(ddl)
        except sqlite3.OperationalError:
            # Legacy tables may lack columns; migration handles them.
            continue
