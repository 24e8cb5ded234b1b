"""Database schema definitions and migration helpers."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..errors import StorageUnavailable

_SCHEMA_VERSION = 1

_DDL = """
CREATE TABLE IF NOT EXISTS inventory_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id TEXT NOT NULL,
    name TEXT NOT NULL,
    category TEXT NOT NULL DEFAULT 'Other',
    quantity REAL NOT NULL DEFAULT 1.0 CHECK (quantity >= 0),
    unit TEXT NOT NULL DEFAULT '',
    location TEXT,
    purchase_date TEXT,
    expiration_date TEXT,
    expiry_is_estimated INTEGER NOT NULL DEFAULT 0,
    status TEXT NOT NULL DEFAULT 'active'
        CHECK (status IN ('active', 'expired', 'inactive')),
    added_by TEXT,
    notes TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now', 'localtime')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now', 'localtime'))
);

CREATE INDEX IF NOT EXISTS idx_inventory_owner_status ON inventory_items(owner_id, status);
CREATE INDEX IF NOT EXISTS idx_inventory_expiration ON inventory_items(expiration_date);
CREATE INDEX IF NOT EXISTS idx_inventory_name ON inventory_items(name);

CREATE TABLE IF NOT EXISTS inventory_settings (
    owner_id TEXT PRIMARY KEY,
    small_quantity_grams REAL NOT NULL DEFAULT 5.0,
    small_quantity_ml REAL NOT NULL DEFAULT 5.0,
    skip_inventory_check INTEGER NOT NULL DEFAULT 0,
    updated_at TEXT NOT NULL DEFAULT (datetime('now', 'localtime'))
);

CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);
"""


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise driver and filesystem errors as StorageUnavailable."""
    try:
        yield
    except (sqlite3.Error, OSError) as exc:
        raise StorageUnavailable(f"{action} failed: {exc}") from exc


def ensure_schema(db_path: str | Path) -> sqlite3.Connection:
    """Open (or create) the database and ensure the schema is up to date.

    Args:
        db_path: Path to the SQLite database file, or ":memory:".

    Returns:
        An open sqlite3.Connection with the schema applied.

    Raises:
        StorageUnavailable: the file cannot be created or opened.
    """
    with storage_errors("opening the inventory database"):
        if str(db_path) == ":memory:":
            conn = sqlite3.connect(":memory:")
        else:
            db_path = Path(db_path).expanduser()
            db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")

        # Check current schema version
        try:
            row = conn.execute("SELECT version FROM schema_version").fetchone()
            current_version = row["version"] if row else 0
        except sqlite3.OperationalError:
            current_version = 0

        if current_version < _SCHEMA_VERSION:
            conn.executescript(_DDL)
            conn.execute("DELETE FROM schema_version")
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (_SCHEMA_VERSION,),
            )
            conn.commit()

    return conn
