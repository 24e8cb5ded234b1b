"""Per-owner inventory settings backed by SQLite."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path

from ..reconcile import SmallQuantityThresholds
from .inventory import DEFAULT_DB_PATH
from .schema import ensure_schema, storage_errors


@dataclass
class InventorySettings:
    owner_id: str
    small_quantity_grams: float = 5.0
    small_quantity_ml: float = 5.0
    skip_inventory_check: bool = False

    def thresholds(self) -> SmallQuantityThresholds:
        return SmallQuantityThresholds(
            grams=self.small_quantity_grams,
            millilitres=self.small_quantity_ml,
        )


class SettingsDB:
    """Stores small-quantity thresholds and flags for each owner."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH) -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def get(self, owner_id: str) -> InventorySettings | None:
        """Return the owner's stored settings, or None if never saved."""
        with storage_errors("reading inventory settings"):
            row = self._get_conn().execute(
                "SELECT * FROM inventory_settings WHERE owner_id = ?",
                (owner_id,),
            ).fetchone()
        if row is None:
            return None
        return InventorySettings(
            owner_id=row["owner_id"],
            small_quantity_grams=row["small_quantity_grams"],
            small_quantity_ml=row["small_quantity_ml"],
            skip_inventory_check=bool(row["skip_inventory_check"]),
        )

    def get_or_default(
        self, owner_id: str, default: SmallQuantityThresholds | None = None
    ) -> InventorySettings:
        """Stored settings, or settings built from *default* thresholds."""
        stored = self.get(owner_id)
        if stored is not None:
            return stored
        default = default or SmallQuantityThresholds()
        return InventorySettings(
            owner_id=owner_id,
            small_quantity_grams=default.grams,
            small_quantity_ml=default.millilitres,
        )

    def put(self, settings: InventorySettings) -> None:
        """Insert or update an owner's settings."""
        if settings.small_quantity_grams < 0 or settings.small_quantity_ml < 0:
            raise ValueError("small-quantity thresholds must not be negative")
        with storage_errors("saving inventory settings"):
            conn = self._get_conn()
            conn.execute(
                """INSERT INTO inventory_settings
                   (owner_id, small_quantity_grams, small_quantity_ml,
                    skip_inventory_check)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(owner_id) DO UPDATE SET
                     small_quantity_grams=excluded.small_quantity_grams,
                     small_quantity_ml=excluded.small_quantity_ml,
                     skip_inventory_check=excluded.skip_inventory_check,
                     updated_at=datetime('now', 'localtime')""",
                (
                    settings.owner_id,
                    settings.small_quantity_grams,
                    settings.small_quantity_ml,
                    int(settings.skip_inventory_check),
                ),
            )
            conn.commit()
