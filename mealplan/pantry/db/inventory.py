"""Inventory line CRUD operations."""

from __future__ import annotations

import logging
import sqlite3
from datetime import date
from pathlib import Path

from ..models import InventoryLine, NewInventoryLine
from ..store import InventoryStore
from .schema import ensure_schema, storage_errors

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "~/.config/mealplan/pantry.db"

# Quantities are kept to 3 decimal places, so anything closer than half a
# unit in the last place is the same quantity.
QUANTITY_TOLERANCE = 5e-4


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value else None


class InventoryDB(InventoryStore):
    """Manages the inventory_items table."""

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

    def add_item(self, line: NewInventoryLine) -> int:
        """Insert one active line and return its id."""
        with storage_errors("adding an inventory item"):
            conn = self._get_conn()
            cur = conn.execute(
                """INSERT INTO inventory_items
                   (owner_id, name, category, quantity, unit, location,
                    purchase_date, expiration_date, expiry_is_estimated,
                    added_by, notes, status)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 'active')""",
                (
                    line.owner_id,
                    line.name,
                    line.category or "Other",
                    line.quantity,
                    line.unit,
                    line.location.value if line.location else None,
                    _iso(line.purchase_date),
                    _iso(line.expiration_date),
                    int(line.expiry_is_estimated),
                    line.added_by,
                    line.notes,
                ),
            )
            conn.commit()
        return cur.lastrowid

    def get_active_inventory(self, owner_id: str) -> list[InventoryLine]:
        """Return the owner's lines with status='active', oldest first."""
        with storage_errors("reading inventory"):
            rows = self._get_conn().execute(
                """SELECT * FROM inventory_items
                   WHERE owner_id = ? AND status = 'active'
                   ORDER BY id""",
                (owner_id,),
            ).fetchall()
        return [InventoryLine.from_row(dict(r)) for r in rows]

    def get_item(self, item_id: int) -> InventoryLine | None:
        with storage_errors("reading an inventory item"):
            row = self._get_conn().execute(
                "SELECT * FROM inventory_items WHERE id = ?", (item_id,)
            ).fetchone()
        return InventoryLine.from_row(dict(row)) if row else None

    def update_quantity(
        self,
        item_id: int,
        owner_id: str,
        expected_quantity: float,
        new_quantity: float,
    ) -> bool:
        """Set a line's quantity if it still holds *expected_quantity*.

        Returns:
            True if the row was updated, False if it is missing, not owned,
            inactive or its quantity changed in the meantime.
        """
        with storage_errors("updating an inventory quantity"):
            conn = self._get_conn()
            cur = conn.execute(
                """UPDATE inventory_items
                   SET quantity = ?,
                       updated_at = datetime('now', 'localtime')
                   WHERE id = ?
                     AND owner_id = ?
                     AND status = 'active'
                     AND ABS(quantity - ?) < ?""",
                (max(0.0, new_quantity), item_id, owner_id,
                 expected_quantity, QUANTITY_TOLERANCE),
            )
            conn.commit()
        return cur.rowcount == 1

    def merge_item(
        self,
        item_id: int,
        owner_id: str,
        expected_quantity: float,
        new_quantity: float,
        expiration_date: date | None,
        expiry_is_estimated: bool,
        purchase_date: date | None,
    ) -> bool:
        """Fold a new purchase into an existing line.

        Conditional on the stored quantity exactly like :meth:`update_quantity`.
        """
        with storage_errors("merging an inventory item"):
            conn = self._get_conn()
            cur = conn.execute(
                """UPDATE inventory_items
                   SET quantity = ?,
                       expiration_date = ?,
                       expiry_is_estimated = ?,
                       purchase_date = ?,
                       updated_at = datetime('now', 'localtime')
                   WHERE id = ?
                     AND owner_id = ?
                     AND status = 'active'
                     AND ABS(quantity - ?) < ?""",
                (
                    max(0.0, new_quantity),
                    _iso(expiration_date),
                    int(expiry_is_estimated),
                    _iso(purchase_date),
                    item_id,
                    owner_id,
                    expected_quantity,
                    QUANTITY_TOLERANCE,
                ),
            )
            conn.commit()
        return cur.rowcount == 1

    def get_expiring_soon(
        self, owner_id: str | None = None, days: int = 3, today: date | None = None
    ) -> list[InventoryLine]:
        """Return active lines expiring within the given number of days."""
        target = (today or date.today()).isoformat()
        sql = """SELECT * FROM inventory_items
                 WHERE status = 'active'
                   AND expiration_date IS NOT NULL
                   AND expiration_date <= date(?, '+' || ? || ' days')"""
        params: list = [target, days]
        if owner_id is not None:
            sql += " AND owner_id = ?"
            params.append(owner_id)
        sql += " ORDER BY expiration_date, id"
        with storage_errors("reading expiring items"):
            rows = self._get_conn().execute(sql, params).fetchall()
        return [InventoryLine.from_row(dict(r)) for r in rows]

    def expire_items(self, today: date | None = None) -> list[InventoryLine]:
        """Set status='expired' on active lines past their expiration_date.

        Returns:
            The lines that were expired, as they were read.
        """
        cutoff = (today or date.today()).isoformat()
        expired: list[InventoryLine] = []
        with storage_errors("expiring inventory items"):
            conn = self._get_conn()
            rows = conn.execute(
                """SELECT * FROM inventory_items
                   WHERE status = 'active'
                     AND expiration_date IS NOT NULL
                     AND expiration_date < ?
                   ORDER BY owner_id, expiration_date, id""",
                (cutoff,),
            ).fetchall()
            for row in rows:
                cur = conn.execute(
                    """UPDATE inventory_items
                       SET status = 'expired',
                           updated_at = datetime('now', 'localtime')
                       WHERE id = ? AND status = 'active'""",
                    (row["id"],),
                )
                if cur.rowcount == 1:
                    expired.append(InventoryLine.from_row(dict(row)))
            conn.commit()
        logger.info("Marked %d inventory items expired", len(expired))
        return expired

    def mark_expired(self, today: date | None = None) -> int:
        """Expire stale lines and return how many were updated."""
        return len(self.expire_items(today))

    def deactivate_item(self, item_id: int, owner_id: str) -> bool:
        """Soft-delete a line (status='inactive')."""
        with storage_errors("deactivating an inventory item"):
            conn = self._get_conn()
            cur = conn.execute(
                """UPDATE inventory_items
                   SET status = 'inactive',
                       updated_at = datetime('now', 'localtime')
                   WHERE id = ? AND owner_id = ?""",
                (item_id, owner_id),
            )
            conn.commit()
        return cur.rowcount == 1

    def delete_item(self, item_id: int, owner_id: str) -> bool:
        """Delete an inventory line by ID."""
        with storage_errors("deleting an inventory item"):
            conn = self._get_conn()
            cur = conn.execute(
                "DELETE FROM inventory_items WHERE id = ? AND owner_id = ?",
                (item_id, owner_id),
            )
            conn.commit()
        return cur.rowcount == 1
