"""Data models for inventory lines and purchased items."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any


class StorageLocation(str, Enum):
    FRIDGE = "fridge"
    FREEZER = "freezer"
    CUPBOARD = "cupboard"
    PANTRY = "pantry"

    @classmethod
    def parse(cls, text: str | None) -> StorageLocation | None:
        """Map free text ("Refrigerated", "frozen", "cabinet") to a location."""
        if not text:
            return None
        key = " ".join(text.strip().lower().replace("-", " ").replace("_", " ").split())
        return _LOCATION_ALIASES.get(key)


_LOCATION_ALIASES: dict[str, StorageLocation] = {
    "fridge": StorageLocation.FRIDGE,
    "refrigerator": StorageLocation.FRIDGE,
    "refrigerated": StorageLocation.FRIDGE,
    "chilled": StorageLocation.FRIDGE,
    "chiller": StorageLocation.FRIDGE,
    "freezer": StorageLocation.FREEZER,
    "frozen": StorageLocation.FREEZER,
    "cupboard": StorageLocation.CUPBOARD,
    "cabinet": StorageLocation.CUPBOARD,
    "shelf": StorageLocation.CUPBOARD,
    "room temp": StorageLocation.CUPBOARD,
    "room temperature": StorageLocation.CUPBOARD,
    "ambient": StorageLocation.CUPBOARD,
    "pantry": StorageLocation.PANTRY,
    "larder": StorageLocation.PANTRY,
}


class LineStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    INACTIVE = "inactive"


@dataclass
class InventoryLine:
    """A persisted stock entry owned by one user."""

    id: int
    owner_id: str
    name: str
    quantity: float
    unit: str
    category: str = "Other"
    location: StorageLocation | None = None
    purchase_date: date | None = None
    expiration_date: date | None = None
    expiry_is_estimated: bool = False
    status: LineStatus = LineStatus.ACTIVE
    added_by: str | None = None
    notes: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status is LineStatus.ACTIVE

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> InventoryLine:
        """Build a line from a database row dict (ISO date strings)."""
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            name=row["name"],
            quantity=float(row["quantity"]),
            unit=row["unit"] or "",
            category=row.get("category") or "Other",
            location=StorageLocation.parse(row.get("location")),
            purchase_date=_parse_date(row.get("purchase_date")),
            expiration_date=_parse_date(row.get("expiration_date")),
            expiry_is_estimated=bool(row.get("expiry_is_estimated")),
            status=LineStatus(row.get("status") or "active"),
            added_by=row.get("added_by"),
            notes=row.get("notes"),
        )


@dataclass
class NewInventoryLine:
    """Values for an inventory line that has not been stored yet."""

    owner_id: str
    name: str
    quantity: float
    unit: str
    category: str = "Other"
    location: StorageLocation | None = None
    purchase_date: date | None = None
    expiration_date: date | None = None
    expiry_is_estimated: bool = False
    added_by: str | None = None
    notes: str | None = None


@dataclass
class PurchasedItem:
    """A bought item (shopping-list entry or CSV row) to be put into stock."""

    name: str
    quantity: float
    unit: str
    category: str | None = None
    location: StorageLocation | None = None
    expiry_date: date | None = None
    notes: str | None = None


def _parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])
