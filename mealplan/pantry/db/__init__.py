"""SQLite storage for inventory lines and per-owner settings."""

from .inventory import InventoryDB
from .schema import ensure_schema
from .settings import InventorySettings, SettingsDB

__all__ = [
    "InventoryDB",
    "InventorySettings",
    "SettingsDB",
    "ensure_schema",
]
