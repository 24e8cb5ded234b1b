"""TOML configuration loader for the pantry module."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .models import StorageLocation
from .reconcile import DEFAULT_MIN_MATCH_SCORE, SmallQuantityThresholds
from .shelf_life.lookup import DEFAULT_STORAGE_LOCATIONS

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

DB_PATH_ENV = "MEALPLAN_PANTRY_DB"


@dataclass
class DatabaseConfig:
    path: str = "~/.config/mealplan/pantry.db"


@dataclass
class ReconcileConfig:
    small_quantity_grams: float = 5.0
    small_quantity_ml: float = 5.0
    min_match_score: float = DEFAULT_MIN_MATCH_SCORE
    merge_match_score: float = 0.8

    def thresholds(self) -> SmallQuantityThresholds:
        return SmallQuantityThresholds(
            grams=self.small_quantity_grams,
            millilitres=self.small_quantity_ml,
        )


@dataclass
class ShelfLifeConfig:
    data_path: str = ""
    expiring_soon_min_days: int = 2


@dataclass
class StorageConfig:
    locations: dict[str, StorageLocation] = field(
        default_factory=lambda: dict(DEFAULT_STORAGE_LOCATIONS)
    )


@dataclass
class SchedulerConfig:
    expire_schedule: str = "0 0 * * *"


@dataclass
class PantryConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    reconcile: ReconcileConfig = field(default_factory=ReconcileConfig)
    shelf_life: ShelfLifeConfig = field(default_factory=ShelfLifeConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)


def _score(value, key: str) -> float:
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"reconcile.{key} must be between 0 and 1, got {value}")
    return value


def _threshold(value, key: str) -> float:
    value = float(value)
    if value < 0:
        raise ValueError(f"reconcile.{key} must not be negative, got {value}")
    return value


def _locations(custom: dict) -> dict[str, StorageLocation]:
    merged = dict(DEFAULT_STORAGE_LOCATIONS)
    for category, text in custom.items():
        location = StorageLocation.parse(text)
        if location is None:
            raise ValueError(
                f"storage.locations: unknown location {text!r} for {category!r} "
                f"(fridge / freezer / cupboard / pantry)"
            )
        merged[category] = location
    return merged


def load_config(path: str | Path | None = None) -> PantryConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    The database path can be overridden via the MEALPLAN_PANTRY_DB
    environment variable.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    dbs = raw.get("database", {})
    rec = raw.get("reconcile", {})
    shl = raw.get("shelf_life", {})
    sto = raw.get("storage", {})
    sch = raw.get("scheduler", {})

    db_path = os.environ.get(DB_PATH_ENV) or dbs.get("path", DatabaseConfig.path)

    return PantryConfig(
        database=DatabaseConfig(path=db_path),
        reconcile=ReconcileConfig(
            small_quantity_grams=_threshold(
                rec.get("small_quantity_grams", 5.0), "small_quantity_grams"
            ),
            small_quantity_ml=_threshold(
                rec.get("small_quantity_ml", 5.0), "small_quantity_ml"
            ),
            min_match_score=_score(
                rec.get("min_match_score", DEFAULT_MIN_MATCH_SCORE), "min_match_score"
            ),
            merge_match_score=_score(
                rec.get("merge_match_score", 0.8), "merge_match_score"
            ),
        ),
        shelf_life=ShelfLifeConfig(
            data_path=shl.get("data_path", ""),
            expiring_soon_min_days=int(shl.get("expiring_soon_min_days", 2)),
        ),
        storage=StorageConfig(locations=_locations(sto.get("locations", {}))),
        scheduler=SchedulerConfig(
            expire_schedule=sch.get("expire_schedule", "0 0 * * *"),
        ),
    )
