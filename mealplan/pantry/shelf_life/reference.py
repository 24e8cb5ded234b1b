"""Shelf-life reference table loader (singleton)."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

from ..matching.normalizer import normalize_ingredient_name
from ..models import StorageLocation

DEFAULT_DATA_PATH = Path(__file__).parent / "data" / "uk_shelf_life.json"

_MIN_WORD_LENGTH = 3


@dataclass(frozen=True)
class ShelfLifeRecord:
    """Typical storage facts for one kind of food."""

    name: str
    category: str
    shelf_life_days: int
    location: StorageLocation


class MatchTier(str, Enum):
    EXACT = "exact"
    SUBSTRING = "substring"
    WORD = "word"


@dataclass(frozen=True)
class ShelfLifeMatch:
    record: ShelfLifeRecord
    tier: MatchTier


class ShelfLifeTable:
    """Immutable shelf-life reference data, loaded once per process.

    Usage:
        table = ShelfLifeTable.instance()
        record = table.lookup("2 chicken breasts")

    A table can also be built directly from records (tests, custom data).
    """

    _instance: ShelfLifeTable | None = None
    _lock = threading.Lock()

    def __init__(
        self,
        records: Iterable[ShelfLifeRecord] | None = None,
        data_path: str | Path | None = None,
    ) -> None:
        if records is None:
            records = _load_records(Path(data_path) if data_path else DEFAULT_DATA_PATH)
        self._records: tuple[ShelfLifeRecord, ...] = tuple(records)
        self._keys: tuple[str, ...] = tuple(
            normalize_ingredient_name(r.name) for r in self._records
        )
        self._words: tuple[tuple[str, ...], ...] = tuple(
            _significant_words(k) for k in self._keys
        )

    @classmethod
    def instance(cls) -> ShelfLifeTable:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (for testing)."""
        with cls._lock:
            cls._instance = None

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> tuple[ShelfLifeRecord, ...]:
        return self._records

    @property
    def categories(self) -> list[str]:
        return sorted({r.category for r in self._records})

    def match(self, name: str) -> ShelfLifeMatch | None:
        """Find the record for *name*, trying each tier in order.

        1. exact: equal canonical keys
        2. substring: either key contains the other
        3. word: any significant word of one contains, or is contained in,
           a significant word of the other
        """
        key = normalize_ingredient_name(name)
        if not key:
            return None

        for record, ref_key in zip(self._records, self._keys):
            if ref_key == key:
                return ShelfLifeMatch(record, MatchTier.EXACT)

        for record, ref_key in zip(self._records, self._keys):
            if ref_key and (ref_key in key or key in ref_key):
                return ShelfLifeMatch(record, MatchTier.SUBSTRING)

        words = _significant_words(key)
        if words:
            for record, ref_words in zip(self._records, self._words):
                for word in words:
                    if any(word in ref or ref in word for ref in ref_words):
                        return ShelfLifeMatch(record, MatchTier.WORD)

        return None

    def lookup(self, name: str) -> ShelfLifeRecord | None:
        found = self.match(name)
        return found.record if found else None


def _significant_words(key: str) -> tuple[str, ...]:
    return tuple(w for w in key.split() if len(w) >= _MIN_WORD_LENGTH)


def _load_records(data_path: Path) -> list[ShelfLifeRecord]:
    with open(data_path, encoding="utf-8") as f:
        raw = json.load(f)

    records: list[ShelfLifeRecord] = []
    for entry in raw["records"]:
        location = StorageLocation.parse(entry.get("location"))
        if location is None:
            raise ValueError(
                f"unknown storage location {entry.get('location')!r} for {entry['name']!r}"
            )
        records.append(
            ShelfLifeRecord(
                name=entry["name"],
                category=entry.get("category") or "Other",
                shelf_life_days=int(entry["shelf_life_days"]),
                location=location,
            )
        )
    return records
