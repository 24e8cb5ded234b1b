"""Put purchased items into inventory, merging with matching stock."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from .matching.duplicates import find_best_match_for_merge, suggest_merged_quantity
from .matching.normalizer import normalize_ingredient_name
from .models import InventoryLine, LineStatus, NewInventoryLine, PurchasedItem, StorageLocation
from .shelf_life.lookup import UNKNOWN_CATEGORY, estimate_shelf_life
from .shelf_life.reference import ShelfLifeTable
from .store import InventoryStore
from .units import parse_quantity, units_compatible

if TYPE_CHECKING:
    from .config import PantryConfig

logger = logging.getLogger(__name__)

DEFAULT_MERGE_SCORE = 0.8
_PRECISION = 3


@dataclass
class ImportSummary:
    created: int = 0
    merged: int = 0
    created_ids: list[int] = field(default_factory=list)
    merged_ids: list[int] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def _earlier_expiry(
    a: date | None, a_estimated: bool, b: date | None, b_estimated: bool
) -> tuple[date | None, bool]:
    if a is None:
        return b, b_estimated
    if b is None or a <= b:
        return a, a_estimated
    return b, b_estimated


def _later(a: date | None, b: date | None) -> date | None:
    if a is None or b is None:
        return a or b
    return max(a, b)


class InventoryImporter:
    """Converts purchased items (shopping list, CSV rows) into inventory lines.

    Usage:
        importer = InventoryImporter(InventoryDB(path))
        summary = importer.import_items("user-1", items)
    """

    def __init__(
        self,
        store: InventoryStore,
        table: ShelfLifeTable | None = None,
        config: PantryConfig | None = None,
    ) -> None:
        self._store = store
        if table is None:
            data_path = config.shelf_life.data_path if config else ""
            table = ShelfLifeTable(data_path=data_path) if data_path else ShelfLifeTable.instance()
        self._table = table
        self._merge_score = (
            config.reconcile.merge_match_score if config else DEFAULT_MERGE_SCORE
        )
        self._locations = config.storage.locations if config else None

    def import_items(
        self,
        owner_id: str,
        items: Iterable[PurchasedItem],
        purchase_date: date | None = None,
        *,
        auto_expiry: bool = True,
        auto_category: bool = True,
        auto_location: bool = True,
        merge: bool = True,
        added_by: str | None = None,
    ) -> ImportSummary:
        """Add each item to the owner's inventory.

        Invalid items are reported in ``errors`` and skipped; the rest of the
        batch still goes in. Storage failures propagate as StorageUnavailable.
        """
        purchased = purchase_date or date.today()
        summary = ImportSummary()
        stock = self._store.get_active_inventory(owner_id) if merge else []

        for item in items:
            error = _validate(item)
            if error:
                summary.errors.append(error)
                continue

            new_line = self._prepare(
                owner_id, item, purchased, auto_expiry, auto_category,
                auto_location, added_by,
            )

            target = self._find_merge_target(new_line, stock) if merge else None
            if target is not None and self._merge_into(target, new_line):
                summary.merged += 1
                if target.id not in summary.merged_ids:
                    summary.merged_ids.append(target.id)
                continue

            item_id = self._store.add_item(new_line)
            summary.created += 1
            summary.created_ids.append(item_id)
            if merge:
                stock.append(_as_line(item_id, new_line))

        logger.info(
            "Imported %d items for owner %s: %d created, %d merged, %d rejected",
            summary.created + summary.merged, owner_id,
            summary.created, summary.merged, len(summary.errors),
        )
        return summary

    def _prepare(
        self,
        owner_id: str,
        item: PurchasedItem,
        purchased: date,
        auto_expiry: bool,
        auto_category: bool,
        auto_location: bool,
        added_by: str | None,
    ) -> NewInventoryLine:
        estimate = estimate_shelf_life(
            item.name,
            purchased,
            category=item.category,
            locations=self._locations,
            table=self._table,
        )

        category = item.category or (estimate.category if auto_category else UNKNOWN_CATEGORY)
        location = item.location or (estimate.location if auto_location else None)
        if item.expiry_date is not None:
            expiry, estimated = item.expiry_date, False
        elif auto_expiry and estimate.expiry_date is not None:
            expiry, estimated = estimate.expiry_date, True
        else:
            expiry, estimated = None, False

        return NewInventoryLine(
            owner_id=owner_id,
            name=item.name.strip(),
            quantity=round(float(item.quantity), _PRECISION),
            unit=(item.unit or "").strip(),
            category=category,
            location=location,
            purchase_date=purchased,
            expiration_date=expiry,
            expiry_is_estimated=estimated,
            added_by=added_by,
            notes=item.notes,
        )

    def _find_merge_target(
        self, new_line: NewInventoryLine, stock: list[InventoryLine]
    ) -> InventoryLine | None:
        """Same canonical key first, then the most similar line.

        Only active lines with the same unit are considered.
        """
        compatible = [
            line for line in stock
            if line.is_active and units_compatible(line.unit, new_line.unit)
        ]
        key = normalize_ingredient_name(new_line.name)
        for line in compatible:
            if normalize_ingredient_name(line.name) == key:
                return line
        return find_best_match_for_merge(
            new_line.name,
            compatible,
            category=new_line.category,
            location=new_line.location,
            threshold=self._merge_score,
        )

    def _merge_into(self, target: InventoryLine, new_line: NewInventoryLine) -> bool:
        suggestion = suggest_merged_quantity(
            target.quantity, new_line.quantity, target.unit, new_line.unit
        )
        if not suggestion.can_merge:
            return False

        quantity = round(suggestion.quantity, _PRECISION)
        expiry, estimated = _earlier_expiry(
            target.expiration_date, target.expiry_is_estimated,
            new_line.expiration_date, new_line.expiry_is_estimated,
        )
        purchased = _later(target.purchase_date, new_line.purchase_date)

        if not self._store.merge_item(
            target.id, target.owner_id, target.quantity, quantity,
            expiry, estimated, purchased,
        ):
            logger.warning(
                "Inventory item %s changed while merging %r; adding a separate line",
                target.id, new_line.name,
            )
            return False

        target.quantity = quantity
        target.expiration_date = expiry
        target.expiry_is_estimated = estimated
        target.purchase_date = purchased
        return True


def _validate(item: PurchasedItem) -> str | None:
    name = (item.name or "").strip()
    if not name:
        return "item has an empty name"
    try:
        quantity = float(item.quantity)
    except (TypeError, ValueError):
        return f"{name}: quantity is not a number: {item.quantity!r}"
    if not math.isfinite(quantity) or quantity <= 0:
        return f"{name}: quantity must be positive, got {item.quantity!r}"
    # Stored quantities keep three decimals.
    if round(quantity, _PRECISION) <= 0:
        return f"{name}: quantity is too small to record: {item.quantity!r}"
    return None


def _as_line(item_id: int, line: NewInventoryLine) -> InventoryLine:
    return InventoryLine(
        id=item_id,
        owner_id=line.owner_id,
        name=line.name,
        quantity=line.quantity,
        unit=line.unit,
        category=line.category,
        location=line.location,
        purchase_date=line.purchase_date,
        expiration_date=line.expiration_date,
        expiry_is_estimated=line.expiry_is_estimated,
        status=LineStatus.ACTIVE,
        added_by=line.added_by,
        notes=line.notes,
    )


def items_from_rows(rows: Iterable[Mapping[str, Any]]) -> tuple[list[PurchasedItem], list[str]]:
    """Turn CSV-style dict rows into purchased items.

    Recognised columns: ``name`` (or ``item``), ``quantity``, ``unit``,
    ``category``, ``location``, ``expiry``. A quantity like "2 kg" with an
    empty unit column is split into amount and unit. Rows that cannot be read
    are reported as ``"row N: ..."`` errors.
    """
    items: list[PurchasedItem] = []
    errors: list[str] = []

    for number, row in enumerate(rows, start=1):
        row = {
            k.strip().lower(): str(v or "").strip()
            for k, v in row.items()
            if k is not None
        }
        name = row.get("name") or row.get("item") or ""
        if not name:
            errors.append(f"row {number}: missing item name")
            continue

        unit = row.get("unit", "")
        quantity_text = row.get("quantity", "")
        try:
            if not quantity_text:
                quantity = 1.0
            elif unit:
                quantity = float(quantity_text)
            else:
                quantity, unit = parse_quantity(quantity_text)
        except ValueError:
            errors.append(f"row {number}: invalid quantity {quantity_text!r}")
            continue

        location = None
        if row.get("location"):
            location = StorageLocation.parse(row["location"])
            if location is None:
                errors.append(f"row {number}: unknown location {row['location']!r}")
                continue

        expiry = None
        if row.get("expiry"):
            try:
                expiry = date.fromisoformat(row["expiry"])
            except ValueError:
                errors.append(f"row {number}: invalid expiry date {row['expiry']!r}")
                continue

        items.append(
            PurchasedItem(
                name=name,
                quantity=quantity,
                unit=unit,
                category=row.get("category") or None,
                location=location,
                expiry_date=expiry,
            )
        )

    return items, errors
