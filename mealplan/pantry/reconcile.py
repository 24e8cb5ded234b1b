"""Reconcile recipe requirements against on-hand stock.

The compute step (:func:`calculate_deductions`) matches every requirement to
the best inventory line in a point-in-time snapshot and works out what would
remain, what is short and what should be bought. It never writes.

The apply step (:func:`apply_deductions`) turns the selected records into
conditional single-row quantity updates. A record whose line changed since
the snapshot is reported as a conflict instead of being applied, so applying
the same record twice can never deduct twice.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from .errors import InvalidInput
from .matching.normalizer import normalize_ingredient_name
from .matching.similarity import ConfidenceLevel, confidence_of, score_keys
from .models import InventoryLine, StorageLocation
from .store import InventoryStore
from .units import UnitKind, parse_quantity, to_base_amount, unit_kind, units_compatible

logger = logging.getLogger(__name__)

DEFAULT_MIN_MATCH_SCORE = 0.5
_PRECISION = 3


@dataclass(frozen=True)
class SmallQuantityThresholds:
    """Residue below these amounts counts as used up."""

    grams: float = 5.0
    millilitres: float = 5.0

    def for_unit(self, unit: str) -> float | None:
        match unit_kind(unit):
            case UnitKind.MASS:
                return self.grams
            case UnitKind.VOLUME:
                return self.millilitres
            case UnitKind.COUNT:
                return None


@dataclass
class RequirementLine:
    name: str
    quantity: float
    unit: str = ""


class MatchStatus(str, Enum):
    SUFFICIENT = "sufficient"
    SHORT = "short"
    NEGLIGIBLE = "negligible"
    UNIT_MISMATCH = "unit_mismatch"
    UNMATCHED = "unmatched"


class RecommendedAction(str, Enum):
    DEDUCT = "deduct"
    REDUCE_AND_BUY = "reduce_and_buy"
    ADD_TO_SHOPPING_LIST = "add_to_shopping_list"


@dataclass
class InventoryMatch:
    """The inventory line a requirement was matched to, as seen at compute time.

    ``quantity`` is what the requirement could draw on after earlier
    requirements in the same call; ``snapshot_quantity`` is the line as read.
    """

    item_id: int
    name: str
    quantity: float
    unit: str
    location: StorageLocation | None = None
    expiration_date: date | None = None
    snapshot_quantity: float | None = None

    @property
    def read_quantity(self) -> float:
        return self.quantity if self.snapshot_quantity is None else self.snapshot_quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "name": self.name,
            "quantity": self.quantity,
            "snapshot_quantity": self.snapshot_quantity,
            "unit": self.unit,
            "location": self.location.value if self.location else None,
            "expiration_date": (
                self.expiration_date.isoformat() if self.expiration_date else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> InventoryMatch:
        expiry = data.get("expiration_date")
        snapshot = data.get("snapshot_quantity")
        return cls(
            item_id=int(data["item_id"]),
            name=data["name"],
            quantity=float(data["quantity"]),
            unit=data.get("unit") or "",
            location=StorageLocation.parse(data.get("location")),
            expiration_date=date.fromisoformat(expiry) if expiry else None,
            snapshot_quantity=float(snapshot) if snapshot is not None else None,
        )


@dataclass
class DeductionRecord:
    """Outcome of reconciling one requirement line."""

    ingredient_name: str
    recipe_quantity: float
    recipe_unit: str
    status: MatchStatus
    action: RecommendedAction
    inventory_match: InventoryMatch | None
    match_score: float
    confidence: ConfidenceLevel
    current_inventory_quantity: float
    quantity_after_deduction: float
    shortfall: float
    buy_quantity: float
    is_small_quantity: bool
    selected: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "ingredient_name": self.ingredient_name,
            "recipe_quantity": self.recipe_quantity,
            "recipe_unit": self.recipe_unit,
            "status": self.status.value,
            "action": self.action.value,
            "inventory_match": (
                self.inventory_match.to_dict() if self.inventory_match else None
            ),
            "match_score": self.match_score,
            "confidence": self.confidence.value,
            "current_inventory_quantity": self.current_inventory_quantity,
            "quantity_after_deduction": self.quantity_after_deduction,
            "shortfall": self.shortfall,
            "buy_quantity": self.buy_quantity,
            "is_small_quantity": self.is_small_quantity,
            "selected": self.selected,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DeductionRecord:
        match_data = data.get("inventory_match")
        return cls(
            ingredient_name=data["ingredient_name"],
            recipe_quantity=float(data["recipe_quantity"]),
            recipe_unit=data.get("recipe_unit") or "",
            status=MatchStatus(data["status"]),
            action=RecommendedAction(data["action"]),
            inventory_match=InventoryMatch.from_dict(match_data) if match_data else None,
            match_score=float(data.get("match_score", 0.0)),
            confidence=ConfidenceLevel(data.get("confidence", "low")),
            current_inventory_quantity=float(data.get("current_inventory_quantity", 0.0)),
            quantity_after_deduction=float(data.get("quantity_after_deduction", 0.0)),
            shortfall=float(data.get("shortfall", 0.0)),
            buy_quantity=float(data.get("buy_quantity", 0.0)),
            is_small_quantity=bool(data.get("is_small_quantity", False)),
            selected=bool(data.get("selected", False)),
        )


class ApplyStatus(str, Enum):
    UPDATED = "updated"
    SKIPPED = "skipped"
    NOT_FOUND = "not_found"
    NOT_OWNED = "not_owned"
    CONFLICT = "conflict"


_FAILURES = frozenset({ApplyStatus.NOT_FOUND, ApplyStatus.NOT_OWNED, ApplyStatus.CONFLICT})


@dataclass
class LineApplyResult:
    ingredient_name: str
    item_id: int | None
    status: ApplyStatus
    previous_quantity: float | None = None
    new_quantity: float | None = None
    message: str = ""

    @property
    def failed(self) -> bool:
        return self.status in _FAILURES


@dataclass
class ApplyResult:
    updated_count: int = 0
    results: list[LineApplyResult] = field(default_factory=list)
    depleted_item_ids: list[int] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if r.failed)

    @property
    def partial_failure(self) -> bool:
        """Some, but not all, of the processed lines failed."""
        return 0 < self.failed_count < len(self.results)

    @property
    def success(self) -> bool:
        return self.failed_count == 0


def _round(value: float) -> float:
    return round(value, _PRECISION) + 0.0


def _coerce_requirement(req: RequirementLine | Mapping[str, Any], scale: float) -> RequirementLine:
    if isinstance(req, Mapping):
        try:
            req = RequirementLine(
                name=req.get("name") or req.get("ingredient_name") or "",
                quantity=float(req["quantity"]),
                unit=req.get("unit") or "",
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidInput(f"malformed requirement: {req!r}") from exc

    name = (req.name or "").strip()
    if not name:
        raise InvalidInput("requirement has an empty ingredient name")
    try:
        quantity = float(req.quantity) * scale
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"{name}: quantity is not a number: {req.quantity!r}") from exc
    if not math.isfinite(quantity) or quantity <= 0:
        raise InvalidInput(f"{name}: quantity must be positive, got {req.quantity!r}")
    return RequirementLine(name=name, quantity=quantity, unit=(req.unit or "").strip())


def _best_candidate(
    req: RequirementLine,
    lines: Sequence[InventoryLine],
    keys: Sequence[str],
    available: Sequence[float],
    min_score: float,
) -> tuple[int, float] | None:
    """Index and score of the best line for *req*, or None.

    Highest score wins; ties go to an exact (case-insensitive) name match,
    then to the larger quantity, then to snapshot order.
    """
    req_key = normalize_ingredient_name(req.name)
    req_name = req.name.lower()
    best: tuple[tuple, int, float] | None = None
    for index, (line, key) in enumerate(zip(lines, keys)):
        score = score_keys(req_key, key)
        if score < min_score or score <= 0.0:
            continue
        rank = (-score, line.name.strip().lower() != req_name, -available[index], index)
        if best is None or rank < best[0]:
            best = (rank, index, score)
    if best is None:
        return None
    return best[1], best[2]


def calculate_deductions(
    requirements: Iterable[RequirementLine | Mapping[str, Any]],
    inventory: Sequence[InventoryLine],
    thresholds: SmallQuantityThresholds | None = None,
    *,
    scale: float = 1.0,
    min_match_score: float = DEFAULT_MIN_MATCH_SCORE,
) -> list[DeductionRecord]:
    """Match each requirement against *inventory* and compute the outcome.

    Raises:
        InvalidInput: a requirement has an empty name or a non-positive
            quantity (after applying *scale*). Nothing is computed.
    """
    thresholds = thresholds or SmallQuantityThresholds()
    if not math.isfinite(scale) or scale <= 0:
        raise InvalidInput(f"scale must be positive, got {scale!r}")

    reqs = [_coerce_requirement(r, scale) for r in requirements]

    lines = [line for line in inventory if line.is_active]
    keys = [normalize_ingredient_name(line.name) for line in lines]
    # Stock left on each line after the default-selected requirements so far.
    available = [line.quantity for line in lines]

    records: list[DeductionRecord] = []
    for req in reqs:
        found = _best_candidate(req, lines, keys, available, min_match_score)
        if found is None:
            records.append(_unmatched(req))
            continue

        index, score = found
        line = lines[index]
        current = available[index]
        target = InventoryMatch(
            item_id=line.id,
            name=line.name,
            quantity=_round(current),
            unit=line.unit,
            location=line.location,
            expiration_date=line.expiration_date,
            snapshot_quantity=_round(line.quantity),
        )

        if not units_compatible(req.unit, line.unit):
            records.append(_unit_mismatch(req, target, score))
            continue

        record = _matched(req, target, score, current, thresholds)
        if record.selected:
            available[index] = record.quantity_after_deduction
        records.append(record)

    return records


def _unmatched(req: RequirementLine) -> DeductionRecord:
    required = _round(req.quantity)
    return DeductionRecord(
        ingredient_name=req.name,
        recipe_quantity=required,
        recipe_unit=req.unit,
        status=MatchStatus.UNMATCHED,
        action=RecommendedAction.ADD_TO_SHOPPING_LIST,
        inventory_match=None,
        match_score=0.0,
        confidence=ConfidenceLevel.LOW,
        current_inventory_quantity=0.0,
        quantity_after_deduction=0.0,
        shortfall=required,
        buy_quantity=required,
        is_small_quantity=False,
        selected=False,
    )


def _unit_mismatch(req: RequirementLine, target: InventoryMatch, score: float) -> DeductionRecord:
    required = _round(req.quantity)
    return DeductionRecord(
        ingredient_name=req.name,
        recipe_quantity=required,
        recipe_unit=req.unit,
        status=MatchStatus.UNIT_MISMATCH,
        action=RecommendedAction.ADD_TO_SHOPPING_LIST,
        inventory_match=target,
        match_score=_round(score),
        confidence=confidence_of(score),
        current_inventory_quantity=target.quantity,
        quantity_after_deduction=target.quantity,
        shortfall=required,
        buy_quantity=required,
        is_small_quantity=False,
        selected=False,
    )


def _matched(
    req: RequirementLine,
    target: InventoryMatch,
    score: float,
    current: float,
    thresholds: SmallQuantityThresholds,
) -> DeductionRecord:
    required = _round(req.quantity)
    remaining = round(current - req.quantity, 9)

    if remaining < 0:
        shortfall = _round(-remaining)
        status, action = MatchStatus.SHORT, RecommendedAction.REDUCE_AND_BUY
        after, buy, small, selected = 0.0, shortfall, False, False
    else:
        shortfall = 0.0
        threshold = thresholds.for_unit(target.unit)
        base = to_base_amount(remaining, target.unit)
        small = (
            threshold is not None
            and base is not None
            and 0 < base < threshold
        )
        if small:
            status, after = MatchStatus.NEGLIGIBLE, 0.0
        else:
            status, after = MatchStatus.SUFFICIENT, _round(remaining)
        action, buy, selected = RecommendedAction.DEDUCT, 0.0, True

    return DeductionRecord(
        ingredient_name=req.name,
        recipe_quantity=required,
        recipe_unit=req.unit,
        status=status,
        action=action,
        inventory_match=target,
        match_score=_round(score),
        confidence=confidence_of(score),
        current_inventory_quantity=target.quantity,
        quantity_after_deduction=after,
        shortfall=shortfall,
        buy_quantity=buy,
        is_small_quantity=small,
        selected=selected,
    )


def preview_deductions(
    store: InventoryStore,
    owner_id: str,
    requirements: Iterable[RequirementLine | Mapping[str, Any]],
    thresholds: SmallQuantityThresholds | None = None,
    *,
    scale: float = 1.0,
    min_match_score: float = DEFAULT_MIN_MATCH_SCORE,
) -> list[DeductionRecord]:
    """Read the owner's inventory once and run :func:`calculate_deductions`."""
    snapshot = store.get_active_inventory(owner_id)
    return calculate_deductions(
        requirements,
        snapshot,
        thresholds,
        scale=scale,
        min_match_score=min_match_score,
    )


def apply_deductions(
    records: Iterable[DeductionRecord],
    owner_id: str,
    store: InventoryStore,
) -> ApplyResult:
    """Write the selected records back to the store.

    Each line is re-read and checked for ownership, then updated with a
    conditional write that only succeeds if its quantity still equals the
    quantity read at compute time, less whatever this batch has already
    deducted from it. Failures are reported per line and do not stop the
    batch; :class:`StorageUnavailable` from the store aborts it.
    """
    result = ApplyResult()
    # Quantity this batch has written to each line.
    written: dict[int, float] = {}

    for record in records:
        if not record.selected:
            continue

        target = record.inventory_match
        if target is None or record.status in (MatchStatus.UNMATCHED, MatchStatus.UNIT_MISMATCH):
            result.results.append(
                LineApplyResult(
                    record.ingredient_name,
                    target.item_id if target else None,
                    ApplyStatus.SKIPPED,
                    message="no deductible inventory match",
                )
            )
            continue

        line_result = _apply_one(record, target, owner_id, store, written)
        if line_result.failed:
            logger.warning(
                "Deduction for %r on item %s not applied: %s",
                record.ingredient_name, target.item_id, line_result.status.value,
            )
        elif line_result.status is ApplyStatus.UPDATED:
            result.updated_count += 1
            if line_result.new_quantity == 0:
                result.depleted_item_ids.append(target.item_id)
        result.results.append(line_result)

    logger.info(
        "Applied %d of %d deductions for owner %s (%d failed)",
        result.updated_count, len(result.results), owner_id, result.failed_count,
    )
    return result


def _apply_one(
    record: DeductionRecord,
    target: InventoryMatch,
    owner_id: str,
    store: InventoryStore,
    written: dict[int, float],
) -> LineApplyResult:
    line = store.get_item(target.item_id)
    if line is None or not line.is_active:
        return LineApplyResult(
            record.ingredient_name, target.item_id, ApplyStatus.NOT_FOUND,
            message="inventory line no longer exists",
        )
    if line.owner_id != owner_id:
        return LineApplyResult(
            record.ingredient_name, target.item_id, ApplyStatus.NOT_OWNED,
            message="inventory line belongs to another user",
        )

    expected = written.get(target.item_id, target.read_quantity)
    new_quantity = max(0.0, _round(expected - _planned_use(record)))
    if not store.update_quantity(target.item_id, owner_id, expected, new_quantity):
        return LineApplyResult(
            record.ingredient_name, target.item_id, ApplyStatus.CONFLICT,
            previous_quantity=line.quantity,
            message=f"quantity changed since it was read (expected {expected:g})",
        )
    written[target.item_id] = new_quantity
    return LineApplyResult(
        record.ingredient_name, target.item_id, ApplyStatus.UPDATED,
        previous_quantity=expected,
        new_quantity=new_quantity,
    )


def _planned_use(record: DeductionRecord) -> float:
    """Amount the record takes off its line.

    A SHORT record uses up to the full requirement. The others take the
    requirement plus any negligible residue computed for them.
    """
    if record.status is MatchStatus.SHORT:
        return record.recipe_quantity
    return record.current_inventory_quantity - record.quantity_after_deduction


def parse_requirements(data: Any) -> list[RequirementLine]:
    """Build requirement lines from decoded JSON.

    Accepts either a mapping of name to quantity text (``{"milk": "2 cups"}``)
    or a list of ``{"name", "quantity", "unit"}`` objects.
    """
    lines: list[RequirementLine] = []
    if isinstance(data, Mapping):
        for name, amount in data.items():
            if isinstance(amount, (int, float)):
                lines.append(RequirementLine(str(name), float(amount), ""))
                continue
            try:
                quantity, unit = parse_quantity(str(amount))
            except ValueError as exc:
                raise InvalidInput(f"{name}: cannot parse quantity {amount!r}") from exc
            lines.append(RequirementLine(str(name), quantity, unit))
        return lines

    if isinstance(data, list):
        for entry in data:
            if not isinstance(entry, Mapping):
                raise InvalidInput(f"malformed requirement: {entry!r}")
            lines.append(_coerce_requirement(entry, 1.0))
        return lines

    raise InvalidInput("requirements must be a JSON object or array")
