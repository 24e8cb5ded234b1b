"""Duplicate detection over ingredient names.

``find_duplicates`` partitions records by canonical key and reports groups
with two or more members. ``check_for_duplicates`` and
``find_best_match_for_merge`` compare one new name against existing stock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterable, Sequence

from ..units import canonical_unit, units_compatible
from .normalizer import normalize_ingredient_name
from .similarity import ConfidenceLevel, confidence_of, score_keys

if TYPE_CHECKING:
    from ..models import InventoryLine

DUPLICATE_THRESHOLD = 0.7
MERGE_THRESHOLD = 0.8
CATEGORY_BOOST = 0.1
LOCATION_BOOST = 0.05


class MatchType(str, Enum):
    EXACT = "exact"
    SIMILAR = "similar"
    NONE = "none"


@dataclass
class DuplicateGroup:
    normalized_name: str
    items: list[Any] = field(default_factory=list)


@dataclass
class DuplicateCheck:
    is_duplicate: bool
    match_type: MatchType
    matching_lines: list[InventoryLine]
    confidence: ConfidenceLevel
    scores: list[float] = field(default_factory=list)


@dataclass
class MergeSuggestion:
    quantity: float
    unit: str
    can_merge: bool


def _item_name(item: Any) -> str:
    if isinstance(item, dict):
        return item.get("name") or item.get("item_name") or ""
    return getattr(item, "name", "") or ""


def group_by_normalized_name(
    items: Iterable[Any], key: Callable[[Any], str] | None = None
) -> dict[str, list[Any]]:
    """Partition *items* by the canonical key of their name.

    Items may be dicts (``name`` or ``item_name``) or objects with ``.name``;
    pass *key* to extract the name some other way. Every item lands in exactly
    one group, in input order.
    """
    get_name = key or _item_name
    groups: dict[str, list[Any]] = {}
    for item in items:
        groups.setdefault(normalize_ingredient_name(get_name(item)), []).append(item)
    return groups


def find_duplicates(
    items: Iterable[Any], key: Callable[[Any], str] | None = None
) -> list[DuplicateGroup]:
    """Return the groups of items sharing a non-empty canonical key."""
    return [
        DuplicateGroup(normalized_name=name, items=members)
        for name, members in group_by_normalized_name(items, key).items()
        if name and len(members) >= 2
    ]


def check_for_duplicates(
    name: str,
    existing_lines: Sequence[InventoryLine],
    category: str | None = None,
    location: Any = None,
    threshold: float = DUPLICATE_THRESHOLD,
) -> DuplicateCheck:
    """Check whether *name* duplicates any active line in *existing_lines*.

    Lines with the same canonical key are exact matches. Otherwise every line
    scoring at least *threshold* is a similar match; its score is boosted for
    an equal category and an equal location, and the matches are returned
    best first.
    """
    key = normalize_ingredient_name(name)
    if not key:
        return DuplicateCheck(False, MatchType.NONE, [], ConfidenceLevel.LOW)

    active = [line for line in existing_lines if line.is_active]

    exact = [line for line in active if normalize_ingredient_name(line.name) == key]
    if exact:
        return DuplicateCheck(
            True, MatchType.EXACT, exact, ConfidenceLevel.HIGH, [1.0] * len(exact)
        )

    scored: list[tuple[float, int, InventoryLine]] = []
    for index, line in enumerate(active):
        score = score_keys(key, normalize_ingredient_name(line.name))
        if score < threshold:
            continue
        if category and line.category == category:
            score += CATEGORY_BOOST
        if location is not None and line.location == location:
            score += LOCATION_BOOST
        scored.append((min(1.0, score), index, line))

    if not scored:
        return DuplicateCheck(False, MatchType.NONE, [], ConfidenceLevel.LOW)

    scored.sort(key=lambda s: (-s[0], s[1]))
    return DuplicateCheck(
        is_duplicate=True,
        match_type=MatchType.SIMILAR,
        matching_lines=[line for _, _, line in scored],
        confidence=confidence_of(scored[0][0]),
        scores=[score for score, _, _ in scored],
    )


def find_best_match_for_merge(
    name: str,
    existing_lines: Sequence[InventoryLine],
    category: str | None = None,
    location: Any = None,
    threshold: float = MERGE_THRESHOLD,
) -> InventoryLine | None:
    """Return the best existing line to merge *name* into, or None."""
    result = check_for_duplicates(name, existing_lines, category, location, threshold)
    if result.is_duplicate:
        return result.matching_lines[0]
    return None


def suggest_merged_quantity(
    existing_quantity: float,
    new_quantity: float,
    existing_unit: str,
    new_unit: str,
) -> MergeSuggestion:
    """Sum two quantities when their units are the same, else keep the existing one."""
    if units_compatible(existing_unit, new_unit):
        return MergeSuggestion(
            quantity=existing_quantity + new_quantity,
            unit=existing_unit or canonical_unit(new_unit),
            can_merge=True,
        )
    return MergeSuggestion(quantity=existing_quantity, unit=existing_unit, can_merge=False)
