"""Cooking unit canonicalisation and quantity parsing.

Units are only ever folded to a canonical spelling ("Grams" -> "g",
"tablespoons" -> "tbsp"). Stock is never combined across different units; the
gram/millilitre factors below are used solely to compare a leftover amount
against the small-quantity threshold of its kind.
"""

from __future__ import annotations

import re
from enum import Enum


class UnitKind(str, Enum):
    MASS = "mass"
    VOLUME = "volume"
    COUNT = "count"


# Spelling aliases → canonical unit
_UNIT_ALIASES: dict[str, str] = {
    "g": "g",
    "gr": "g",
    "gram": "g",
    "grams": "g",
    "gramme": "g",
    "grammes": "g",
    "kg": "kg",
    "kgs": "kg",
    "kilo": "kg",
    "kilos": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    "mg": "mg",
    "milligram": "mg",
    "milligrams": "mg",
    "oz": "oz",
    "ounce": "oz",
    "ounces": "oz",
    "lb": "lb",
    "lbs": "lb",
    "pound": "lb",
    "pounds": "lb",
    "ml": "ml",
    "millilitre": "ml",
    "millilitres": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "cl": "cl",
    "l": "l",
    "ltr": "l",
    "litre": "l",
    "litres": "l",
    "liter": "l",
    "liters": "l",
    "tsp": "tsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "tbsp": "tbsp",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "cup": "cup",
    "cups": "cup",
    "fl oz": "fl oz",
    "pint": "pint",
    "pints": "pint",
    "pc": "piece",
    "pcs": "piece",
    "piece": "piece",
    "pieces": "piece",
    "item": "item",
    "items": "item",
    "unit": "unit",
    "units": "unit",
    "x": "unit",
    "each": "unit",
    "pack": "pack",
    "packs": "pack",
    "packet": "pack",
    "packets": "pack",
    "tin": "tin",
    "tins": "tin",
    "can": "tin",
    "cans": "tin",
    "jar": "jar",
    "jars": "jar",
    "bottle": "bottle",
    "bottles": "bottle",
    "bunch": "bunch",
    "bunches": "bunch",
    "clove": "clove",
    "cloves": "clove",
    "slice": "slice",
    "slices": "slice",
    "loaf": "loaf",
    "loaves": "loaf",
    "dozen": "dozen",
}

# Canonical mass units → grams
_MASS_TO_GRAMS: dict[str, float] = {
    "mg": 0.001,
    "g": 1.0,
    "kg": 1000.0,
    "oz": 28.3495,
    "lb": 453.592,
}

# Canonical volume units → millilitres (UK measures)
_VOLUME_TO_ML: dict[str, float] = {
    "ml": 1.0,
    "cl": 10.0,
    "l": 1000.0,
    "tsp": 5.0,
    "tbsp": 15.0,
    "cup": 250.0,
    "fl oz": 28.4131,
    "pint": 568.261,
}

_FRACTIONS: dict[str, float] = {
    "½": 0.5,
    "⅓": 1 / 3,
    "⅔": 2 / 3,
    "¼": 0.25,
    "¾": 0.75,
}

_QTY_PATTERN = re.compile(
    r"^\s*(?P<amount>\d+(?:\.\d+)?(?:\s+\d+/\d+|/\d+)?|[½⅓⅔¼¾])?\s*(?P<unit>.*?)\s*$"
)


def canonical_unit(unit: str | None) -> str:
    """Return the canonical spelling of *unit* (lowercase, aliases folded)."""
    if not unit:
        return ""
    key = " ".join(unit.strip().lower().rstrip(".").split())
    return _UNIT_ALIASES.get(key, key)


def units_compatible(unit_a: str | None, unit_b: str | None) -> bool:
    """True when two unit strings name the same unit."""
    return canonical_unit(unit_a) == canonical_unit(unit_b)


def unit_kind(unit: str | None) -> UnitKind:
    canonical = canonical_unit(unit)
    if canonical in _MASS_TO_GRAMS:
        return UnitKind.MASS
    if canonical in _VOLUME_TO_ML:
        return UnitKind.VOLUME
    return UnitKind.COUNT


def to_base_amount(quantity: float, unit: str | None) -> float | None:
    """Express *quantity* in grams (mass) or millilitres (volume).

    Returns None for count-like units, which have no base amount.
    """
    canonical = canonical_unit(unit)
    if canonical in _MASS_TO_GRAMS:
        return quantity * _MASS_TO_GRAMS[canonical]
    if canonical in _VOLUME_TO_ML:
        return quantity * _VOLUME_TO_ML[canonical]
    return None


def parse_quantity(text: str) -> tuple[float, str]:
    """Parse a quantity string such as "2 cups", "500g", "1 1/2 tbsp" or "3".

    Returns:
        (amount, unit) tuple. The unit is returned as written (stripped);
        a missing amount defaults to 1.0.

    Raises:
        ValueError: if the amount cannot be parsed.
    """
    text = (text or "").strip()
    if not text:
        raise ValueError("empty quantity")

    m = _QTY_PATTERN.match(text)
    if m is None or m.group("amount") is None:
        return (1.0, text)
    return (_parse_number(m.group("amount")), m.group("unit"))


def _parse_number(s: str) -> float:
    s = s.strip()
    if s in _FRACTIONS:
        return _FRACTIONS[s]

    whole = 0.0
    if " " in s:
        head, s = s.split(None, 1)
        whole = float(head)

    if "/" in s:
        num, den = s.split("/", 1)
        try:
            return whole + float(num) / float(den)
        except ZeroDivisionError as exc:
            raise ValueError(f"invalid fraction: {s!r}") from exc

    return whole + float(s)
