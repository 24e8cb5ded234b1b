"""Shelf-life lookup, category/location inference and expiry estimation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Mapping

from ..matching.normalizer import normalize_ingredient_name
from ..models import StorageLocation
from .reference import ShelfLifeRecord, ShelfLifeTable

UNKNOWN_CATEGORY = "Other"

# Category → default storage location
DEFAULT_STORAGE_LOCATIONS: dict[str, StorageLocation] = {
    "Fresh Produce": StorageLocation.FRIDGE,
    "Meat & Fish": StorageLocation.FRIDGE,
    "Dairy & Eggs": StorageLocation.FRIDGE,
    "Chilled & Deli": StorageLocation.FRIDGE,
    "Frozen": StorageLocation.FREEZER,
    "Bakery": StorageLocation.CUPBOARD,
    "Cupboard Staples": StorageLocation.CUPBOARD,
    "Baking & Cooking Ingredients": StorageLocation.CUPBOARD,
    "Breakfast": StorageLocation.CUPBOARD,
    "Snacks & Treats": StorageLocation.CUPBOARD,
    "Drinks": StorageLocation.CUPBOARD,
}

# Keyword → category mapping for names missing from the reference table
_CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "Meat & Fish": [
        "chicken", "beef", "pork", "lamb", "turkey", "duck", "mince", "steak",
        "bacon", "sausage", "ham", "gammon", "chorizo", "salami", "venison",
        "fish", "salmon", "cod", "haddock", "tuna", "mackerel", "prawn",
        "mussel", "squid", "crab", "sardine", "trout", "anchovy",
    ],
    "Dairy & Eggs": [
        "milk", "cheese", "cheddar", "mozzarella", "parmesan", "feta",
        "butter", "cream", "yoghurt", "egg", "creme fraiche", "quark",
    ],
    "Fresh Produce": [
        "apple", "banana", "orange", "lemon", "lime", "grape", "berry",
        "strawberry", "raspberry", "blueberry", "pear", "peach", "plum",
        "melon", "mango", "pineapple", "avocado", "tomato", "potato",
        "onion", "garlic", "carrot", "pepper", "courgette", "aubergine",
        "lettuce", "spinach", "kale", "cabbage", "broccoli", "cauliflower",
        "mushroom", "cucumber", "celery", "leek", "parsnip", "swede",
        "beetroot", "sweetcorn", "pea", "bean", "herb", "basil", "coriander",
        "parsley", "mint", "ginger", "chilli", "rocket", "salad",
    ],
    "Bakery": [
        "bread", "loaf", "roll", "bagel", "croissant", "baguette", "wrap",
        "tortilla", "pitta", "naan", "crumpet", "muffin", "brioche",
    ],
    "Baking & Cooking Ingredients": [
        "flour", "sugar", "yeast", "baking powder", "bicarbonate",
        "cornflour", "cocoa", "vanilla", "oil", "vinegar", "stock", "spice",
        "salt", "treacle", "syrup", "honey",
    ],
    "Cupboard Staples": [
        "rice", "pasta", "spaghetti", "noodle", "couscous", "lentil",
        "chickpea", "tin", "sauce", "passata", "ketchup", "mayonnaise",
        "mustard", "jam", "peanut butter", "soup",
    ],
    "Breakfast": ["cereal", "porridge", "oat", "granola", "muesli", "cornflake"],
    "Drinks": ["juice", "coffee", "tea", "water", "squash", "cola", "beer", "wine"],
    "Snacks & Treats": [
        "crisp", "biscuit", "chocolate", "sweet", "cake", "cookie", "popcorn",
        "nut",
    ],
    "Frozen": ["ice cream", "ice lolly", "frozen"],
}

_KEYWORD_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (category, re.compile(r"\b(?:" + "|".join(map(re.escape, keywords)) + r")\b"))
    for category, keywords in _CATEGORY_KEYWORDS.items()
]


@dataclass(frozen=True)
class ShelfLifeEstimate:
    """Category, location and expiry derived for a newly stocked item."""

    category: str
    location: StorageLocation | None
    shelf_life_days: int | None
    expiry_date: date | None
    expiry_is_estimated: bool
    source: str  # "reference" or "unknown"


def lookup_shelf_life(name: str, table: ShelfLifeTable | None = None) -> ShelfLifeRecord | None:
    """Return the reference record for *name*, or None when it is unknown."""
    return (table or ShelfLifeTable.instance()).lookup(name)


def infer_category(name: str) -> str:
    """Guess a category from keywords in the normalized name."""
    key = normalize_ingredient_name(name)
    if key:
        for category, pattern in _KEYWORD_PATTERNS:
            if pattern.search(key):
                return category
    return UNKNOWN_CATEGORY


def default_location(
    category: str | None,
    locations: Mapping[str, StorageLocation] | None = None,
) -> StorageLocation | None:
    """Default storage location for *category*; None means assign by hand."""
    if not category:
        return None
    return (locations or DEFAULT_STORAGE_LOCATIONS).get(category)


def estimate_shelf_life(
    name: str,
    purchase_date: date | None = None,
    category: str | None = None,
    locations: Mapping[str, StorageLocation] | None = None,
    table: ShelfLifeTable | None = None,
) -> ShelfLifeEstimate:
    """Estimate category, storage location and expiry for a purchased item.

    A reference hit gives ``purchase_date + shelf_life_days`` as an *estimated*
    expiry. An unknown item gets the caller's category (or a keyword guess),
    the category's default location if it has one, and no expiry at all.
    """
    record = lookup_shelf_life(name, table)
    if record is not None:
        purchased = purchase_date or date.today()
        return ShelfLifeEstimate(
            category=category or record.category,
            location=record.location,
            shelf_life_days=record.shelf_life_days,
            expiry_date=purchased + timedelta(days=record.shelf_life_days),
            expiry_is_estimated=True,
            source="reference",
        )

    resolved = category or infer_category(name)
    return ShelfLifeEstimate(
        category=resolved,
        location=default_location(resolved, locations),
        shelf_life_days=None,
        expiry_date=None,
        expiry_is_estimated=False,
        source="unknown",
    )
