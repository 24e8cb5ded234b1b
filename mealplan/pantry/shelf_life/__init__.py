from .expiry import (
    ExpiryStatus,
    days_until_expiry,
    expiry_status,
    line_expiry_status,
    shelf_life_days_between,
    sort_by_expiry_priority,
)
from .lookup import (
    DEFAULT_STORAGE_LOCATIONS,
    ShelfLifeEstimate,
    default_location,
    estimate_shelf_life,
    infer_category,
    lookup_shelf_life,
)
from .reference import MatchTier, ShelfLifeMatch, ShelfLifeRecord, ShelfLifeTable

__all__ = [
    "DEFAULT_STORAGE_LOCATIONS",
    "ExpiryStatus",
    "MatchTier",
    "ShelfLifeEstimate",
    "ShelfLifeMatch",
    "ShelfLifeRecord",
    "ShelfLifeTable",
    "days_until_expiry",
    "default_location",
    "estimate_shelf_life",
    "expiry_status",
    "infer_category",
    "line_expiry_status",
    "lookup_shelf_life",
    "shelf_life_days_between",
    "sort_by_expiry_priority",
]
