"""Ingredient identity resolution and pantry stock reconciliation."""

from .config import (
    DatabaseConfig,
    PantryConfig,
    ReconcileConfig,
    SchedulerConfig,
    ShelfLifeConfig,
    StorageConfig,
    load_config,
)
from .errors import InvalidInput, PantryError, StorageUnavailable
from .importer import ImportSummary, InventoryImporter, items_from_rows
from .matching import (
    ConfidenceLevel,
    DuplicateGroup,
    calculate_similarity,
    check_for_duplicates,
    confidence_of,
    find_best_match_for_merge,
    find_duplicates,
    normalize,
    normalize_ingredient_name,
)
from .models import InventoryLine, NewInventoryLine, PurchasedItem, StorageLocation
from .reconcile import (
    ApplyResult,
    ApplyStatus,
    DeductionRecord,
    MatchStatus,
    RecommendedAction,
    RequirementLine,
    SmallQuantityThresholds,
    apply_deductions,
    calculate_deductions,
    preview_deductions,
)
from .shelf_life import (
    ShelfLifeRecord,
    ShelfLifeTable,
    estimate_shelf_life,
    lookup_shelf_life,
)
from .store import InventoryStore

__all__ = [
    "ApplyResult",
    "ApplyStatus",
    "ConfidenceLevel",
    "DatabaseConfig",
    "DeductionRecord",
    "DuplicateGroup",
    "ImportSummary",
    "InvalidInput",
    "InventoryImporter",
    "InventoryLine",
    "InventoryStore",
    "MatchStatus",
    "NewInventoryLine",
    "PantryConfig",
    "PantryError",
    "PurchasedItem",
    "RecommendedAction",
    "ReconcileConfig",
    "RequirementLine",
    "SchedulerConfig",
    "ShelfLifeConfig",
    "ShelfLifeRecord",
    "ShelfLifeTable",
    "SmallQuantityThresholds",
    "StorageConfig",
    "StorageLocation",
    "StorageUnavailable",
    "apply_deductions",
    "calculate_deductions",
    "calculate_similarity",
    "check_for_duplicates",
    "confidence_of",
    "estimate_shelf_life",
    "find_best_match_for_merge",
    "find_duplicates",
    "items_from_rows",
    "load_config",
    "lookup_shelf_life",
    "normalize",
    "normalize_ingredient_name",
    "preview_deductions",
]
