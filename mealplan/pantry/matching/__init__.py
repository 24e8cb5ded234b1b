from .duplicates import (
    DuplicateCheck,
    DuplicateGroup,
    MatchType,
    MergeSuggestion,
    check_for_duplicates,
    find_best_match_for_merge,
    find_duplicates,
    group_by_normalized_name,
    suggest_merged_quantity,
)
from .normalizer import normalize, normalize_ingredient_name
from .similarity import (
    ConfidenceLevel,
    calculate_similarity,
    confidence_of,
)

__all__ = [
    "ConfidenceLevel",
    "DuplicateCheck",
    "DuplicateGroup",
    "MatchType",
    "MergeSuggestion",
    "calculate_similarity",
    "check_for_duplicates",
    "confidence_of",
    "find_best_match_for_merge",
    "find_duplicates",
    "group_by_normalized_name",
    "normalize",
    "normalize_ingredient_name",
    "suggest_merged_quantity",
]
