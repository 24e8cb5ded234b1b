"""Similarity scoring between ingredient names and confidence classification."""

from __future__ import annotations

from enum import Enum

from .normalizer import normalize_ingredient_name

HIGH_CONFIDENCE_SCORE = 0.9
MEDIUM_CONFIDENCE_SCORE = 0.6


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def score_keys(key_a: str, key_b: str) -> float:
    """Score two already-normalized keys. See :func:`calculate_similarity`."""
    if key_a == key_b:
        return 1.0
    if not key_a or not key_b:
        return 0.0

    shorter, longer = sorted((key_a, key_b), key=len)
    if shorter in longer:
        return len(shorter) / len(longer)

    tokens_a = set(key_a.split())
    tokens_b = set(key_b.split())
    union = tokens_a | tokens_b
    if not union:
        return 0.0
    return len(tokens_a & tokens_b) / len(union)


def calculate_similarity(name_a: str, name_b: str) -> float:
    """Return a similarity score in [0.0, 1.0] for two raw ingredient names.

    1.0 when the canonical keys are equal. When one key contains the other the
    score is the length ratio of the shorter key to the longer one, which is
    symmetric in its arguments. Otherwise the score is the Jaccard overlap of
    the whitespace tokens, 0.0 when they share none.
    """
    return score_keys(
        normalize_ingredient_name(name_a), normalize_ingredient_name(name_b)
    )


def confidence_of(score: float) -> ConfidenceLevel:
    if score >= HIGH_CONFIDENCE_SCORE:
        return ConfidenceLevel.HIGH
    if score >= MEDIUM_CONFIDENCE_SCORE:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW
