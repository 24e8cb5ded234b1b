"""Ingredient name normalization.

Turns free-text ingredient names ("2 large organic chicken breasts, sliced",
"Zucchini (organic)", "garbanzo beans") into a canonical key suitable for
equality comparison. The function is total: it never raises, and any input
without letters or digits normalizes to the empty string.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Callable

from .vocabulary import (
    ES_PLURAL_STEM_ENDINGS,
    FORM_WORDS,
    INGREDIENT_SYNONYMS,
    IRREGULAR_PLURALS,
    MODIFIER_WORDS,
    NON_PLURAL_ENDINGS,
    PREP_WORDS,
)

_MAX_PASSES = 8


def _phrase_pattern(phrases) -> re.Pattern[str]:
    ordered = sorted(phrases, key=lambda p: (-len(p), p))
    return re.compile(r"\b(?:" + "|".join(re.escape(p) for p in ordered) + r")\b")


_DISALLOWED_CHARS = re.compile(r"[^a-z0-9\s(),./-]")
_WHITESPACE = re.compile(r"\s+")
_PARENTHESIZED = re.compile(r"\([^)]*(?:\)|$)")
_QUANTITY = re.compile(
    r"\b\d+(?:[./]\d+)?\s*"
    r"(?:kg|g|grams?|mg|ml|l|litres?|liters?|oz|ounces?|lbs?|pounds?|"
    r"tsp|teaspoons?|tbsp|tablespoons?|cups?|pinch(?:es)?|dash(?:es)?|"
    r"handfuls?|x)?\b"
)
_PREP = _phrase_pattern(PREP_WORDS)
_MODIFIERS = _phrase_pattern(MODIFIER_WORDS)
_FORM_OF = re.compile(
    r"\b(?:" + "|".join(sorted(map(re.escape, FORM_WORDS), key=len, reverse=True)) + r")\s+of\b"
)
_FORMS = _phrase_pattern(FORM_WORDS)
_SYNONYMS = re.compile(
    r"\b("
    + "|".join(re.escape(k) for k in sorted(INGREDIENT_SYNONYMS, key=lambda k: (-len(k), k)))
    + r")(?:es|s)?\b"
)


def _squash(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _has_content(text: str) -> bool:
    return any(ch.isalnum() for ch in text)


def _guarded(stage: Callable[[str], str], fallback: Callable[[str], str] | None = None):
    """Wrap a stripping stage so that it never empties a non-empty name."""

    def run(text: str) -> str:
        result = _squash(stage(text))
        if _has_content(result) or not _has_content(text):
            return result
        return _squash(fallback(text)) if fallback else text

    return run


def _fold(text: str) -> str:
    text = unicodedata.normalize("NFKD", text.lower())
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.replace("'", "")
    return _squash(_DISALLOWED_CHARS.sub(" ", text))


def _strip_parentheses(text: str) -> str:
    return _PARENTHESIZED.sub(" ", text).replace(")", " ")


def _drop_paren_chars(text: str) -> str:
    return text.replace("(", " ").replace(")", " ")


def _truncate_at_comma(text: str) -> str:
    return text.split(",", 1)[0]


def _commas_to_spaces(text: str) -> str:
    return text.replace(",", " ")


def _strip_quantities_and_prep(text: str) -> str:
    text = _QUANTITY.sub(" ", text)
    text = _PREP.sub(" ", text)
    text = re.sub(r"[./]", " ", text)
    return " ".join(tok for tok in text.split() if any(ch.isalpha() for ch in tok))


def _strip_modifiers(text: str) -> str:
    return _MODIFIERS.sub(" ", text.replace("-", " "))


def _hyphens_to_spaces(text: str) -> str:
    return text.replace("-", " ")


def _apply_synonyms(text: str) -> str:
    return _SYNONYMS.sub(lambda m: INGREDIENT_SYNONYMS[m.group(1)], text)


def _strip_forms(text: str) -> str:
    return _FORMS.sub(" ", _FORM_OF.sub(" ", text))


def singularize(word: str) -> str:
    """Singularize one lowercase token using simple English suffix rules."""
    if word in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[word]
    if len(word) > 4 and word.endswith("ies"):
        return word[:-3] + "y"
    if len(word) > 4 and word.endswith("oes"):
        return word[:-2]
    if word.endswith("es") and word[:-2].endswith(ES_PLURAL_STEM_ENDINGS):
        return word[:-2]
    if len(word) > 3 and word.endswith("s") and not word.endswith(NON_PLURAL_ENDINGS):
        return word[:-1]
    return word


def _singularize_all(text: str) -> str:
    return " ".join(singularize(tok) for tok in text.split())


_PIPELINE = (
    _fold,
    _guarded(_strip_parentheses, _drop_paren_chars),
    _guarded(_truncate_at_comma, _commas_to_spaces),
    _guarded(_strip_quantities_and_prep),
    _guarded(_strip_modifiers, _hyphens_to_spaces),
    _apply_synonyms,
    _guarded(_strip_forms),
    _singularize_all,
    _squash,
)


def _normalize_once(text: str) -> str:
    for stage in _PIPELINE:
        text = stage(text)
    return text


def normalize_ingredient_name(name: str | None) -> str:
    """Return the canonical key for an ingredient name.

    The pipeline is repeated until its output stops changing, so the result is
    a fixed point and ``normalize(normalize(x)) == normalize(x)``.
    """
    if not name:
        return ""
    text = str(name)
    if not _has_content(text):
        return ""
    for _ in range(_MAX_PASSES):
        result = _normalize_once(text)
        if result == text:
            break
        text = result
    # Leftover punctuation never survives into a key.
    return _squash(re.sub(r"[^a-z0-9 ]", " ", text))


normalize = normalize_ingredient_name
