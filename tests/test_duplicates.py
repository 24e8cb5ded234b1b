"""Tests for duplicate grouping and merge matching."""

import pytest

from mealplan.pantry.matching.duplicates import (
    MatchType,
    check_for_duplicates,
    find_best_match_for_merge,
    find_duplicates,
    group_by_normalized_name,
    suggest_merged_quantity,
)
from mealplan.pantry.matching.similarity import ConfidenceLevel
from mealplan.pantry.models import InventoryLine, LineStatus, StorageLocation


def _line(item_id, name, category="Other", location=None, status=LineStatus.ACTIVE):
    return InventoryLine(
        id=item_id,
        owner_id="u1",
        name=name,
        quantity=1.0,
        unit="pack",
        category=category,
        location=location,
        status=status,
    )


ITEMS = [
    {"id": 1, "name": "chicken breast"},
    {"id": 2, "name": "chicken breast"},
    {"id": 3, "name": "beef mince"},
    {"id": 4, "name": "ground beef"},
    {"id": 5, "name": "pork"},
]


class TestGrouping:
    def test_partition_covers_every_item_once(self):
        groups = group_by_normalized_name(ITEMS)
        members = [item["id"] for group in groups.values() for item in group]
        assert sorted(members) == [1, 2, 3, 4, 5]

    def test_find_duplicates_example(self):
        """Two groups of two; pork has no group."""
        groups = find_duplicates(ITEMS)
        assert len(groups) == 2
        assert sorted(len(g.items) for g in groups) == [2, 2]
        names = {g.normalized_name for g in groups}
        assert names == {"chicken", "beef mince"}
        assert all("pork" not in g.normalized_name for g in groups)

    def test_synonyms_group_together(self):
        groups = find_duplicates([{"id": 1, "name": "Eggplant"}, {"id": 2, "name": "aubergines"}])
        assert len(groups) == 1
        assert groups[0].normalized_name == "aubergine"

    def test_accepts_item_name_key_and_objects(self):
        items = [{"item_name": "Milk"}, _line(9, "milk")]
        groups = find_duplicates(items)
        assert len(groups) == 1
        assert len(groups[0].items) == 2

    def test_custom_key(self):
        groups = find_duplicates(["Leeks", "leek", "onion"], key=lambda s: s)
        assert [g.normalized_name for g in groups] == ["leek"]

    def test_empty_names_are_not_duplicates(self):
        assert find_duplicates([{"name": ""}, {"name": "  "}]) == []


class TestCheckForDuplicates:
    def test_exact_match(self):
        existing = [_line(1, "Chicken Breasts"), _line(2, "Pork Chops")]
        result = check_for_duplicates("chicken breast", existing)
        assert result.is_duplicate
        assert result.match_type is MatchType.EXACT
        assert [line.id for line in result.matching_lines] == [1]
        assert result.confidence is ConfidenceLevel.HIGH

    def test_inactive_lines_ignored(self):
        existing = [_line(1, "Chicken Breasts", status=LineStatus.INACTIVE)]
        result = check_for_duplicates("chicken", existing)
        assert not result.is_duplicate
        assert result.match_type is MatchType.NONE

    def test_similar_match(self):
        """"spaghetti" inside "spaghettini" scores 9/11."""
        existing = [_line(1, "Spaghettini"), _line(2, "Rice")]
        result = check_for_duplicates("spaghetti", existing)
        assert result.match_type is MatchType.SIMILAR
        assert [line.id for line in result.matching_lines] == [1]
        assert result.confidence is ConfidenceLevel.MEDIUM

    def test_category_and_location_boost(self):
        existing = [
            _line(1, "Spaghettini", category="Cupboard Staples",
                  location=StorageLocation.CUPBOARD),
        ]
        result = check_for_duplicates(
            "spaghetti", existing,
            category="Cupboard Staples", location=StorageLocation.CUPBOARD,
        )
        assert result.scores[0] == pytest.approx(9 / 11 + 0.15)
        assert result.confidence is ConfidenceLevel.HIGH

    def test_boosted_score_clamped(self):
        existing = [_line(1, "Red Onion", category="Fruit & Veg")]
        result = check_for_duplicates(
            "red onion soup", existing, category="Fruit & Veg", threshold=0.5
        )
        assert result.scores[0] <= 1.0

    def test_no_match(self):
        result = check_for_duplicates("apples", [_line(1, "Beef Mince")])
        assert not result.is_duplicate
        assert result.matching_lines == []
        assert result.confidence is ConfidenceLevel.LOW

    def test_empty_name(self):
        assert not check_for_duplicates("", [_line(1, "Milk")]).is_duplicate


class TestMerge:
    def test_best_match_for_merge(self):
        existing = [_line(1, "Spaghettini")]
        assert find_best_match_for_merge("spaghetti", existing).id == 1

    def test_best_match_requires_high_score(self):
        """cheddar vs mature cheddar scores 0.5, below the merge threshold."""
        existing = [_line(1, "Mature Cheddar")]
        assert find_best_match_for_merge("cheddar", existing) is None

    def test_suggest_merged_quantity_same_unit(self):
        suggestion = suggest_merged_quantity(2, 3, "kg", "KG")
        assert suggestion.can_merge
        assert suggestion.quantity == 5
        assert suggestion.unit == "kg"

    def test_suggest_merged_quantity_alias_unit(self):
        suggestion = suggest_merged_quantity(200, 300, "g", "grams")
        assert suggestion.can_merge
        assert suggestion.quantity == 500

    def test_suggest_merged_quantity_different_units(self):
        suggestion = suggest_merged_quantity(2, 500, "kg", "g")
        assert not suggestion.can_merge
        assert suggestion.quantity == 2
        assert suggestion.unit == "kg"
