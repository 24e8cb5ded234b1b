"""Tests for expiry status and expiry-priority ordering."""

from datetime import date, timedelta

import pytest

from mealplan.pantry.models import InventoryLine
from mealplan.pantry.shelf_life import (
    ExpiryStatus,
    days_until_expiry,
    expiry_status,
    line_expiry_status,
    shelf_life_days_between,
    sort_by_expiry_priority,
)

TODAY = date(2025, 1, 15)


def _line(item_id, name, expiry_offset=None, purchase_offset=None):
    return InventoryLine(
        id=item_id,
        owner_id="u1",
        name=name,
        quantity=1.0,
        unit="pack",
        purchase_date=TODAY + timedelta(days=purchase_offset) if purchase_offset is not None else None,
        expiration_date=TODAY + timedelta(days=expiry_offset) if expiry_offset is not None else None,
    )


def test_days_until_expiry():
    assert days_until_expiry(date(2025, 1, 18), TODAY) == 3
    assert days_until_expiry(date(2025, 1, 14), TODAY) == -1
    assert days_until_expiry(None, TODAY) is None


def test_shelf_life_days_between():
    assert shelf_life_days_between(date(2025, 1, 1), date(2025, 1, 11)) == 10
    assert shelf_life_days_between(None, date(2025, 1, 11)) is None


@pytest.mark.parametrize(
    "days_until, shelf_life, expected",
    [
        (None, None, ExpiryStatus.FRESH),
        (-1, 10, ExpiryStatus.EXPIRED),
        (0, 10, ExpiryStatus.EXPIRING_SOON),
        (2, 10, ExpiryStatus.EXPIRING_SOON),
        (3, 10, ExpiryStatus.FRESH),
        (3, 11, ExpiryStatus.EXPIRING_SOON),
        (6, 30, ExpiryStatus.EXPIRING_SOON),
        (7, 30, ExpiryStatus.FRESH),
        (2, None, ExpiryStatus.EXPIRING_SOON),
        (3, None, ExpiryStatus.FRESH),
    ],
)
def test_expiry_status(days_until, shelf_life, expected):
    assert expiry_status(days_until, shelf_life) is expected


def test_expiry_status_min_days():
    assert expiry_status(4, None, min_days=5) is ExpiryStatus.EXPIRING_SOON
    assert expiry_status(6, None, min_days=5) is ExpiryStatus.FRESH


def test_line_expiry_status():
    line = _line(1, "Milk", expiry_offset=1, purchase_offset=-2)
    assert line_expiry_status(line, TODAY) is ExpiryStatus.EXPIRING_SOON


def test_sort_by_expiry_priority():
    """Expired, then expiring soon, then fresh by date, undated last."""
    lines = [
        _line(1, "Rice"),
        _line(2, "Cheddar", expiry_offset=30, purchase_offset=-5),
        _line(3, "Milk", expiry_offset=-1, purchase_offset=-4),
        _line(4, "Yoghurt", expiry_offset=10, purchase_offset=0),
        _line(5, "Chicken", expiry_offset=1, purchase_offset=-1),
    ]
    ordered = sort_by_expiry_priority(lines, TODAY)
    assert [line.name for line in ordered] == ["Milk", "Chicken", "Yoghurt", "Cheddar", "Rice"]


def test_sort_ties_broken_by_name():
    lines = [_line(1, "banana", expiry_offset=5), _line(2, "Apple", expiry_offset=5)]
    assert [l.name for l in sort_by_expiry_priority(lines, TODAY)] == ["Apple", "banana"]
