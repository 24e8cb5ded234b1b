"""Tests for InventoryDB and SettingsDB."""

from datetime import date

import pytest

from mealplan.pantry.db.inventory import InventoryDB
from mealplan.pantry.db.settings import InventorySettings, SettingsDB
from mealplan.pantry.models import LineStatus, NewInventoryLine, StorageLocation
from mealplan.pantry.reconcile import SmallQuantityThresholds


@pytest.fixture
def db(tmp_path):
    """Create a temporary InventoryDB."""
    inventory = InventoryDB(db_path=tmp_path / "test.db")
    yield inventory
    inventory.close()


@pytest.fixture
def settings_db(tmp_path):
    settings = SettingsDB(db_path=tmp_path / "test.db")
    yield settings
    settings.close()


@pytest.fixture
def sample_lines():
    """Sample inventory lines for testing."""
    return [
        NewInventoryLine(
            owner_id="u1",
            name="Tomatoes",
            quantity=6,
            unit="",
            category="Fresh Produce",
            location=StorageLocation.PANTRY,
            purchase_date=date(2025, 1, 10),
            expiration_date=date(2025, 1, 15),
            expiry_is_estimated=True,
        ),
        NewInventoryLine(
            owner_id="u1",
            name="Chicken Thighs",
            quantity=500,
            unit="g",
            category="Meat & Fish",
            location=StorageLocation.FRIDGE,
            purchase_date=date(2025, 1, 10),
            expiration_date=date(2025, 1, 12),
        ),
        NewInventoryLine(owner_id="u2", name="Rice", quantity=1, unit="kg"),
    ]


def _add_all(db, lines):
    return [db.add_item(line) for line in lines]


def test_add_item_round_trip(db, sample_lines):
    """Add a line and read every field back."""
    item_id = db.add_item(sample_lines[0])
    line = db.get_item(item_id)

    assert line.id == item_id
    assert line.owner_id == "u1"
    assert line.name == "Tomatoes"
    assert line.quantity == 6
    assert line.category == "Fresh Produce"
    assert line.location is StorageLocation.PANTRY
    assert line.purchase_date == date(2025, 1, 10)
    assert line.expiration_date == date(2025, 1, 15)
    assert line.expiry_is_estimated
    assert line.status is LineStatus.ACTIVE


def test_get_item_missing(db):
    assert db.get_item(999) is None


def test_get_active_inventory(db, sample_lines):
    """Only the owner's active lines, oldest first."""
    ids = _add_all(db, sample_lines)
    db.deactivate_item(ids[0], "u1")

    lines = db.get_active_inventory("u1")
    assert [line.id for line in lines] == [ids[1]]
    assert [line.name for line in db.get_active_inventory("u2")] == ["Rice"]


class TestUpdateQuantity:
    def test_matching_expected_quantity(self, db, sample_lines):
        item_id = db.add_item(sample_lines[1])
        assert db.update_quantity(item_id, "u1", 500, 300)
        assert db.get_item(item_id).quantity == 300

    def test_stale_expected_quantity(self, db, sample_lines):
        item_id = db.add_item(sample_lines[1])
        assert not db.update_quantity(item_id, "u1", 450, 300)
        assert db.get_item(item_id).quantity == 500

    def test_rounding_tolerance(self, db, sample_lines):
        item_id = db.add_item(sample_lines[1])
        assert db.update_quantity(item_id, "u1", 500.0004, 300)

    def test_wrong_owner(self, db, sample_lines):
        item_id = db.add_item(sample_lines[1])
        assert not db.update_quantity(item_id, "u2", 500, 300)

    def test_inactive_line(self, db, sample_lines):
        item_id = db.add_item(sample_lines[1])
        db.deactivate_item(item_id, "u1")
        assert not db.update_quantity(item_id, "u1", 500, 300)

    def test_never_negative(self, db, sample_lines):
        item_id = db.add_item(sample_lines[1])
        assert db.update_quantity(item_id, "u1", 500, -20)
        assert db.get_item(item_id).quantity == 0


def test_merge_item(db, sample_lines):
    item_id = db.add_item(sample_lines[1])
    assert db.merge_item(
        item_id, "u1", 500, 900, date(2025, 1, 12), False, date(2025, 1, 11)
    )
    line = db.get_item(item_id)
    assert line.quantity == 900
    assert line.purchase_date == date(2025, 1, 11)
    assert not line.expiry_is_estimated

    assert not db.merge_item(item_id, "u1", 500, 1300, None, False, None)


def test_get_expiring_soon(db, sample_lines):
    _add_all(db, sample_lines)
    lines = db.get_expiring_soon(owner_id="u1", days=3, today=date(2025, 1, 10))
    assert [line.name for line in lines] == ["Chicken Thighs"]

    lines = db.get_expiring_soon(days=5, today=date(2025, 1, 10))
    assert [line.name for line in lines] == ["Chicken Thighs", "Tomatoes"]


def test_mark_expired(db, sample_lines):
    ids = _add_all(db, sample_lines)
    count = db.mark_expired(today=date(2025, 1, 13))

    assert count == 1
    assert db.get_item(ids[1]).status is LineStatus.EXPIRED
    assert [line.name for line in db.get_active_inventory("u1")] == ["Tomatoes"]


def test_expire_items_returns_lines(db, sample_lines):
    ids = _add_all(db, sample_lines)
    expired = db.expire_items(today=date(2025, 1, 13))

    assert [line.id for line in expired] == [ids[1]]
    assert expired[0].owner_id == "u1"
    assert db.expire_items(today=date(2025, 1, 13)) == []


def test_deactivate_and_delete(db, sample_lines):
    item_id = db.add_item(sample_lines[0])
    assert not db.delete_item(item_id, "u2")
    assert db.deactivate_item(item_id, "u1")
    assert db.get_item(item_id).status is LineStatus.INACTIVE
    assert db.delete_item(item_id, "u1")
    assert db.get_item(item_id) is None


class TestSettings:
    def test_missing(self, settings_db):
        assert settings_db.get("u1") is None

    def test_default(self, settings_db):
        settings = settings_db.get_or_default("u1", SmallQuantityThresholds(grams=3.0))
        assert settings.small_quantity_grams == 3.0
        assert settings.small_quantity_ml == 5.0

    def test_put_and_update(self, settings_db):
        settings_db.put(InventorySettings("u1", small_quantity_grams=10, small_quantity_ml=2))
        settings_db.put(InventorySettings("u1", small_quantity_grams=8, skip_inventory_check=True))

        stored = settings_db.get("u1")
        assert stored.small_quantity_grams == 8
        assert stored.small_quantity_ml == 5
        assert stored.skip_inventory_check
        assert stored.thresholds() == SmallQuantityThresholds(grams=8, millilitres=5)

    def test_negative_threshold_rejected(self, settings_db):
        with pytest.raises(ValueError):
            settings_db.put(InventorySettings("u1", small_quantity_grams=-1))
