"""Tests for pantry config loading."""

import os
import tempfile

import pytest

from mealplan.pantry.config import (
    DB_PATH_ENV,
    PantryConfig,
    load_config,
)
from mealplan.pantry.models import StorageLocation
from mealplan.pantry.reconcile import SmallQuantityThresholds


@pytest.fixture(autouse=True)
def _no_db_env(monkeypatch):
    monkeypatch.delenv(DB_PATH_ENV, raising=False)


def _load(toml_content: bytes) -> PantryConfig:
    with tempfile.NamedTemporaryFile(suffix=".toml", delete=False) as f:
        f.write(toml_content)
        f.flush()
        config = load_config(f.name)
    os.unlink(f.name)
    return config


def test_load_config_defaults():
    """Loading with no path returns all defaults."""
    config = load_config()
    assert isinstance(config, PantryConfig)
    assert config.database.path == "~/.config/mealplan/pantry.db"
    assert config.reconcile.small_quantity_grams == 5.0
    assert config.reconcile.small_quantity_ml == 5.0
    assert config.reconcile.min_match_score == 0.5
    assert config.reconcile.merge_match_score == 0.8
    assert config.shelf_life.data_path == ""
    assert config.shelf_life.expiring_soon_min_days == 2
    assert config.scheduler.expire_schedule == "0 0 * * *"
    assert config.storage.locations["Frozen"] is StorageLocation.FREEZER


def test_load_config_nonexistent_file():
    """Loading a nonexistent file returns defaults."""
    config = load_config("/nonexistent/path.toml")
    assert config.reconcile.min_match_score == 0.5


def test_load_config_from_toml():
    """Loading a valid TOML file populates config."""
    config = _load(b"""\
[database]
path = "/var/lib/pantry.db"

[reconcile]
small_quantity_grams = 2.5
small_quantity_ml = 10
min_match_score = 0.6
merge_match_score = 0.9

[shelf_life]
data_path = "/etc/pantry/shelf_life.json"
expiring_soon_min_days = 3

[scheduler]
expire_schedule = "30 1 * * *"
""")
    assert config.database.path == "/var/lib/pantry.db"
    assert config.reconcile.thresholds() == SmallQuantityThresholds(grams=2.5, millilitres=10)
    assert config.reconcile.min_match_score == 0.6
    assert config.reconcile.merge_match_score == 0.9
    assert config.shelf_life.data_path == "/etc/pantry/shelf_life.json"
    assert config.shelf_life.expiring_soon_min_days == 3
    assert config.scheduler.expire_schedule == "30 1 * * *"


def test_load_config_partial_toml():
    """Partial TOML uses defaults for missing sections."""
    config = _load(b"""\
[reconcile]
min_match_score = 0.7
""")
    assert config.reconcile.min_match_score == 0.7
    assert config.reconcile.small_quantity_grams == 5.0
    assert config.database.path == "~/.config/mealplan/pantry.db"


def test_load_config_env_override(monkeypatch):
    """The environment variable overrides the database path."""
    monkeypatch.setenv(DB_PATH_ENV, "/tmp/env.db")
    config = _load(b"""\
[database]
path = "/var/lib/pantry.db"
""")
    assert config.database.path == "/tmp/env.db"


def test_load_config_custom_storage_locations():
    """Custom storage locations are merged with defaults."""
    config = _load(b"""\
[storage.locations]
"Bakery" = "freezer"
"Condiments" = "Refrigerated"
""")
    assert config.storage.locations["Bakery"] is StorageLocation.FREEZER
    assert config.storage.locations["Condiments"] is StorageLocation.FRIDGE
    # Defaults preserved for non-overridden keys
    assert config.storage.locations["Meat & Fish"] is StorageLocation.FRIDGE


def test_default_locations_not_shared():
    first = PantryConfig()
    first.storage.locations["Bakery"] = StorageLocation.FREEZER
    assert PantryConfig().storage.locations["Bakery"] is StorageLocation.CUPBOARD


@pytest.mark.parametrize(
    "toml_content",
    [
        b"[reconcile]\nmin_match_score = 1.5\n",
        b"[reconcile]\nmerge_match_score = -0.1\n",
        b"[reconcile]\nsmall_quantity_grams = -1\n",
        b'[storage.locations]\n"Bakery" = "garage"\n',
    ],
)
def test_load_config_rejects_bad_values(toml_content):
    with pytest.raises(ValueError):
        _load(toml_content)
