"""Tests for PantryScheduler."""

import asyncio
import logging
from datetime import date, timedelta

import pytest

from mealplan.pantry.config import load_config
from mealplan.pantry.db.inventory import InventoryDB
from mealplan.pantry.models import LineStatus, NewInventoryLine
from mealplan.pantry.scheduler import EXPIRY_JOB_ID, run_expiry_check

TODAY = date(2025, 1, 15)


@pytest.fixture
def db(tmp_path):
    inventory = InventoryDB(db_path=tmp_path / "test.db")
    yield inventory
    inventory.close()


def _add(db, name, expiry, owner_id="u1"):
    return db.add_item(NewInventoryLine(
        owner_id=owner_id, name=name, quantity=1, unit="",
        expiration_date=expiry,
    ))


def _scheduler(config):
    try:
        from mealplan.pantry.scheduler import PantryScheduler

        return PantryScheduler(config)
    except ImportError:
        pytest.skip("apscheduler not installed")


def test_scheduler_import_error():
    """PantryScheduler raises ImportError if apscheduler is missing."""
    # This test verifies behavior whether or not apscheduler is installed
    try:
        from mealplan.pantry.scheduler import PantryScheduler

        scheduler = PantryScheduler(load_config())
        assert scheduler is not None
        assert scheduler.running is False
    except ImportError:
        # Expected if apscheduler is not installed
        pass


def test_scheduler_setup_jobs():
    """The expire_items job is registered."""
    config = load_config()
    config.scheduler.expire_schedule = "15 3 * * *"

    scheduler = _scheduler(config)
    scheduler.setup_jobs()

    job_ids = {j["id"] for j in scheduler.get_jobs()}
    assert job_ids == {EXPIRY_JOB_ID}


def test_scheduler_invalid_cron():
    config = load_config()
    config.scheduler.expire_schedule = "every night"

    scheduler = _scheduler(config)
    with pytest.raises(ValueError):
        scheduler.setup_jobs()


def test_scheduler_stop_when_not_running():
    scheduler = _scheduler(load_config())
    scheduler.stop()
    assert scheduler.running is False


def test_expire_job_marks_expired(tmp_path):
    """The job expires active lines past their expiry date."""
    config = load_config()
    config.database.path = str(tmp_path / "test.db")

    db = InventoryDB(config.database.path)
    yesterday = date.today() - timedelta(days=1)
    stale = db.add_item(NewInventoryLine(
        owner_id="u1", name="Milk", quantity=1, unit="l", expiration_date=yesterday
    ))
    fresh = db.add_item(NewInventoryLine(owner_id="u1", name="Rice", quantity=1, unit="kg"))

    scheduler = _scheduler(config)
    report = asyncio.run(scheduler._job_expire_items())
    assert report.expired_count == 1
    assert scheduler.last_report is report

    assert db.get_item(stale).status is LineStatus.EXPIRED
    assert db.get_item(fresh).status is LineStatus.ACTIVE
    db.close()


def test_expire_job_survives_storage_failure(tmp_path):
    """An unreachable database is logged, not raised."""
    config = load_config()
    config.database.path = str(tmp_path)

    scheduler = _scheduler(config)
    assert asyncio.run(scheduler._job_expire_items()) is None
    assert scheduler.last_report is None


class TestRunExpiryCheck:
    def test_expired_lines_grouped_by_owner(self, db):
        _add(db, "Milk", date(2025, 1, 14))
        _add(db, "Chicken", date(2025, 1, 10))
        _add(db, "Yoghurt", date(2025, 1, 12), owner_id="u2")
        _add(db, "Rice", date(2026, 1, 1))

        report = run_expiry_check(db, today=TODAY)
        assert report.expired_count == 3
        assert [line.name for line in report.expired["u1"]] == ["Chicken", "Milk"]
        assert [line.name for line in report.expired["u2"]] == ["Yoghurt"]
        assert report.owners == ["u1", "u2"]

    def test_expiring_within_min_days(self, db):
        _add(db, "Cheddar", date(2025, 1, 17))
        _add(db, "Milk", date(2025, 1, 15))
        _add(db, "Ham", date(2025, 1, 18))
        _add(db, "Bread", date(2025, 1, 16), owner_id="u2")

        report = run_expiry_check(db, today=TODAY, min_days=2)
        assert report.expired == {}
        assert [line.name for line in report.expiring_soon["u1"]] == ["Milk", "Cheddar"]
        assert [line.name for line in report.expiring_soon["u2"]] == ["Bread"]

    def test_expired_lines_not_listed_as_due(self, db):
        item_id = _add(db, "Milk", date(2025, 1, 14))
        report = run_expiry_check(db, today=TODAY)

        assert "u1" not in report.expiring_soon
        assert db.get_item(item_id).status is LineStatus.EXPIRED

    def test_second_run_expires_nothing(self, db):
        _add(db, "Milk", date(2025, 1, 14))
        run_expiry_check(db, today=TODAY)
        assert run_expiry_check(db, today=TODAY).expired_count == 0

    def test_logs_per_owner(self, db, caplog):
        _add(db, "Milk", date(2025, 1, 14), owner_id="alice")
        _add(db, "Ham", date(2025, 1, 16), owner_id="bob")

        with caplog.at_level(logging.INFO, logger="mealplan.pantry.scheduler"):
            run_expiry_check(db, today=TODAY)
        assert "Owner alice: 1 item(s) expired: Milk" in caplog.text
        assert "Owner bob: 1 item(s) due within 2 day(s): Ham" in caplog.text
