"""Daily pantry maintenance: expire stale lines and report what goes off next.

:func:`run_expiry_check` does the work and is usable on its own (the
``expire`` command calls it). :class:`PantryScheduler` runs it on a cron
schedule with APScheduler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from .errors import StorageUnavailable
from .shelf_life.expiry import MIN_EXPIRING_SOON_DAYS, sort_by_expiry_priority

if TYPE_CHECKING:
    from .config import PantryConfig
    from .db import InventoryDB
    from .models import InventoryLine

logger = logging.getLogger(__name__)

EXPIRY_JOB_ID = "expire_items"


@dataclass
class ExpiryReport:
    """Per-owner outcome of one expiry check."""

    expired: dict[str, list[InventoryLine]] = field(default_factory=dict)
    expiring_soon: dict[str, list[InventoryLine]] = field(default_factory=dict)

    @property
    def expired_count(self) -> int:
        return sum(len(lines) for lines in self.expired.values())

    @property
    def owners(self) -> list[str]:
        return sorted(set(self.expired) | set(self.expiring_soon))


def run_expiry_check(
    db: InventoryDB,
    today: date | None = None,
    min_days: int = MIN_EXPIRING_SOON_DAYS,
) -> ExpiryReport:
    """Expire lines past their date, then collect lines due within *min_days*.

    Lines still active after the expiry pass and dated no later than
    ``today + min_days`` are listed per owner, soonest first.
    """
    today = today or date.today()
    report = ExpiryReport()

    for line in db.expire_items(today):
        report.expired.setdefault(line.owner_id, []).append(line)

    due: dict[str, list[InventoryLine]] = {}
    for line in db.get_expiring_soon(days=min_days, today=today):
        due.setdefault(line.owner_id, []).append(line)
    for owner_id, lines in due.items():
        report.expiring_soon[owner_id] = sort_by_expiry_priority(lines, today, min_days)

    for owner_id in report.owners:
        expired = report.expired.get(owner_id, [])
        if expired:
            logger.info(
                "Owner %s: %d item(s) expired: %s",
                owner_id, len(expired), ", ".join(line.name for line in expired),
            )
        soon = report.expiring_soon.get(owner_id, [])
        if soon:
            logger.info(
                "Owner %s: %d item(s) due within %d day(s): %s",
                owner_id, len(soon), min_days, ", ".join(line.name for line in soon),
            )
    return report


class PantryScheduler:
    """Runs :func:`run_expiry_check` on the configured cron schedule.

    Raises:
        ImportError: If apscheduler is not installed.
    """

    def __init__(self, config: PantryConfig) -> None:
        try:
            from apscheduler.schedulers.asyncio import AsyncIOScheduler
            from apscheduler.triggers.cron import CronTrigger
        except ImportError:
            raise ImportError(
                "apscheduler is required: pip install 'mealplan-pantry[scheduler]'"
            )

        self._config = config
        self._scheduler = AsyncIOScheduler()
        self._CronTrigger = CronTrigger
        self._running = False
        self.last_report: ExpiryReport | None = None

    def setup_jobs(self) -> None:
        schedule = self._config.scheduler.expire_schedule
        try:
            trigger = self._CronTrigger.from_crontab(schedule)
        except ValueError as exc:
            raise ValueError(f"invalid expire_schedule {schedule!r}: {exc}") from exc

        self._scheduler.add_job(
            self._job_expire_items,
            trigger=trigger,
            id=EXPIRY_JOB_ID,
            name="Expire stale pantry lines",
            replace_existing=True,
        )
        logger.info("Registered %s job: %s", EXPIRY_JOB_ID, schedule)

    def start(self) -> None:
        """Start the scheduler. Must be called with a running event loop."""
        self.setup_jobs()
        self._scheduler.start()
        self._running = True
        logger.info("Pantry scheduler started")

    def stop(self) -> None:
        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Pantry scheduler stopped")

    @property
    def running(self) -> bool:
        return self._running

    def get_jobs(self) -> list[dict]:
        return [
            {
                "id": job.id,
                "name": job.name,
                "next_run": str(job.next_run_time) if getattr(job, "next_run_time", None) else None,
            }
            for job in self._scheduler.get_jobs()
        ]

    async def _job_expire_items(self) -> ExpiryReport | None:
        from .db import InventoryDB

        db = InventoryDB(self._config.database.path)
        try:
            self.last_report = run_expiry_check(
                db, min_days=self._config.shelf_life.expiring_soon_min_days
            )
        except StorageUnavailable:
            logger.exception("%s job could not reach the inventory database", EXPIRY_JOB_ID)
            return None
        finally:
            db.close()
        return self.last_report
