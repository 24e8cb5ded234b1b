"""Expiry date arithmetic and freshness status."""

from __future__ import annotations

import math
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from ..models import InventoryLine

MIN_EXPIRING_SOON_DAYS = 2
EXPIRING_SOON_FRACTION = 0.2


class ExpiryStatus(str, Enum):
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"
    FRESH = "fresh"


_STATUS_PRIORITY = {
    ExpiryStatus.EXPIRED: 0,
    ExpiryStatus.EXPIRING_SOON: 1,
    ExpiryStatus.FRESH: 2,
}


def days_until_expiry(expiry: date | None, today: date | None = None) -> int | None:
    if expiry is None:
        return None
    return (expiry - (today or date.today())).days


def shelf_life_days_between(purchase: date | None, expiry: date | None) -> int | None:
    if purchase is None or expiry is None:
        return None
    return (expiry - purchase).days


def expiry_status(
    days_until: int | None,
    shelf_life_days: int | None,
    min_days: int = MIN_EXPIRING_SOON_DAYS,
) -> ExpiryStatus:
    """Classify freshness.

    Expired when the expiry date has passed. Expiring soon when it is at most
    ``max(min_days, ceil(20% of shelf life))`` days away. No expiry date counts
    as fresh.
    """
    if days_until is None:
        return ExpiryStatus.FRESH
    if days_until < 0:
        return ExpiryStatus.EXPIRED

    window = min_days
    if shelf_life_days:
        window = max(min_days, math.ceil(shelf_life_days * EXPIRING_SOON_FRACTION))
    if days_until <= window:
        return ExpiryStatus.EXPIRING_SOON
    return ExpiryStatus.FRESH


def line_expiry_status(
    line: InventoryLine, today: date | None = None, min_days: int = MIN_EXPIRING_SOON_DAYS
) -> ExpiryStatus:
    return expiry_status(
        days_until_expiry(line.expiration_date, today),
        shelf_life_days_between(line.purchase_date, line.expiration_date),
        min_days,
    )


def sort_by_expiry_priority(
    lines: Iterable[InventoryLine],
    today: date | None = None,
    min_days: int = MIN_EXPIRING_SOON_DAYS,
) -> list[InventoryLine]:
    """Expired first, then expiring soon, then fresh.

    Within a status the soonest expiry comes first, lines without an expiry
    date come last, and ties are broken by name.
    """
    today = today or date.today()

    def sort_key(line: InventoryLine):
        days = days_until_expiry(line.expiration_date, today)
        return (
            _STATUS_PRIORITY[line_expiry_status(line, today, min_days)],
            days is None,
            days if days is not None else 0,
            line.name.lower(),
        )

    return sorted(lines, key=sort_key)
