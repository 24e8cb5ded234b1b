"""Inventory store interface used by reconciliation and import."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import InventoryLine, NewInventoryLine


class InventoryStore(ABC):
    """Abstract base for the host application's inventory persistence.

    Implementations raise :class:`~mealplan.pantry.errors.StorageUnavailable`
    when the backing store cannot be reached.
    """

    @abstractmethod
    def get_active_inventory(self, owner_id: str) -> list[InventoryLine]:
        """Return the owner's active lines as a point-in-time snapshot."""
        ...

    @abstractmethod
    def get_item(self, item_id: int) -> InventoryLine | None:
        """Return one line regardless of owner or status, or None."""
        ...

    @abstractmethod
    def update_quantity(
        self,
        item_id: int,
        owner_id: str,
        expected_quantity: float,
        new_quantity: float,
    ) -> bool:
        """Set the quantity of one active line owned by *owner_id*.

        The write only happens if the stored quantity still equals
        *expected_quantity*. Returns False when no row was updated.
        """
        ...

    @abstractmethod
    def add_item(self, line: NewInventoryLine) -> int:
        """Insert a new active line and return its id."""
        ...

    @abstractmethod
    def merge_item(
        self,
        item_id: int,
        owner_id: str,
        expected_quantity: float,
        new_quantity: float,
        expiration_date: date | None,
        expiry_is_estimated: bool,
        purchase_date: date | None,
    ) -> bool:
        """Fold a purchase into an existing line (same conditional rule as
        :meth:`update_quantity`)."""
        ...
