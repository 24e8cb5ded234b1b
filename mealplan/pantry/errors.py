"""Exceptions raised by the pantry subsystem.

Only two conditions are true errors: structurally invalid input and an
unavailable inventory store. "No match" and per-line apply failures are
ordinary results, never exceptions.
"""


class PantryError(Exception):
    """Base class for pantry errors."""


class InvalidInput(PantryError, ValueError):
    """A requirement or purchased item is structurally invalid."""


class StorageUnavailable(PantryError):
    """The inventory store could not be read or written."""
