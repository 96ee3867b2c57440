"""Exception types for HabitGrid."""

from __future__ import annotations


class HabitGridError(Exception):
    """Base class for HabitGrid errors."""


class MalformedDateError(HabitGridError, ValueError):
    """A day identifier is not a valid 'YYYY-MM-DD' calendar date."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Malformed day identifier: {value!r}")
        self.value = value


class StorageUnavailable(HabitGridError, OSError):
    """The persisted snapshot could not be read or written."""


class CorruptSnapshotError(HabitGridError, ValueError):
    """The persisted snapshot does not have the expected document shape."""
