"""recordtrack exception hierarchy."""

from __future__ import annotations


class RecordTrackError(Exception):
    """Base exception for all recordtrack errors."""


class RecordNotFoundError(RecordTrackError):
    """Operation referenced a record that was never initialized (or was cleaned up)."""

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(f"Record {record_id} not found in tracker")


class InvariantViolationError(RecordTrackError):
    """Operation would break a record lifecycle invariant."""

    def __init__(self, record_id: str, operation: str, message: str) -> None:
        self.record_id = record_id
        self.operation = operation
        super().__init__(f"{operation} rejected for record {record_id}: {message}")
