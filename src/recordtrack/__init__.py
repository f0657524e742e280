"""recordtrack: in-memory lifecycle tracking for batch-submitted records."""

from __future__ import annotations

from recordtrack.core.exceptions import InvariantViolationError, RecordNotFoundError, RecordTrackError
from recordtrack.models.record_state import ErrorInfo, RecordStatus
from recordtrack.tracking import RecordTracker, create_tracker

__all__ = [
    "ErrorInfo",
    "InvariantViolationError",
    "RecordNotFoundError",
    "RecordStatus",
    "RecordTrackError",
    "RecordTracker",
    "create_tracker",
]

__version__ = "0.1.0"
