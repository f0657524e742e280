"""Read models returned to reporting collaborators."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from recordtrack.models.record_state import ErrorEntry, RecordState, RecordStatus


class RecordStats(BaseModel):
    """Per-record processing summary."""

    id: str
    status: RecordStatus
    attempts: int = 0
    max_attempts: int = 3
    errors: int = 0
    recovery_attempts: int = 0
    is_processed: bool = False
    recoverable: bool = True
    processing_time_ms: int = 0


class SessionStats(BaseModel):
    """Aggregated counts across every record of a session."""

    session_id: str
    total_records: int = 0
    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0
    total_errors: int = 0
    total_recovery_attempts: int = 0


class FailedRecordSummary(BaseModel):
    """Manual-review row for a record in the failed-record index."""

    record_id: str
    record_name: str = "Unknown"
    failure_reason: Optional[str] = None
    failed_at: datetime
    recoverable: bool = False
    attempts: int = 0
    last_error: Optional[ErrorEntry] = None


class RecordExport(RecordState):
    """Full record state plus computed stats, for diagnostics."""

    stats: RecordStats
