"""Protocol interfaces for recordtrack collaborators.

The batch orchestrator and the reporting layer depend on these Protocols,
not on the concrete tracker: structural typing, no inheritance required,
easy to check with isinstance().
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from recordtrack.models.record_state import Attempt, ErrorEntry, ErrorInfo, RecordState, RecoveryAttempt
from recordtrack.models.reports import FailedRecordSummary, RecordExport, RecordStats, SessionStats


# ---------------------------------------------------------------------------
# Orchestrator-facing: lifecycle mutations and retry gate
# ---------------------------------------------------------------------------

@runtime_checkable
class IRecordTracker(Protocol):
    """Per-record lifecycle tracking driven by the batch orchestrator."""

    def initialize(
        self, record_id: str, payload: Mapping[str, Any], session_id: str, job_id: str
    ) -> RecordState: ...

    def start_attempt(self, record_id: str, number: int) -> Attempt: ...

    def record_error(
        self,
        record_id: str,
        error: ErrorInfo | Mapping[str, Any] | BaseException | str,
        context: Mapping[str, Any] | None = None,
    ) -> ErrorEntry: ...

    def record_recovery_attempt(
        self, record_id: str, kind: str, success: bool, details: Mapping[str, Any] | None = None
    ) -> RecoveryAttempt: ...

    def mark_processed(self, record_id: str, result: Mapping[str, Any] | None = None) -> RecordState: ...

    def mark_failed(
        self, record_id: str, reason: str = ..., recoverable: bool = False
    ) -> RecordState: ...

    def should_continue_processing(self, record_id: str) -> bool: ...

    def should_retry_record(self, record_id: str) -> bool: ...


# ---------------------------------------------------------------------------
# Reporting-facing: read-only views
# ---------------------------------------------------------------------------

@runtime_checkable
class IRecordReporter(Protocol):
    """Read-only statistics consumed by the reporting layer."""

    def get_record_stats(self, record_id: str) -> RecordStats | None: ...

    def get_session_stats(self, session_id: str) -> SessionStats | None: ...

    def get_failed_records(self) -> list[FailedRecordSummary]: ...

    def get_error_correlation(self, record_id: str, kind: str) -> list[ErrorEntry]: ...

    def export_record_state(self, record_id: str) -> RecordExport | None: ...


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------

@runtime_checkable
class ICleanable(Protocol):
    """Store that can purge state older than an age threshold."""

    def cleanup(self, max_age_hours: float | None = None) -> int: ...
