"""RecordTracker: per-record processing lifecycle, retry gate and cleanup.

Four in-memory indices, all guarded by a single re-entrant lock:

- records:     record id -> RecordState (authoritative history)
- sessions:    session id -> set of record ids
- failed:      record id -> FailedRecordSnapshot (manual review)
- correlation: (record id, error kind) -> [ErrorEntry, ...]

Every value handed back to a caller is a deep copy; internal lists are
append-only and only shrink when ``cleanup`` drops a whole record.
"""

from __future__ import annotations

import copy
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from recordtrack.core.config import TrackerConfig
from recordtrack.core.exceptions import InvariantViolationError, RecordNotFoundError
from recordtrack.core.types import Clock
from recordtrack.models.record_state import (
    Attempt,
    AttemptStatus,
    ErrorEntry,
    ErrorInfo,
    FailedRecordSnapshot,
    RecordState,
    RecordStatus,
    RecoveryAttempt,
)
from recordtrack.models.reports import FailedRecordSummary, RecordExport, RecordStats, SessionStats
from recordtrack.tracking.classifier import ErrorClassifier

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_REASON = "Max attempts exceeded"
UNKNOWN_RECORD_NAME = "Unknown"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordTracker:
    """In-memory record state store consulted by the batch orchestrator."""

    def __init__(self, config: TrackerConfig | None = None, clock: Clock | None = None) -> None:
        self._config = config or TrackerConfig()
        self._now = clock or _utcnow
        self._lock = threading.RLock()
        self._records: dict[str, RecordState] = {}
        self._sessions: dict[str, set[str]] = {}
        self._failed: dict[str, FailedRecordSnapshot] = {}
        self._correlation: dict[tuple[str, str], list[ErrorEntry]] = {}

    @property
    def config(self) -> TrackerConfig:
        return self._config

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def has_record(self, record_id: str) -> bool:
        with self._lock:
            return record_id in self._records

    def list_session_records(self, session_id: str) -> list[str]:
        with self._lock:
            return sorted(self._sessions.get(session_id, ()))

    # ---- internals ----

    def _get(self, record_id: str) -> RecordState:
        state = self._records.get(record_id)
        if state is None:
            raise RecordNotFoundError(record_id)
        return state

    def _ensure_open(self, state: RecordState, operation: str) -> None:
        if not state.is_processed:
            return
        if self._config.strict_terminal:
            logger.warning("Rejected %s on %s record %s", operation, state.status, state.id)
            raise InvariantViolationError(state.id, operation, f"record is already {state.status}")
        logger.warning("%s on already %s record %s", operation, state.status, state.id)

    def _to_error_info(self, state: RecordState, error: Any) -> ErrorInfo:
        if isinstance(error, ErrorInfo):
            return error
        if isinstance(error, (BaseException, str)):
            return ErrorClassifier.classify(
                error,
                attempt=state.current_attempt or 1,
                max_attempts=state.max_attempts,
            )
        return ErrorInfo(
            message=error.get("message") or "Unknown error",
            kind=error.get("kind") or "unknown",
            recoverable=error.get("recoverable") is not False,
            trace=error.get("trace"),
        )

    @staticmethod
    def _own(data: Mapping[str, Any] | None) -> dict[str, Any]:
        # Must run before any index is touched.
        return copy.deepcopy(dict(data or {}))

    def _unindex_session(self, record_id: str, session_id: str) -> None:
        members = self._sessions.get(session_id)
        if members is None:
            return
        members.discard(record_id)
        if not members:
            del self._sessions[session_id]

    def _stats_for(self, state: RecordState, now: datetime) -> RecordStats:
        end = state.terminal_time or now
        return RecordStats(
            id=state.id,
            status=state.status,
            attempts=len(state.attempts),
            max_attempts=state.max_attempts,
            errors=len(state.errors),
            recovery_attempts=state.recovery_attempt_count,
            is_processed=state.is_processed,
            recoverable=state.recoverable,
            processing_time_ms=int((end - state.start_time).total_seconds() * 1000),
        )

    # ---- lifecycle mutations ----

    def initialize(
        self, record_id: str, payload: Mapping[str, Any], session_id: str, job_id: str
    ) -> RecordState:
        """Start tracking a record in ``pending``.

        Re-initializing a known id replaces its state and moves it to the new
        session; its failed-index entry is dropped.
        """
        now = self._now()
        state = RecordState(
            id=record_id,
            payload=self._own(payload),
            session_id=session_id,
            job_id=job_id,
            max_attempts=self._config.max_attempts,
            start_time=now,
            last_updated=now,
        )
        with self._lock:
            previous = self._records.get(record_id)
            if previous is not None:
                logger.info("Re-initializing record %s (was %s)", record_id, previous.status)
                self._unindex_session(record_id, previous.session_id)
                self._failed.pop(record_id, None)
            self._records[record_id] = state
            self._sessions.setdefault(session_id, set()).add(record_id)
            logger.debug("Initialized record %s (session=%s, job=%s)", record_id, session_id, job_id)
            return state.model_copy(deep=True)

    def start_attempt(self, record_id: str, number: int) -> Attempt:
        """Append a new in-progress attempt. ``number`` is not validated."""
        with self._lock:
            state = self._get(record_id)
            self._ensure_open(state, "start_attempt")
            now = self._now()
            attempt = Attempt(number=number, start_time=now)
            state.attempts.append(attempt)
            state.current_attempt = number
            state.status = RecordStatus.PROCESSING
            state.last_updated = now
            logger.debug("Record %s attempt %d started", record_id, number)
            return attempt.model_copy(deep=True)

    def record_error(
        self,
        record_id: str,
        error: ErrorInfo | Mapping[str, Any] | BaseException | str,
        context: Mapping[str, Any] | None = None,
    ) -> ErrorEntry:
        """Store a processing failure on the record, its attempt, and the correlation index.

        ``error`` may be an ErrorInfo, a mapping with ``message``/``kind``/
        ``recoverable``/``trace`` keys, or an exception or message text
        (classified first).
        """
        context = self._own(context)
        with self._lock:
            state = self._get(record_id)
            self._ensure_open(state, "record_error")
            info = self._to_error_info(state, error)
            now = self._now()
            entry = ErrorEntry(
                message=info.message,
                kind=info.kind,
                context=context,
                timestamp=now,
                trace=info.trace,
                recoverable=info.recoverable,
                attempt_number=state.current_attempt,
            )
            attempt = state.latest_attempt
            if attempt is not None:
                attempt.errors.append(entry)
            state.errors.append(entry)
            state.last_updated = now
            self._correlation.setdefault((record_id, info.kind), []).append(entry)
            logger.debug(
                "Record %s error [%s] recoverable=%s: %s",
                record_id, info.kind, info.recoverable, info.message,
            )
            return entry.model_copy(deep=True)

    def record_recovery_attempt(
        self, record_id: str, kind: str, success: bool, details: Mapping[str, Any] | None = None
    ) -> RecoveryAttempt:
        details = self._own(details)
        with self._lock:
            state = self._get(record_id)
            self._ensure_open(state, "record_recovery_attempt")
            now = self._now()
            recovery = RecoveryAttempt(kind=kind, success=success, timestamp=now, details=details)
            attempt = state.latest_attempt
            if attempt is not None:
                attempt.recovery_attempts.append(recovery)
            state.last_updated = now
            logger.debug("Record %s recovery %s success=%s", record_id, kind, success)
            return recovery.model_copy(deep=True)

    def mark_processed(self, record_id: str, result: Mapping[str, Any] | None = None) -> RecordState:
        """Terminal success. Clears any earlier failure and its failed-index entry."""
        result = self._own(result)
        with self._lock:
            state = self._get(record_id)
            now = self._now()
            state.status = RecordStatus.COMPLETED
            state.is_processed = True
            state.completed_at = now
            state.last_updated = now
            state.result = result
            state.failed_at = None
            state.failure_reason = None
            state.recoverable = True
            attempt = state.latest_attempt
            if attempt is not None:
                attempt.status = AttemptStatus.COMPLETED
                attempt.end_time = now
            self._failed.pop(record_id, None)
            logger.info("Record %s completed after %d attempt(s)", record_id, len(state.attempts))
            return state.model_copy(deep=True)

    def mark_failed(
        self, record_id: str, reason: str = DEFAULT_FAILURE_REASON, recoverable: bool = False
    ) -> RecordState:
        """Terminal failure. Adds the record to the failed-record index."""
        with self._lock:
            state = self._get(record_id)
            now = self._now()
            state.status = RecordStatus.FAILED
            state.is_processed = True
            state.failed_at = now
            state.last_updated = now
            state.failure_reason = reason
            state.recoverable = recoverable
            state.completed_at = None
            state.result = None
            attempt = state.latest_attempt
            if attempt is not None:
                attempt.status = AttemptStatus.FAILED
                attempt.end_time = now
            self._failed[record_id] = FailedRecordSnapshot.model_construct(
                record=state, failed_at=now, recoverable=recoverable,
            )
            logger.info(
                "Record %s failed after %d attempt(s): %s (recoverable=%s)",
                record_id, len(state.attempts), reason, recoverable,
            )
            return state.model_copy(deep=True)

    # ---- retry gate ----

    def should_continue_processing(self, record_id: str) -> bool:
        """Attempt-count and record-recoverability gate."""
        with self._lock:
            state = self._records.get(record_id)
            if state is None or state.is_processed:
                return False
            if state.current_attempt >= state.max_attempts:
                return False
            return state.recoverable

    def should_retry_record(self, record_id: str) -> bool:
        """Attempt-count gate plus the most recent error's recoverable flag.

        Only the last recorded error counts: a recoverable error recorded
        after a non-recoverable one re-opens the record for retry.
        """
        with self._lock:
            state = self._records.get(record_id)
            if state is None or state.is_processed:
                return False
            if state.current_attempt >= state.max_attempts:
                return False
            last = state.last_error
            return last is None or last.recoverable

    # ---- reporting ----

    def get_record_stats(self, record_id: str) -> RecordStats | None:
        with self._lock:
            state = self._records.get(record_id)
            if state is None:
                return None
            return self._stats_for(state, self._now())

    def get_session_stats(self, session_id: str) -> SessionStats | None:
        with self._lock:
            record_ids = self._sessions.get(session_id)
            if record_ids is None:
                return None
            counts = {status: 0 for status in RecordStatus}
            total_errors = 0
            total_recoveries = 0
            for record_id in record_ids:
                state = self._records.get(record_id)
                if state is None:
                    continue
                counts[state.status] += 1
                total_errors += len(state.errors)
                total_recoveries += state.recovery_attempt_count
            return SessionStats(
                session_id=session_id,
                total_records=sum(counts.values()),
                pending=counts[RecordStatus.PENDING],
                processing=counts[RecordStatus.PROCESSING],
                completed=counts[RecordStatus.COMPLETED],
                failed=counts[RecordStatus.FAILED],
                total_errors=total_errors,
                total_recovery_attempts=total_recoveries,
            )

    def get_failed_records(self) -> list[FailedRecordSummary]:
        name_field = self._config.display_name_field
        with self._lock:
            summaries = []
            for record_id, snapshot in self._failed.items():
                state = snapshot.record
                last = state.last_error
                summaries.append(FailedRecordSummary(
                    record_id=record_id,
                    record_name=str(state.payload.get(name_field) or UNKNOWN_RECORD_NAME),
                    failure_reason=state.failure_reason,
                    failed_at=snapshot.failed_at,
                    recoverable=snapshot.recoverable,
                    attempts=len(state.attempts),
                    last_error=last.model_copy(deep=True) if last is not None else None,
                ))
            return summaries

    def get_error_correlation(self, record_id: str, kind: str) -> list[ErrorEntry]:
        with self._lock:
            entries = self._correlation.get((record_id, kind), [])
            return [e.model_copy(deep=True) for e in entries]

    def export_record_state(self, record_id: str) -> RecordExport | None:
        with self._lock:
            state = self._records.get(record_id)
            if state is None:
                return None
            stats = self._stats_for(state, self._now())
            return RecordExport.model_validate({**state.model_dump(), "stats": stats.model_dump()})

    # ---- maintenance ----

    def cleanup(self, max_age_hours: float | None = None) -> int:
        """Drop records not updated within ``max_age_hours`` and prune stale correlations.

        Returns:
            Number of records removed.
        """
        if max_age_hours is None:
            max_age_hours = self._config.cleanup_max_age_hours
        cutoff = self._now() - timedelta(hours=max_age_hours)
        with self._lock:
            expired = [rid for rid, s in self._records.items() if s.last_updated <= cutoff]
            for record_id in expired:
                state = self._records.pop(record_id)
                self._unindex_session(record_id, state.session_id)
                self._failed.pop(record_id, None)

            pruned_keys = 0
            for key in list(self._correlation):
                kept = [e for e in self._correlation[key] if e.timestamp > cutoff]
                if kept:
                    self._correlation[key] = kept
                else:
                    del self._correlation[key]
                    pruned_keys += 1

        if expired or pruned_keys:
            logger.info(
                "Cleanup removed %d record(s) and %d correlation key(s) older than %.1fh",
                len(expired), pruned_keys, max_age_hours,
            )
        return len(expired)
