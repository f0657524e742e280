"""Record, attempt, and error models for the processing lifecycle."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, Field


class RecordStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AttemptStatus(StrEnum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class ErrorInfo(BaseModel):
    """Caller-side description of a failure, as classified by the orchestrator."""

    message: str = "Unknown error"
    kind: str = "unknown"
    recoverable: bool = True
    trace: Optional[str] = None


class ErrorEntry(BaseModel):
    """A failure recorded against a record and its active attempt."""

    message: str
    kind: str
    context: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime
    trace: Optional[str] = None
    recoverable: bool = True
    attempt_number: int = 0


class RecoveryAttempt(BaseModel):
    """A crash-recovery procedure run during an attempt."""

    kind: str
    success: bool
    timestamp: datetime
    details: dict[str, Any] = Field(default_factory=dict)


class Attempt(BaseModel):
    """One discrete try at processing a record."""

    number: int
    start_time: datetime
    end_time: Optional[datetime] = None
    status: AttemptStatus = AttemptStatus.IN_PROGRESS
    errors: list[ErrorEntry] = Field(default_factory=list)
    recovery_attempts: list[RecoveryAttempt] = Field(default_factory=list)


class RecordState(BaseModel):
    """Full processing history for a single record."""

    id: str
    payload: dict[str, Any] = Field(default_factory=dict)
    session_id: str
    job_id: str
    status: RecordStatus = RecordStatus.PENDING
    attempts: list[Attempt] = Field(default_factory=list)
    current_attempt: int = 0
    max_attempts: int = 3
    errors: list[ErrorEntry] = Field(default_factory=list)
    start_time: datetime
    last_updated: datetime
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    is_processed: bool = False
    recoverable: bool = True
    result: Optional[dict[str, Any]] = None
    failure_reason: Optional[str] = None

    @property
    def latest_attempt(self) -> Attempt | None:
        return self.attempts[-1] if self.attempts else None

    @property
    def last_error(self) -> ErrorEntry | None:
        return self.errors[-1] if self.errors else None

    @property
    def recovery_attempt_count(self) -> int:
        """Recovery attempts summed over every attempt."""
        return sum(len(a.recovery_attempts) for a in self.attempts)

    @property
    def terminal_time(self) -> datetime | None:
        """Timestamp of the terminal state the record is currently in."""
        if self.status == RecordStatus.COMPLETED:
            return self.completed_at
        if self.status == RecordStatus.FAILED:
            return self.failed_at
        return None


class FailedRecordSnapshot(BaseModel):
    """Failed-record index entry held for manual review."""

    record: RecordState
    failed_at: datetime
    recoverable: bool = False
