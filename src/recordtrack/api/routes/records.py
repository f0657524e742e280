"""Read-only record, session, and failure endpoints for the reporting layer."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from recordtrack.models.record_state import ErrorEntry
from recordtrack.models.reports import FailedRecordSummary, RecordExport, RecordStats, SessionStats
from recordtrack.tracking import RecordTracker

router = APIRouter(tags=["records"])


def get_tracker(request: Request) -> RecordTracker:
    return request.app.state.tracker


@router.get("/records/{record_id}", response_model=RecordExport)
async def export_record(record_id: str, tracker: RecordTracker = Depends(get_tracker)) -> RecordExport:
    """Full record history plus computed stats."""
    exported = tracker.export_record_state(record_id)
    if exported is None:
        raise HTTPException(status_code=404, detail=f"Record {record_id} not found")
    return exported


@router.get("/records/{record_id}/stats", response_model=RecordStats)
async def record_stats(record_id: str, tracker: RecordTracker = Depends(get_tracker)) -> RecordStats:
    stats = tracker.get_record_stats(record_id)
    if stats is None:
        raise HTTPException(status_code=404, detail=f"Record {record_id} not found")
    return stats


@router.get("/records/{record_id}/errors/{kind}", response_model=list[ErrorEntry])
async def error_correlation(
    record_id: str, kind: str, tracker: RecordTracker = Depends(get_tracker)
) -> list[ErrorEntry]:
    """Errors of one kind for a record, oldest first."""
    return tracker.get_error_correlation(record_id, kind)


@router.get("/sessions/{session_id}/stats", response_model=SessionStats)
async def session_stats(session_id: str, tracker: RecordTracker = Depends(get_tracker)) -> SessionStats:
    stats = tracker.get_session_stats(session_id)
    if stats is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return stats


@router.get("/failed", response_model=list[FailedRecordSummary])
async def failed_records(tracker: RecordTracker = Depends(get_tracker)) -> list[FailedRecordSummary]:
    """Records held for manual review."""
    return tracker.get_failed_records()
