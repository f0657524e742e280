"""Record lifecycle tracking: tracker, error classifier, and cleanup scheduler."""

from __future__ import annotations

from recordtrack.core.config import AppSettings
from recordtrack.core.protocols import ICleanable
from recordtrack.tracking.classifier import ErrorClassifier, ErrorKind
from recordtrack.tracking.maintenance import CleanupScheduler
from recordtrack.tracking.tracker import RecordTracker


def create_tracker(settings: AppSettings | None = None) -> RecordTracker:
    """Create a tracker configured from application settings."""
    if settings is None:
        settings = AppSettings()
    return RecordTracker(config=settings.tracker)


def create_scheduler(tracker: ICleanable, settings: AppSettings | None = None) -> CleanupScheduler:
    """Create a cleanup scheduler for ``tracker`` using the maintenance settings."""
    if settings is None:
        settings = AppSettings()
    return CleanupScheduler(
        tracker,
        interval_seconds=settings.maintenance.interval_seconds,
        max_age_hours=settings.tracker.cleanup_max_age_hours,
    )


__all__ = [
    "CleanupScheduler",
    "ErrorClassifier",
    "ErrorKind",
    "RecordTracker",
    "create_scheduler",
    "create_tracker",
]
