"""CleanupScheduler: periodic age-based cleanup of a tracker.

Usage:
    scheduler = CleanupScheduler(tracker, interval_seconds=3600, max_age_hours=24)
    scheduler.start()
    ...
    scheduler.stop()
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from recordtrack.core.protocols import ICleanable

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """Runs ``cleanup`` on a daemon thread at a fixed interval."""

    def __init__(
        self,
        tracker: ICleanable,
        *,
        interval_seconds: float = 3600.0,
        max_age_hours: Optional[float] = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._tracker = tracker
        self._interval = interval_seconds
        self._max_age_hours = max_age_hours
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> int:
        """Perform one cleanup pass and return the number of records removed."""
        return self._tracker.cleanup(self._max_age_hours)

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="recordtrack-cleanup", daemon=True,
        )
        self._thread.start()
        logger.info("Cleanup scheduler started (interval=%.0fs)", self._interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Cleanup scheduler stopped")

    def _loop(self) -> None:
        # Event.wait returns True once stop() is called.
        while not self._stop.wait(self._interval):
            try:
                self.run_once()
            except Exception:
                logger.exception("Cleanup pass failed")
