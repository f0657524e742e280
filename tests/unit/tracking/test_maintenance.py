"""Tests for CleanupScheduler."""

from __future__ import annotations

import threading

import pytest

from recordtrack.core.config import AppSettings, MaintenanceConfig, TrackerConfig
from recordtrack.tracking import create_scheduler
from recordtrack.tracking.maintenance import CleanupScheduler
from recordtrack.tracking.tracker import RecordTracker
from tests.fakes import FakeClock


class _CountingStore:
    """ICleanable that records calls and signals after the first pass."""

    def __init__(self, fail: bool = False) -> None:
        self.calls: list[float | None] = []
        self.called = threading.Event()
        self._fail = fail

    def cleanup(self, max_age_hours: float | None = None) -> int:
        self.calls.append(max_age_hours)
        self.called.set()
        if self._fail:
            raise RuntimeError("boom")
        return 0


def test_run_once_cleans_tracker():
    clock = FakeClock()
    tracker = RecordTracker(clock=clock)
    tracker.initialize("r1", {}, "s1", "j1")
    clock.advance(hours=2)
    scheduler = CleanupScheduler(tracker, max_age_hours=1)
    assert scheduler.run_once() == 1
    assert len(tracker) == 0


def test_background_thread_runs_cleanup():
    store = _CountingStore()
    scheduler = CleanupScheduler(store, interval_seconds=0.01, max_age_hours=6)
    scheduler.start()
    try:
        assert store.called.wait(2.0)
    finally:
        scheduler.stop()
    assert store.calls[0] == 6
    assert scheduler.running is False


def test_failed_pass_does_not_stop_thread():
    store = _CountingStore(fail=True)
    scheduler = CleanupScheduler(store, interval_seconds=0.01)
    scheduler.start()
    try:
        assert store.called.wait(2.0)
        store.called.clear()
        assert store.called.wait(2.0)
        assert scheduler.running is True
    finally:
        scheduler.stop()


def test_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        CleanupScheduler(_CountingStore(), interval_seconds=0)


def test_create_scheduler_uses_settings():
    settings = AppSettings(
        tracker=TrackerConfig(cleanup_max_age_hours=12),
        maintenance=MaintenanceConfig(interval_seconds=30),
    )
    store = _CountingStore()
    scheduler = create_scheduler(store, settings)
    scheduler.run_once()
    assert store.calls == [12]
