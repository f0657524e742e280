"""Tests for ErrorClassifier message classification."""

from __future__ import annotations

import pytest

from recordtrack.tracking.classifier import ErrorClassifier, ErrorKind, termination_reason


@pytest.mark.parametrize(
    ("message", "kind"),
    [
        ("Form validation failed: missing DOB", ErrorKind.FORM_VALIDATION),
        ("Required field 'zip' is empty", ErrorKind.FORM_VALIDATION),
        ("Session expired, please log in", ErrorKind.SESSION_VALIDATION),
        ("Failed to launch the browser process", ErrorKind.BROWSER_LAUNCH),
        ("Timeout 30000ms exceeded", ErrorKind.BROWSER_TIMEOUT),
        ("Target page, context or browser has been closed", ErrorKind.BROWSER_SESSION_TERMINATED),
        ("Browser crashed unexpectedly", ErrorKind.BROWSER_CRASH),
        ("net::ERR_NAME_NOT_RESOLVED", ErrorKind.PAGE_NAVIGATION),
        ("JavaScript heap exceeded", ErrorKind.RESOURCE_EXHAUSTION),
        ("something odd happened", ErrorKind.UNKNOWN),
    ],
)
def test_classifies_message_kind(message, kind):
    assert ErrorClassifier.classify(message).kind == kind


class TestRecoverability:
    def test_launch_failure_unrecoverable_on_last_attempt(self):
        assert ErrorClassifier.classify("Failed to launch", attempt=1, max_attempts=3).recoverable is True
        assert ErrorClassifier.classify("Failed to launch", attempt=3, max_attempts=3).recoverable is False

    def test_navigation_failure_unrecoverable_on_last_attempt(self):
        info = ErrorClassifier.classify("Cannot navigate to page", attempt=3, max_attempts=3)
        assert info.kind == ErrorKind.PAGE_NAVIGATION
        assert info.recoverable is False

    def test_crash_during_recovery_is_unrecoverable(self):
        assert ErrorClassifier.classify("Browser crash", recovery_attempt=False).recoverable is True
        assert ErrorClassifier.classify("Browser crash", recovery_attempt=True).recoverable is False

    def test_killed_session_is_unrecoverable(self):
        info = ErrorClassifier.classify("Browser disconnected: process killed by SIGKILL")
        assert info.kind == ErrorKind.BROWSER_SESSION_TERMINATED
        assert info.recoverable is False

    def test_race_condition_session_is_recoverable(self):
        info = ErrorClassifier.classify("Execution context was destroyed")
        assert info.recoverable is True

    @pytest.mark.parametrize("message", ["Permission denied", "401 Unauthorized", "configuration error in env"])
    def test_unknown_auth_and_config_errors_unrecoverable(self, message):
        info = ErrorClassifier.classify(message)
        assert info.kind == ErrorKind.UNKNOWN
        assert info.recoverable is False


def test_exception_keeps_message_and_trace():
    try:
        raise ConnectionError("net::ERR_CONNECTION_RESET")
    except ConnectionError as exc:
        info = ErrorClassifier.classify(exc)
    assert info.message == "net::ERR_CONNECTION_RESET"
    assert info.kind == ErrorKind.PAGE_NAVIGATION
    assert "ConnectionError" in info.trace


def test_empty_exception_message_falls_back_to_type_name():
    assert ErrorClassifier.classify(TimeoutError()).message == "TimeoutError"


def test_termination_reason_unknown():
    assert termination_reason("nothing matches") == "unknown"
