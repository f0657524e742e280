"""ErrorClassifier: maps raw submission-workflow failures to ErrorInfo.

The browser-driven submission process fails with free-text messages. The
classifier turns those into a ``(message, kind, recoverable)`` triple that
``RecordTracker.record_error`` stores and later evaluates for retry.
"""

from __future__ import annotations

import re
import traceback
from enum import StrEnum

from recordtrack.models.record_state import ErrorInfo


class ErrorKind(StrEnum):
    FORM_VALIDATION = "form_validation"
    SESSION_VALIDATION = "session_validation"
    BROWSER_LAUNCH = "browser_launch"
    BROWSER_TIMEOUT = "browser_timeout"
    BROWSER_SESSION_TERMINATED = "browser_session_terminated"
    BROWSER_CRASH = "browser_crash"
    PAGE_NAVIGATION = "page_navigation"
    RESOURCE_EXHAUSTION = "resource_exhaustion"
    CIRCUIT_BREAKER = "circuit_breaker"
    UNKNOWN = "unknown"


def _compile(*patterns: str) -> list[re.Pattern[str]]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


_FORM_VALIDATION = _compile(
    r"form validation failed", r"form.*incomplete", r"form.*invalid", r"field.*missing",
    r"field.*empty", r"required.*field", r"validation.*error",
)
_SESSION_VALIDATION = _compile(
    r"session validation failed", r"session.*invalid", r"session.*expired", r"session.*not.*found",
)
_BROWSER_LAUNCH = _compile(
    r"browserType\.launch.*Timeout", r"Failed to launch", r"Could not start browser",
    r"Browser process crashed", r"ECONNREFUSED.*browser", r"spawn.*ENOENT",
    r"browser.*not found", r"chromium.*launch.*failed",
)
_BROWSER_TIMEOUT = _compile(
    r"Timeout.*exceeded", r"Navigation timeout", r"Page timeout", r"waiting for.*timed out",
    r"element.*timeout", r"selector.*timeout",
)
_SESSION_TERMINATED = _compile(
    r"target page, context or browser has been closed", r"page closed", r"browser has been closed",
    r"execution context was destroyed", r"session.*closed", r"browser.*disconnected",
    r"protocol error.*target closed", r"websocket connection.*closed",
    r"browser instance.*terminated", r"context.*destroyed", r"page.*detached",
    r"connection.*terminated",
)
_BROWSER_CRASH = _compile(
    r"browser.*crash", r"Target page.*detached", r"Session closed", r"Connection closed",
    r"Browser closed", r"context.*closed", r"page.*closed",
)
_PAGE_NAVIGATION = _compile(
    r"navigation.*failed", r"net::ERR_", r"Failed to load", r"Cannot navigate", r"page.*load.*failed",
)
_RESOURCE_EXHAUSTION = _compile(
    r"out of memory", r"memory.*exhausted", r"resource.*exhausted", r"ENOMEM", r"heap.*exceeded",
)
_NON_RECOVERABLE = _compile(
    r"permission.*denied", r"access.*denied", r"authentication.*failed", r"unauthorized",
    r"forbidden", r"not.*found.*404", r"syntax.*error", r"configuration.*error",
)

# Order matters: first matching reason wins.
_TERMINATION_REASONS: dict[str, list[re.Pattern[str]]] = {
    "race_condition": _compile(
        r"target page, context or browser has been closed", r"execution context was destroyed",
    ),
    "manual_close": _compile(r"browser.*close.*manually", r"session.*terminated.*by.*user"),
    "process_killed": _compile(r"process.*killed", r"sigterm", r"sigkill"),
    "network_disconnection": _compile(
        r"websocket connection.*closed", r"connection.*terminated", r"browser.*disconnected",
    ),
    "context_destroyed": _compile(r"context.*destroyed", r"execution context was destroyed"),
    "page_detached": _compile(r"page.*detached", r"target.*detached"),
    "browser_crash": _compile(r"browser.*crash", r"unexpected.*termination"),
}

_UNRECOVERABLE_TERMINATIONS = frozenset({"manual_close", "process_killed"})


def _matches(patterns: list[re.Pattern[str]], message: str) -> bool:
    return any(p.search(message) for p in patterns)


def termination_reason(message: str) -> str:
    """Best-guess reason a browser session ended, or ``"unknown"``."""
    for reason, patterns in _TERMINATION_REASONS.items():
        if _matches(patterns, message):
            return reason
    return "unknown"


def is_generally_recoverable(message: str) -> bool:
    return not _matches(_NON_RECOVERABLE, message)


class ErrorClassifier:
    """Stateless message classifier for submission-workflow failures."""

    @staticmethod
    def classify(
        error: BaseException | str,
        *,
        attempt: int = 1,
        max_attempts: int = 3,
        recovery_attempt: bool = False,
    ) -> ErrorInfo:
        """Classify an exception or message into an ErrorInfo.

        Args:
            error: Raised exception or raw message text.
            attempt: Attempt number active when the failure happened.
            max_attempts: Attempt ceiling; launch and navigation failures
                stop being recoverable on the last attempt.
            recovery_attempt: True when the failure happened while a crash
                recovery was already running.
        """
        if isinstance(error, BaseException):
            message = str(error) or type(error).__name__
            trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        else:
            message = error
            trace = None

        kind, recoverable = ErrorClassifier._kind_for(
            message, attempt=attempt, max_attempts=max_attempts, recovery_attempt=recovery_attempt,
        )
        return ErrorInfo(message=message, kind=kind, recoverable=recoverable, trace=trace)

    @staticmethod
    def _kind_for(
        message: str, *, attempt: int, max_attempts: int, recovery_attempt: bool
    ) -> tuple[ErrorKind, bool]:
        if _matches(_FORM_VALIDATION, message):
            return ErrorKind.FORM_VALIDATION, True
        if _matches(_SESSION_VALIDATION, message):
            return ErrorKind.SESSION_VALIDATION, True
        if _matches(_BROWSER_LAUNCH, message):
            return ErrorKind.BROWSER_LAUNCH, attempt < max_attempts
        if _matches(_BROWSER_TIMEOUT, message):
            return ErrorKind.BROWSER_TIMEOUT, True
        # Session termination is the more specific form of a crash.
        if _matches(_SESSION_TERMINATED, message):
            reason = termination_reason(message)
            return ErrorKind.BROWSER_SESSION_TERMINATED, reason not in _UNRECOVERABLE_TERMINATIONS
        if _matches(_BROWSER_CRASH, message):
            return ErrorKind.BROWSER_CRASH, not recovery_attempt
        if _matches(_PAGE_NAVIGATION, message):
            return ErrorKind.PAGE_NAVIGATION, attempt < max_attempts
        if _matches(_RESOURCE_EXHAUSTION, message):
            return ErrorKind.RESOURCE_EXHAUSTION, True
        return ErrorKind.UNKNOWN, is_generally_recoverable(message)
