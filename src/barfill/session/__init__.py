"""Capture sessions for barfill.

This module coordinates the interactive part of a run: launching the
host's drawing command, following its lifecycle, and deferring bar
generation until the host is idle.

Key classes:
- CaptureSession: Per-document state machine
- SessionRegistry: Process-wide guard against concurrent sessions
- SessionOutcome: Completed, Cancelled or Failed result of a session
"""

from barfill.session.capture import (
    CaptureSession,
    SessionState,
    normalize_command_name,
    start_capture,
)
from barfill.session.outcome import FailureReason, OutcomeStatus, SessionOutcome
from barfill.session.registry import SessionRegistry, default_registry
from barfill.session.subscriptions import SubscriptionGroup

__all__ = [
    "CaptureSession",
    "FailureReason",
    "OutcomeStatus",
    "SessionOutcome",
    "SessionRegistry",
    "SessionState",
    "SubscriptionGroup",
    "default_registry",
    "normalize_command_name",
    "start_capture",
]
