"""Terminal outcome of a capture session."""

from dataclasses import dataclass
from enum import Enum

from barfill.domain import RunResult


class OutcomeStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class FailureReason(str, Enum):
    """Why a session ended in FAILED."""

    BOUNDARY_NOT_CLOSED = "boundary_not_closed"
    MISSING_BOUNDARY = "missing_boundary"
    TOOL_FAILED = "tool_failed"
    WRITE_FAILED = "write_failed"
    REPORT_FAILED = "report_failed"


@dataclass(frozen=True)
class SessionOutcome:
    """Completed(result), Cancelled, or Failed(reason).

    Attributes:
        status: Which of the three outcomes this is
        result: Run report, only for completed sessions
        reason: Failure category, only for failed sessions
        message: Human-readable detail
    """

    status: OutcomeStatus
    result: RunResult | None = None
    reason: FailureReason | None = None
    message: str = ""

    @classmethod
    def completed(cls, result: RunResult) -> "SessionOutcome":
        return cls(status=OutcomeStatus.COMPLETED, result=result)

    @classmethod
    def cancelled(cls, message: str = "") -> "SessionOutcome":
        return cls(status=OutcomeStatus.CANCELLED, message=message)

    @classmethod
    def failed(cls, reason: FailureReason, message: str = "") -> "SessionOutcome":
        return cls(status=OutcomeStatus.FAILED, reason=reason, message=message)

    @property
    def is_completed(self) -> bool:
        return self.status is OutcomeStatus.COMPLETED

    @property
    def is_cancelled(self) -> bool:
        return self.status is OutcomeStatus.CANCELLED

    @property
    def is_failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED
