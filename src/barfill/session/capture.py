"""Capture session state machine.

A CaptureSession launches the host's polyline command, watches the
command's lifecycle, remembers the polyline it produced, and runs the bar
pipeline once the host has gone idle after the command ends:

    IDLE -> AWAITING_TOOL -> TOOL_RUNNING -> TOOL_ENDED_PENDING_IDLE
         -> COMPLETED | CANCELLED | FAILED

Nothing here blocks. start() returns once the command has been queued;
everything after that happens inside host event callbacks, and the caller
learns the result through the on_finished callback.
"""

from collections.abc import Callable
from dataclasses import replace
from enum import Enum
from typing import Protocol

from barfill.config import BarConfig, BarfillSettings
from barfill.core.pipeline import BarPipeline, summary_lines
from barfill.domain import AxisMode, RunResult
from barfill.exceptions import (
    BoundaryNotClosedError,
    MissingBoundaryError,
    SessionStateError,
)
from barfill.host.base import Entity, HostDocument
from barfill.host.events import CommandEventArgs, HostEvent
from barfill.session.outcome import FailureReason, OutcomeStatus, SessionOutcome
from barfill.session.registry import SessionRegistry, default_registry
from barfill.session.subscriptions import SubscriptionGroup
from barfill.utils import SessionLogger

# Subscriptions tied to the drawing command itself
TOOL_SUBSCRIPTIONS = ("object_appended", "command_ended", "command_cancelled", "command_failed")

# Prefixes a host may put in front of a command name (global name, built-in
# version, transparent invocation)
INVOCATION_MARKERS = "_.'"


class SessionState(str, Enum):
    """Lifecycle states of a capture session."""

    IDLE = "idle"
    AWAITING_TOOL = "awaiting_tool"
    TOOL_RUNNING = "tool_running"
    TOOL_ENDED_PENDING_IDLE = "tool_ended_pending_idle"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.COMPLETED, SessionState.CANCELLED, SessionState.FAILED)


TERMINAL_STATES = {
    OutcomeStatus.COMPLETED: SessionState.COMPLETED,
    OutcomeStatus.CANCELLED: SessionState.CANCELLED,
    OutcomeStatus.FAILED: SessionState.FAILED,
}


class RunExporter(Protocol):
    """Persists a run result and reports where it went."""

    def export(self, result: RunResult) -> str: ...


def normalize_command_name(name: str | None) -> str:
    """Upper-case command name without leading invocation markers.

    Examples:
        >>> normalize_command_name("_.pline")
        'PLINE'
    """
    return (name or "").strip().lstrip(INVOCATION_MARKERS).upper()


class CaptureSession:
    """Captures one boundary from the host and fills it with bars.

    Example:
        session = CaptureSession(document, settings, on_finished=print)
        session.start()
        # ... host delivers command and idle events ...
        assert session.state.is_terminal
    """

    def __init__(
        self,
        document: HostDocument,
        settings: BarfillSettings | None = None,
        on_finished: Callable[[SessionOutcome], None] | None = None,
        registry: SessionRegistry | None = None,
        exporter: RunExporter | None = None,
        session_logger: SessionLogger | None = None,
    ) -> None:
        """Initialize a session in the IDLE state.

        Args:
            document: Host document to capture from
            settings: Bar layout, tolerances and capture command
            on_finished: Called exactly once with the terminal outcome
            registry: Registry enforcing one session per document
            exporter: Optional persistence step run after a completed write
            session_logger: Logger for transitions and results
        """
        self.document = document
        self.settings = settings if settings is not None else BarfillSettings()
        self.on_finished = on_finished
        self.registry = registry if registry is not None else default_registry
        self.exporter = exporter
        self.session_logger = (
            session_logger if session_logger is not None else SessionLogger(document=document.name)
        )
        self.pipeline = BarPipeline(self.settings.geometry, self.session_logger)

        self.boundary_id: str | None = None
        self.outcome: SessionOutcome | None = None
        self._state = SessionState.IDLE
        self._subscriptions = SubscriptionGroup()
        self._finished = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> BarConfig:
        return self.settings.bars

    @property
    def subscription_count(self) -> int:
        """Number of observers this session still has attached."""
        return len(self._subscriptions)

    def start(self) -> None:
        """Register the session and launch the drawing command.

        Returns as soon as the command is queued.

        Raises:
            InvalidConfigurationError: If a required spacing is not positive
            SessionAlreadyActiveError: If the document already has a session
            SessionStateError: If this session was already started
        """
        if self._state is not SessionState.IDLE:
            raise SessionStateError("start", self._state.value)

        self.config.validate_for_run()
        self.registry.register(self.document.key, self, self.document.name)
        self._transition(SessionState.AWAITING_TOOL)

        self.session_logger.log_session_start(
            self.config.axis_mode.value,
            self.config.spacing_horizontal,
            self.config.spacing_vertical,
        )
        self._announce_configuration()

        events = self.document.events
        self._subscriptions.add(
            "object_appended", events.subscribe(HostEvent.OBJECT_APPENDED, self._on_object_appended)
        )
        self._subscriptions.add(
            "command_ended", events.subscribe(HostEvent.COMMAND_ENDED, self._on_command_ended)
        )
        self._subscriptions.add(
            "command_cancelled",
            events.subscribe(HostEvent.COMMAND_CANCELLED, self._on_command_cancelled),
        )
        self._subscriptions.add(
            "command_failed", events.subscribe(HostEvent.COMMAND_FAILED, self._on_command_failed)
        )

        command = self.settings.capture.command_name
        self.document.write_message(
            f"Now draw boundary using {command} (type C to close OR end at start point), "
            "then press Enter..."
        )
        try:
            self.document.execute_command(self.settings.capture.command_string)
        except Exception as e:
            if not self._finished:
                self.session_logger.log_session_failed(FailureReason.TOOL_FAILED.value, e)
                self._finish(SessionOutcome.failed(FailureReason.TOOL_FAILED, str(e)))
            return

        # A host may run the whole command inside execute_command
        if self._state is SessionState.AWAITING_TOOL:
            self._transition(SessionState.TOOL_RUNNING)

    def cancel(self) -> None:
        """Cancel the session from any non-terminal state."""
        if self._finished:
            return
        self.session_logger.log_session_cancelled(self._state.value)
        self._finish(SessionOutcome.cancelled("Cancelled by user"))

    def _matches_command(self, args: CommandEventArgs) -> bool:
        expected = normalize_command_name(self.settings.capture.command_name)
        return normalize_command_name(args.command_name) == expected

    def _on_object_appended(self, entity: Entity) -> None:
        if entity.owner_id != self.document.current_space_id or not entity.is_polyline:
            return
        if entity.handle is None:
            return
        # Last match wins: later appends during the same command replace earlier ones
        self.boundary_id = entity.handle
        self.session_logger.log_candidate(entity.handle, entity.kind.value)

    def _on_command_ended(self, args: CommandEventArgs) -> None:
        if self._state not in (SessionState.AWAITING_TOOL, SessionState.TOOL_RUNNING):
            return
        if not self._matches_command(args):
            self.session_logger.log_ignored_command(args.command_name)
            return

        self._subscriptions.detach(*TOOL_SUBSCRIPTIONS)
        self._transition(SessionState.TOOL_ENDED_PENDING_IDLE)
        self._subscriptions.add(
            "idle", self.document.events.subscribe(HostEvent.IDLE, self._on_idle)
        )

    def _on_idle(self, _payload: object) -> None:
        self._subscriptions.detach("idle")
        if self._state is not SessionState.TOOL_ENDED_PENDING_IDLE:
            return
        try:
            outcome = self._process()
        except Exception as e:
            # Bars may already be committed; the host event loop must not see this
            self.session_logger.log_session_failed(FailureReason.REPORT_FAILED.value, e)
            outcome = SessionOutcome.failed(FailureReason.REPORT_FAILED, str(e))
        self._finish(outcome)

    def _on_command_cancelled(self, args: CommandEventArgs) -> None:
        if not self._matches_command(args):
            return
        self.document.write_message(f"{self.settings.capture.command_name} cancelled.")
        self.session_logger.log_session_cancelled(self._state.value)
        self._finish(SessionOutcome.cancelled("Drawing command cancelled"))

    def _on_command_failed(self, args: CommandEventArgs) -> None:
        if not self._matches_command(args):
            return
        self.document.write_message(f"{self.settings.capture.command_name} failed.")
        self.session_logger.log_session_failed(FailureReason.TOOL_FAILED.value)
        self._finish(SessionOutcome.failed(FailureReason.TOOL_FAILED, "Drawing command failed"))

    def _process(self) -> SessionOutcome:
        """Close the boundary, generate bars and write them atomically."""
        if self.boundary_id is None:
            self.document.write_message("No polyline created. Command cancelled.")
            self.session_logger.log_session_failed(FailureReason.MISSING_BOUNDARY.value)
            return SessionOutcome.failed(
                FailureReason.MISSING_BOUNDARY, str(MissingBoundaryError(None))
            )

        boundary_id = self.boundary_id
        try:
            with self.document.transaction() as tr:
                entity = tr.get_entity(boundary_id)
                if entity is None or entity.boundary is None:
                    raise MissingBoundaryError(boundary_id)

                boundary = entity.boundary
                closed = boundary.ensure_closed(self.settings.geometry.closing_tolerance)
                if closed is not boundary:
                    tr.replace_entity(boundary_id, replace(entity, boundary=closed))
                    self.session_logger.log_boundary_closed(boundary_id, boundary.endpoint_gap())

                self.document.write_message(f"Boundary Handle: {boundary_id}")
                layout = self.pipeline.generate(closed, self.config)
                bars = self.pipeline.write(tr, layout, self.document.current_space_id)
        except MissingBoundaryError as e:
            self.document.write_message("Created boundary not available.")
            self.session_logger.log_session_failed(FailureReason.MISSING_BOUNDARY.value, e)
            return SessionOutcome.failed(FailureReason.MISSING_BOUNDARY, str(e))
        except BoundaryNotClosedError as e:
            self.document.write_message("Boundary must be closed.")
            self.session_logger.log_session_failed(FailureReason.BOUNDARY_NOT_CLOSED.value, e)
            return SessionOutcome.failed(FailureReason.BOUNDARY_NOT_CLOSED, str(e))
        except Exception as e:
            # Host callbacks must not see exceptions; the transaction has aborted
            self.document.write_message(f"Bar generation failed: {e}")
            self.session_logger.log_session_failed(FailureReason.WRITE_FAILED.value, e)
            return SessionOutcome.failed(FailureReason.WRITE_FAILED, str(e))

        for bar in bars:
            self.document.write_message(bar.describe())

        result = self.pipeline.summarize(
            bars,
            boundary_id=boundary_id,
            config=self.config,
            drawing_name=self.document.name,
            drawing_path=self.document.path,
        )

        if result.total_bars == 0:
            self.document.write_message(
                "No bars were generated inside the boundary (check spacing / boundary)."
            )
        for line in summary_lines(result):
            self.document.write_message(line)

        self._export(result)
        return SessionOutcome.completed(result)

    def _export(self, result: RunResult) -> None:
        if self.exporter is None:
            return
        try:
            location = self.exporter.export(result)
        except Exception as e:
            self.document.write_message(f"JSON save failed: {e}")
            self.session_logger.log_export_failed(getattr(e, "path", ""), e)
            return
        self.document.write_message(f"Bars JSON saved: {location}")

    def _announce_configuration(self) -> None:
        config = self.config
        self.document.write_message(f"Orientation: {config.axis_mode.value}")
        if config.axis_mode is AxisMode.HORIZONTAL:
            self.document.write_message(f"Spacing(H): {config.spacing_horizontal}")
        elif config.axis_mode is AxisMode.VERTICAL:
            self.document.write_message(f"Spacing(V): {config.spacing_vertical}")
        else:
            self.document.write_message(
                f"Spacing(H): {config.spacing_horizontal} | Spacing(V): {config.spacing_vertical}"
            )

    def _transition(self, target: SessionState) -> None:
        self.session_logger.log_transition(self._state.value, target.value)
        self._state = target

    def _finish(self, outcome: SessionOutcome) -> None:
        """Enter a terminal state. Runs at most once per session."""
        if self._finished:
            return
        self._finished = True

        self._subscriptions.dispose()
        self.registry.release(self.document.key, self)
        if not outcome.is_completed:
            self.boundary_id = None

        self._transition(TERMINAL_STATES[outcome.status])
        self.outcome = outcome

        if self.on_finished is not None:
            self.on_finished(outcome)


def start_capture(
    document: HostDocument,
    settings: BarfillSettings | None = None,
    on_finished: Callable[[SessionOutcome], None] | None = None,
    registry: SessionRegistry | None = None,
    exporter: RunExporter | None = None,
) -> CaptureSession:
    """Create and start a capture session for ``document``.

    Raises:
        InvalidConfigurationError: If a required spacing is not positive
        SessionAlreadyActiveError: If the document already has a session
    """
    session = CaptureSession(
        document,
        settings=settings,
        on_finished=on_finished,
        registry=registry,
        exporter=exporter,
    )
    session.start()
    return session
