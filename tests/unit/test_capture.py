"""Unit tests for the capture session state machine."""

import json

import pytest

from barfill.config import AxisMode
from barfill.domain import Boundary
from barfill.exceptions import (
    BarValidationError,
    InvalidConfigurationError,
    SessionAlreadyActiveError,
    SessionStateError,
)
from barfill.host import (
    CommandEventArgs,
    Entity,
    EntityKind,
    HostEvent,
    InMemoryDocument,
    ReplayDrawingTool,
)
from barfill.io import JsonExporter
from barfill.session import (
    CaptureSession,
    FailureReason,
    SessionState,
    normalize_command_name,
    start_capture,
)


@pytest.fixture
def outcomes():
    return []


@pytest.fixture
def session(document, registry, outcomes, make_settings):
    return CaptureSession(
        document,
        settings=make_settings(),
        on_finished=outcomes.append,
        registry=registry,
    )


class FailingCommandDocument(InMemoryDocument):
    def execute_command(self, command: str) -> None:
        raise RuntimeError("command line busy")


class SynchronousDocument(InMemoryDocument):
    """Host that runs the whole drawing command inside execute_command."""

    def __init__(self, boundary: Boundary, finish: str = "end") -> None:
        super().__init__("slab.dwg")
        self.boundary = boundary
        self.finish = finish

    def execute_command(self, command: str) -> None:
        super().execute_command(command)
        tool = ReplayDrawingTool(self)
        tool.draw(self.boundary)
        getattr(tool, self.finish)()


class RaisingExporter:
    def export(self, result):
        raise ValueError("boom")


class TestNormalizeCommandName:
    """Tests for normalize_command_name function."""

    @pytest.mark.parametrize("name", ["PLINE", "pline", "_.PLINE", "_.pline ", "'_pline", "_PLINE"])
    def test_prefixes_and_case(self, name):
        """Test that invocation markers and case are ignored."""
        assert normalize_command_name(name) == "PLINE"

    def test_none(self):
        """Test a missing command name."""
        assert normalize_command_name(None) == ""


class TestStart:
    """Tests for starting a session."""

    def test_start_launches_command(self, session, document, registry):
        """Test that start registers the session and queues the command."""
        session.start()
        assert session.state is SessionState.TOOL_RUNNING
        assert document.executed_commands == ["_.PLINE "]
        assert registry.get(document.key) is session
        assert session.subscription_count == 4

    def test_start_announces_configuration(self, document, registry, make_settings):
        """Test the configuration messages written on start."""
        session = CaptureSession(
            document,
            settings=make_settings(AxisMode.BOTH, 150.0, 200.0),
            registry=registry,
        )
        session.start()
        assert document.messages[0] == "Orientation: Both"
        assert document.messages[1] == "Spacing(H): 150.0 | Spacing(V): 200.0"
        assert document.messages[2].startswith("Now draw boundary using PLINE")

    def test_start_twice_rejected(self, session):
        """Test that a session cannot be started again."""
        session.start()
        with pytest.raises(SessionStateError):
            session.start()

    @pytest.mark.parametrize(
        ("mode", "spacing_h", "spacing_v"),
        [
            (AxisMode.HORIZONTAL, 0.0, 100.0),
            (AxisMode.VERTICAL, 100.0, -1.0),
            (AxisMode.BOTH, 100.0, 0.0),
        ],
    )
    def test_invalid_configuration_changes_nothing(
        self, document, registry, make_settings, mode, spacing_h, spacing_v
    ):
        """Test that a bad spacing fails before anything is touched."""
        session = CaptureSession(
            document, settings=make_settings(mode, spacing_h, spacing_v), registry=registry
        )
        with pytest.raises(InvalidConfigurationError):
            session.start()

        assert session.state is SessionState.IDLE
        assert len(registry) == 0
        assert document.messages == []
        assert document.executed_commands == []
        assert document.events.subscriber_count() == 0

    def test_unused_spacing_not_validated(self, document, registry, make_settings):
        """Test that only the swept axes need a positive spacing."""
        session = CaptureSession(
            document,
            settings=make_settings(AxisMode.VERTICAL, 0.0, 100.0),
            registry=registry,
        )
        session.start()
        assert session.state is SessionState.TOOL_RUNNING

    def test_second_session_rejected(self, session, document, registry, make_settings):
        """Test that a document cannot run two sessions at once."""
        session.start()
        other = CaptureSession(document, settings=make_settings(), registry=registry)

        with pytest.raises(SessionAlreadyActiveError):
            other.start()

        assert other.state is SessionState.IDLE
        assert session.state is SessionState.TOOL_RUNNING
        assert registry.get(document.key) is session
        assert document.executed_commands == ["_.PLINE "]

    def test_command_launch_failure(self, registry, outcomes, make_settings):
        """Test that a host refusing the command fails the session cleanly."""
        document = FailingCommandDocument()
        session = CaptureSession(
            document, settings=make_settings(), on_finished=outcomes.append, registry=registry
        )
        session.start()

        assert session.state is SessionState.FAILED
        assert outcomes[0].reason is FailureReason.TOOL_FAILED
        assert len(registry) == 0
        assert document.events.subscriber_count() == 0

    def test_command_ending_inside_launch(self, square, registry, outcomes, make_settings):
        """Test a host that draws and ends the command before execute_command returns."""
        document = SynchronousDocument(square)
        session = CaptureSession(
            document, settings=make_settings(), on_finished=outcomes.append, registry=registry
        )
        session.start()

        assert session.state is SessionState.TOOL_ENDED_PENDING_IDLE
        assert session.subscription_count == 1

        document.emit_idle()
        assert session.state is SessionState.COMPLETED
        assert len(outcomes) == 1
        assert outcomes[0].result.total_bars == 11
        assert len(registry) == 0
        assert document.events.subscriber_count() == 0

    @pytest.mark.parametrize(
        ("finish", "state"),
        [("cancel", SessionState.CANCELLED), ("fail", SessionState.FAILED)],
    )
    def test_command_terminating_inside_launch(
        self, square, registry, outcomes, make_settings, finish, state
    ):
        """Test that a terminal state reached during launch is kept."""
        document = SynchronousDocument(square, finish=finish)
        session = CaptureSession(
            document, settings=make_settings(), on_finished=outcomes.append, registry=registry
        )
        session.start()

        assert session.state is state
        assert len(outcomes) == 1
        assert len(registry) == 0
        assert document.events.subscriber_count() == 0

    def test_start_capture_helper(self, document, registry, make_settings):
        """Test the convenience constructor."""
        session = start_capture(document, make_settings(), registry=registry)
        assert session.state is SessionState.TOOL_RUNNING


class TestCompletion:
    """Tests for a session that runs to completion."""

    def test_full_run(self, session, document, tool, square, registry, outcomes):
        """Test draw, end, idle producing bars and a result."""
        session.start()
        handle = tool.run(square)

        assert session.state is SessionState.COMPLETED
        assert len(outcomes) == 1
        result = outcomes[0].result
        assert result.boundary_id == handle
        assert result.total_bars == 11
        assert result.total_length == 11000.0
        assert len(document.entities) == 12
        assert len(registry) == 0
        assert document.events.subscriber_count() == 0

    def test_processing_waits_for_idle(self, session, document, tool, square):
        """Test that nothing is written until the host goes idle."""
        session.start()
        tool.draw(square)
        tool.end()

        assert session.state is SessionState.TOOL_ENDED_PENDING_IDLE
        assert len(document.entities) == 1
        assert session.subscription_count == 1

        document.emit_idle()
        assert session.state is SessionState.COMPLETED
        assert len(document.entities) == 12

    def test_idle_before_command_end_ignored(self, session, document, tool, square):
        """Test that idle events while the tool runs do nothing."""
        session.start()
        tool.draw(square)
        document.emit_idle()
        assert session.state is SessionState.TOOL_RUNNING

    def test_bars_written_in_one_transaction(self, session, document, tool, square):
        """Test that the bar batch commits once."""
        session.start()
        tool.draw(square)
        commits = document.commit_count
        tool.end()
        document.emit_idle()
        assert document.commit_count == commits + 1

    def test_last_polyline_wins(self, session, document, tool, square, u_slot, outcomes):
        """Test that the last polyline appended during the command is the boundary."""
        session.start()
        tool.draw(square)
        second = tool.draw(u_slot)
        tool.end()
        document.emit_idle()

        assert outcomes[0].result.boundary_id == second
        assert outcomes[0].result.total_bars == 18

    def test_other_space_ignored(self, session, document, tool, square, outcomes):
        """Test that polylines outside the current space are not captured."""
        session.start()
        handle = tool.draw(square)
        with document.transaction() as tr:
            tr.append_entity(
                Entity(kind=EntityKind.POLYLINE, owner_id="*Paper_Space", boundary=square)
            )
        tool.end()
        document.emit_idle()
        assert outcomes[0].result.boundary_id == handle

    def test_non_polyline_ignored(self, session, document, tool, square, outcomes):
        """Test that non-polyline entities are not captured."""
        session.start()
        handle = tool.draw(square)
        with document.transaction() as tr:
            tr.append_entity(Entity(kind=EntityKind.CIRCLE, owner_id=document.current_space_id))
        tool.end()
        document.emit_idle()
        assert outcomes[0].result.boundary_id == handle

    def test_polyline2d_captured(self, session, document, tool, square, outcomes):
        """Test that every polyline kind is a candidate."""
        session.start()
        handle = tool.draw(square, kind=EntityKind.POLYLINE2D)
        tool.end()
        document.emit_idle()
        assert outcomes[0].result.boundary_id == handle

    def test_unrelated_command_ignored(self, session, document, tool, square):
        """Test that other commands ending do not trigger processing."""
        session.start()
        tool.draw(square)
        document.events.emit(HostEvent.COMMAND_ENDED, CommandEventArgs("LINE"))
        document.emit_idle()
        assert session.state is SessionState.TOOL_RUNNING
        assert len(document.entities) == 1

    def test_prefixed_command_name_matches(self, session, document, square, outcomes):
        """Test that hosts reporting the invoked form still match."""
        session.start()
        ReplayDrawingTool(document, command_name="_.pline").run(square)
        assert outcomes[0].is_completed

    def test_console_transcript(self, session, document, tool, square):
        """Test the messages written for a completed run."""
        session.start()
        handle = tool.run(square)
        assert f"Boundary Handle: {handle}" in document.messages
        assert "H-Bar 1: 1000.00 mm" in document.messages
        assert "H-Bar 11: 1000.00 mm" in document.messages
        assert document.messages[-4:] == [
            "====================",
            "Total Bars: 11",
            "Total Length: 11000.00 mm",
            "====================",
        ]

    def test_zero_bars_still_completes(
        self, document, tool, diamond, registry, outcomes, make_settings
    ):
        """Test that a run producing no bars is still a completed run."""
        session = CaptureSession(
            document,
            settings=make_settings(spacing_h=5000.0),
            on_finished=outcomes.append,
            registry=registry,
        )
        session.start()
        tool.run(diamond)

        assert outcomes[0].is_completed
        assert outcomes[0].result.total_bars == 0
        assert outcomes[0].result.total_length == 0.0
        assert outcomes[0].result.groups == ()
        assert len(document.entities) == 1
        assert any("No bars were generated" in m for m in document.messages)

    def test_auto_close_within_tolerance(self, session, document, tool, outcomes):
        """Test that a nearly closed polyline is closed and filled."""
        boundary = Boundary.from_coordinates(
            [(0, 0), (1000, 0), (1000, 1000), (0, 1000), (0, 0.3)]
        )
        session.start()
        handle = tool.run(boundary)

        assert outcomes[0].is_completed
        assert outcomes[0].result.total_bars == 11
        assert document.entities[handle].boundary.closed

    def test_on_finished_called_once(self, session, tool, square, outcomes):
        """Test that later cancels do not report again."""
        session.start()
        tool.run(square)
        session.cancel()
        assert len(outcomes) == 1
        assert session.state is SessionState.COMPLETED

    def test_export(self, document, registry, tool, square, tmp_path, make_settings):
        """Test saving the result through an exporter."""
        target = tmp_path / "slab_bars.json"
        session = CaptureSession(
            document,
            settings=make_settings(),
            registry=registry,
            exporter=JsonExporter(target),
        )
        session.start()
        tool.run(square)

        data = json.loads(target.read_text(encoding="utf-8"))
        assert data["totalBars"] == 11
        assert f"Bars JSON saved: {target}" in document.messages

    def test_export_failure_keeps_completion(
        self, document, registry, tool, square, tmp_path, make_settings
    ):
        """Test that a failed save is reported but the run still completes."""
        target = tmp_path / "missing" / "slab_bars.json"
        session = CaptureSession(
            document,
            settings=make_settings(),
            registry=registry,
            exporter=JsonExporter(target),
        )
        session.start()
        tool.run(square)

        assert session.outcome.is_completed
        assert any(m.startswith("JSON save failed:") for m in document.messages)
        assert len(document.entities) == 12

    def test_exporter_error_of_any_type_reported(
        self, document, registry, tool, square, outcomes, make_settings
    ):
        """Test that an exporter raising an arbitrary error still completes the run."""
        session = CaptureSession(
            document,
            settings=make_settings(),
            on_finished=outcomes.append,
            registry=registry,
            exporter=RaisingExporter(),
        )
        session.start()
        tool.run(square)

        assert session.state is SessionState.COMPLETED
        assert len(outcomes) == 1
        assert outcomes[0].result.total_bars == 11
        assert "JSON save failed: boom" in document.messages
        assert len(registry) == 0
        assert document.events.subscriber_count() == 0


class TestCancellation:
    """Tests for cancelled and failed sessions."""

    def test_tool_cancelled(self, session, document, tool, registry, outcomes):
        """Test that cancelling the drawing command cancels the session."""
        session.start()
        tool.cancel()

        assert session.state is SessionState.CANCELLED
        assert outcomes[0].is_cancelled
        assert "PLINE cancelled." in document.messages
        assert document.events.subscriber_count() == 0
        assert document.entities == {}
        assert len(registry) == 0

    def test_cancel_after_drawing_writes_no_bars(self, session, document, tool, square):
        """Test that a cancelled session never writes bars."""
        session.start()
        tool.draw(square)
        tool.cancel()
        document.emit_idle()

        assert session.state is SessionState.CANCELLED
        assert session.boundary_id is None
        assert all(e.kind is not EntityKind.LINE for e in document.entities.values())

    def test_explicit_cancel_while_pending_idle(self, session, document, tool, square):
        """Test cancelling between command end and idle."""
        session.start()
        tool.draw(square)
        tool.end()
        session.cancel()
        document.emit_idle()

        assert session.state is SessionState.CANCELLED
        assert len(document.entities) == 1
        assert document.events.subscriber_count() == 0

    def test_tool_failed(self, session, document, tool, registry, outcomes):
        """Test that a failing drawing command fails the session."""
        session.start()
        tool.fail()

        assert session.state is SessionState.FAILED
        assert outcomes[0].reason is FailureReason.TOOL_FAILED
        assert "PLINE failed." in document.messages
        assert len(registry) == 0

    def test_unrelated_cancel_ignored(self, session, document):
        """Test that another command being cancelled does not matter."""
        session.start()
        document.events.emit(HostEvent.COMMAND_CANCELLED, CommandEventArgs("MOVE"))
        assert session.state is SessionState.TOOL_RUNNING

    def test_nothing_drawn(self, session, document, tool, outcomes):
        """Test that ending the command without a polyline fails."""
        session.start()
        tool.end()
        document.emit_idle()

        assert outcomes[0].reason is FailureReason.MISSING_BOUNDARY
        assert "No polyline created. Command cancelled." in document.messages

    def test_boundary_deleted_before_idle(self, session, document, tool, square, outcomes):
        """Test that a boundary removed before processing fails the run."""
        session.start()
        handle = tool.draw(square)
        tool.end()
        document.delete_entity(handle)
        document.emit_idle()

        assert outcomes[0].reason is FailureReason.MISSING_BOUNDARY
        assert "Created boundary not available." in document.messages
        assert document.entities == {}

    def test_open_boundary_rejected(self, session, document, tool, outcomes):
        """Test that an open polyline far from closing fails the run."""
        boundary = Boundary.from_coordinates([(0, 0), (1000, 0), (1000, 1000), (0, 1000)])
        session.start()
        tool.run(boundary)

        assert outcomes[0].reason is FailureReason.BOUNDARY_NOT_CLOSED
        assert "Boundary must be closed." in document.messages
        assert len(document.entities) == 1
        assert session.boundary_id is None

    def test_write_failure_rolls_back(
        self, session, document, tool, square, outcomes, monkeypatch
    ):
        """Test that a bar failing mid-batch leaves no bars behind."""
        original = session.pipeline.validate_bar

        def validate(bar):
            if bar.index == 5:
                raise BarValidationError(bar.index, "forced")
            original(bar)

        monkeypatch.setattr(session.pipeline, "validate_bar", validate)
        session.start()
        tool.run(square)

        assert outcomes[0].reason is FailureReason.WRITE_FAILED
        assert len(document.entities) == 1
        assert document.abort_count == 1
        assert any(m.startswith("Bar generation failed:") for m in document.messages)
        assert document.events.subscriber_count() == 0

    def test_report_failure_after_commit(
        self, session, document, tool, square, registry, outcomes, monkeypatch
    ):
        """Test that an error after the bars are committed still ends the session."""

        def summarize(*args, **kwargs):
            raise RuntimeError("summary unavailable")

        monkeypatch.setattr(session.pipeline, "summarize", summarize)
        session.start()
        tool.run(square)

        assert session.state is SessionState.FAILED
        assert len(outcomes) == 1
        assert outcomes[0].reason is FailureReason.REPORT_FAILED
        assert "summary unavailable" in outcomes[0].message
        assert len(registry) == 0
        assert document.events.subscriber_count() == 0

    def test_new_session_after_terminal(self, session, document, tool, registry, make_settings):
        """Test that a document accepts a new session once the last one ended."""
        session.start()
        tool.cancel()

        again = CaptureSession(document, settings=make_settings(), registry=registry)
        again.start()
        assert again.state is SessionState.TOOL_RUNNING
