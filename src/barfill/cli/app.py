"""CLI application entry point for barfill.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated

import typer

from barfill import __version__
from barfill.cli.output import (
    console,
    print_boundary_info,
    print_cancellation_summary,
    print_configuration,
    print_error,
    print_header,
    print_host_messages,
    print_schedule,
    print_step,
    print_success,
)
from barfill.config import (
    AxisMode,
    BarConfig,
    BarfillSettings,
    LoggingConfig,
)
from barfill.domain import Boundary
from barfill.exceptions import BarfillError, BoundaryReadError, InvalidConfigurationError
from barfill.host import InMemoryDocument, ReplayDrawingTool
from barfill.io import DxfWriter, JsonExporter, default_json_path, read_boundary
from barfill.session import CaptureSession, SessionOutcome
from barfill.utils import RunStats, configure_logging

# Create the Typer app
app = typer.Typer(
    name="barfill",
    help="Fill closed boundaries with regular grids of structural bars.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]barfill[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Fill closed boundaries with regular grids of structural bars."""


@app.command()
def fill(
    boundary_file: Annotated[
        Path,
        typer.Argument(
            help="Recorded boundary to replay (JSON or DXF)",
            show_default=False,
        ),
    ],
    mode: Annotated[
        str,
        typer.Option(
            "--mode",
            "-m",
            help="Bar orientation (horizontal|vertical|both)",
        ),
    ] = "horizontal",
    spacing_h: Annotated[
        float,
        typer.Option(
            "--spacing-h",
            help="Spacing between horizontal bars (drawing units)",
        ),
    ] = 100.0,
    spacing_v: Annotated[
        float,
        typer.Option(
            "--spacing-v",
            help="Spacing between vertical bars (drawing units)",
        ),
    ] = 100.0,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="JSON output path (default: {name}_bars.json)",
        ),
    ] = None,
    dxf_output: Annotated[
        Path | None,
        typer.Option(
            "--dxf-output",
            help="Also write the boundary and bars to this DXF file",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
) -> None:
    """Fill a recorded boundary with bars and save the bar schedule.

    The boundary is replayed through an in-memory drawing as if it had
    just been drawn with PLINE, so the run goes through the same capture
    session, deferred processing and atomic write as an interactive one.

    Example:
        barfill fill slab.json --mode both --spacing-h 150 --spacing-v 200

    This will create slab_bars.json with the bars grouped by orientation
    and length.
    """
    # Validate mutually exclusive options
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    # Validate input file exists
    if not boundary_file.exists():
        print_error(
            f"Input file not found: {boundary_file}",
            details=f"The file '{boundary_file}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    # Validate mode argument
    try:
        axis_mode = AxisMode(mode.strip().capitalize())
    except ValueError:
        print_error(
            f"Invalid mode: {mode}",
            details="Valid values: horizontal, vertical, both",
        )
        raise typer.Exit(code=1)

    if not quiet:
        print_header(__version__)

    # Create settings from CLI arguments
    settings = BarfillSettings(
        bars=BarConfig(
            axis_mode=axis_mode,
            spacing_horizontal=spacing_h,
            spacing_vertical=spacing_v,
        ),
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level if not quiet else "ERROR",
        ),
    )

    configure_logging(
        log_file=settings.logging.log_file,
        console_level=settings.logging.log_level,
        file_level=settings.logging.file_log_level,
        quiet=quiet,
    )

    try:
        if not quiet:
            print_step("Loading boundary")

        boundary = read_boundary(boundary_file)

        if not quiet:
            print_boundary_info(str(boundary_file), boundary)
            print_step("Generating bars")
            print_configuration(axis_mode.value, spacing_h, spacing_v)

        json_path = output if output is not None else default_json_path(str(boundary_file))
        document, outcome, stats = _run_session(
            boundary_file, boundary, settings, json_path, dxf_output
        )

        if verbose:
            print_host_messages(document.messages)

        if outcome.is_cancelled:
            if not quiet:
                print_cancellation_summary(outcome.message)
            raise typer.Exit(code=130)

        if outcome.is_failed:
            print_error(outcome.message, details=_reason_hint(outcome, settings))
            raise typer.Exit(code=1)

        run = outcome.result
        if not quiet and run is not None:
            print_step("Bar schedule")
            print_schedule(run)
            print_success(
                output_path=str(json_path),
                total_bars=run.total_bars,
                total_length=run.total_length,
                groups=len(run.groups),
                dxf_path=str(dxf_output) if dxf_output else None,
                stats=stats,
            )
            if run.total_bars == 0:
                console.print(
                    "  [yellow]No bars were generated inside the boundary "
                    "(check spacing / boundary)[/yellow]"
                )

    except InvalidConfigurationError as e:
        print_error(str(e), details="Spacing must be positive for every swept axis.")
        raise typer.Exit(code=1)
    except BoundaryReadError as e:
        print_error(f"Could not read boundary: {e.reason}")
        raise typer.Exit(code=1)
    except BarfillError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        # Re-raise typer.Exit to allow clean exits
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def _run_session(
    boundary_file: Path,
    boundary: Boundary,
    settings: BarfillSettings,
    json_path: Path,
    dxf_output: Path | None,
) -> tuple[InMemoryDocument, SessionOutcome, RunStats]:
    """Replay the boundary through a capture session.

    Args:
        boundary_file: File the boundary was read from (names the drawing)
        boundary: Boundary to replay
        settings: Run settings
        json_path: Where to save the bar schedule
        dxf_output: Optional DXF output path

    Returns:
        The document the session ran against, its outcome and its statistics
    """
    document = InMemoryDocument.for_path(boundary_file)
    outcomes: list[SessionOutcome] = []

    session = CaptureSession(
        document,
        settings=settings,
        on_finished=outcomes.append,
        exporter=JsonExporter(json_path),
    )
    session.start()

    tool = ReplayDrawingTool(document, command_name=settings.capture.command_name)
    try:
        tool.run(boundary)
    except KeyboardInterrupt:
        session.cancel()

    if not outcomes:
        session.cancel()
    outcome = outcomes[0]

    if outcome.is_completed and dxf_output is not None:
        DxfWriter(dxf_output).save(document.entities.values())

    return document, outcome, session.session_logger.stats


def _reason_hint(outcome: SessionOutcome, settings: BarfillSettings) -> str | None:
    if outcome.reason is None:
        return None
    tolerance = settings.geometry.closing_tolerance
    hints = {
        "boundary_not_closed": f"Close the polyline, or end it within {tolerance} units of its start.",
        "missing_boundary": "The drawing command did not produce a polyline.",
        "tool_failed": "The drawing command reported a failure.",
        "write_failed": "No bars were written; the drawing is unchanged.",
        "report_failed": "Bars were written but the run could not be reported.",
    }
    return hints.get(outcome.reason.value)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
