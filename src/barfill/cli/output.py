"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with tables and formatted messages.
"""


from rich.console import Console
from rich.table import Table
from rich.text import Text

from barfill.domain import Boundary, RunResult
from barfill.utils import RunStats

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]barfill[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_boundary_info(path: str, boundary: Boundary) -> None:
    """Print boundary information.

    Args:
        path: Path the boundary was read from
        boundary: Loaded boundary
    """
    # Use Text to safely handle paths with special characters
    line1 = Text("  ")
    line1.append(path)
    console.print(line1)

    bbox = boundary.bounding_box()
    state = "closed" if boundary.is_closed else f"open (gap {boundary.endpoint_gap():.3f})"
    console.print(
        f"  {len(boundary.vertices)} vertices {SYM_DOT} {state} {SYM_DOT} "
        f"{bbox.width:,.2f} × {bbox.height:,.2f}"
    )


def print_configuration(axis_mode: str, spacing_h: float, spacing_v: float) -> None:
    """Print the bar layout being generated."""
    console.print(f"  {axis_mode} {SYM_DOT} H {spacing_h:g} {SYM_DOT} V {spacing_v:g}")


def print_host_messages(messages: list[str]) -> None:
    """Echo the host console transcript."""
    for message in messages:
        console.print(Text(f"  {message}", style="dim"))


def print_schedule(result: RunResult) -> None:
    """Print the grouped bar schedule as a table.

    Args:
        result: Completed run
    """
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("  Axis")
    table.add_column("Length", justify="right")
    table.add_column("Qty", justify="right")
    table.add_column("Handles")

    for group in result.groups:
        handles = ", ".join(group.handles[:6])
        if len(group.handles) > 6:
            handles += f" {SYM_DOT}{SYM_DOT}{SYM_DOT} (+{len(group.handles) - 6} more)"
        table.add_row(
            f"  {group.axis.value}",
            f"{group.length:,.2f}",
            str(group.repetition),
            handles,
        )

    console.print(table)


def print_success(
    output_path: str,
    total_bars: int,
    total_length: float,
    groups: int,
    dxf_path: str | None = None,
    stats: RunStats | None = None,
) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to the JSON bar schedule
        total_bars: Number of bars generated
        total_length: Total bar length
        groups: Number of length groups
        dxf_path: Path to the DXF output, if written
        stats: Session statistics for the scanline line
    """
    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green]")

    line = Text("  ")
    line.append(output_path, style="bold")
    console.print(line)
    if dxf_path:
        line = Text("  ")
        line.append(dxf_path, style="bold")
        console.print(line)

    bars_style = "green" if total_bars > 0 else "yellow"
    console.print(
        f"  [{bars_style}]{total_bars} bars[/{bars_style}] {SYM_DOT} "
        f"{total_length:,.2f} mm {SYM_DOT} {groups} groups"
    )

    if stats is not None:
        discarded_style = "yellow" if stats.bars_discarded > 0 else "dim"
        console.print(
            f"  {stats.scanlines} scanlines {SYM_DOT} "
            f"[{discarded_style}]{stats.bars_discarded} discarded[/{discarded_style}]"
        )


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_summary(message: str) -> None:
    """Print cancellation summary.

    Args:
        message: Why the session was cancelled
    """
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print(f"  {message}")
    console.print("  No bars written")
