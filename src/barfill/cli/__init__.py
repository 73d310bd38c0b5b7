"""Command-line interface for barfill.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Key features:
- Replay a recorded boundary (JSON or DXF) through a capture session
- Bar schedule table and run summary
- JSON and optional DXF output
- Verbose/quiet output modes
"""

from barfill.cli.app import cli, main

__all__ = ["cli", "main"]
