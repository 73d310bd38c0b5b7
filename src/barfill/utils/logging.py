"""Logging utilities for barfill."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog

# Handlers installed by the last configure_logging() call
_handlers: list[logging.Handler] = []


@dataclass
class RunStats:
    """Statistics from one capture session."""

    scanlines: int = 0
    bars_written: int = 0
    bars_discarded: int = 0
    total_length: float = 0.0
    transitions: list[tuple[str, str]] = field(default_factory=list)
    failure: str | None = None


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    while _handlers:
        stale = _handlers.pop()
        root_logger.removeHandler(stale)
        stale.close()

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        root_logger.addHandler(file_handler)
        _handlers.append(file_handler)

    if not quiet:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, console_level.upper()))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(console_handler)
        _handlers.append(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("barfill")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


class SessionLogger:
    """Logger for one capture session's transitions and results."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        document: str = "",
    ) -> None:
        base = logger if logger is not None else structlog.get_logger("barfill")
        self._logger = base.bind(document=document) if document else base
        self._stats = RunStats()

    def log_session_start(self, axis_mode: str, spacing_h: float, spacing_v: float) -> None:
        """Log a session entering the capture phase."""
        self._logger.info(
            "Capture session started",
            axis_mode=axis_mode,
            spacing_h=spacing_h,
            spacing_v=spacing_v,
        )

    def log_transition(self, source: str, target: str) -> None:
        self._logger.debug("Session transition", source=source, target=target)
        self._stats.transitions.append((source, target))

    def log_candidate(self, handle: str, kind: str) -> None:
        """Log a boundary candidate recorded from the drawing tool."""
        self._logger.debug("Boundary candidate", handle=handle, kind=kind)

    def log_ignored_command(self, command_name: str) -> None:
        self._logger.debug("Ignoring unrelated command", command=command_name)

    def log_boundary_closed(self, handle: str, gap: float) -> None:
        self._logger.info("Boundary auto-closed", handle=handle, gap=round(gap, 4))

    def log_scanline(self, axis: str, coordinate: float, raw: int, usable: int) -> None:
        self._logger.debug(
            "Scanline",
            axis=axis,
            coordinate=round(coordinate, 4),
            raw_points=raw,
            usable_points=usable,
        )
        self._stats.scanlines += 1

    def log_bar(self, index: int, axis: str, length: float, handle: str) -> None:
        self._logger.debug(
            "Bar written",
            bar=index,
            axis=axis,
            length=round(length, 4),
            handle=handle,
        )
        self._stats.bars_written += 1
        self._stats.total_length += length

    def log_discarded(self, count: int) -> None:
        if count:
            self._logger.debug("Degenerate bars discarded", count=count)
        self._stats.bars_discarded += count

    def log_run_complete(self, total_bars: int, total_length: float, groups: int) -> None:
        self._logger.info(
            "Bar run complete",
            total_bars=total_bars,
            total_length=total_length,
            groups=groups,
        )

    def log_session_cancelled(self, state: str) -> None:
        self._logger.info("Capture session cancelled", state=state)

    def log_session_failed(
        self,
        reason: str,
        error: Exception | None = None,
    ) -> None:
        """Log a session ending in failure."""
        self._logger.error(
            "Capture session failed",
            reason=reason,
            error=str(error) if error else None,
            error_type=type(error).__name__ if error else None,
        )
        self._stats.failure = reason

    def log_export_failed(self, path: str, error: Exception) -> None:
        self._logger.warning("Run export failed", path=path, error=str(error))

    @property
    def stats(self) -> RunStats:
        """Get statistics collected so far."""
        return self._stats
