"""Utility functions for barfill.

This module provides utility functions including:

- Logging setup and configuration
- Session logging with run statistics
"""

from barfill.utils.logging import (
    RunStats,
    SessionLogger,
    configure_logging,
)

__all__ = [
    "RunStats",
    "SessionLogger",
    "configure_logging",
]
