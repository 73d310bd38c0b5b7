"""Configuration management for barfill.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- BarConfig: Axis mode and bar spacings for one run
- GeometryConfig: Scanline engine tolerances
- CaptureConfig: Drawing command used to capture the boundary
- LoggingConfig: Logging settings
- BarfillSettings: Main application settings
"""

from barfill.config.settings import (
    BarConfig,
    BarfillSettings,
    CaptureConfig,
    GeometryConfig,
    LoggingConfig,
    get_default_settings,
)
from barfill.domain.bar import AxisMode

__all__ = [
    "AxisMode",
    "BarConfig",
    "BarfillSettings",
    "CaptureConfig",
    "GeometryConfig",
    "LoggingConfig",
    "get_default_settings",
]
