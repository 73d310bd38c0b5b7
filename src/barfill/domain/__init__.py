"""Domain models for barfill.

This module contains the core domain models representing boundaries, bars
and run reports. All models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Free of host document details (entities are referenced by identifier)

Key classes:
- Point: A 2D point
- Boundary: A polyline outline with a closed flag
- Bar: A segment between two boundary crossings
- BarGroup: Bars sharing orientation and rounded length
- RunResult: The report of one completed session
"""

from barfill.domain.bar import (
    AxisMode,
    Bar,
    BarGroup,
    BarGroupKey,
    RunResult,
    SweepAxis,
    round_half_away,
)
from barfill.domain.geometry import Boundary, BoundingBox, Point

__all__: list[str] = [
    # Enums
    "AxisMode",
    "SweepAxis",
    # Core types
    "Point",
    "BoundingBox",
    "Boundary",
    "Bar",
    "BarGroupKey",
    "BarGroup",
    "RunResult",
    # Helpers
    "round_half_away",
]
