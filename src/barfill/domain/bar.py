"""Bar types produced by the scanline engine.

This module defines the bar domain models:
- SweepAxis / AxisMode: Orientation of the scanlines
- Bar: One segment between two consecutive boundary crossings
- BarGroupKey / BarGroup: Repetition groups used for the bar schedule
- RunResult: The immutable report of one successful session
"""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

from barfill.domain.geometry import Point


class SweepAxis(str, Enum):
    """Direction of the bars produced by a sweep.

    Horizontal bars come from test lines at fixed Y, swept upward and
    paired along X. Vertical bars come from test lines at fixed X, swept
    rightward and paired along Y.
    """

    HORIZONTAL = "Horizontal"
    VERTICAL = "Vertical"

    @property
    def report_order(self) -> int:
        return 0 if self is SweepAxis.HORIZONTAL else 1

    @property
    def prefix(self) -> str:
        return "H" if self is SweepAxis.HORIZONTAL else "V"


class AxisMode(str, Enum):
    """Which sweep directions a run generates."""

    HORIZONTAL = "Horizontal"
    VERTICAL = "Vertical"
    BOTH = "Both"

    def axes(self) -> list[SweepAxis]:
        """Sweep axes to run, in report order."""
        if self is AxisMode.HORIZONTAL:
            return [SweepAxis.HORIZONTAL]
        if self is AxisMode.VERTICAL:
            return [SweepAxis.VERTICAL]
        return [SweepAxis.HORIZONTAL, SweepAxis.VERTICAL]


def round_half_away(value: float, places: int = 2) -> float:
    """Round to ``places`` decimals with halves rounded away from zero.

    Python's round() uses banker's rounding on binary floats; the bar
    schedule needs 12.345 -> 12.35 and -12.345 -> -12.35.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(frozen=True, slots=True)
class Bar:
    """A bar between two consecutive boundary crossings on one scanline.

    Attributes:
        index: Run-wide index, shared across both sweep axes
        axis: Orientation of the scanline the bar lies on
        start: First crossing (lower coordinate along the pairing axis)
        end: Second crossing
        length: Euclidean length of the bar
        handle: Host identifier of the appended line entity, once written
    """

    index: int
    axis: SweepAxis
    start: Point
    end: Point
    length: float
    handle: str | None = None

    def recomputed_length(self) -> float:
        return self.start.distance_to(self.end)

    def is_finite(self) -> bool:
        return all(
            math.isfinite(v)
            for v in (self.start.x, self.start.y, self.end.x, self.end.y, self.length)
        )

    def with_handle(self, handle: str) -> "Bar":
        """Copy of this bar bound to the host entity it was written as."""
        return replace(self, handle=handle)

    def describe(self) -> str:
        """Console line for this bar, e.g. ``H-Bar 3: 1000.00 mm``."""
        return f"{self.axis.prefix}-Bar {self.index}: {self.length:.2f} mm"

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "axis": self.axis.value,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "length": self.length,
            "handle": self.handle,
        }


@dataclass(frozen=True, slots=True)
class BarGroupKey:
    """Composite grouping key: orientation plus rounded length."""

    axis: SweepAxis
    length: float

    def sort_key(self) -> tuple[int, float]:
        return (self.axis.report_order, self.length)


@dataclass(frozen=True)
class BarGroup:
    """Bars sharing an orientation and rounded length.

    Attributes:
        key: Grouping key
        repetition: Number of bars in the group
        handles: Identifiers of the grouped bars, in generation order
    """

    key: BarGroupKey
    repetition: int = 0
    handles: tuple[str, ...] = ()

    @property
    def axis(self) -> SweepAxis:
        return self.key.axis

    @property
    def length(self) -> float:
        return self.key.length

    def to_dict(self) -> dict[str, Any]:
        return {
            "axis": self.axis.value,
            "length": self.length,
            "repetition": self.repetition,
            "handles": list(self.handles),
        }


@dataclass(frozen=True)
class RunResult:
    """Report of one successful capture session.

    Created once when a session completes; never modified afterwards.

    Attributes:
        boundary_id: Host identifier of the boundary entity
        axis_mode: Configured axis mode
        spacing_horizontal: Configured horizontal spacing
        spacing_vertical: Configured vertical spacing
        total_bars: Number of bars written
        total_length: Sum of bar lengths, rounded to 2 decimals
        groups: Repetition groups sorted by axis then length
        drawing_name: File name of the host drawing
        drawing_path: Full path of the host drawing ("" when unsaved)
        created_at: When the result was produced
    """

    boundary_id: str
    axis_mode: AxisMode
    spacing_horizontal: float
    spacing_vertical: float
    total_bars: int
    total_length: float
    groups: tuple[BarGroup, ...]
    drawing_name: str = ""
    drawing_path: str = ""
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the export record."""
        return {
            "drawingName": self.drawing_name,
            "drawingPath": self.drawing_path,
            "createdAt": self.created_at.isoformat(timespec="seconds"),
            "boundaryId": self.boundary_id,
            "axisMode": self.axis_mode.value,
            "spacingHorizontal": self.spacing_horizontal,
            "spacingVertical": self.spacing_vertical,
            "totalBars": self.total_bars,
            "totalLength": self.total_length,
            "groups": [g.to_dict() for g in self.groups],
        }
