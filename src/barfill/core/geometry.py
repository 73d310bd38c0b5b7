"""Scanline intersection for bar generation.

This module sweeps axis-aligned test lines across a boundary and reports
where each line crosses it:
- Scanline positions (inclusive of the far extent)
- Test line margin so lines always overshoot the boundary
- Line/segment intersection, inclusive of segment endpoints
- The full sweep over a boundary's bounding box

All functions are pure and stateless.
"""

import math
from collections.abc import Iterator
from dataclasses import dataclass

from barfill.domain import Boundary, BoundingBox, Point, SweepAxis
from barfill.exceptions import InvalidConfigurationError

# Coordinates closer than this to a scanline are treated as lying on it
ON_LINE_EPSILON = 1e-9

# Absorbs float error when deciding whether the last step reaches the far extent
STEP_EPSILON = 1e-9


@dataclass(frozen=True)
class ScanlineHit:
    """Raw intersections of one test line with the boundary.

    Attributes:
        axis: Sweep axis the line belongs to
        coordinate: Fixed Y (horizontal) or X (vertical) of the line
        points: Intersection points in discovery order, duplicates included
    """

    axis: SweepAxis
    coordinate: float
    points: list[Point]


def scanline_positions(start: float, stop: float, spacing: float) -> list[float]:
    """Calculate scanline coordinates from ``start`` to ``stop`` inclusive.

    Positions are computed from the iteration count rather than by repeated
    addition, so a far extent lying on a multiple of ``spacing`` is always
    included.

    Args:
        start: Lowest coordinate (the first line sits exactly here)
        stop: Highest coordinate
        spacing: Distance between lines

    Returns:
        Coordinates ``start, start + spacing, ...`` not exceeding ``stop``

    Raises:
        InvalidConfigurationError: If spacing is not positive

    Examples:
        >>> scanline_positions(0.0, 300.0, 100.0)
        [0.0, 100.0, 200.0, 300.0]
        >>> scanline_positions(0.0, 50.0, 100.0)
        [0.0]
    """
    if not spacing > 0 or not math.isfinite(spacing):
        raise InvalidConfigurationError(f"spacing must be a positive number, got {spacing}")

    if stop < start:
        return []

    count = math.floor((stop - start) / spacing + STEP_EPSILON)
    return [start + i * spacing for i in range(count + 1)]


def sweep_margin(bbox: BoundingBox, minimum: float = 1000.0) -> float:
    """Overshoot applied to both ends of every test line.

    Short test lines can end exactly on the boundary and produce tangency
    artifacts, so lines extend past the extents by at least ``minimum`` and
    by at least the sum of the box dimensions.
    """
    return max(minimum, bbox.width + bbox.height)


def _along(point: Point, axis: SweepAxis) -> float:
    # Coordinate measured along the test line
    return point.x if axis is SweepAxis.HORIZONTAL else point.y


def _across(point: Point, axis: SweepAxis) -> float:
    # Coordinate the test line holds fixed
    return point.y if axis is SweepAxis.HORIZONTAL else point.x


def _make_point(along: float, across: float, axis: SweepAxis) -> Point:
    if axis is SweepAxis.HORIZONTAL:
        return Point(along, across)
    return Point(across, along)


def intersect_segment(
    a: Point,
    b: Point,
    axis: SweepAxis,
    coordinate: float,
) -> list[Point]:
    """Intersect one boundary segment with an infinite scanline.

    Endpoints count as intersections. A segment lying on the scanline
    yields both of its endpoints.

    Args:
        a: Segment start
        b: Segment end
        axis: Sweep axis of the scanline
        coordinate: Fixed coordinate of the scanline

    Returns:
        Zero, one or two intersection points
    """
    da = _across(a, axis) - coordinate
    db = _across(b, axis) - coordinate

    a_on = abs(da) <= ON_LINE_EPSILON
    b_on = abs(db) <= ON_LINE_EPSILON

    if a_on and b_on:
        return [
            _make_point(_along(a, axis), coordinate, axis),
            _make_point(_along(b, axis), coordinate, axis),
        ]
    if a_on:
        return [_make_point(_along(a, axis), coordinate, axis)]
    if b_on:
        return [_make_point(_along(b, axis), coordinate, axis)]

    # Strictly on the same side
    if (da > 0) == (db > 0):
        return []

    t = da / (da - db)
    along = _along(a, axis) + t * (_along(b, axis) - _along(a, axis))
    return [_make_point(along, coordinate, axis)]


def intersect_scanline(
    boundary: Boundary,
    axis: SweepAxis,
    coordinate: float,
    bbox: BoundingBox,
    margin: float,
) -> list[Point]:
    """Intersect a full-span test line with every boundary segment.

    The test line runs from ``min - margin`` to ``max + margin`` along the
    pairing axis; intersections outside that span are ignored.

    Returns:
        Raw intersection points, unordered and possibly duplicated where
        the line passes through a vertex shared by two segments
    """
    if axis is SweepAxis.HORIZONTAL:
        lo, hi = bbox.min_x - margin, bbox.max_x + margin
    else:
        lo, hi = bbox.min_y - margin, bbox.max_y + margin

    points: list[Point] = []
    for a, b in boundary.segments():
        for p in intersect_segment(a, b, axis, coordinate):
            if lo <= _along(p, axis) <= hi:
                points.append(p)
    return points


def sweep(
    boundary: Boundary,
    axis: SweepAxis,
    spacing: float,
    min_margin: float = 1000.0,
) -> Iterator[ScanlineHit]:
    """Sweep test lines across a boundary at a fixed spacing.

    Horizontal sweeps step Y from min_y to max_y; vertical sweeps step X
    from min_x to max_x. Lines with fewer than two raw intersections
    (misses and single tangent touches) are skipped.

    Args:
        boundary: Closed boundary to sweep
        axis: Sweep axis
        spacing: Distance between test lines
        min_margin: Lower bound for the test line overshoot

    Yields:
        ScanlineHit for every line with at least two raw intersections
    """
    bbox = boundary.bounding_box()
    margin = sweep_margin(bbox, min_margin)

    if axis is SweepAxis.HORIZONTAL:
        positions = scanline_positions(bbox.min_y, bbox.max_y, spacing)
    else:
        positions = scanline_positions(bbox.min_x, bbox.max_x, spacing)

    for coordinate in positions:
        points = intersect_scanline(boundary, axis, coordinate, bbox, margin)
        if len(points) < 2:
            continue
        yield ScanlineHit(axis=axis, coordinate=coordinate, points=points)
