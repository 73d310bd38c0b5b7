"""Core geometric types for boundary representation.

This module defines the planar geometry the bar engine works on:
- Point: A 2D point in drawing units
- BoundingBox: Axis-aligned extents of a boundary
- Boundary: A polyline boundary that must be closed before sweeping
"""

import math
from dataclasses import dataclass, field
from typing import Any

from barfill.exceptions import BoundaryNotClosedError


@dataclass(frozen=True, slots=True)
class Point:
    """A point in 2D space.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate in drawing units
        y: Y coordinate in drawing units
    """

    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return math.hypot(other.x - self.x, other.y - self.y)

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary with x and y fields
        """
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with x and y fields

        Returns:
            Point instance
        """
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned bounding box."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


@dataclass(frozen=True)
class Boundary:
    """A planar polyline used as the outline of the fill region.

    The boundary references its host entity by identifier only; the
    vertices are a derived copy of the entity's geometry.

    Attributes:
        vertices: Ordered polyline vertices
        closed: Whether the polyline closes back onto its first vertex
        entity_id: Host identifier of the entity this was read from
    """

    vertices: tuple[Point, ...]
    closed: bool = False
    entity_id: str | None = field(default=None, compare=False)

    @classmethod
    def from_coordinates(
        cls,
        coordinates: list[tuple[float, float]],
        closed: bool = False,
        entity_id: str | None = None,
    ) -> "Boundary":
        """Build a boundary from (x, y) pairs."""
        return cls(
            vertices=tuple(Point(float(x), float(y)) for x, y in coordinates),
            closed=closed,
            entity_id=entity_id,
        )

    @property
    def is_closed(self) -> bool:
        return self.closed and len(self.vertices) >= 3

    def endpoint_gap(self) -> float:
        """Distance between the first and last vertex."""
        if not self.vertices:
            return 0.0
        return self.vertices[0].distance_to(self.vertices[-1])

    def ensure_closed(self, tolerance: float) -> "Boundary":
        """Return a closed version of this boundary.

        An open polyline whose ends lie within ``tolerance`` of each other
        is closed in place of the gap. Anything else is rejected.

        Args:
            tolerance: Maximum end gap that may be auto-closed

        Returns:
            This boundary if already closed, otherwise a closed copy

        Raises:
            BoundaryNotClosedError: If the boundary cannot be closed
        """
        if self.is_closed:
            return self

        gap = self.endpoint_gap()
        if len(self.vertices) < 3 or gap > tolerance:
            raise BoundaryNotClosedError(gap=gap, tolerance=tolerance)

        return Boundary(vertices=self.vertices, closed=True, entity_id=self.entity_id)

    def segments(self) -> list[tuple[Point, Point]]:
        """Get the straight segments of the polyline.

        The closing segment is included for closed boundaries. Zero-length
        segments (repeated vertices) are skipped.

        Returns:
            List of (start, end) pairs
        """
        pts = list(self.vertices)
        if self.closed and len(pts) > 1:
            pts.append(pts[0])

        return [
            (a, b) for a, b in zip(pts, pts[1:]) if a.distance_to(b) > 1e-12
        ]

    def bounding_box(self) -> BoundingBox:
        """Calculate bounding box of the boundary.

        Returns:
            BoundingBox covering all vertices
        """
        if not self.vertices:
            return BoundingBox(0.0, 0.0, 0.0, 0.0)

        xs = [p.x for p in self.vertices]
        ys = [p.y for p in self.vertices]
        return BoundingBox(min(xs), max(xs), min(ys), max(ys))

    def to_dict(self) -> dict[str, Any]:
        return {
            "vertices": [[p.x, p.y] for p in self.vertices],
            "closed": self.closed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Boundary":
        """Deserialize from dictionary.

        Raises:
            TypeError: If "closed" is present but not a boolean
        """
        closed = data.get("closed", False)
        if not isinstance(closed, bool):
            raise TypeError(f"'closed' must be true or false, got {closed!r}")
        coordinates = [(float(v[0]), float(v[1])) for v in data["vertices"]]
        return cls.from_coordinates(coordinates, closed=closed)
