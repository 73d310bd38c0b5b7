"""Turning scanline intersections into bars.

Two steps run on every scanline that crossed the boundary:

1. dedupe_points() orders the raw crossings along the line and collapses
   near-duplicates, which appear wherever a line passes through a vertex
   shared by two segments.
2. BarBuilder pairs the remaining crossings (0,1), (2,3), ... into bars,
   filtering degenerate ones and keeping run-wide totals.
"""

from barfill.domain import Bar, Point, SweepAxis

DEFAULT_POINT_TOLERANCE = 0.01
DEFAULT_MIN_BAR_LENGTH = 0.0001


def pairing_coordinate(point: Point, axis: SweepAxis) -> float:
    """Coordinate used to order crossings on a scanline of ``axis``."""
    return point.x if axis is SweepAxis.HORIZONTAL else point.y


def dedupe_points(
    points: list[Point],
    axis: SweepAxis,
    tolerance: float = DEFAULT_POINT_TOLERANCE,
) -> list[Point]:
    """Sort crossings along the scanline and drop near-duplicates.

    Each cluster of consecutive points within ``tolerance`` of the first
    point kept is reduced to that first point; later points are dropped,
    not averaged. If an odd number of points remains, the last one is
    dropped so every crossing has a partner. That happens when the line
    grazes a vertex.

    Args:
        points: Raw intersection points of one scanline
        axis: Sweep axis of the scanline
        tolerance: Merge distance in drawing units

    Returns:
        Sorted, deduplicated points with an even count

    Examples:
        >>> pts = [Point(10, 0), Point(0, 0), Point(0.005, 0), Point(10, 0)]
        >>> dedupe_points(pts, SweepAxis.HORIZONTAL)
        [Point(x=0, y=0), Point(x=10, y=0)]
    """
    ordered = sorted(points, key=lambda p: pairing_coordinate(p, axis))

    unique: list[Point] = []
    for p in ordered:
        if not unique or unique[-1].distance_to(p) > tolerance:
            unique.append(p)

    if len(unique) % 2 == 1:
        unique.pop()

    return unique


class BarBuilder:
    """Pairs deduplicated crossings into bars.

    One builder serves a whole run, so indices keep increasing across the
    horizontal and vertical sweeps.

    Example:
        builder = BarBuilder()
        for hit in sweep(boundary, SweepAxis.HORIZONTAL, 100.0):
            builder.add_scanline(hit.axis, dedupe_points(hit.points, hit.axis))
        print(builder.total_length)
    """

    def __init__(
        self,
        min_length: float = DEFAULT_MIN_BAR_LENGTH,
        start_index: int = 1,
    ) -> None:
        """Initialize the builder.

        Args:
            min_length: Pairs at or below this length are discarded
            start_index: Index given to the first bar
        """
        self.min_length = min_length
        self._next_index = start_index
        self._bars: list[Bar] = []
        self._total_length = 0.0
        self._discarded = 0

    def add_scanline(self, axis: SweepAxis, points: list[Point]) -> list[Bar]:
        """Pair consecutive crossings of one scanline into bars.

        Args:
            axis: Sweep axis of the scanline
            points: Deduplicated crossings, sorted along the scanline

        Returns:
            Bars created for this scanline
        """
        created: list[Bar] = []
        usable = len(points) - (len(points) % 2)

        for i in range(0, usable - 1, 2):
            start, end = points[i], points[i + 1]
            length = start.distance_to(end)

            if length <= self.min_length:
                self._discarded += 1
                continue

            bar = Bar(
                index=self._next_index,
                axis=axis,
                start=start,
                end=end,
                length=length,
            )
            self._next_index += 1
            self._total_length += length
            self._bars.append(bar)
            created.append(bar)

        return created

    @property
    def bars(self) -> list[Bar]:
        return list(self._bars)

    @property
    def total_length(self) -> float:
        return self._total_length

    @property
    def discarded(self) -> int:
        """Number of degenerate pairs filtered out."""
        return self._discarded

    @property
    def next_index(self) -> int:
        return self._next_index
