"""Bar generation pipeline.

Runs the scanline engine for every requested axis, writes the resulting
bars into an open host transaction, and aggregates them into a RunResult.

Key components:
- BarLayout: Bars generated for a boundary before anything is written
- BarPipeline: Orchestrates sweep, dedupe, build, write and aggregation
"""

import math
from dataclasses import dataclass, field

from barfill.config import BarConfig, GeometryConfig
from barfill.core.aggregator import BarAggregator
from barfill.core.bars import BarBuilder, dedupe_points
from barfill.core.geometry import sweep
from barfill.domain import Bar, Boundary, RunResult, SweepAxis, round_half_away
from barfill.exceptions import BarValidationError
from barfill.host.base import Entity, EntityKind, HostTransaction
from barfill.utils import SessionLogger

BAR_LAYERS: dict[SweepAxis, str] = {
    SweepAxis.HORIZONTAL: "BARS_H",
    SweepAxis.VERTICAL: "BARS_V",
}


@dataclass
class BarLayout:
    """Bars generated for one boundary, not yet written.

    Attributes:
        bars: Bars in generation order (horizontal sweep first)
        total_length: Sum of bar lengths
        scanlines: Number of scanlines that crossed the boundary
        discarded: Number of degenerate pairs filtered out
    """

    bars: list[Bar] = field(default_factory=list)
    total_length: float = 0.0
    scanlines: int = 0
    discarded: int = 0


class BarPipeline:
    """Orchestrates bar generation for a closed boundary.

    Example:
        pipeline = BarPipeline(settings.geometry)
        layout = pipeline.generate(boundary, settings.bars)
        with document.transaction() as tr:
            bars = pipeline.write(tr, layout, document.current_space_id)
        result = pipeline.summarize(bars, boundary_id, settings.bars)
    """

    def __init__(
        self,
        geometry: GeometryConfig | None = None,
        session_logger: SessionLogger | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            geometry: Tolerances for the scanline engine
            session_logger: Logger for scanline and bar events
        """
        self.geometry = geometry if geometry is not None else GeometryConfig()
        self.session_logger = session_logger if session_logger is not None else SessionLogger()

    def generate(self, boundary: Boundary, config: BarConfig) -> BarLayout:
        """Sweep the boundary along every requested axis and build bars.

        Bar indices run on from the horizontal sweep into the vertical one.

        Args:
            boundary: Closed boundary
            config: Axis mode and spacings

        Returns:
            BarLayout with all generated bars
        """
        builder = BarBuilder(min_length=self.geometry.min_bar_length)
        layout = BarLayout()

        for axis in config.axis_mode.axes():
            spacing = config.spacing_for(axis is SweepAxis.HORIZONTAL)
            for hit in sweep(boundary, axis, spacing, self.geometry.min_sweep_margin):
                points = dedupe_points(hit.points, axis, self.geometry.point_tolerance)
                self.session_logger.log_scanline(
                    axis.value, hit.coordinate, len(hit.points), len(points)
                )
                builder.add_scanline(axis, points)
                layout.scanlines += 1

        layout.bars = builder.bars
        layout.total_length = builder.total_length
        layout.discarded = builder.discarded
        self.session_logger.log_discarded(builder.discarded)
        return layout

    def validate_bar(self, bar: Bar) -> None:
        """Check a bar before it is written.

        Raises:
            BarValidationError: If the bar is not finite, too short, or its
                stored length disagrees with its endpoints
        """
        if not bar.is_finite():
            raise BarValidationError(bar.index, "non-finite coordinates")
        if bar.length <= self.geometry.min_bar_length:
            raise BarValidationError(bar.index, f"length {bar.length} is degenerate")
        drift = abs(bar.recomputed_length() - bar.length)
        if drift > self.geometry.length_check_tolerance:
            raise BarValidationError(bar.index, f"length drift {drift:.6f}")

    def write(
        self,
        transaction: HostTransaction,
        layout: BarLayout,
        owner_id: str,
    ) -> list[Bar]:
        """Append one line entity per bar to an open transaction.

        Nothing is rolled back here; a validation failure propagates and
        the caller's transaction aborts the whole batch.

        Args:
            transaction: Open host transaction
            layout: Generated bars
            owner_id: Space that receives the line entities

        Returns:
            Bars carrying the handles of their line entities

        Raises:
            BarValidationError: If any bar fails validation
        """
        written: list[Bar] = []
        for bar in layout.bars:
            self.validate_bar(bar)
            entity = Entity(
                kind=EntityKind.LINE,
                owner_id=owner_id,
                line=(bar.start, bar.end),
                layer=BAR_LAYERS[bar.axis],
            )
            handle = transaction.append_entity(entity)
            written.append(bar.with_handle(handle))
        return written

    def summarize(
        self,
        bars: list[Bar],
        boundary_id: str,
        config: BarConfig,
        drawing_name: str = "",
        drawing_path: str = "",
    ) -> RunResult:
        """Aggregate written bars into a RunResult.

        Args:
            bars: Bars with handles, in generation order
            boundary_id: Handle of the boundary entity
            config: Configuration the run used
            drawing_name: File name of the drawing
            drawing_path: Full path of the drawing

        Returns:
            Immutable run report
        """
        aggregator = BarAggregator(precision=self.geometry.length_precision)
        for bar in bars:
            aggregator.add(bar)
            self.session_logger.log_bar(
                bar.index, bar.axis.value, bar.length, bar.handle or str(bar.index)
            )

        groups = tuple(aggregator.groups())
        total_length = round_half_away(math.fsum(b.length for b in bars), 2)
        self.session_logger.log_run_complete(aggregator.total_bars, total_length, len(groups))

        return RunResult(
            boundary_id=boundary_id,
            axis_mode=config.axis_mode,
            spacing_horizontal=config.spacing_horizontal,
            spacing_vertical=config.spacing_vertical,
            total_bars=aggregator.total_bars,
            total_length=total_length,
            groups=groups,
            drawing_name=drawing_name,
            drawing_path=drawing_path,
        )


def summary_lines(result: RunResult) -> list[str]:
    """Four-line console summary block for a run."""
    return [
        "====================",
        f"Total Bars: {result.total_bars}",
        f"Total Length: {result.total_length:.2f} mm",
        "====================",
    ]
