"""Core processing algorithms for barfill.

This module contains the scanline engine:

- Geometry (scanline positions, sweep margin, line/segment intersection)
- Point deduplication along a scanline
- Bar building (pairing crossings, filtering degenerate bars)
- Bar aggregation (grouping by orientation and rounded length)
- The pipeline tying them to a host transaction

All services except the pipeline's write step are pure.

Key functions:
- scanline_positions: Inclusive scanline coordinates for a spacing
- sweep_margin: Overshoot for full-span test lines
- intersect_scanline: Raw crossings of one test line
- sweep: Raw crossings for every test line of an axis
- dedupe_points: Sort and collapse crossings on one scanline

Key classes:
- BarBuilder: Pairs crossings into bars with running totals
- BarAggregator: Groups bars into a bar schedule
- BarPipeline: Generate, write and summarize bars for a boundary
"""

from barfill.core.aggregator import BarAggregator
from barfill.core.bars import BarBuilder, dedupe_points
from barfill.core.geometry import (
    ScanlineHit,
    intersect_scanline,
    intersect_segment,
    scanline_positions,
    sweep,
    sweep_margin,
)
from barfill.core.pipeline import BAR_LAYERS, BarLayout, BarPipeline, summary_lines

__all__ = [
    "BAR_LAYERS",
    # Aggregation
    "BarAggregator",
    # Bar building
    "BarBuilder",
    # Pipeline
    "BarLayout",
    "BarPipeline",
    # Geometry
    "ScanlineHit",
    "dedupe_points",
    "intersect_scanline",
    "intersect_segment",
    "scanline_positions",
    "summary_lines",
    "sweep",
    "sweep_margin",
]
