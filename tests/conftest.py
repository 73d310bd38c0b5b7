"""Shared fixtures for the barfill test suite."""

import pytest

from barfill.config import AxisMode, BarConfig, BarfillSettings
from barfill.domain import Boundary
from barfill.host import InMemoryDocument, ReplayDrawingTool
from barfill.session import SessionRegistry


def _make_settings(
    mode: AxisMode = AxisMode.HORIZONTAL,
    spacing_h: float = 100.0,
    spacing_v: float = 100.0,
) -> BarfillSettings:
    """Settings for one run with the given layout."""
    return BarfillSettings(
        bars=BarConfig(axis_mode=mode, spacing_horizontal=spacing_h, spacing_vertical=spacing_v)
    )


@pytest.fixture
def make_settings():
    """Factory for run settings with a given axis mode and spacings."""
    return _make_settings


@pytest.fixture
def square() -> Boundary:
    """Closed 1000 x 1000 square at the origin."""
    return Boundary.from_coordinates(
        [(0, 0), (1000, 0), (1000, 1000), (0, 1000)],
        closed=True,
    )


@pytest.fixture
def u_slot() -> Boundary:
    """1000 x 1000 square with a 200 wide slot cut down from the top to y=400."""
    return Boundary.from_coordinates(
        [
            (0, 0),
            (1000, 0),
            (1000, 1000),
            (600, 1000),
            (600, 400),
            (400, 400),
            (400, 1000),
            (0, 1000),
        ],
        closed=True,
    )


@pytest.fixture
def diamond() -> Boundary:
    """Square rotated 45 degrees, touching each bounding box edge at one vertex."""
    return Boundary.from_coordinates(
        [(500, 0), (1000, 500), (500, 1000), (0, 500)],
        closed=True,
    )


@pytest.fixture
def registry() -> SessionRegistry:
    """Registry isolated from the process-wide default."""
    return SessionRegistry()


@pytest.fixture
def document() -> InMemoryDocument:
    return InMemoryDocument("slab.dwg", path="")


@pytest.fixture
def tool(document: InMemoryDocument) -> ReplayDrawingTool:
    return ReplayDrawingTool(document)
