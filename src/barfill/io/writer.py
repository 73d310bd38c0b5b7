"""DXF output of a host document.

This module provides the DxfWriter class for saving the boundary and the
generated bars held by an in-memory host document as a DXF drawing.
"""

from collections.abc import Iterable
from pathlib import Path

import ezdxf

from barfill.core.pipeline import BAR_LAYERS
from barfill.domain import SweepAxis
from barfill.exceptions import ExportError
from barfill.host.base import Entity, EntityKind

BOUNDARY_LAYER = "BOUNDARY"

# AutoCAD color index per layer
LAYER_COLORS: dict[str, int] = {
    BOUNDARY_LAYER: 7,
    BAR_LAYERS[SweepAxis.HORIZONTAL]: 1,
    BAR_LAYERS[SweepAxis.VERTICAL]: 5,
}


class DxfWriter:
    """Writes host entities to a new DXF drawing.

    Polylines go on the BOUNDARY layer; lines keep the layer they were
    appended on, so horizontal and vertical bars can be toggled
    independently.

    Example:
        writer = DxfWriter(Path("slab-bars.dxf"))
        writer.save(document.entities.values())
    """

    def __init__(self, output_path: Path, dxfversion: str = "R2010") -> None:
        """Initialize the DXF writer.

        Args:
            output_path: Path where the drawing will be saved
            dxfversion: DXF version of the new drawing
        """
        self._output_path = output_path
        self._dxfversion = dxfversion

    @property
    def output_path(self) -> Path:
        return self._output_path

    def save(self, entities: Iterable[Entity]) -> int:
        """Write polyline and line entities to the drawing.

        Other entity kinds are skipped.

        Args:
            entities: Entities to write

        Returns:
            Number of entities written

        Raises:
            ExportError: If the file cannot be written
        """
        doc = ezdxf.new(self._dxfversion)
        for name, color in LAYER_COLORS.items():
            doc.layers.add(name, color=color)

        msp = doc.modelspace()
        written = 0
        for entity in entities:
            if entity.is_polyline and entity.boundary is not None:
                msp.add_lwpolyline(
                    [p.to_tuple() for p in entity.boundary.vertices],
                    close=entity.boundary.closed,
                    dxfattribs={"layer": BOUNDARY_LAYER},
                )
                written += 1
            elif entity.kind is EntityKind.LINE and entity.line is not None:
                start, end = entity.line
                if entity.layer not in doc.layers:
                    doc.layers.add(entity.layer)
                msp.add_line(
                    start.to_tuple(),
                    end.to_tuple(),
                    dxfattribs={"layer": entity.layer},
                )
                written += 1

        try:
            doc.saveas(self._output_path)
        except OSError as e:
            raise ExportError(str(self._output_path), str(e)) from e
        return written

