"""Boundary readers for loading recorded polylines.

This module loads the boundary a run should replay from a file:
- JSON: {"vertices": [[x, y], ...], "closed": true}
- DXF: the last LWPOLYLINE or POLYLINE in modelspace, via ezdxf
"""

import json
from pathlib import Path

import ezdxf
from ezdxf.document import Drawing

from barfill.domain import Boundary
from barfill.exceptions import BoundaryReadError

SUPPORTED_SUFFIXES = (".json", ".dxf")


def read_json_boundary(path: Path) -> Boundary:
    """Load a boundary from a JSON file.

    Raises:
        BoundaryReadError: If the file is unreadable or malformed
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        boundary = Boundary.from_dict(data)
    except (OSError, ValueError, KeyError, TypeError, IndexError) as e:
        raise BoundaryReadError(str(path), str(e)) from e

    if len(boundary.vertices) < 2:
        raise BoundaryReadError(str(path), "boundary needs at least two vertices")
    return boundary


def boundary_from_dxf(doc: Drawing) -> Boundary | None:
    """Extract the last polyline in a drawing's modelspace.

    Later polylines replace earlier ones, matching how a drawing command
    that appends several candidates is interpreted.

    Returns:
        Boundary, or None if the modelspace holds no polyline
    """
    boundary: Boundary | None = None
    for entity in doc.modelspace().query("LWPOLYLINE POLYLINE"):
        if entity.dxftype() == "LWPOLYLINE":
            coordinates = [(pt[0], pt[1]) for pt in entity.get_points("xy")]
            closed = bool(entity.closed)
        else:
            coordinates = [(p.x, p.y) for p in entity.points()]
            closed = bool(entity.is_closed)

        if coordinates:
            boundary = Boundary.from_coordinates(
                coordinates, closed=closed, entity_id=entity.dxf.handle
            )
    return boundary


def read_dxf_boundary(path: Path) -> Boundary:
    """Load a boundary from a DXF file.

    Raises:
        BoundaryReadError: If the file cannot be parsed or has no polyline
    """
    try:
        doc = ezdxf.readfile(str(path))
    except (OSError, ezdxf.DXFStructureError) as e:
        raise BoundaryReadError(str(path), str(e)) from e

    boundary = boundary_from_dxf(doc)
    if boundary is None:
        raise BoundaryReadError(str(path), "no LWPOLYLINE or POLYLINE in modelspace")
    return boundary


def read_boundary(path: Path) -> Boundary:
    """Load a boundary, choosing the reader from the file suffix.

    Raises:
        FileNotFoundError: If the file does not exist
        BoundaryReadError: If the suffix is unsupported or the file is invalid
    """
    if not path.exists():
        raise FileNotFoundError(f"Boundary file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        return read_json_boundary(path)
    if suffix == ".dxf":
        return read_dxf_boundary(path)
    raise BoundaryReadError(
        str(path), f"unsupported file type '{suffix}' (expected {', '.join(SUPPORTED_SUFFIXES)})"
    )
