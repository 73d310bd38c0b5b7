"""File I/O layer for barfill.

This module handles reading recorded boundaries and writing run output.
It keeps file formats out of the domain models and the core.

Key responsibilities:
- Load boundaries from JSON or DXF (ezdxf)
- Export run results as JSON bar schedules
- Write a document's boundary and bars to a DXF drawing

Key classes:
- JsonExporter: Save RunResult records
- DxfWriter: Save host entities as DXF
"""

from barfill.io.exporter import JsonExporter, default_json_path
from barfill.io.reader import read_boundary, read_dxf_boundary, read_json_boundary
from barfill.io.writer import DxfWriter

__all__ = [
    "DxfWriter",
    "JsonExporter",
    "default_json_path",
    "read_boundary",
    "read_dxf_boundary",
    "read_json_boundary",
]
