"""JSON export of run results."""

import json
from pathlib import Path

from barfill.domain import RunResult
from barfill.exceptions import ExportError


def default_json_path(drawing_path: str, fallback_dir: Path | None = None) -> Path:
    """Where a drawing's bar schedule is saved by default.

    ``C:/jobs/slab.dwg`` maps to ``C:/jobs/slab_bars.json``. Unsaved
    drawings map to ``Drawing_bars.json`` in ``fallback_dir`` (the current
    directory if not given).
    """
    if drawing_path.strip():
        source = Path(drawing_path)
        return source.with_name(f"{source.stem}_bars.json")

    folder = fallback_dir if fallback_dir is not None else Path.cwd()
    return folder / "Drawing_bars.json"


class JsonExporter:
    """Writes RunResult records as indented JSON.

    Example:
        exporter = JsonExporter(Path("slab_bars.json"))
        exporter.export(result)
    """

    def __init__(self, path: Path | None = None, fallback_dir: Path | None = None) -> None:
        """Initialize the exporter.

        Args:
            path: Fixed output path; derived from the drawing path if None
            fallback_dir: Folder used for unsaved drawings
        """
        self.path = path
        self.fallback_dir = fallback_dir

    def target_for(self, result: RunResult) -> Path:
        if self.path is not None:
            return self.path
        return default_json_path(result.drawing_path, self.fallback_dir)

    def export(self, result: RunResult) -> str:
        """Save ``result`` and return the path written.

        Raises:
            ExportError: If the file cannot be written
        """
        target = self.target_for(result)
        try:
            target.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            raise ExportError(str(target), str(e)) from e
        return str(target)
