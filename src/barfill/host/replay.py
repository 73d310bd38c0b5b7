"""Replay drawing tool.

Stands in for an interactive polyline command: it appends pre-recorded
geometry to the document and reports the command lifecycle exactly as an
interactive tool would, so a capture session can be driven without a user.
"""

from barfill.domain import Boundary
from barfill.host.base import Entity, EntityKind
from barfill.host.events import CommandEventArgs, HostEvent
from barfill.host.memory import InMemoryDocument


class ReplayDrawingTool:
    """Replays a polyline drawing command against an InMemoryDocument.

    Example:
        tool = ReplayDrawingTool(doc)
        tool.run(boundary)  # draw, end the command, then go idle
    """

    def __init__(self, document: InMemoryDocument, command_name: str = "PLINE") -> None:
        self._document = document
        self.command_name = command_name

    def draw(self, boundary: Boundary, kind: EntityKind = EntityKind.POLYLINE) -> str:
        """Append one polyline as the tool would while the user draws.

        Returns:
            Handle of the appended entity
        """
        entity = Entity(
            kind=kind,
            owner_id=self._document.current_space_id,
            boundary=boundary,
        )
        with self._document.transaction() as tr:
            return tr.append_entity(entity)

    def end(self) -> None:
        self._emit(HostEvent.COMMAND_ENDED)

    def cancel(self) -> None:
        self._emit(HostEvent.COMMAND_CANCELLED)

    def fail(self) -> None:
        self._emit(HostEvent.COMMAND_FAILED)

    def run(self, boundary: Boundary) -> str:
        """Draw, end the command and let the host go idle.

        Returns:
            Handle of the drawn polyline
        """
        handle = self.draw(boundary)
        self.end()
        self._document.emit_idle()
        return handle

    def _emit(self, event: HostEvent) -> None:
        self._document.events.emit(event, CommandEventArgs(command_name=self.command_name))
