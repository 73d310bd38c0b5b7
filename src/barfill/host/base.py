"""Host document protocol.

The core never owns drawing entities. It talks to the host through the
narrow interface defined here: an event hub, a transaction with
begin/commit/abort semantics, entity lookup and append, command launch and
a console for user-facing messages.
"""

from collections.abc import Hashable
from contextlib import AbstractContextManager
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol

from barfill.domain import Boundary, Point
from barfill.host.events import EventHub


class EntityKind(str, Enum):
    """Entity types a host can store."""

    LINE = "LINE"
    POLYLINE = "POLYLINE"
    POLYLINE2D = "POLYLINE2D"
    POLYLINE3D = "POLYLINE3D"
    CIRCLE = "CIRCLE"
    TEXT = "TEXT"


# Entity kinds a polyline drawing tool can produce
POLYLINE_KINDS: frozenset[EntityKind] = frozenset(
    {EntityKind.POLYLINE, EntityKind.POLYLINE2D, EntityKind.POLYLINE3D}
)


@dataclass(frozen=True)
class Entity:
    """A drawing entity stored by the host.

    Attributes:
        kind: Entity type
        owner_id: Identifier of the space (model/paper/block) owning it
        boundary: Polyline geometry for polyline kinds
        line: (start, end) for LINE entities
        layer: Layer name
        handle: Host identifier, assigned on append
    """

    kind: EntityKind
    owner_id: str
    boundary: Boundary | None = None
    line: tuple[Point, Point] | None = None
    layer: str = "0"
    handle: str | None = None

    @property
    def is_polyline(self) -> bool:
        return self.kind in POLYLINE_KINDS

    def with_handle(self, handle: str) -> "Entity":
        boundary = self.boundary
        if boundary is not None:
            boundary = replace(boundary, entity_id=handle)
        return replace(self, handle=handle, boundary=boundary)


class HostTransaction(Protocol):
    """An open unit of work against a host document."""

    def get_entity(self, handle: str) -> Entity | None: ...

    def append_entity(self, entity: Entity) -> str: ...

    def replace_entity(self, handle: str, entity: Entity) -> None: ...

    def commit(self) -> None: ...

    def abort(self) -> None: ...


class HostDocument(Protocol):
    """A host document the capture session can drive.

    ``transaction()`` must commit when its block exits normally and abort
    when it exits with an exception.
    """

    @property
    def key(self) -> Hashable: ...

    @property
    def name(self) -> str: ...

    @property
    def path(self) -> str: ...

    @property
    def current_space_id(self) -> str: ...

    @property
    def events(self) -> EventHub: ...

    def transaction(self) -> AbstractContextManager[HostTransaction]: ...

    def execute_command(self, command: str) -> None: ...

    def write_message(self, message: str) -> None: ...
