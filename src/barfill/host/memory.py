"""In-memory host document.

A self-contained implementation of the host protocol used by the CLI and
the test suite. Entities live in a dict keyed by hexadecimal handles,
transactions stage their changes until commit, and appends are announced
through the document's EventHub as they happen.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum, auto
from pathlib import Path

from barfill.host.base import Entity
from barfill.host.events import EventHub, HostEvent

MODEL_SPACE_ID = "*Model_Space"


class TransactionState(Enum):
    OPEN = auto()
    COMMITTED = auto()
    ABORTED = auto()


class InMemoryTransaction:
    """Staged changes against an InMemoryDocument.

    Appended and replaced entities are visible through get_entity() while
    the transaction is open and reach the document only on commit().
    """

    def __init__(self, document: "InMemoryDocument") -> None:
        self._document = document
        self._staged: dict[str, Entity] = {}
        self.state = TransactionState.OPEN

    def _check_open(self) -> None:
        if self.state is not TransactionState.OPEN:
            raise RuntimeError(f"Transaction is {self.state.name.lower()}")

    def get_entity(self, handle: str) -> Entity | None:
        self._check_open()
        if handle in self._staged:
            return self._staged[handle]
        return self._document.entities.get(handle)

    def append_entity(self, entity: Entity) -> str:
        """Stage a new entity and announce it.

        Returns:
            Handle assigned to the entity
        """
        self._check_open()
        handle = self._document._next_handle()
        stored = entity.with_handle(handle)
        self._staged[handle] = stored
        self._document.events.emit(HostEvent.OBJECT_APPENDED, stored)
        return handle

    def replace_entity(self, handle: str, entity: Entity) -> None:
        self._check_open()
        if self.get_entity(handle) is None:
            raise KeyError(f"Unknown entity handle: {handle}")
        self._staged[handle] = entity.with_handle(handle)

    def commit(self) -> None:
        self._check_open()
        self._document.entities.update(self._staged)
        self._staged.clear()
        self.state = TransactionState.COMMITTED
        self._document.commit_count += 1

    def abort(self) -> None:
        if self.state is not TransactionState.OPEN:
            return
        self._staged.clear()
        self.state = TransactionState.ABORTED
        self._document.abort_count += 1


class InMemoryDocument:
    """Host document kept entirely in memory.

    Example:
        doc = InMemoryDocument("slab.dwg")
        with doc.transaction() as tr:
            handle = tr.append_entity(entity)
        doc.emit_idle()
    """

    def __init__(self, name: str = "Drawing1.dwg", path: str = "") -> None:
        """Initialize an empty document.

        Args:
            name: Display name of the drawing
            path: File path of the drawing, empty when unsaved
        """
        self._name = name
        self._path = path
        self._handle_seed = 0x200
        self.events = EventHub()
        self.entities: dict[str, Entity] = {}
        self.messages: list[str] = []
        self.executed_commands: list[str] = []
        self.commit_count = 0
        self.abort_count = 0

    @classmethod
    def for_path(cls, path: Path) -> "InMemoryDocument":
        """Document named after a drawing file on disk."""
        return cls(name=path.name, path=str(path))

    @property
    def key(self) -> "InMemoryDocument":
        return self

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> str:
        return self._path

    @property
    def current_space_id(self) -> str:
        return MODEL_SPACE_ID

    @contextmanager
    def transaction(self) -> Iterator[InMemoryTransaction]:
        """Open a transaction; commit on normal exit, abort on error."""
        tr = InMemoryTransaction(self)
        try:
            yield tr
        except BaseException:
            tr.abort()
            raise
        else:
            if tr.state is TransactionState.OPEN:
                tr.commit()

    def execute_command(self, command: str) -> None:
        """Queue a command; the drawing tool runs it later."""
        self.executed_commands.append(command)

    def write_message(self, message: str) -> None:
        self.messages.append(message)

    def emit_idle(self) -> None:
        """Signal that the host has no pending internal work."""
        self.events.emit(HostEvent.IDLE)

    def delete_entity(self, handle: str) -> None:
        self.entities.pop(handle, None)

    def entities_of_layer(self, layer: str) -> list[Entity]:
        return [e for e in self.entities.values() if e.layer == layer]

    def _next_handle(self) -> str:
        self._handle_seed += 1
        return format(self._handle_seed, "X")
