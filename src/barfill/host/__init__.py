"""Host document layer for barfill.

The capture session drives a host CAD document through a small protocol:
an event hub for lifecycle notifications, transactions with commit/abort,
entity append and lookup, command launch and console messages.

Key classes:
- HostDocument / HostTransaction: The protocol the core depends on
- EventHub / Subscription: Observer mechanism exposed by documents
- InMemoryDocument: Reference host used by the CLI and tests
- ReplayDrawingTool: Replays a recorded polyline as a drawing command
"""

from barfill.host.base import (
    POLYLINE_KINDS,
    Entity,
    EntityKind,
    HostDocument,
    HostTransaction,
)
from barfill.host.events import CommandEventArgs, EventHub, HostEvent, Subscription
from barfill.host.memory import MODEL_SPACE_ID, InMemoryDocument, InMemoryTransaction
from barfill.host.replay import ReplayDrawingTool

__all__ = [
    "MODEL_SPACE_ID",
    "POLYLINE_KINDS",
    "CommandEventArgs",
    "Entity",
    "EntityKind",
    "EventHub",
    "HostDocument",
    "HostEvent",
    "HostTransaction",
    "InMemoryDocument",
    "InMemoryTransaction",
    "ReplayDrawingTool",
    "Subscription",
]
