"""Observer mechanism exposed by host documents.

Host documents publish lifecycle notifications through an EventHub.
Subscribers receive a Subscription they dispose to detach; dispatch runs
over a snapshot of the subscriber list and skips subscriptions disposed
mid-dispatch, so a handler may detach itself or others while an event is
being delivered.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class HostEvent(Enum):
    """Notifications a host document emits."""

    OBJECT_APPENDED = auto()
    COMMAND_ENDED = auto()
    COMMAND_CANCELLED = auto()
    COMMAND_FAILED = auto()
    IDLE = auto()


@dataclass(frozen=True)
class CommandEventArgs:
    """Payload of command lifecycle notifications.

    Attributes:
        command_name: Global name of the command, as reported by the host
    """

    command_name: str


Handler = Callable[[Any], None]


class Subscription:
    """Handle for one attached handler."""

    def __init__(self, hub: "EventHub", event: HostEvent, handler: Handler) -> None:
        self._hub = hub
        self.event = event
        self.handler = handler
        self.active = True

    def dispose(self) -> None:
        """Detach the handler. Safe to call more than once."""
        if not self.active:
            return
        self.active = False
        self._hub._remove(self)

    def __repr__(self) -> str:
        state = "active" if self.active else "disposed"
        return f"Subscription({self.event.name}, {state})"


class EventHub:
    """Per-document event dispatcher."""

    def __init__(self) -> None:
        self._subscriptions: dict[HostEvent, list[Subscription]] = {e: [] for e in HostEvent}

    def subscribe(self, event: HostEvent, handler: Handler) -> Subscription:
        """Attach ``handler`` to ``event``.

        Returns:
            Subscription used to detach the handler
        """
        subscription = Subscription(self, event, handler)
        self._subscriptions[event].append(subscription)
        return subscription

    def emit(self, event: HostEvent, payload: Any = None) -> None:
        """Deliver ``payload`` to every handler attached to ``event``."""
        for subscription in list(self._subscriptions[event]):
            if subscription.active:
                subscription.handler(payload)

    def subscriber_count(self, event: HostEvent | None = None) -> int:
        """Number of attached handlers, for one event or for all."""
        if event is not None:
            return len(self._subscriptions[event])
        return sum(len(subs) for subs in self._subscriptions.values())

    def _remove(self, subscription: Subscription) -> None:
        subs = self._subscriptions[subscription.event]
        if subscription in subs:
            subs.remove(subscription)
