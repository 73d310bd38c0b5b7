"""Grouped event subscriptions with a single idempotent disposer."""

from barfill.host.events import Subscription


class SubscriptionGroup:
    """Named subscriptions owned by one session.

    ``dispose()`` detaches everything and may be called any number of
    times; ``detach()`` releases selected subscriptions early.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, Subscription] = {}
        self.disposed = False

    def add(self, name: str, subscription: Subscription) -> None:
        """Track a subscription under ``name``, replacing any earlier one."""
        previous = self._subscriptions.pop(name, None)
        if previous is not None:
            previous.dispose()
        if self.disposed:
            subscription.dispose()
            return
        self._subscriptions[name] = subscription

    def detach(self, *names: str) -> None:
        for name in names:
            subscription = self._subscriptions.pop(name, None)
            if subscription is not None:
                subscription.dispose()

    def dispose(self) -> None:
        for subscription in self._subscriptions.values():
            subscription.dispose()
        self._subscriptions.clear()
        self.disposed = True

    def names(self) -> list[str]:
        return list(self._subscriptions)

    def __len__(self) -> int:
        return len(self._subscriptions)

    def __contains__(self, name: object) -> bool:
        return name in self._subscriptions
