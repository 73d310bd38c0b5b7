"""Unit tests for host events, subscription groups and the session registry."""

import pytest

from barfill.exceptions import SessionAlreadyActiveError
from barfill.host import EventHub, HostEvent, InMemoryDocument
from barfill.session import SessionRegistry, SubscriptionGroup


class TestEventHub:
    """Tests for EventHub and Subscription."""

    def test_emit_reaches_subscribers(self):
        """Test that payloads are delivered to every handler."""
        hub = EventHub()
        received = []
        hub.subscribe(HostEvent.IDLE, received.append)
        hub.subscribe(HostEvent.IDLE, received.append)
        hub.emit(HostEvent.IDLE, "x")
        assert received == ["x", "x"]

    def test_emit_other_event_ignored(self):
        """Test that handlers only see their own event."""
        hub = EventHub()
        received = []
        hub.subscribe(HostEvent.COMMAND_ENDED, received.append)
        hub.emit(HostEvent.IDLE)
        assert received == []

    def test_dispose_detaches(self):
        """Test that a disposed subscription stops receiving."""
        hub = EventHub()
        received = []
        sub = hub.subscribe(HostEvent.IDLE, received.append)
        sub.dispose()
        hub.emit(HostEvent.IDLE, 1)
        assert received == []
        assert hub.subscriber_count() == 0

    def test_dispose_twice(self):
        """Test that disposing is idempotent."""
        hub = EventHub()
        sub = hub.subscribe(HostEvent.IDLE, lambda _: None)
        sub.dispose()
        sub.dispose()
        assert not sub.active

    def test_handler_may_detach_itself(self):
        """Test that a one-shot handler fires once even if the event repeats."""
        hub = EventHub()
        calls = []

        def once(payload):
            calls.append(payload)
            sub.dispose()

        sub = hub.subscribe(HostEvent.IDLE, once)
        hub.emit(HostEvent.IDLE, 1)
        hub.emit(HostEvent.IDLE, 2)
        assert calls == [1]

    def test_handler_disposed_mid_dispatch_is_skipped(self):
        """Test that a handler removed by an earlier one is not called."""
        hub = EventHub()
        calls = []

        hub.subscribe(HostEvent.IDLE, lambda _: second.dispose())
        second = hub.subscribe(HostEvent.IDLE, calls.append)
        hub.emit(HostEvent.IDLE, 1)
        assert calls == []

    def test_handler_added_mid_dispatch_waits(self):
        """Test that a handler attached during dispatch sees only later events."""
        hub = EventHub()
        calls = []

        def attach(_payload):
            hub.subscribe(HostEvent.IDLE, calls.append)

        first = hub.subscribe(HostEvent.IDLE, attach)
        hub.emit(HostEvent.IDLE, 1)
        first.dispose()
        hub.emit(HostEvent.IDLE, 2)
        assert calls == [2]

    def test_subscriber_count_per_event(self):
        """Test counting subscribers."""
        hub = EventHub()
        hub.subscribe(HostEvent.IDLE, lambda _: None)
        hub.subscribe(HostEvent.COMMAND_ENDED, lambda _: None)
        assert hub.subscriber_count(HostEvent.IDLE) == 1
        assert hub.subscriber_count() == 2


class TestSubscriptionGroup:
    """Tests for SubscriptionGroup class."""

    def test_dispose_all(self):
        """Test that dispose detaches every member."""
        hub = EventHub()
        group = SubscriptionGroup()
        group.add("a", hub.subscribe(HostEvent.IDLE, lambda _: None))
        group.add("b", hub.subscribe(HostEvent.COMMAND_ENDED, lambda _: None))
        group.dispose()
        assert len(group) == 0
        assert hub.subscriber_count() == 0

    def test_dispose_idempotent(self):
        """Test that dispose may run any number of times."""
        hub = EventHub()
        group = SubscriptionGroup()
        group.add("a", hub.subscribe(HostEvent.IDLE, lambda _: None))
        group.dispose()
        group.dispose()
        assert group.disposed

    def test_detach_selected(self):
        """Test releasing some subscriptions early."""
        hub = EventHub()
        group = SubscriptionGroup()
        group.add("a", hub.subscribe(HostEvent.IDLE, lambda _: None))
        group.add("b", hub.subscribe(HostEvent.COMMAND_ENDED, lambda _: None))
        group.detach("a", "missing")
        assert group.names() == ["b"]
        assert "a" not in group
        assert hub.subscriber_count(HostEvent.IDLE) == 0

    def test_add_replaces_existing(self):
        """Test that reusing a name disposes the earlier subscription."""
        hub = EventHub()
        group = SubscriptionGroup()
        first = hub.subscribe(HostEvent.IDLE, lambda _: None)
        group.add("idle", first)
        group.add("idle", hub.subscribe(HostEvent.IDLE, lambda _: None))
        assert not first.active
        assert hub.subscriber_count(HostEvent.IDLE) == 1

    def test_add_after_dispose(self):
        """Test that late additions to a disposed group are released at once."""
        hub = EventHub()
        group = SubscriptionGroup()
        group.dispose()
        sub = hub.subscribe(HostEvent.IDLE, lambda _: None)
        group.add("late", sub)
        assert not sub.active
        assert len(group) == 0


class TestSessionRegistry:
    """Tests for SessionRegistry class."""

    def test_register_and_release(self):
        """Test a register/release cycle."""
        registry = SessionRegistry()
        doc = InMemoryDocument()
        session = object()
        registry.register(doc.key, session)
        assert doc.key in registry
        assert registry.get(doc.key) is session
        assert registry.release(doc.key, session)
        assert len(registry) == 0

    def test_second_register_rejected(self):
        """Test that a document can only hold one session."""
        registry = SessionRegistry()
        doc = InMemoryDocument("slab.dwg")
        first = object()
        registry.register(doc.key, first, doc.name)
        with pytest.raises(SessionAlreadyActiveError, match="slab.dwg"):
            registry.register(doc.key, object(), doc.name)
        assert registry.get(doc.key) is first

    def test_release_other_session_is_noop(self):
        """Test that a session cannot release another session's entry."""
        registry = SessionRegistry()
        doc = InMemoryDocument()
        first = object()
        registry.register(doc.key, first)
        assert not registry.release(doc.key, object())
        assert registry.is_active(doc.key)

    def test_documents_independent(self):
        """Test that different documents may each hold a session."""
        registry = SessionRegistry()
        registry.register(InMemoryDocument().key, object())
        registry.register(InMemoryDocument().key, object())
        assert len(registry) == 2
