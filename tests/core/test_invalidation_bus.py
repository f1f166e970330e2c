"""
Tests for the invalidation bus and listener registry.
"""

from unittest.mock import MagicMock

import pytest

from medicore_admin.core.domain.events import EntityKind, InvalidationEvent
from medicore_admin.core.events import InvalidationBus, ListenerRegistry


class TestInvalidationBusDelivery:
    def test_publish_reaches_listeners_of_that_kind_only(self, bus: InvalidationBus):
        doctors_listener = MagicMock()
        messages_listener = MagicMock()
        bus.subscribe(EntityKind.DOCTORS, doctors_listener)
        bus.subscribe(EntityKind.MESSAGES, messages_listener)

        event = bus.publish(EntityKind.DOCTORS)

        doctors_listener.assert_called_once_with(event)
        messages_listener.assert_not_called()
        assert event.entity_kind is EntityKind.DOCTORS

    def test_delivery_is_synchronous_and_in_registration_order(self, bus: InvalidationBus):
        calls: list[str] = []
        bus.subscribe("doctors", lambda e: calls.append("first"))
        bus.subscribe("doctors", lambda e: calls.append("second"))

        bus.publish("doctors")

        # Already delivered when publish returns
        assert calls == ["first", "second"]

    def test_wildcard_listener_receives_every_kind(self, bus: InvalidationBus):
        received: list[EntityKind] = []
        bus.subscribe_all(lambda e: received.append(e.entity_kind))

        bus.publish(EntityKind.DOCTORS)
        bus.publish(EntityKind.APPOINTMENTS)

        assert received == [EntityKind.DOCTORS, EntityKind.APPOINTMENTS]

    def test_publish_without_listeners_is_noop(self, bus: InvalidationBus):
        event = bus.publish(EntityKind.MESSAGES)

        assert isinstance(event, InvalidationEvent)
        assert bus.published_count == 1

    def test_failing_listener_does_not_block_others(self, bus: InvalidationBus):
        after = MagicMock()

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(EntityKind.DOCTORS, broken)
        bus.subscribe(EntityKind.DOCTORS, after)

        bus.publish(EntityKind.DOCTORS)

        after.assert_called_once()

    def test_unknown_kind_is_rejected(self, bus: InvalidationBus):
        with pytest.raises(ValueError, match="Unknown entity kind"):
            bus.publish("patients")
        with pytest.raises(ValueError):
            bus.subscribe("patients", MagicMock())
        assert bus.published_count == 0

    def test_non_callable_listener_is_rejected(self, bus: InvalidationBus):
        with pytest.raises(TypeError):
            bus.subscribe(EntityKind.DOCTORS, "not callable")


class TestInvalidationBusSubscriptions:
    def test_unsubscribe_removes_exactly_one_registration(self, bus: InvalidationBus):
        listener = MagicMock()
        first = bus.subscribe(EntityKind.DOCTORS, listener)
        bus.subscribe(EntityKind.DOCTORS, listener)

        assert bus.unsubscribe(first) is True
        bus.publish(EntityKind.DOCTORS)

        assert listener.call_count == 1
        assert bus.listener_count(EntityKind.DOCTORS) == 1

    def test_unsubscribe_twice_returns_false(self, bus: InvalidationBus):
        subscription = bus.subscribe(EntityKind.DOCTORS, MagicMock())

        assert bus.unsubscribe(subscription) is True
        assert bus.unsubscribe(subscription) is False

    def test_listener_may_unsubscribe_itself_during_delivery(self, bus: InvalidationBus):
        other = MagicMock()
        calls = []

        def once(event):
            calls.append(event)
            subscription.cancel()

        subscription = bus.subscribe(EntityKind.DOCTORS, once)
        bus.subscribe(EntityKind.DOCTORS, other)

        bus.publish(EntityKind.DOCTORS)
        bus.publish(EntityKind.DOCTORS)

        assert len(calls) == 1
        assert other.call_count == 2

    def test_listener_cancelled_mid_delivery_is_skipped(self, bus: InvalidationBus):
        late = MagicMock()

        def cancel_late(event):
            late_subscription.cancel()

        bus.subscribe(EntityKind.DOCTORS, cancel_late)
        late_subscription = bus.subscribe(EntityKind.DOCTORS, late)

        bus.publish(EntityKind.DOCTORS)

        late.assert_not_called()

    def test_listener_added_during_delivery_waits_for_next_publish(self, bus: InvalidationBus):
        added = MagicMock()

        def add_another(event):
            bus.subscribe(EntityKind.DOCTORS, added)

        bus.subscribe(EntityKind.DOCTORS, add_another)

        bus.publish(EntityKind.DOCTORS)
        added.assert_not_called()

        bus.publish(EntityKind.DOCTORS)
        added.assert_called_once()

    def test_listener_count_and_clear(self, bus: InvalidationBus):
        bus.subscribe(EntityKind.DOCTORS, MagicMock())
        bus.subscribe(EntityKind.MESSAGES, MagicMock())
        bus.subscribe_all(MagicMock())

        assert bus.listener_count() == 3
        assert bus.listener_count("doctors") == 1

        bus.clear()
        assert bus.listener_count() == 0


class TestListenerRegistry:
    def test_deliver_reports_delivered_and_failed(self):
        registry: ListenerRegistry[int] = ListenerRegistry("Test")
        registry.add(lambda value: None)
        registry.add(lambda value: 1 / 0)

        assert registry.deliver(1) == (1, 1)

    def test_predicate_filters_by_key(self):
        registry: ListenerRegistry[str] = ListenerRegistry("Test")
        a = MagicMock()
        b = MagicMock()
        registry.add(a, key="a")
        registry.add(b, key="b")

        registry.deliver("payload", lambda s: s.key == "a")

        a.assert_called_once_with("payload")
        b.assert_not_called()


class TestInvalidationEvent:
    def test_event_type_and_dict(self):
        event = InvalidationEvent(entity_kind=EntityKind.APPOINTMENTS)

        data = event.to_dict()

        assert event.event_type == "appointments.invalidated"
        assert data["entity_kind"] == "appointments"
        assert data["event_id"] == str(event.event_id)
