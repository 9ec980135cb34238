"""
Unit tests for the player EventBus.

Tests subscription, ordering, unsubscribe isolation, and error isolation.
"""

import pytest
from unittest.mock import Mock
from commutr.player.events import EventBus, PlayerEvent, PlayerEventType


@pytest.fixture
def bus():
    return EventBus()


class TestSubscription:
    """Test basic subscribe / publish."""

    def test_handler_receives_event_once(self, bus):
        """Subscribed handler is called exactly once with the event."""
        handler = Mock()
        bus.subscribe(handler)

        event = PlayerEvent.play("vid1", 0)
        bus.publish(event)

        handler.assert_called_once_with(event)

    def test_unsubscribed_handler_not_called(self, bus):
        """After unsubscribe, later events are not delivered."""
        handler = Mock()
        unsubscribe = bus.subscribe(handler)

        bus.publish(PlayerEvent.play("vid1", 0))
        unsubscribe()
        bus.publish(PlayerEvent.pause("vid1", 30))

        assert handler.call_count == 1

    def test_publish_without_subscribers(self, bus):
        """Publishing to an empty bus is a no-op."""
        bus.publish(PlayerEvent.complete("vid1", 300))
        assert bus.subscriber_count == 0


class TestMultipleSubscribers:
    """Test delivery to several handlers."""

    def test_each_subscriber_called_once(self, bus):
        handlers = [Mock(), Mock(), Mock()]
        for h in handlers:
            bus.subscribe(h)

        event = PlayerEvent.skip("vid2", 45)
        bus.publish(event)

        for h in handlers:
            h.assert_called_once_with(event)

    def test_subscription_order(self, bus):
        """Handlers run in the order they subscribed."""
        calls = []
        bus.subscribe(lambda e: calls.append("first"))
        bus.subscribe(lambda e: calls.append("second"))
        bus.subscribe(lambda e: calls.append("third"))

        bus.publish(PlayerEvent.play("vid1"))

        assert calls == ["first", "second", "third"]

    def test_unsubscribe_does_not_affect_others(self, bus):
        """Removing one handler leaves the rest subscribed."""
        h1, h2, h3 = Mock(), Mock(), Mock()
        bus.subscribe(h1)
        unsubscribe2 = bus.subscribe(h2)
        bus.subscribe(h3)

        unsubscribe2()
        bus.publish(PlayerEvent.play("vid1"))

        h1.assert_called_once()
        h2.assert_not_called()
        h3.assert_called_once()

    def test_double_unsubscribe_is_harmless(self, bus):
        """Calling unsubscribe twice is a no-op the second time."""
        h1, h2 = Mock(), Mock()
        unsubscribe1 = bus.subscribe(h1)
        bus.subscribe(h2)

        unsubscribe1()
        unsubscribe1()
        bus.publish(PlayerEvent.play("vid1"))

        h1.assert_not_called()
        h2.assert_called_once()
        assert bus.subscriber_count == 1

    def test_same_handler_subscribed_twice(self, bus):
        """Each subscription is independent."""
        handler = Mock()
        unsubscribe_a = bus.subscribe(handler)
        bus.subscribe(handler)

        unsubscribe_a()
        bus.publish(PlayerEvent.play("vid1"))

        assert handler.call_count == 1

    def test_failing_handler_isolated(self, bus):
        """A handler that raises does not stop later handlers."""
        failing = Mock(side_effect=RuntimeError("boom"))
        after = Mock()
        bus.subscribe(failing)
        bus.subscribe(after)

        bus.publish(PlayerEvent.error("vid1", "network"))

        failing.assert_called_once()
        after.assert_called_once()

    def test_buses_are_independent(self):
        """Sessions do not share subscribers."""
        bus_a, bus_b = EventBus(), EventBus()
        handler = Mock()
        bus_a.subscribe(handler)

        bus_b.publish(PlayerEvent.play("vid1"))

        handler.assert_not_called()


class TestPlayerEvent:
    """Test event factories."""

    def test_complete_carries_duration(self):
        event = PlayerEvent.complete("vid1", 300)
        assert event.type == PlayerEventType.COMPLETE
        assert event.duration_sec == 300
        assert event.at_sec is None

    def test_skip_carries_position(self):
        event = PlayerEvent.skip("vid1", 45)
        assert event.type == PlayerEventType.SKIP
        assert event.at_sec == 45

    def test_error_carries_message(self):
        event = PlayerEvent.error("vid1", "decode failed")
        assert event.type == PlayerEventType.ERROR
        assert event.message == "decode failed"

    def test_type_compares_to_string(self):
        assert PlayerEvent.pause("vid1", 10).type == "PAUSE"
