"""
Tests for the in-process event bus.
"""

from gachasim.storage.event_bus import (
    DebugChangedEvent,
    EventBus,
    GachaEventType,
    RollAcknowledgedEvent,
)


def test_listeners_receive_their_type_only():
    bus = EventBus()
    debug_events = []
    ack_events = []
    bus.subscribe(GachaEventType.DEBUG_CHANGED, debug_events.append)
    bus.subscribe(GachaEventType.ROLL_ACKNOWLEDGED, ack_events.append)

    bus.publish(DebugChangedEvent(enabled=True))

    assert len(debug_events) == 1
    assert debug_events[0].enabled is True
    assert ack_events == []


def test_failing_listener_does_not_stop_delivery():
    """
    Test that the listeners after a failing one still run.
    """
    bus = EventBus()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(GachaEventType.ROLL_ACKNOWLEDGED, broken)
    bus.subscribe(GachaEventType.ROLL_ACKNOWLEDGED, received.append)

    bus.publish(RollAcknowledgedEvent())

    assert len(received) == 1


def test_unsubscribe_is_idempotent():
    bus = EventBus()
    unsubscribe = bus.subscribe(GachaEventType.DEBUG_CHANGED, lambda e: None)
    assert bus.listener_count(GachaEventType.DEBUG_CHANGED) == 1

    unsubscribe()
    unsubscribe()

    assert bus.listener_count(GachaEventType.DEBUG_CHANGED) == 0
