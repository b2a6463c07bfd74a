from budgetpunk.services.event_bus import EventBus, GUIEvent


def test_subscribe_publish_basic(bus: EventBus):
    received = []

    def handler(evt):
        received.append((evt.name, evt.payload))

    bus.subscribe(GUIEvent.THEME_CHANGED, handler)
    bus.publish(GUIEvent.THEME_CHANGED, "dark")
    assert received == [(GUIEvent.THEME_CHANGED.value, "dark")]


def test_once_subscription(bus: EventBus):
    count = 0

    def incr(_):
        nonlocal count
        count += 1

    bus.subscribe(GUIEvent.ROUTE_CHANGED, incr, once=True)
    bus.publish(GUIEvent.ROUTE_CHANGED)
    bus.publish(GUIEvent.ROUTE_CHANGED)
    assert count == 1
    assert bus.subscriber_count(GUIEvent.ROUTE_CHANGED) == 0


def test_error_isolation(bus: EventBus):
    order = []

    def bad(_):
        order.append("bad")
        raise RuntimeError("boom")

    def good(_):
        order.append("good")

    bus.subscribe("custom", bad)
    bus.subscribe("custom", good)
    bus.publish("custom", 123)
    assert order == ["bad", "good"]
    assert len(bus.errors) == 1
    assert isinstance(bus.errors[0][1], RuntimeError)


def test_cancel_subscription(bus: EventBus):
    seen = []
    sub = bus.subscribe(GUIEvent.OVERLAY_CHANGED, seen.append)
    sub.cancel()
    sub.cancel()  # idempotent
    bus.publish(GUIEvent.OVERLAY_CHANGED, 1)
    assert seen == []
    assert not sub.active
    assert GUIEvent.OVERLAY_CHANGED.value not in bus.list_events()


def test_handler_may_unsubscribe_during_publish(bus: EventBus):
    calls = []
    subs = {}

    def first(_):
        calls.append("first")
        subs["second"].cancel()

    def second(_):
        calls.append("second")

    subs["first"] = bus.subscribe("evt", first)
    subs["second"] = bus.subscribe("evt", second)
    bus.publish("evt")
    assert calls == ["first"]


def test_clear_removes_everything(bus: EventBus):
    sub = bus.subscribe("a", lambda e: None)
    bus.clear()
    assert bus.list_events() == []
    assert not sub.active
