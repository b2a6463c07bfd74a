from budgetpunk.services.event_bus import GUIEvent
from budgetpunk.services.notifications import Notification, NotificationCenter


def test_success_and_error_are_recorded_and_published(bus):
    center = NotificationCenter(bus)
    payloads = []
    bus.subscribe(GUIEvent.NOTIFICATION_POSTED, lambda e: payloads.append(e.payload))
    center.success("Saved", "All good", duration_ms=3000)
    center.error("Failed")
    assert center.history() == [
        Notification("success", "Saved", "All good", 3000),
        Notification("error", "Failed", None, None),
    ]
    assert payloads[0]["level"] == "success"
    assert payloads[1]["title"] == "Failed"
    assert center.last().level == "error"


def test_capacity_and_clear():
    center = NotificationCenter(capacity=2)
    for i in range(3):
        center.success(f"n{i}")
    assert [n.title for n in center.history()] == ["n1", "n2"]
    center.clear()
    assert center.history() == []
    assert center.last() is None
