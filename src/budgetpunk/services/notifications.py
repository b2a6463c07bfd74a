"""Notification center.

Headless counterpart of a toast host: stores recently posted notifications
and publishes each one as `GUIEvent.NOTIFICATION_POSTED`. A Qt toast widget
(or a test) subscribes to the event and renders the payload.
"""

from __future__ import annotations

from collections import deque
from dataclasses import asdict, dataclass
from typing import Deque, List, Optional

from .event_bus import EventBus, GUIEvent

__all__ = ["Notification", "NotificationCenter"]


@dataclass(frozen=True)
class Notification:
    level: str  # "success" | "error"
    title: str
    description: Optional[str] = None
    duration_ms: Optional[int] = None


class NotificationCenter:
    def __init__(self, event_bus: EventBus | None = None, *, capacity: int = 50) -> None:
        self._bus = event_bus
        self._history: Deque[Notification] = deque(maxlen=max(1, capacity))

    def success(
        self, title: str, description: str | None = None, *, duration_ms: int | None = None
    ) -> Notification:
        return self._post(Notification("success", title, description, duration_ms))

    def error(
        self, title: str, description: str | None = None, *, duration_ms: int | None = None
    ) -> Notification:
        return self._post(Notification("error", title, description, duration_ms))

    def _post(self, notification: Notification) -> Notification:
        self._history.append(notification)
        if self._bus is not None:
            self._bus.publish(GUIEvent.NOTIFICATION_POSTED, asdict(notification))
        return notification

    def history(self) -> List[Notification]:
        return list(self._history)

    def last(self) -> Optional[Notification]:
        return self._history[-1] if self._history else None

    def clear(self) -> None:
        self._history.clear()
