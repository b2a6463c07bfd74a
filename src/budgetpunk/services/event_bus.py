"""EventBus core.

Synchronous publish/subscribe channel used by every reactive store in the
shell. A store commits a new state snapshot and publishes it here; views,
bindings and tests subscribe to the channel they care about.

Goals:
 - Decouple stores from their observers (no Qt dependency)
 - A failing handler is logged and recorded; the remaining handlers still run
 - One-shot (once) subscriptions
 - Subscription handles that can be cancelled more than once
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from threading import RLock
from time import perf_counter
from typing import Any, Dict, List, Protocol, Tuple

__all__ = [
    "GUIEvent",
    "Event",
    "EventBus",
    "EventHandler",
    "Subscription",
]

_logger = logging.getLogger(__name__)


class GUIEvent(str, Enum):  # str subclass keeps payload dumps readable
    SESSION_CHANGED = "session_changed"
    OVERLAY_CHANGED = "overlay_changed"
    THEME_CHANGED = "theme_changed"
    ROUTE_CHANGED = "route_changed"
    NOTIFICATION_POSTED = "notification_posted"
    LOG_RECORD_ADDED = "log_record_added"
    FETCH_COUNT_CHANGED = "fetch_count_changed"


def _channel(name: str | GUIEvent) -> str:
    return name.value if isinstance(name, GUIEvent) else str(name)


@dataclass
class Event:
    name: str  # GUIEvent value or a custom channel name
    payload: Any
    timestamp: float


class EventHandler(Protocol):
    def __call__(self, event: Event) -> None: ...  # pragma: no cover - structural


@dataclass
class Subscription:
    event: str
    handler: EventHandler
    once: bool
    active: bool = True
    bus: "EventBus | None" = None

    def cancel(self) -> None:
        if self.bus is not None and self.active:
            self.bus.unsubscribe(self)
        self.active = False


HandlerFailure = Tuple[Event, BaseException]


class EventBus:
    """Synchronous event dispatcher.

    The channel table is guarded by a re-entrant lock. Dispatch iterates over a
    copy taken under the lock and calls handlers outside it, so a handler may
    subscribe or cancel (itself or others) while an event is being delivered.
    A handler cancelled mid-dispatch is skipped.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._channels: Dict[str, List[Subscription]] = {}
        self._failures: List[HandlerFailure] = []

    # Subscriptions ------------------------------------------------------
    def subscribe(
        self, name: str | GUIEvent, handler: EventHandler, *, once: bool = False
    ) -> Subscription:
        sub = Subscription(event=_channel(name), handler=handler, once=once, bus=self)
        with self._lock:
            self._channels.setdefault(sub.event, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            remaining = [s for s in self._channels.get(sub.event, ()) if s is not sub]
            if remaining:
                self._channels[sub.event] = remaining
            else:
                self._channels.pop(sub.event, None)
        sub.active = False

    def clear(self) -> None:
        """Drop every subscription and recorded failure."""
        with self._lock:
            for subs in self._channels.values():
                for sub in subs:
                    sub.active = False
            self._channels = {}
            self._failures = []

    # Dispatch -----------------------------------------------------------
    def publish(self, name: str | GUIEvent, payload: Any = None) -> Event:
        channel = _channel(name)
        event = Event(name=channel, payload=payload, timestamp=perf_counter())
        with self._lock:
            targets = tuple(self._channels.get(channel, ()))
        for sub in targets:
            if not sub.active:
                continue
            if sub.once:
                self.unsubscribe(sub)
            try:
                sub.handler(event)
            except Exception as exc:  # noqa: BLE001 - isolate handler failures
                _logger.exception("Handler for %r failed", channel)
                with self._lock:
                    self._failures.append((event, exc))
        return event

    # Introspection ------------------------------------------------------
    def subscriber_count(self, name: str | GUIEvent) -> int:
        with self._lock:
            return len(self._channels.get(_channel(name), ()))

    def list_events(self) -> list[str]:
        with self._lock:
            return sorted(self._channels)

    @property
    def errors(self) -> list[HandlerFailure]:
        """Handler failures recorded since construction or the last `clear()`."""
        with self._lock:
            return list(self._failures)
