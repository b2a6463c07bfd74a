"""One-shot timer scheduling.

The navigation transition policy and the simulated identity backend need
delayed callbacks that can always be cancelled. Three interchangeable
schedulers share one small protocol:

 - `QtTimerScheduler`  single-shot `QTimer`s on the GUI event loop
 - `AsyncioScheduler`  `loop.call_later` for a headless asyncio runtime
 - `ManualScheduler`   virtual clock advanced explicitly (tests, demos)

Every `TimerHandle.cancel()` is a no-op once the timer has fired or was
already cancelled.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol

__all__ = [
    "TimerHandle",
    "Scheduler",
    "ManualScheduler",
    "AsyncioScheduler",
    "QtTimerScheduler",
]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...  # pragma: no cover - structural

    @property
    def pending(self) -> bool: ...  # pragma: no cover - structural


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], Any]) -> TimerHandle: ...  # pragma: no cover


# ----------------------------------------------------------------------
# Manual (virtual clock)
# ----------------------------------------------------------------------
@dataclass(order=True)
class _ManualTimer:
    due_ms: int
    seq: int
    callback: Callable[[], Any] = field(compare=False)
    fired: bool = field(default=False, compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not (self.fired or self.cancelled)


class ManualScheduler:
    """Deterministic scheduler driven by `advance()`.

    Timers due at the same instant fire in scheduling order. Callbacks may
    schedule or cancel other timers while the clock is advancing.
    """

    def __init__(self) -> None:
        self._now_ms = 0
        self._queue: List[_ManualTimer] = []
        self._seq = itertools.count()

    @property
    def now_ms(self) -> int:
        return self._now_ms

    def call_later(self, delay_ms: int, callback: Callable[[], Any]) -> _ManualTimer:
        timer = _ManualTimer(self._now_ms + max(0, int(delay_ms)), next(self._seq), callback)
        heapq.heappush(self._queue, timer)
        return timer

    def advance(self, ms: int) -> int:
        """Move the clock forward, firing due timers; returns how many fired."""
        target = self._now_ms + max(0, int(ms))
        fired = 0
        while self._queue and self._queue[0].due_ms <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now_ms = timer.due_ms
            timer.fired = True
            timer.callback()
            fired += 1
        self._now_ms = target
        return fired

    def pending_count(self) -> int:
        return sum(1 for t in self._queue if t.pending)


# ----------------------------------------------------------------------
# asyncio
# ----------------------------------------------------------------------
class _AsyncioTimer:
    def __init__(self, callback: Callable[[], Any]) -> None:
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._fired = False

    def _run(self) -> None:
        self._fired = True
        self._callback()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()

    @property
    def pending(self) -> bool:
        return not self._fired and self._handle is not None and not self._handle.cancelled()


class AsyncioScheduler:
    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], Any]) -> _AsyncioTimer:
        loop = self._loop or asyncio.get_running_loop()
        timer = _AsyncioTimer(callback)
        timer._handle = loop.call_later(max(0, delay_ms) / 1000.0, timer._run)
        return timer


# ----------------------------------------------------------------------
# Qt
# ----------------------------------------------------------------------
class _QtTimer:
    def __init__(self, timer: Any) -> None:
        self._timer = timer
        self._fired = False
        self._cancelled = False

    def _on_timeout(self, callback: Callable[[], Any]) -> None:
        self._fired = True
        self._timer.deleteLater()
        callback()

    def cancel(self) -> None:
        if self._fired or self._cancelled:
            return
        self._cancelled = True
        self._timer.stop()
        self._timer.deleteLater()

    @property
    def pending(self) -> bool:
        return not (self._fired or self._cancelled)


class QtTimerScheduler:
    """Single-shot `QTimer`s parented to an optional QObject.

    PyQt6 is imported lazily so headless code paths never load Qt.
    """

    def __init__(self, parent: Any = None) -> None:
        from PyQt6.QtCore import QTimer  # local import keeps headless startup light

        self._timer_cls = QTimer
        self._parent = parent

    def call_later(self, delay_ms: int, callback: Callable[[], Any]) -> _QtTimer:
        qt_timer = self._timer_cls(self._parent)
        qt_timer.setSingleShot(True)
        qt_timer.setInterval(max(0, int(delay_ms)))
        handle = _QtTimer(qt_timer)
        qt_timer.timeout.connect(lambda: handle._on_timeout(callback))  # type: ignore[attr-defined]
        qt_timer.start()
        return handle
