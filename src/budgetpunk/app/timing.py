"""Startup phase timing.

Collects named phase durations while the shell is wired so slow phases
(config I/O, storage reads, Qt start-up) show up in the debug log and in
`AppContext.metadata`.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from time import perf_counter
from typing import Iterator, List, Optional

__all__ = ["PhaseTiming", "StartupTimer"]


@dataclass(frozen=True)
class PhaseTiming:
    name: str
    start: float
    end: float

    @property
    def duration(self) -> float:  # seconds
        return self.end - self.start


class StartupTimer:
    """Records phases measured with `phase()` until `stop()` is called.

    Phases cannot nest; starting one while another is open is an error.
    """

    def __init__(self) -> None:
        self._started_at = perf_counter()
        self._stopped_at: Optional[float] = None
        self._phases: List[PhaseTiming] = []
        self._open: Optional[str] = None

    @property
    def stopped(self) -> bool:
        return self._stopped_at is not None

    @contextmanager
    def phase(self, name: str) -> Iterator[None]:
        if self.stopped:
            raise RuntimeError("StartupTimer already stopped")
        if self._open is not None:
            raise RuntimeError(f"Cannot start phase {name!r} while {self._open!r} is open")
        self._open = name
        start = perf_counter()
        try:
            yield
        finally:
            # Failed phases are still recorded.
            self._phases.append(PhaseTiming(name, start, perf_counter()))
            self._open = None

    def stop(self) -> None:
        if self._stopped_at is None:
            self._stopped_at = perf_counter()

    @property
    def phases(self) -> List[PhaseTiming]:
        return list(self._phases)

    @property
    def total_duration(self) -> float:
        end = self._stopped_at if self._stopped_at is not None else perf_counter()
        return end - self._started_at

    def as_dict(self) -> dict:
        return {
            "total_duration": self.total_duration,
            "phases": [{"name": p.name, "duration": p.duration} for p in self._phases],
        }
