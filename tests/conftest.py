# Shared fixtures. Qt tests use the real pytest-qt 'qtbot' fixture and run on
# the offscreen platform unless the environment says otherwise.

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from budgetpunk.services.event_bus import EventBus  # noqa: E402
from budgetpunk.services.notifications import NotificationCenter  # noqa: E402
from budgetpunk.services.scheduler import ManualScheduler  # noqa: E402
from budgetpunk.services.storage import MemoryStorage  # noqa: E402
from budgetpunk.stores.overlay_store import OverlayStore  # noqa: E402


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def overlay(bus) -> OverlayStore:
    return OverlayStore(bus)


@pytest.fixture
def notifications(bus) -> NotificationCenter:
    return NotificationCenter(bus)
