import asyncio

import pytest

from budgetpunk.bindings.fetch_tracker import DATA_LOADING_MESSAGE, FetchTracker, QueryLoadingBinder
from budgetpunk.stores.overlay_store import OverlayScope

G = OverlayScope.GLOBAL


@pytest.fixture
def tracker(bus):
    return FetchTracker(bus)


def test_binder_holds_single_show_while_requests_in_flight(tracker, overlay, bus):
    binder = QueryLoadingBinder(tracker, overlay, bus)
    tracker.begin()
    tracker.begin()
    assert overlay.state.global_.active_count == 1
    assert overlay.snapshot(G).message == DATA_LOADING_MESSAGE
    tracker.end()
    assert overlay.snapshot(G).visible
    tracker.end()
    assert not overlay.snapshot(G).visible
    assert not binder.shown


def test_track_context_managers(tracker, overlay, bus):
    QueryLoadingBinder(tracker, overlay, bus)
    with pytest.raises(RuntimeError):
        with tracker.track():
            assert tracker.in_flight == 1
            raise RuntimeError("request failed")
    assert tracker.in_flight == 0

    async def fetch():
        async with tracker.track_async():
            assert overlay.snapshot(G).visible
            await asyncio.sleep(0)

    asyncio.run(fetch())
    assert not overlay.snapshot(G).visible


def test_end_without_begin_is_ignored(tracker):
    tracker.end()
    assert tracker.in_flight == 0


def test_binder_coexists_with_other_global_shows(tracker, overlay, bus):
    QueryLoadingBinder(tracker, overlay, bus)
    overlay.show(G, "Saving")
    with tracker.track():
        assert overlay.state.global_.active_count == 2
    assert overlay.state.global_.active_count == 1


def test_dispose_releases_show(tracker, overlay, bus):
    tracker.begin()
    binder = QueryLoadingBinder(tracker, overlay, bus)
    assert binder.shown
    binder.dispose()
    assert overlay.state.global_.active_count == 0
    tracker.end()
    tracker.begin()
    assert overlay.state.global_.active_count == 0
