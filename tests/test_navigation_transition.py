import pytest

from budgetpunk.navigation.transition import (
    PAGE_LOADING_MESSAGE,
    NavigationTransitionController,
    TransitionState,
)
from budgetpunk.stores.overlay_store import OverlayScope

C = OverlayScope.CONTENT


@pytest.fixture
def controller(overlay, scheduler):
    ctl = NavigationTransitionController(overlay, scheduler)
    yield ctl
    if not ctl.disposed:
        ctl.dispose()


def _record(overlay):
    events = []
    overlay.subscribe(lambda s: events.append(s.content.active_count))
    return events


def test_shows_after_delay_and_hides_later(controller, overlay, scheduler):
    controller.route_changed("/savings")
    scheduler.advance(99)
    assert not overlay.snapshot(C).visible
    scheduler.advance(1)
    assert overlay.snapshot(C).visible
    assert overlay.snapshot(C).message == PAGE_LOADING_MESSAGE
    assert controller.state is TransitionState.SHOWN
    scheduler.advance(150)
    assert not overlay.snapshot(C).visible
    assert controller.state is TransitionState.IDLE


def test_exactly_one_show_and_one_hide(controller, overlay, scheduler):
    counts = _record(overlay)
    controller.route_changed("/investments")
    scheduler.advance(1000)
    assert counts == [1, 0]


def test_rapid_navigation_debounces(controller, overlay, scheduler):
    counts = _record(overlay)
    controller.route_changed("/savings")
    scheduler.advance(50)
    controller.route_changed("/investments")
    scheduler.advance(50)
    controller.route_changed("/transactions")
    scheduler.advance(99)
    assert counts == []
    scheduler.advance(1000)
    assert counts == [1, 0]
    assert controller.route == "/transactions"


def test_retrigger_after_show_balances_counter(controller, overlay, scheduler):
    controller.route_changed("/savings")
    scheduler.advance(120)
    assert overlay.state.content.active_count == 1
    controller.route_changed("/profile")
    assert overlay.state.content.active_count == 0
    scheduler.advance(100)
    assert overlay.state.content.active_count == 1
    scheduler.advance(1000)
    assert overlay.state.content.active_count == 0


def test_dispose_before_show_never_shows(controller, overlay, scheduler):
    counts = _record(overlay)
    controller.route_changed("/savings")
    scheduler.advance(50)
    controller.dispose()
    scheduler.advance(1000)
    assert counts == []
    assert scheduler.pending_count() == 0


def test_dispose_after_show_hides(controller, overlay, scheduler):
    controller.route_changed("/savings")
    scheduler.advance(100)
    controller.dispose()
    assert not overlay.snapshot(C).visible
    scheduler.advance(1000)
    assert overlay.state.content.active_count == 0


def test_does_not_disturb_other_content_shows(controller, overlay, scheduler):
    overlay.show(C, "Loading accounts")
    controller.route_changed("/dashboard")
    scheduler.advance(1000)
    assert overlay.state.content.active_count == 1
    assert overlay.snapshot(C).visible


def test_disposed_controller_rejects_use(overlay, scheduler):
    with NavigationTransitionController(overlay, scheduler) as ctl:
        ctl.route_changed("/savings")
    assert ctl.disposed
    with pytest.raises(RuntimeError):
        ctl.route_changed("/profile")


def test_hide_delay_must_cover_show_delay(overlay, scheduler):
    with pytest.raises(ValueError):
        NavigationTransitionController(overlay, scheduler, show_delay_ms=300, hide_delay_ms=200)
