import pytest

from budgetpunk.navigation.routes import (
    DEFAULT_ROUTE,
    LOGIN_ROUTE,
    RouteOutcome,
    Router,
    resolve_route,
)
from budgetpunk.services.event_bus import GUIEvent
from budgetpunk.services.identity import Identity
from budgetpunk.stores.session_store import SessionState

USER = Identity(uid="u1", email="a@example.com")
BOOTING = SessionState()
ANON = SessionState(identity=None, bootstrapping=False)
SIGNED_IN = SessionState(identity=USER, bootstrapping=False)


def test_bootstrapping_blocks_routing():
    for path in ("/login", "/dashboard", "/anything"):
        assert resolve_route(path, BOOTING).outcome is RouteOutcome.BOOTSTRAP


@pytest.mark.parametrize("path", ["/login", "/signup", "/reset-password"])
def test_public_routes_always_render(path):
    for session in (ANON, SIGNED_IN):
        decision = resolve_route(path, session)
        assert decision.outcome is RouteOutcome.RENDER
        assert decision.path == path
        assert not decision.protected


@pytest.mark.parametrize("path", ["/dashboard", "/savings", "/investments", "/transactions", "/profile"])
def test_protected_routes_require_identity(path):
    assert resolve_route(path, ANON).path == LOGIN_ROUTE
    assert resolve_route(path, ANON).outcome is RouteOutcome.REDIRECT
    decision = resolve_route(path, SIGNED_IN)
    assert decision.outcome is RouteOutcome.RENDER and decision.protected


@pytest.mark.parametrize("path", ["/", "", "/nope", "/dashboard/extra"])
def test_root_and_unknown_redirect_to_dashboard(path):
    decision = resolve_route(path, SIGNED_IN)
    assert decision.outcome is RouteOutcome.REDIRECT
    assert decision.path == DEFAULT_ROUTE


def test_paths_are_normalised():
    assert resolve_route("/savings/?tab=2#top", SIGNED_IN).path == "/savings"
    assert resolve_route("login", ANON).path == "/login"


def test_router_follows_redirects_and_publishes(bus):
    router = Router(bus)
    changes = []
    bus.subscribe(GUIEvent.ROUTE_CHANGED, lambda e: changes.append(e.payload))
    decision = router.navigate("/", ANON)
    assert decision.path == LOGIN_ROUTE
    assert router.current == LOGIN_ROUTE
    router.navigate("/login", ANON)
    assert changes == [{"from": None, "to": LOGIN_ROUTE}]


def test_router_ignores_requests_while_bootstrapping(bus):
    router = Router(bus)
    assert router.navigate("/dashboard", BOOTING).outcome is RouteOutcome.BOOTSTRAP
    assert router.current is None


def test_router_feeds_transitions_for_protected_pages(bus):
    class Spy:
        def __init__(self):
            self.routes = []

        def route_changed(self, route):
            self.routes.append(route)

    router = Router(bus)
    spy = Spy()
    router.attach_transitions(spy)
    router.navigate("/dashboard", SIGNED_IN)
    router.navigate("/dashboard", SIGNED_IN)
    router.navigate("/savings", SIGNED_IN)
    router.navigate("/login", SIGNED_IN)
    assert spy.routes == ["/dashboard", "/savings"]
