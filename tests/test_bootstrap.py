import pytest

from budgetpunk.app.bootstrap import create_app
from budgetpunk.app.config_store import AppConfig, ConfigError
from budgetpunk.services.event_bus import EventBus
from budgetpunk.services.identity import InMemoryIdentityProvider
from budgetpunk.services.rest_identity import RestIdentityProvider
from budgetpunk.services.scheduler import ManualScheduler
from budgetpunk.services.storage import JsonFileStorage
from budgetpunk.stores.overlay_store import OverlayScope, OverlayStore


@pytest.fixture
def ctx(tmp_path):
    context = create_app(headless=True, config=AppConfig(), data_dir=tmp_path)
    yield context
    context.dispose()


def test_headless_bootstrap_registers_services(ctx, tmp_path):
    assert ctx.qt_app is None
    assert ctx.headless
    assert isinstance(ctx.services.get("event_bus"), EventBus)
    assert ctx.services.get_typed("overlay_store", OverlayStore) is ctx.overlay
    assert ctx.services.origin_of("session_store") == "bootstrap"
    assert isinstance(ctx.scheduler, ManualScheduler)
    assert isinstance(ctx.identity, InMemoryIdentityProvider)
    assert isinstance(ctx.storage, JsonFileStorage)
    assert ctx.storage.path.parent == tmp_path
    assert ctx.timing.stopped
    assert ctx.metadata["app_config"]["identity_backend"] == "memory"


def test_each_bootstrap_is_isolated(tmp_path):
    a = create_app(headless=True, config=AppConfig(), data_dir=tmp_path)
    b = create_app(headless=True, config=AppConfig(), data_dir=tmp_path)
    try:
        assert a.event_bus is not b.event_bus
        a.overlay.show(OverlayScope.GLOBAL)
        assert not b.overlay.global_indicator.visible
    finally:
        a.dispose()
        b.dispose()


def test_stores_share_the_context_bus(ctx):
    for store in (ctx.overlay, ctx.session, ctx.theme):
        assert store.event_bus is ctx.event_bus


def test_rest_backend_selected_from_config(tmp_path):
    cfg = AppConfig(identity_backend="rest", identity_api_key="key")
    context = create_app(headless=True, config=cfg, data_dir=tmp_path)
    try:
        assert isinstance(context.identity, RestIdentityProvider)
    finally:
        context.dispose()


def test_invalid_config_rejected(tmp_path):
    with pytest.raises(ConfigError):
        create_app(headless=True, config=AppConfig(identity_backend="rest"), data_dir=tmp_path)


def test_config_loaded_from_data_dir_with_env(tmp_path, monkeypatch):
    monkeypatch.setenv("BUDGETPUNK_SHOW_DELAY_MS", "10")
    context = create_app(headless=True, data_dir=tmp_path)
    try:
        assert context.config.show_delay_ms == 10
    finally:
        context.dispose()
