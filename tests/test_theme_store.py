import pytest

from budgetpunk.services.storage import MemoryStorage
from budgetpunk.services.system_theme import StaticColorSchemeSignal
from budgetpunk.stores.theme_store import THEME_STORAGE_KEY, Theme, ThemeStore


class FailingStorage(MemoryStorage):
    def set(self, key, value):
        raise OSError("read-only")


@pytest.fixture
def system():
    return StaticColorSchemeSignal(matches=False)


def test_persisted_preference_wins(system, bus):
    system.set_matches(True)
    store = ThemeStore(MemoryStorage({THEME_STORAGE_KEY: "light"}), system, bus)
    store.initialize()
    assert store.theme is Theme.LIGHT
    system.set_matches(False)
    system.set_matches(True)
    assert store.theme is Theme.LIGHT


def test_system_preference_used_when_nothing_persisted(system, bus):
    system.set_matches(True)
    store = ThemeStore(MemoryStorage(), system, bus)
    store.initialize()
    assert store.theme is Theme.DARK


def test_default_without_system_signal(bus):
    store = ThemeStore(MemoryStorage(), None, bus, default=Theme.DARK)
    store.initialize()
    assert store.theme is Theme.DARK
    assert not store.listening


def test_invalid_persisted_value_is_ignored(system, bus, caplog):
    store = ThemeStore(MemoryStorage({THEME_STORAGE_KEY: "purple"}), system, bus)
    store.initialize()
    assert store.theme is Theme.LIGHT
    assert "purple" in caplog.text


def test_follows_system_until_user_chooses(system, bus):
    storage = MemoryStorage()
    store = ThemeStore(storage, system, bus)
    store.initialize()
    system.set_matches(True)
    assert store.theme is Theme.DARK
    store.toggle()
    assert store.theme is Theme.LIGHT
    assert storage.get(THEME_STORAGE_KEY) == "light"
    system.set_matches(False)
    system.set_matches(True)
    assert store.theme is Theme.LIGHT


def test_toggle_applies_and_publishes(system, bus):
    applied, published = [], []
    store = ThemeStore(MemoryStorage(), system, bus, apply=applied.append)
    store.subscribe(published.append)
    store.initialize()
    assert store.toggle() is Theme.DARK
    assert store.toggle() is Theme.LIGHT
    assert applied == [Theme.LIGHT, Theme.DARK, Theme.LIGHT]
    assert published == [Theme.DARK, Theme.LIGHT]


def test_reinitialize_keeps_single_listener(system, bus):
    store = ThemeStore(MemoryStorage(), system, bus)
    store.initialize()
    store.initialize()
    assert system.listener_count == 1
    store.dispose()
    assert system.listener_count == 0
    assert not store.listening


def test_toggle_storage_failure_keeps_new_theme(system, bus):
    store = ThemeStore(FailingStorage(), system, bus)
    store.initialize()
    assert store.toggle() is Theme.DARK
    assert store.theme is Theme.DARK


def test_unsaved_toggle_survives_system_changes(system, bus):
    store = ThemeStore(FailingStorage(), system, bus)
    store.initialize()
    store.toggle()
    system.set_matches(True)
    system.set_matches(False)
    assert store.theme is Theme.DARK
    store.initialize()
    assert store.theme is Theme.DARK


def test_theme_helpers():
    assert Theme.LIGHT.opposite is Theme.DARK
    assert Theme.from_matches(True) is Theme.DARK
    assert Theme.from_matches(False) is Theme.LIGHT
