import json
from pathlib import Path

import pytest

from budgetpunk.app.config_store import (
    CONFIG_VERSION,
    AppConfig,
    ConfigError,
    apply_env_overrides,
    load_config,
    save_config,
)


def test_load_returns_defaults_when_missing(tmp_path: Path):
    cfg = load_config(tmp_path)
    assert cfg == AppConfig()
    assert cfg.show_delay_ms == 100
    assert cfg.hide_delay_ms == 250


def test_save_and_reload(tmp_path: Path):
    cfg = AppConfig(log_level="DEBUG", identity_backend="rest", identity_api_key="k")
    save_config(cfg, tmp_path)
    assert load_config(tmp_path) == cfg


def test_corrupt_file_graceful_fallback(tmp_path: Path):
    (tmp_path / "app_config.json").write_text("not json", encoding="utf-8")
    assert load_config(tmp_path) == AppConfig()


def test_version_mismatch_resets_but_keeps_data_dir(tmp_path: Path):
    data = {"version": CONFIG_VERSION + 1, "data_dir": "keepme", "log_level": "DEBUG"}
    (tmp_path / "app_config.json").write_text(json.dumps(data), encoding="utf-8")
    cfg = load_config(tmp_path)
    assert cfg.data_dir == "keepme"
    assert cfg.log_level == "INFO"


def test_env_overrides():
    env = {
        "BUDGETPUNK_LOG_LEVEL": "debug",
        "BUDGETPUNK_IDENTITY_BACKEND": "rest",
        "BUDGETPUNK_IDENTITY_API_KEY": "abc",
        "BUDGETPUNK_SHOW_DELAY_MS": "50",
    }
    cfg = apply_env_overrides(AppConfig(), env)
    assert cfg.log_level == "DEBUG"
    assert cfg.identity_backend == "rest"
    assert cfg.identity_api_key == "abc"
    assert cfg.show_delay_ms == 50
    assert apply_env_overrides(cfg, {}) is cfg


def test_env_override_rejects_non_integer():
    with pytest.raises(ConfigError):
        apply_env_overrides(AppConfig(), {"BUDGETPUNK_HIDE_DELAY_MS": "soon"})


@pytest.mark.parametrize(
    "cfg",
    [
        AppConfig(identity_backend="ldap"),
        AppConfig(identity_backend="rest"),
        AppConfig(show_delay_ms=300, hide_delay_ms=100),
    ],
)
def test_validate_rejects_bad_values(cfg):
    with pytest.raises(ConfigError):
        cfg.validate()
