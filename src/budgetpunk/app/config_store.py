"""Application configuration persistence.

Runtime knobs for the shell (data directory, log level, identity backend,
transition delays) stored as versioned JSON next to the local storage file.

Design principles:
- Pure logic (no Qt import) so it can be unit-tested headless.
- Explicit schema with version field to enable future migrations.
- Graceful fallback: corrupt or incompatible files produce defaults instead of raising.
- Environment variables override file values (see `apply_env_overrides`).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from budgetpunk.navigation.transition import DEFAULT_HIDE_DELAY_MS, DEFAULT_SHOW_DELAY_MS

from . import settings

__all__ = [
    "AppConfig",
    "ConfigError",
    "load_config",
    "save_config",
    "apply_env_overrides",
    "CONFIG_VERSION",
]

_logger = logging.getLogger(__name__)

CONFIG_VERSION = 1  # Increment when structure changes
DEFAULT_FILENAME = "app_config.json"


class ConfigError(RuntimeError):
    """Raised when a configuration value is invalid."""


@dataclass(frozen=True)
class AppConfig:
    """Serializable shell configuration.

    Attributes
    ----------
    version: Schema version for migration handling.
    data_dir: Directory holding local storage and this file.
    log_level: Root logging level name.
    identity_backend: ``memory`` (simulated) or ``rest``.
    identity_api_key: API key for the REST backend.
    show_delay_ms / hide_delay_ms: Navigation transition timings.
    """

    version: int = CONFIG_VERSION
    data_dir: str = settings.DEFAULT_DATA_DIR
    log_level: str = "INFO"
    identity_backend: str = "memory"
    identity_api_key: Optional[str] = None
    show_delay_ms: int = DEFAULT_SHOW_DELAY_MS
    hide_delay_ms: int = DEFAULT_HIDE_DELAY_MS

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AppConfig":
        return cls(
            version=int(data.get("version", CONFIG_VERSION)),
            data_dir=str(data.get("data_dir", settings.DEFAULT_DATA_DIR)),
            log_level=str(data.get("log_level", "INFO")).upper(),
            identity_backend=str(data.get("identity_backend", "memory")),
            identity_api_key=data.get("identity_api_key"),
            show_delay_ms=int(data.get("show_delay_ms", DEFAULT_SHOW_DELAY_MS)),
            hide_delay_ms=int(data.get("hide_delay_ms", DEFAULT_HIDE_DELAY_MS)),
        )

    def validate(self) -> "AppConfig":
        if self.identity_backend not in settings.IDENTITY_BACKENDS:
            raise ConfigError(f"Unknown identity backend: {self.identity_backend!r}")
        if self.identity_backend == "rest" and not self.identity_api_key:
            raise ConfigError("The rest identity backend requires an API key")
        if self.show_delay_ms < 0 or self.hide_delay_ms < self.show_delay_ms:
            raise ConfigError("Transition delays must satisfy 0 <= show <= hide")
        return self


def _resolve_path(base_dir: str | Path | None) -> Path:
    base = Path(base_dir) if base_dir else Path.cwd()
    return base / DEFAULT_FILENAME


def load_config(base_dir: str | Path | None = None) -> AppConfig:
    """Load config from ``base_dir`` (defaults to CWD); never raises on bad files."""
    path = _resolve_path(base_dir)
    if not path.exists():
        return AppConfig()
    try:
        cfg = AppConfig.from_dict(json.loads(path.read_text(encoding="utf-8")))
    except (ValueError, TypeError, AttributeError, OSError):
        _logger.warning("Config file %s unreadable; using defaults", path)
        return AppConfig()
    if cfg.version != CONFIG_VERSION:
        # Keep the data location, reset everything else.
        return AppConfig(data_dir=cfg.data_dir)
    return cfg


def save_config(cfg: AppConfig, base_dir: str | Path | None = None) -> Path:
    """Persist config; returns the path written."""
    path = _resolve_path(base_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(cfg.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)
    return path


def apply_env_overrides(cfg: AppConfig, environ: Mapping[str, str] | None = None) -> AppConfig:
    env = os.environ if environ is None else environ
    changes: Dict[str, Any] = {}
    if env.get(settings.ENV_DATA_DIR):
        changes["data_dir"] = env[settings.ENV_DATA_DIR]
    if env.get(settings.ENV_LOG_LEVEL):
        changes["log_level"] = env[settings.ENV_LOG_LEVEL].upper()
    if env.get(settings.ENV_IDENTITY_BACKEND):
        changes["identity_backend"] = env[settings.ENV_IDENTITY_BACKEND]
    if env.get(settings.ENV_IDENTITY_API_KEY):
        changes["identity_api_key"] = env[settings.ENV_IDENTITY_API_KEY]
    for key, name in (
        ("show_delay_ms", settings.ENV_SHOW_DELAY_MS),
        ("hide_delay_ms", settings.ENV_HIDE_DELAY_MS),
    ):
        raw = env.get(name)
        if raw:
            try:
                changes[key] = int(raw)
            except ValueError as exc:
                raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    return replace(cfg, **changes) if changes else cfg
