"""Global constants and environment variable names."""

from __future__ import annotations

from typing import Final

APP_NAME: Final = "Budgetpunk"
ENV_PREFIX: Final = "BUDGETPUNK_"

ENV_DATA_DIR: Final = ENV_PREFIX + "DATA_DIR"
ENV_LOG_LEVEL: Final = ENV_PREFIX + "LOG_LEVEL"
ENV_IDENTITY_BACKEND: Final = ENV_PREFIX + "IDENTITY_BACKEND"
ENV_IDENTITY_API_KEY: Final = ENV_PREFIX + "IDENTITY_API_KEY"
ENV_SHOW_DELAY_MS: Final = ENV_PREFIX + "SHOW_DELAY_MS"
ENV_HIDE_DELAY_MS: Final = ENV_PREFIX + "HIDE_DELAY_MS"

DEFAULT_DATA_DIR: Final = "data"
IDENTITY_BACKENDS: Final = ("memory", "rest")
