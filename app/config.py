"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

_ALLOWED_APP_MODES = {"cloud", "local"}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _require_app_mode() -> str:
    """
    Read and validate APP_MODE from the environment.

    APP_MODE must be set explicitly so a deployment never silently runs with
    the development identity fallback.
    """

    _load_env_once()
    raw = os.getenv("APP_MODE")
    if raw is None:
        raise RuntimeError(
            f"APP_MODE must be explicitly set. Allowed values: {sorted(_ALLOWED_APP_MODES)}."
        )
    mode = raw.strip().lower()
    if mode not in _ALLOWED_APP_MODES:
        raise RuntimeError(
            f"APP_MODE '{raw.strip()}' is not valid. "
            f"Allowed values: {sorted(_ALLOWED_APP_MODES)}."
        )
    return mode


@dataclass(frozen=True)
class AppSettings:
    """
    Top-level application mode settings.
    """

    mode: str
    log_level: str = "INFO"


@dataclass(frozen=True)
class CSVUploadSettings:
    """
    Runtime settings for CSV metric uploads.
    """

    max_returned_errors: int = 10
    log_row_errors: bool = True
    max_upload_bytes: int = 50 * 1024 * 1024


@dataclass(frozen=True)
class DevAuthSettings:
    """
    Owner identity fallback used when no authenticated identity is supplied.
    """

    fallback_enabled: bool = True
    fallback_user_id: str = "test_user_123"


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """
    Return cached application settings.

    Raises RuntimeError if APP_MODE is missing or invalid.
    """

    return AppSettings(
        mode=_require_app_mode(),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_csv_upload_settings() -> CSVUploadSettings:
    """
    Return cached CSV upload settings from environment variables.
    """

    return CSVUploadSettings(
        max_returned_errors=max(1, _get_int_env("CSV_UPLOAD_MAX_RETURNED_ERRORS", 10)),
        log_row_errors=_get_bool_env("CSV_UPLOAD_LOG_ROW_ERRORS", True),
        max_upload_bytes=max(1, _get_int_env("UPLOAD_MAX_BYTES", 50 * 1024 * 1024)),
    )


@lru_cache(maxsize=1)
def get_dev_auth_settings() -> DevAuthSettings:
    """
    Return cached identity fallback settings.
    """

    return DevAuthSettings(
        fallback_enabled=_get_bool_env("DEV_AUTH_FALLBACK_ENABLED", True),
        fallback_user_id=_get_str_env("DEV_FALLBACK_USER_ID", "test_user_123"),
    )
