"""
app/config.py

Application-level configuration helpers.

Settings are read from the process environment (plus optional `.env` files)
once at startup and handed to the application as an immutable object.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_PAGESPEED_API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
DEFAULT_CHROME_FLAGS = "--headless --no-sandbox --disable-dev-shm-usage"
DEFAULT_CORS_ORIGINS = ("https://trafficl.vercel.app", "http://localhost:3000")
_VALID_PAGESPEED_STRATEGIES = {"desktop", "mobile"}
DEFAULT_PORT = 3001


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
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


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
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


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_csv_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Read a comma-separated list from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class AuditSettings:
    """
    Runtime settings for the DOM analysis service.
    """

    service_name: str = "Lighthouse DOM Analysis"
    port: int = DEFAULT_PORT

    lighthouse_binary: str = "lighthouse"
    cli_timeout_seconds: float = 120.0
    terminate_grace_seconds: float = 5.0
    chrome_flags: str = DEFAULT_CHROME_FLAGS
    only_categories: str = "performance"

    sample_line_limit: int = 10
    timeout_sample_limit: int = 20

    library_fallback_enabled: bool = True
    pagespeed_api_url: str = DEFAULT_PAGESPEED_API_URL
    pagespeed_api_key: str | None = None
    pagespeed_strategy: str = "desktop"
    pagespeed_timeout_seconds: float = 90.0

    cors_allowed_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS


def load_audit_settings() -> AuditSettings:
    """
    Build settings from environment variables, clamping out-of-range values.
    """

    strategy = _get_str_env("PAGESPEED_STRATEGY", "desktop").lower()
    if strategy not in _VALID_PAGESPEED_STRATEGIES:
        strategy = "desktop"

    port = _get_int_env("PORT", DEFAULT_PORT)
    if not 0 < port < 65536:
        port = DEFAULT_PORT

    return AuditSettings(
        service_name=_get_str_env("SERVICE_NAME", "Lighthouse DOM Analysis"),
        port=port,
        lighthouse_binary=_get_str_env("LIGHTHOUSE_BINARY", "lighthouse"),
        cli_timeout_seconds=max(1.0, _get_float_env("LIGHTHOUSE_TIMEOUT_SECONDS", 120.0)),
        terminate_grace_seconds=max(0.1, _get_float_env("LIGHTHOUSE_TERMINATE_GRACE_SECONDS", 5.0)),
        chrome_flags=_get_str_env("LIGHTHOUSE_CHROME_FLAGS", DEFAULT_CHROME_FLAGS),
        only_categories=_get_str_env("LIGHTHOUSE_ONLY_CATEGORIES", "performance"),
        sample_line_limit=max(1, _get_int_env("AUDIT_SAMPLE_LINE_LIMIT", 10)),
        timeout_sample_limit=max(1, _get_int_env("AUDIT_TIMEOUT_SAMPLE_LIMIT", 20)),
        library_fallback_enabled=_get_bool_env("LIBRARY_FALLBACK_ENABLED", True),
        pagespeed_api_url=_get_str_env("PAGESPEED_API_URL", DEFAULT_PAGESPEED_API_URL),
        pagespeed_api_key=_get_optional_str_env("PAGESPEED_API_KEY"),
        pagespeed_strategy=strategy,
        pagespeed_timeout_seconds=max(1.0, _get_float_env("PAGESPEED_TIMEOUT_SECONDS", 90.0)),
        cors_allowed_origins=_get_csv_env("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS),
    )


@lru_cache(maxsize=1)
def get_audit_settings() -> AuditSettings:
    """
    Return cached settings read from the environment.
    """

    return load_audit_settings()
