"""
tests/test_config.py

Environment parsing tests for AuditSettings.
"""

from __future__ import annotations

import pytest

from app.config import DEFAULT_CORS_ORIGINS, AuditSettings, load_audit_settings

_ENV_VARS = (
    "SERVICE_NAME",
    "PORT",
    "LIGHTHOUSE_BINARY",
    "LIGHTHOUSE_TIMEOUT_SECONDS",
    "LIGHTHOUSE_TERMINATE_GRACE_SECONDS",
    "LIGHTHOUSE_CHROME_FLAGS",
    "LIGHTHOUSE_ONLY_CATEGORIES",
    "AUDIT_SAMPLE_LINE_LIMIT",
    "AUDIT_TIMEOUT_SAMPLE_LIMIT",
    "LIBRARY_FALLBACK_ENABLED",
    "PAGESPEED_API_URL",
    "PAGESPEED_API_KEY",
    "PAGESPEED_STRATEGY",
    "PAGESPEED_TIMEOUT_SECONDS",
    "CORS_ALLOWED_ORIGINS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = load_audit_settings()
    assert settings == AuditSettings()
    assert settings.cli_timeout_seconds == 120.0
    assert settings.sample_line_limit == 10
    assert settings.cors_allowed_origins == DEFAULT_CORS_ORIGINS
    assert settings.port == 3001


def test_settings_are_frozen() -> None:
    settings = AuditSettings()
    with pytest.raises((AttributeError, TypeError)):
        settings.cli_timeout_seconds = 1.0  # type: ignore[misc]


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIGHTHOUSE_BINARY", "/usr/local/bin/lighthouse")
    monkeypatch.setenv("LIGHTHOUSE_TIMEOUT_SECONDS", "180")
    monkeypatch.setenv("LIBRARY_FALLBACK_ENABLED", "false")
    monkeypatch.setenv("PAGESPEED_API_KEY", "  key-123  ")
    monkeypatch.setenv("PAGESPEED_STRATEGY", "MOBILE")
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://a.example, https://b.example,")
    monkeypatch.setenv("PORT", "8080")

    settings = load_audit_settings()

    assert settings.lighthouse_binary == "/usr/local/bin/lighthouse"
    assert settings.cli_timeout_seconds == 180.0
    assert settings.library_fallback_enabled is False
    assert settings.pagespeed_api_key == "key-123"
    assert settings.pagespeed_strategy == "mobile"
    assert settings.cors_allowed_origins == ("https://a.example", "https://b.example")
    assert settings.port == 8080


def test_invalid_values_fall_back_or_clamp(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIGHTHOUSE_TIMEOUT_SECONDS", "soon")
    monkeypatch.setenv("LIGHTHOUSE_TERMINATE_GRACE_SECONDS", "-3")
    monkeypatch.setenv("AUDIT_SAMPLE_LINE_LIMIT", "0")
    monkeypatch.setenv("PAGESPEED_STRATEGY", "tablet")
    monkeypatch.setenv("SERVICE_NAME", "   ")

    settings = load_audit_settings()

    assert settings.cli_timeout_seconds == 120.0
    assert settings.terminate_grace_seconds == 0.1
    assert settings.sample_line_limit == 1
    assert settings.pagespeed_strategy == "desktop"
    assert settings.service_name == "Lighthouse DOM Analysis"


@pytest.mark.parametrize("value", ["0", "70000", "-1", "http"])
def test_out_of_range_port_falls_back(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("PORT", value)
    assert load_audit_settings().port == 3001
