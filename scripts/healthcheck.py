"""
Container health check for the DOM analysis API.
"""

from __future__ import annotations

import os

import requests

from app.config import get_audit_settings


def build_healthcheck_url() -> str:
    path = os.getenv("HEALTHCHECK_PATH", "/health")
    return f"http://127.0.0.1:{get_audit_settings().port}{path}"


def main() -> int:
    try:
        response = requests.get(build_healthcheck_url(), timeout=2)
        payload = response.json()
    except (requests.RequestException, ValueError):
        return 1
    if not response.ok:
        return 1
    return 0 if isinstance(payload, dict) and payload.get("status") == "OK" else 1


if __name__ == "__main__":
    raise SystemExit(main())
