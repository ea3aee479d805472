"""
In-process Lighthouse invocation.

The library form of the audit returns a report object with the same
``audits`` shape as the CLI JSON document, but no diagnostic stream.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import requests

from app.audit.errors import LibraryAuditError
from app.config import AuditSettings

logger = logging.getLogger(__name__)


@runtime_checkable
class AuditLibraryClient(Protocol):
    """
    Synchronous audit call returning a Lighthouse report mapping.
    """

    def run_audit(self, url: str) -> dict[str, Any]:
        ...


class PageSpeedLighthouseClient:
    """
    Runs Lighthouse through the PageSpeed Insights v5 API.

    The API response wraps the Lighthouse report under ``lighthouseResult``.
    Calls run on worker threads, so each one opens and closes its own session.
    """

    def __init__(
        self,
        *,
        api_url: str,
        api_key: str | None = None,
        strategy: str = "desktop",
        categories: tuple[str, ...] = ("performance",),
        timeout_seconds: float = 90.0,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self._api_url = api_url
        self._api_key = api_key
        self._strategy = strategy
        self._categories = categories
        self._timeout_seconds = timeout_seconds
        self._session_factory = session_factory

    @classmethod
    def from_settings(cls, settings: AuditSettings) -> "PageSpeedLighthouseClient":
        categories = tuple(
            item.strip().upper().replace("-", "_")
            for item in settings.only_categories.split(",")
            if item.strip()
        )
        return cls(
            api_url=settings.pagespeed_api_url,
            api_key=settings.pagespeed_api_key,
            strategy=settings.pagespeed_strategy,
            categories=categories or ("PERFORMANCE",),
            timeout_seconds=settings.pagespeed_timeout_seconds,
        )

    def run_audit(self, url: str) -> dict[str, Any]:
        """
        Fetch the Lighthouse report for ``url``.

        Raises:
            LibraryAuditError: transport failure, error status, or a payload
                without a ``lighthouseResult`` object.
        """

        params: list[tuple[str, str]] = [("url", url), ("strategy", self._strategy)]
        params.extend(("category", category) for category in self._categories)
        if self._api_key:
            params.append(("key", self._api_key))

        try:
            with self._session_factory() as session:
                response = session.get(
                    self._api_url,
                    params=params,
                    timeout=self._timeout_seconds,
                )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            logger.warning("PageSpeed request failed status=%s url=%s", status_code, url)
            raise LibraryAuditError(f"PageSpeed request failed with status {status_code}.") from exc
        except requests.RequestException as exc:
            logger.warning("PageSpeed request error url=%s error=%s", url, exc)
            raise LibraryAuditError(f"PageSpeed request error: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise LibraryAuditError("PageSpeed response was not valid JSON.") from exc

        report = payload.get("lighthouseResult") if isinstance(payload, dict) else None
        if not isinstance(report, dict):
            raise LibraryAuditError("PageSpeed response has no lighthouseResult object.")
        return report
