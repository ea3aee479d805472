"""
app/services/dom_analysis_service.py

Service orchestration for Lighthouse DOM analysis.
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse, urlunparse

from app.audit.errors import AllStrategiesFailedError, InvalidTargetUrlError
from app.audit.library_client import AuditLibraryClient, PageSpeedLighthouseClient
from app.audit.logging_utils import log_event
from app.audit.orchestrator import FallbackOrchestrator
from app.audit.strategies import CliAuditStrategy, CollectionStrategy, LibraryAuditStrategy
from app.config import AuditSettings
from app.domain.dom_analysis import AnalysisResult

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = {"http", "https"}


def normalize_target_url(raw: str | None) -> str:
    """
    Validate and normalize the page URL handed to the audit tool.

    A missing scheme defaults to https. Only http(s) URLs with a host are
    accepted, so the value can never be read as a command-line option.
    """

    value = (raw or "").strip()
    if not value:
        raise InvalidTargetUrlError("URL is required")
    parsed = urlparse(value)
    if not parsed.scheme:
        value = f"https://{value}"
        parsed = urlparse(value)
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES:
        raise InvalidTargetUrlError(f"Unsupported URL scheme: {parsed.scheme}")
    if not parsed.netloc:
        raise InvalidTargetUrlError(f"URL has no host: {raw}")
    return urlunparse(parsed)


def build_orchestrator(
    settings: AuditSettings,
    *,
    library_client: AuditLibraryClient | None = None,
) -> FallbackOrchestrator:
    """
    Wire the CLI strategy first and, when enabled, the library fallback.
    """

    strategies: list[CollectionStrategy] = [CliAuditStrategy(settings=settings)]
    if settings.library_fallback_enabled:
        client = library_client or PageSpeedLighthouseClient.from_settings(settings)
        strategies.append(LibraryAuditStrategy(client=client))
    return FallbackOrchestrator(strategies=strategies)


class DomAnalysisService:
    """
    Runs one DOM analysis per request and logs its outcome.
    """

    def __init__(
        self,
        *,
        settings: AuditSettings,
        orchestrator: FallbackOrchestrator | None = None,
    ) -> None:
        self._settings = settings
        self._orchestrator = orchestrator or build_orchestrator(settings)

    @property
    def service_name(self) -> str:
        return self._settings.service_name

    async def analyze(self, url: str | None) -> AnalysisResult:
        """
        Analyze one page.

        Raises:
            InvalidTargetUrlError: the URL is missing or unusable.
            AllStrategiesFailedError: no strategy produced a report.
        """

        target = normalize_target_url(url)
        log_event(logger, logging.INFO, "dom_analysis_started", url=target)
        try:
            result = await self._orchestrator.analyze(target)
        except AllStrategiesFailedError as exc:
            log_event(
                logger,
                logging.ERROR,
                "dom_analysis_failed",
                url=target,
                attempts=[name for name, _ in exc.attempts],
                error=str(exc.last_error),
            )
            raise
        except Exception:
            logger.exception("DOM analysis crashed url=%r", target)
            raise

        log_event(
            logger,
            logging.INFO,
            "dom_analysis_completed",
            url=target,
            capture_method=result.capture_method.value,
            crawlability_score=result.crawlability_score,
            risk_tier=result.risk_tier.value,
            dom_nodes=result.dom_metrics.node_count,
            penalties=len(result.penalties),
        )
        return result
