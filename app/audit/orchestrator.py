"""
Fallback orchestration across audit collection strategies.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from app.audit.errors import AllStrategiesFailedError
from app.audit.logging_utils import log_event
from app.audit.report_parser import summarize_report
from app.audit.strategies import AuditCollection, CollectionStrategy
from app.domain.dom_analysis import AnalysisResult
from risk.base import BaseRiskModel
from risk.scoring import CrawlabilityRiskModel

logger = logging.getLogger(__name__)


class FallbackOrchestrator:
    """
    Tries each strategy once, in order, and scores the first success.

    With the default wiring the order is the Lighthouse CLI (full error
    capture) followed by the in-process library call (no diagnostics).
    Holds no per-request state, so one instance can serve concurrent
    analyses.
    """

    def __init__(
        self,
        *,
        strategies: Sequence[CollectionStrategy],
        risk_model: BaseRiskModel | None = None,
    ) -> None:
        if not strategies:
            raise ValueError("At least one collection strategy is required.")
        self._strategies = tuple(strategies)
        self._risk_model = risk_model or CrawlabilityRiskModel()

    @property
    def strategy_names(self) -> tuple[str, ...]:
        return tuple(strategy.name for strategy in self._strategies)

    async def collect(self, url: str) -> AuditCollection:
        """
        Return the first successful collection.

        Raises:
            AllStrategiesFailedError: every strategy failed; the most recent
                error is chained as ``__cause__``.
        """

        attempts: list[tuple[str, Exception]] = []
        for strategy in self._strategies:
            try:
                collection = await strategy.collect(url)
            except Exception as exc:
                attempts.append((strategy.name, exc))
                log_event(
                    logger,
                    logging.WARNING,
                    "audit_strategy_failed",
                    url=url,
                    strategy=strategy.name,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                continue

            log_event(
                logger,
                logging.INFO,
                "audit_strategy_succeeded",
                url=url,
                strategy=strategy.name,
                capture_method=collection.error_report.capture_method.value,
                failed_attempts=len(attempts),
            )
            return collection

        raise AllStrategiesFailedError(url, attempts) from attempts[-1][1]

    async def analyze(self, url: str) -> AnalysisResult:
        """
        Collect a report, extract its metrics and score it.
        """

        collection = await self.collect(url)
        summary = summarize_report(collection.report)
        assessment = self._risk_model.compute(summary.dom_metrics, collection.error_report)

        return AnalysisResult(
            url=url,
            dom_metrics=summary.dom_metrics,
            crawlability_score=assessment.score,
            risk_tier=assessment.tier,
            penalties=assessment.penalties,
            error_report=collection.error_report,
            audit_tool_version=summary.audit_tool_version,
            performance_metrics=summary.performance_metrics,
            dom_related_issues=summary.dom_related_issues,
            render_blocking_resources=summary.render_blocking_resources,
            timestamp=datetime.now(timezone.utc),
        )
