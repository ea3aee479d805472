"""
Audit collection strategies, tried in priority order by the orchestrator.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from app.audit.error_extractor import extract_error_report
from app.audit.errors import LibraryAuditError, MalformedReportError
from app.audit.library_client import AuditLibraryClient
from app.audit.logging_utils import log_event
from app.audit.process_runner import ProcessRunner
from app.audit.report_parser import locate_report
from app.config import AuditSettings
from app.domain.dom_analysis import CaptureMethod, ErrorReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditCollection:
    """
    Report and diagnostics produced by one successful strategy.
    """

    report: dict[str, Any]
    error_report: ErrorReport


class CollectionStrategy(ABC):
    """
    One way of obtaining a Lighthouse report for a URL.
    """

    name: str

    @abstractmethod
    async def collect(self, url: str) -> AuditCollection:
        """
        Return the report, or raise an ``AuditCollectionError`` subclass.
        """


def build_cli_args(url: str, settings: AuditSettings) -> list[str]:
    """
    Fixed Lighthouse argument set: JSON report on stdout, headless Chrome.
    """

    return [
        url,
        "--output=json",
        "--output-path=stdout",
        f"--only-categories={settings.only_categories}",
        f"--chrome-flags={settings.chrome_flags}",
    ]


class CliAuditStrategy(CollectionStrategy):
    """
    Runs the Lighthouse CLI and recovers error signals from its stderr.
    """

    name = "cli"

    def __init__(
        self,
        *,
        settings: AuditSettings,
        runner: ProcessRunner | None = None,
    ) -> None:
        self._settings = settings
        self._runner = runner or ProcessRunner(
            terminate_grace_seconds=settings.terminate_grace_seconds
        )

    async def collect(self, url: str) -> AuditCollection:
        log_event(
            logger,
            logging.INFO,
            "audit_cli_started",
            url=url,
            binary=self._settings.lighthouse_binary,
            timeout_seconds=self._settings.cli_timeout_seconds,
        )
        capture = await self._runner.run(
            self._settings.lighthouse_binary,
            build_cli_args(url, self._settings),
            timeout_seconds=self._settings.cli_timeout_seconds,
        )

        try:
            report = locate_report(capture.stdout_text())
        except MalformedReportError as exc:
            log_event(
                logger,
                logging.WARNING,
                "audit_cli_report_malformed",
                url=url,
                exit_code=capture.exit_code,
                stdout_bytes=len(capture.stdout),
                error=str(exc),
            )
            raise

        error_report = extract_error_report(
            capture.stderr_text(),
            capture_method=CaptureMethod.CLI_REAL,
            sample_limit=self._settings.sample_line_limit,
            timeout_sample_limit=self._settings.timeout_sample_limit,
        )
        return AuditCollection(report=report, error_report=error_report)


class LibraryAuditStrategy(CollectionStrategy):
    """
    Calls the in-process audit API; no diagnostic stream is available.
    """

    name = "library"

    def __init__(self, *, client: AuditLibraryClient) -> None:
        self._client = client

    async def collect(self, url: str) -> AuditCollection:
        log_event(logger, logging.INFO, "audit_library_started", url=url)
        report = await asyncio.to_thread(self._client.run_audit, url)
        if not isinstance(report, dict):
            raise LibraryAuditError(
                f"Library audit returned {type(report).__name__}, expected a report object."
            )
        return AuditCollection(
            report=report,
            error_report=ErrorReport.empty(CaptureMethod.LIBRARY_FALLBACK),
        )
