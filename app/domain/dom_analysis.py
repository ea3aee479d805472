"""
app/domain/dom_analysis.py

Domain models for Lighthouse DOM analysis.

Every entity here is created and discarded within one analysis request.
Nothing is persisted and nothing is shared between concurrent analyses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class CaptureMethod(str, Enum):
    """
    How the audit report and diagnostics were collected.
    """

    CLI_REAL = "cli_real"
    LIBRARY_FALLBACK = "library_fallback"


class RiskTier(str, Enum):
    """
    Crawlability risk classification derived from the score.
    """

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class RawCapture:
    """
    Raw output of one audit subprocess invocation.
    """

    stdout: bytes
    stderr: bytes
    exit_code: int | None
    timed_out: bool = False

    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class ErrorReport:
    """
    Structured error signals recovered from the audit tool's diagnostic stream.

    ``raw_sample_lines`` and ``resource_timeouts`` are bounded samples.
    ``dom_push_node_failures`` and ``resource_timeout_total`` are exact counts.
    """

    dom_push_node_failures: int = 0
    image_gathering_failures: str | None = None
    resource_timeouts: tuple[str, ...] = ()
    resource_timeout_total: int = 0
    rendering_budget_exceeded: bool = False
    raw_sample_lines: tuple[str, ...] = ()
    capture_method: CaptureMethod = CaptureMethod.CLI_REAL

    @classmethod
    def empty(cls, capture_method: CaptureMethod) -> "ErrorReport":
        """
        Report used when no diagnostic stream was available.
        """

        return cls(capture_method=capture_method)


@dataclass(frozen=True)
class DomMetrics:
    """
    DOM structural metrics extracted from the ``dom-size`` audit.
    """

    node_count: int = 0
    max_depth: int = 0
    max_children: int = 0


@dataclass(frozen=True)
class PenaltyEntry:
    """
    One applied score deduction with a human-readable explanation.
    """

    label: str
    amount: float


@dataclass(frozen=True)
class CrawlabilityAssessment:
    """
    Output of the crawlability scoring model.
    """

    score: int
    tier: RiskTier
    penalties: tuple[PenaltyEntry, ...] = ()


@dataclass(frozen=True)
class PerformanceMetrics:
    """
    Core timing metrics copied from the report (``numericValue``, 0 when absent).
    """

    fcp: float = 0.0
    lcp: float = 0.0
    cls: float = 0.0
    tbt: float = 0.0
    speed_index: float = 0.0


@dataclass(frozen=True)
class DomRelatedIssue:
    """
    A failing audit whose id points at DOM, rendering, layout or paint work.
    """

    audit: str
    title: str
    score: float
    description: str


@dataclass(frozen=True)
class AuditReportSummary:
    """
    Everything the pipeline reads out of one audit report.
    """

    dom_metrics: DomMetrics
    audit_tool_version: str
    performance_metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    dom_related_issues: tuple[DomRelatedIssue, ...] = ()
    render_blocking_resources: int = 0


@dataclass(frozen=True)
class AnalysisResult:
    """
    Terminal artifact of one DOM analysis.
    """

    url: str
    dom_metrics: DomMetrics
    crawlability_score: int
    risk_tier: RiskTier
    penalties: tuple[PenaltyEntry, ...]
    error_report: ErrorReport
    audit_tool_version: str
    performance_metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    dom_related_issues: tuple[DomRelatedIssue, ...] = ()
    render_blocking_resources: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def capture_method(self) -> CaptureMethod:
        return self.error_report.capture_method
