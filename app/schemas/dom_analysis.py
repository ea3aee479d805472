"""
app/schemas/dom_analysis.py

Request and response schemas for DOM analysis endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.dom_analysis import AnalysisResult, CaptureMethod, RiskTier


class DomAnalysisRequest(BaseModel):
    """
    API request body for one page analysis.
    """

    url: str | None = Field(default=None, description="Page URL to audit.")


class DomMetricsResponse(BaseModel):
    node_count: int = Field(..., ge=0)
    max_depth: int = Field(..., ge=0)
    max_children: int = Field(..., ge=0)


class PenaltyResponse(BaseModel):
    label: str
    amount: float = Field(..., ge=0)


class ErrorReportResponse(BaseModel):
    """
    Diagnostic-stream findings; samples are already bounded.
    """

    dom_push_node_failures: int = Field(..., ge=0)
    image_gathering_failures: str | None = None
    resource_timeouts: list[str] = Field(default_factory=list)
    resource_timeout_total: int = Field(..., ge=0)
    rendering_budget_exceeded: bool
    raw_sample_lines: list[str] = Field(default_factory=list)
    capture_method: CaptureMethod


class PerformanceMetricsResponse(BaseModel):
    fcp: float
    lcp: float
    cls: float
    tbt: float
    speed_index: float


class DomRelatedIssueResponse(BaseModel):
    audit: str
    title: str
    score: float
    description: str


class DomAnalysisResponse(BaseModel):
    """
    API response model for a completed analysis.
    """

    success: bool = True
    url: str
    service: str
    dom_metrics: DomMetricsResponse
    crawlability_score: int = Field(..., ge=0, le=100)
    risk_tier: RiskTier
    penalties: list[PenaltyResponse] = Field(default_factory=list)
    error_report: ErrorReportResponse
    audit_tool_version: str
    performance_metrics: PerformanceMetricsResponse
    dom_related_issues: list[DomRelatedIssueResponse] = Field(default_factory=list)
    render_blocking_resources: int = Field(..., ge=0)
    timestamp: datetime

    @classmethod
    def from_result(cls, result: AnalysisResult, *, service: str) -> "DomAnalysisResponse":
        metrics = result.dom_metrics
        errors = result.error_report
        performance = result.performance_metrics
        return cls(
            url=result.url,
            service=service,
            dom_metrics=DomMetricsResponse(
                node_count=metrics.node_count,
                max_depth=metrics.max_depth,
                max_children=metrics.max_children,
            ),
            crawlability_score=result.crawlability_score,
            risk_tier=result.risk_tier,
            penalties=[
                PenaltyResponse(label=entry.label, amount=entry.amount)
                for entry in result.penalties
            ],
            error_report=ErrorReportResponse(
                dom_push_node_failures=errors.dom_push_node_failures,
                image_gathering_failures=errors.image_gathering_failures,
                resource_timeouts=list(errors.resource_timeouts),
                resource_timeout_total=errors.resource_timeout_total,
                rendering_budget_exceeded=errors.rendering_budget_exceeded,
                raw_sample_lines=list(errors.raw_sample_lines),
                capture_method=errors.capture_method,
            ),
            audit_tool_version=result.audit_tool_version,
            performance_metrics=PerformanceMetricsResponse(
                fcp=performance.fcp,
                lcp=performance.lcp,
                cls=performance.cls,
                tbt=performance.tbt,
                speed_index=performance.speed_index,
            ),
            dom_related_issues=[
                DomRelatedIssueResponse(
                    audit=issue.audit,
                    title=issue.title,
                    score=issue.score,
                    description=issue.description,
                )
                for issue in result.dom_related_issues
            ],
            render_blocking_resources=result.render_blocking_resources,
            timestamp=result.timestamp,
        )


class DomAnalysisFailureResponse(BaseModel):
    """
    API response model for an analysis where every strategy failed.
    """

    success: bool = False
    url: str
    service: str
    error: str


class HealthResponse(BaseModel):
    status: str = "OK"
    service: str
    timestamp: datetime
