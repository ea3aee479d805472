"""
app/domain package marker.
"""

from app.domain.dom_analysis import (
    AnalysisResult,
    AuditReportSummary,
    CaptureMethod,
    CrawlabilityAssessment,
    DomMetrics,
    DomRelatedIssue,
    ErrorReport,
    PenaltyEntry,
    PerformanceMetrics,
    RawCapture,
    RiskTier,
)

__all__ = [
    "AnalysisResult",
    "AuditReportSummary",
    "CaptureMethod",
    "CrawlabilityAssessment",
    "DomMetrics",
    "DomRelatedIssue",
    "ErrorReport",
    "PenaltyEntry",
    "PerformanceMetrics",
    "RawCapture",
    "RiskTier",
]
