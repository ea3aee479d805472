"""
Lighthouse audit collection, error recovery and report parsing.
"""

from app.audit.error_extractor import extract_error_report
from app.audit.errors import (
    AllStrategiesFailedError,
    AuditCollectionError,
    AuditSpawnError,
    AuditTimeoutError,
    InvalidTargetUrlError,
    LibraryAuditError,
    MalformedReportError,
)
from app.audit.orchestrator import FallbackOrchestrator
from app.audit.process_runner import ProcessRunner
from app.audit.report_parser import locate_report, parse_dom_metrics, summarize_report

__all__ = [
    "AllStrategiesFailedError",
    "AuditCollectionError",
    "AuditSpawnError",
    "AuditTimeoutError",
    "FallbackOrchestrator",
    "InvalidTargetUrlError",
    "LibraryAuditError",
    "MalformedReportError",
    "ProcessRunner",
    "extract_error_report",
    "locate_report",
    "parse_dom_metrics",
    "summarize_report",
]
