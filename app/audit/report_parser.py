"""
Lighthouse JSON report location and metric extraction.

The ``dom-size`` audit has changed shape across Lighthouse releases:

- older reports put the node count in ``numericValue`` and plain numbers in
  ``details.items[n].value``;
- newer reports wrap item values as ``{"type": "numeric", "value": N}``.

Item order is fixed: item 0 is the total node count, item 1 the maximum
depth, item 2 the maximum child count.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from typing import Any

from app.audit.errors import MalformedReportError
from app.domain.dom_analysis import (
    AuditReportSummary,
    DomMetrics,
    DomRelatedIssue,
    PerformanceMetrics,
)

logger = logging.getLogger(__name__)

DOM_SIZE_AUDIT = "dom-size"
RENDER_BLOCKING_AUDIT = "render-blocking-resources"
UNKNOWN_VERSION = "unknown"

DOM_ISSUE_SCORE_THRESHOLD = 0.9
DOM_ISSUE_KEYWORDS = ("dom", "render", "layout", "paint", "blocking")

_PERFORMANCE_AUDITS = {
    "fcp": "first-contentful-paint",
    "lcp": "largest-contentful-paint",
    "cls": "cumulative-layout-shift",
    "tbt": "total-blocking-time",
    "speed_index": "speed-index",
}


def locate_report(text: str) -> dict[str, Any]:
    """
    Parse the JSON document enclosed by the outermost braces of ``text``.

    Raises:
        MalformedReportError: no braces, invalid JSON, or not a JSON object.
    """

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise MalformedReportError("No JSON object found in audit output.")
    try:
        document = json.loads(text[start : end + 1])
    except ValueError as exc:
        raise MalformedReportError(f"Audit output is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise MalformedReportError("Audit output JSON is not an object.")
    return document


def parse_dom_metrics(report: Mapping[str, Any] | str | None) -> DomMetrics:
    """
    Extract DOM metrics, degrading to all zeros on any malformed input.

    Node count sources, in order: the audit's ``numericValue``, then
    ``details.items[0]``. A later source can only raise the node count.
    """

    if isinstance(report, str):
        try:
            report = locate_report(report)
        except MalformedReportError as exc:
            logger.debug("DOM metrics unavailable: %s", exc)
            return DomMetrics()
    if not isinstance(report, Mapping):
        return DomMetrics()

    dom_audit = _audits(report).get(DOM_SIZE_AUDIT)
    if not isinstance(dom_audit, Mapping):
        return DomMetrics()

    node_count = _numeric_value(dom_audit.get("numericValue")) or 0

    details = dom_audit.get("details")
    items = details.get("items") if isinstance(details, Mapping) else None
    if not isinstance(items, list):
        items = []

    item_values = [_item_value(items, index) for index in range(3)]
    if item_values[0] is not None:
        node_count = max(node_count, item_values[0])

    return DomMetrics(
        node_count=node_count,
        max_depth=item_values[1] or 0,
        max_children=item_values[2] or 0,
    )


def summarize_report(report: Mapping[str, Any]) -> AuditReportSummary:
    """
    Read DOM metrics, version, timings and DOM-related failures from a report.
    """

    audits = _audits(report)
    version = report.get("lighthouseVersion")
    return AuditReportSummary(
        dom_metrics=parse_dom_metrics(report),
        audit_tool_version=str(version) if version else UNKNOWN_VERSION,
        performance_metrics=_performance_metrics(audits),
        dom_related_issues=_dom_related_issues(audits),
        render_blocking_resources=_render_blocking_count(audits),
    )


def _audits(report: Mapping[str, Any]) -> Mapping[str, Any]:
    audits = report.get("audits")
    return audits if isinstance(audits, Mapping) else {}


def _numeric_value(raw: Any) -> int | None:
    """
    Resolve a plain number or a ``{"value": number}`` wrapper to a
    non-negative int. Anything else is ``None``.
    """

    if isinstance(raw, Mapping):
        raw = raw.get("value")
    if not _is_finite_number(raw):
        return None
    return max(0, int(raw))


def _item_value(items: list[Any], index: int) -> int | None:
    if index >= len(items) or not isinstance(items[index], Mapping):
        return None
    return _numeric_value(items[index].get("value"))


def _is_finite_number(raw: Any) -> bool:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return False
    if isinstance(raw, int):
        return True
    return math.isfinite(raw)


def _float_or_zero(raw: Any) -> float:
    if not _is_finite_number(raw):
        return 0.0
    return float(raw)


def _performance_metrics(audits: Mapping[str, Any]) -> PerformanceMetrics:
    values: dict[str, float] = {}
    for name, audit_id in _PERFORMANCE_AUDITS.items():
        audit = audits.get(audit_id)
        values[name] = _float_or_zero(audit.get("numericValue")) if isinstance(audit, Mapping) else 0.0
    return PerformanceMetrics(**values)


def _dom_related_issues(audits: Mapping[str, Any]) -> tuple[DomRelatedIssue, ...]:
    issues: list[DomRelatedIssue] = []
    for audit_id, audit in audits.items():
        if not isinstance(audit, Mapping):
            continue
        score = audit.get("score")
        if not _is_finite_number(score):
            continue
        if score >= DOM_ISSUE_SCORE_THRESHOLD:
            continue
        if not any(keyword in audit_id for keyword in DOM_ISSUE_KEYWORDS):
            continue
        issues.append(
            DomRelatedIssue(
                audit=audit_id,
                title=str(audit.get("title") or audit_id),
                score=float(score),
                description=str(audit.get("description") or "No description available"),
            )
        )
    return tuple(issues)


def _render_blocking_count(audits: Mapping[str, Any]) -> int:
    audit = audits.get(RENDER_BLOCKING_AUDIT)
    if not isinstance(audit, Mapping):
        return 0
    details = audit.get("details")
    items = details.get("items") if isinstance(details, Mapping) else None
    return len(items) if isinstance(items, list) else 0
