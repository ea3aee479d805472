"""
Recovery of structured error signals from Lighthouse diagnostic output.

Lighthouse reports some gathering problems only as free-text log lines on
stderr, never in the JSON report. The catalog below is matched
case-sensitively against that fixed vocabulary:

- ``DOM.pushNodeByPathToFrontend`` / ``DOM.pushNodesByBackendIdsToFrontend``
  protocol failures: node lookups that failed while collecting element details.
- ``Reached gathering budget of 5s. Skipped extra details for 69/86``:
  the ImageElements gatherer gave up on part of the page's images.
- ``... budget exceeded`` / ``... budget reached``: a rendering budget tripped.
- Timeout lines (``timeout``, ``Timed out``, Chrome's ``net::ERR_TIMED_OUT``...):
  resources or protocol calls that did not answer in time.
- Remaining ``:warn`` / ``:error`` lines are kept as a bounded raw sample.
"""

from __future__ import annotations

import re

from app.domain.dom_analysis import CaptureMethod, ErrorReport

DEFAULT_SAMPLE_LINE_LIMIT = 10
DEFAULT_TIMEOUT_SAMPLE_LIMIT = 20
TIMEOUT_EXCERPT_CHARS = 100

_DOM_PUSH_NODE_PATTERN = re.compile(r"DOM\.pushNodes?By\w+ToFrontend")
_IMAGE_BUDGET_PATTERN = re.compile(r"gathering budget")
_IMAGE_RATIO_PATTERN = re.compile(r"(\d+)\s*/\s*(\d+)")
_RENDER_BUDGET_PATTERN = re.compile(r"budget (?:exceeded|reached)")
_TIMEOUT_PATTERN = re.compile(r"[Tt]imeout|[Tt]imed out|ERR_(?:CONNECTION_)?TIMED_OUT")
_DURATION_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(ms|s)\b")
_WARN_OR_ERROR_PATTERN = re.compile(r":warn|:error|ERR:|Error|WARN")


def extract_error_report(
    diagnostic_text: str,
    *,
    capture_method: CaptureMethod = CaptureMethod.CLI_REAL,
    sample_limit: int = DEFAULT_SAMPLE_LINE_LIMIT,
    timeout_sample_limit: int = DEFAULT_TIMEOUT_SAMPLE_LIMIT,
) -> ErrorReport:
    """
    Scan diagnostic text line by line and build an :class:`ErrorReport`.

    Pure function of its arguments. Every rule is evaluated independently per
    line, so one line may count as a DOM push failure and a timeout at once.
    Samples beyond their limits are dropped silently; counts stay exact.
    """

    dom_push_node_failures = 0
    image_gathering_failures: str | None = None
    rendering_budget_exceeded = False
    resource_timeouts: list[str] = []
    resource_timeout_total = 0
    samples: list[str] = []

    for raw_line in diagnostic_text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        sampled = False

        if _DOM_PUSH_NODE_PATTERN.search(line):
            dom_push_node_failures += 1
            if len(samples) < sample_limit:
                samples.append(line)
            sampled = True

        image_budget_line = bool(_IMAGE_BUDGET_PATTERN.search(line))
        if image_budget_line and image_gathering_failures is None:
            ratio = _IMAGE_RATIO_PATTERN.search(line)
            if ratio:
                image_gathering_failures = (
                    f"{ratio.group(1)}/{ratio.group(2)} images skipped - gathering budget exceeded"
                )

        if _RENDER_BUDGET_PATTERN.search(line):
            rendering_budget_exceeded = True

        if not image_budget_line and _TIMEOUT_PATTERN.search(line):
            resource_timeout_total += 1
            if len(resource_timeouts) < timeout_sample_limit:
                resource_timeouts.append(_describe_timeout(line))

        if not sampled and _WARN_OR_ERROR_PATTERN.search(line):
            if len(samples) < sample_limit:
                samples.append(line)

    return ErrorReport(
        dom_push_node_failures=dom_push_node_failures,
        image_gathering_failures=image_gathering_failures,
        resource_timeouts=tuple(resource_timeouts),
        resource_timeout_total=resource_timeout_total,
        rendering_budget_exceeded=rendering_budget_exceeded,
        raw_sample_lines=tuple(samples),
        capture_method=capture_method,
    )


def _describe_timeout(line: str) -> str:
    duration = _DURATION_PATTERN.search(line)
    if duration:
        return f"Timeout: {duration.group(1)}{duration.group(2)}"
    return f"Timeout: {line[:TIMEOUT_EXCERPT_CHARS]}"
