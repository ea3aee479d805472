"""
risk/scoring.py

Crawlability risk model implementing BaseRiskModel.
Deducts capped penalties from a perfect score of 100 based on DOM
structure and the error signals recovered from the audit diagnostics.
"""

from app.domain.dom_analysis import (
    CrawlabilityAssessment,
    DomMetrics,
    ErrorReport,
    PenaltyEntry,
    RiskTier,
)
from risk.base import BaseRiskModel
from risk.normalizer import RiskNormalizer


# ---------------------------------------------------------------------------
# Risk tier classification: thresholds are inclusive lower bounds
# ---------------------------------------------------------------------------

_TIER_THRESHOLDS: tuple[tuple[int, RiskTier], ...] = (
    (80, RiskTier.LOW),
    (60, RiskTier.MEDIUM),
)


def classify(score: int) -> RiskTier:
    """Map an integer score in [0, 100] to a risk tier.

    Args:
        score: Integer crawlability score.

    Returns:
        LOW for scores >= 80, MEDIUM for scores >= 60, otherwise HIGH.
    """
    for threshold, tier in _TIER_THRESHOLDS:
        if score >= threshold:
            return tier
    return RiskTier.HIGH


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------

class CrawlabilityRiskModel(BaseRiskModel):
    """Penalty-based crawlability scoring for a single page load.

    Penalties are evaluated in a fixed order, each independently capped,
    and recorded with the raw measurement that triggered them. The final
    score is 100 minus the penalty total, clamped to [0, 100] and rounded
    half-up.
    """

    MAX_SCORE: float = 100.0

    # DOM structure limits and per-penalty caps
    NODE_COUNT_LIMIT: int = 1500
    NODE_COUNT_DIVISOR: float = 100.0
    NODE_COUNT_CAP: float = 30.0

    DEPTH_LIMIT: int = 32
    DEPTH_MULTIPLIER: float = 2.0
    DEPTH_CAP: float = 20.0

    CHILDREN_LIMIT: int = 60
    CHILDREN_CAP: float = 25.0

    # Diagnostic-stream penalties
    DOM_PUSH_FAILURE_DIVISOR: float = 10.0
    DOM_PUSH_FAILURE_CAP: float = 25.0
    IMAGE_GATHERING_PENALTY: float = 15.0
    RENDERING_BUDGET_PENALTY: float = 10.0
    RESOURCE_TIMEOUT_EACH: float = 5.0
    RESOURCE_TIMEOUT_CAP: float = 20.0

    def __init__(self) -> None:
        """Initialize the model with a shared RiskNormalizer instance."""
        self._normalizer = RiskNormalizer()

    def compute(self, dom_metrics: DomMetrics, error_report: ErrorReport) -> CrawlabilityAssessment:
        """Compute the crawlability score, tier and penalty breakdown.

        Penalty rules (applied only when the condition holds):
            - node_count > 1500: (node_count - 1500) / 100, cap 30
            - max_depth > 32: (max_depth - 32) * 2, cap 20
            - max_children > 60: max_children - 60, cap 25
            - dom_push_node_failures > 0: failures / 10, cap 25
            - image_gathering_failures present: 15
            - rendering_budget_exceeded: 10
            - resource_timeouts non-empty: 5 per entry, cap 20

        Args:
            dom_metrics: DOM node count, depth and widest sibling set.
            error_report: Signals recovered from the diagnostic stream.

        Returns:
            A CrawlabilityAssessment. Identical inputs always yield an
            identical assessment.
        """
        n = self._normalizer
        penalties: list[PenaltyEntry] = []

        if dom_metrics.node_count > self.NODE_COUNT_LIMIT:
            amount = n.cap(
                (dom_metrics.node_count - self.NODE_COUNT_LIMIT) / self.NODE_COUNT_DIVISOR,
                self.NODE_COUNT_CAP,
            )
            penalties.append(
                PenaltyEntry(
                    label=f"Excessive DOM size: {dom_metrics.node_count} nodes (limit {self.NODE_COUNT_LIMIT})",
                    amount=amount,
                )
            )

        if dom_metrics.max_depth > self.DEPTH_LIMIT:
            amount = n.cap(
                (dom_metrics.max_depth - self.DEPTH_LIMIT) * self.DEPTH_MULTIPLIER,
                self.DEPTH_CAP,
            )
            penalties.append(
                PenaltyEntry(
                    label=f"Deep DOM nesting: depth {dom_metrics.max_depth} (limit {self.DEPTH_LIMIT})",
                    amount=amount,
                )
            )

        if dom_metrics.max_children > self.CHILDREN_LIMIT:
            amount = n.cap(
                float(dom_metrics.max_children - self.CHILDREN_LIMIT),
                self.CHILDREN_CAP,
            )
            penalties.append(
                PenaltyEntry(
                    label=f"Wide DOM: {dom_metrics.max_children} children on one parent (limit {self.CHILDREN_LIMIT})",
                    amount=amount,
                )
            )

        if error_report.dom_push_node_failures > 0:
            amount = n.cap(
                error_report.dom_push_node_failures / self.DOM_PUSH_FAILURE_DIVISOR,
                self.DOM_PUSH_FAILURE_CAP,
            )
            penalties.append(
                PenaltyEntry(
                    label=f"DOM traversal failures: {error_report.dom_push_node_failures} pushNode errors",
                    amount=amount,
                )
            )

        if error_report.image_gathering_failures:
            penalties.append(
                PenaltyEntry(
                    label=f"Image gathering incomplete: {error_report.image_gathering_failures}",
                    amount=self.IMAGE_GATHERING_PENALTY,
                )
            )

        if error_report.rendering_budget_exceeded:
            penalties.append(
                PenaltyEntry(
                    label="Rendering budget exceeded",
                    amount=self.RENDERING_BUDGET_PENALTY,
                )
            )

        if error_report.resource_timeouts:
            amount = n.cap(
                len(error_report.resource_timeouts) * self.RESOURCE_TIMEOUT_EACH,
                self.RESOURCE_TIMEOUT_CAP,
            )
            penalties.append(
                PenaltyEntry(
                    label=f"Resource timeouts: {len(error_report.resource_timeouts)} recorded",
                    amount=amount,
                )
            )

        total_penalty = sum(entry.amount for entry in penalties)
        score = n.round_half_up(n.clamp(self.MAX_SCORE - total_penalty, 0.0, self.MAX_SCORE))

        return CrawlabilityAssessment(
            score=score,
            tier=classify(score),
            penalties=tuple(penalties),
        )
