"""
risk/base.py

Abstract base interface for crawlability risk models.
All risk model implementations must inherit from BaseRiskModel.
"""

from abc import ABC, abstractmethod

from app.domain.dom_analysis import CrawlabilityAssessment, DomMetrics, ErrorReport


class BaseRiskModel(ABC):
    """Abstract base class for crawlability risk models.

    Defines the interface that all risk model implementations
    must follow. Implementations must be deterministic and free
    of I/O so that identical inputs always produce identical output.
    """

    @abstractmethod
    def compute(self, dom_metrics: DomMetrics, error_report: ErrorReport) -> CrawlabilityAssessment:
        """Score a page from its DOM metrics and recovered error signals.

        Args:
            dom_metrics: Structural metrics extracted from the audit report.
            error_report: Error signals recovered from the diagnostic stream.

        Returns:
            A CrawlabilityAssessment holding the 0-100 score, its risk
            tier, and the ordered list of applied penalties.

        Raises:
            NotImplementedError: If the subclass does not implement
                                 this method.
        """
        raise NotImplementedError("Subclasses must implement compute()")
