"""
Exceptions raised while collecting a Lighthouse audit.
"""

from __future__ import annotations

from collections.abc import Sequence

from app.domain.dom_analysis import RawCapture


class AuditCollectionError(RuntimeError):
    """
    Base error for one failed collection strategy.
    """


class AuditSpawnError(AuditCollectionError):
    """
    Raised when the audit subprocess cannot be started.
    """


class AuditTimeoutError(AuditCollectionError):
    """
    Raised when the audit subprocess exceeds its deadline and has been reaped.
    """

    def __init__(self, message: str, *, capture: RawCapture | None = None) -> None:
        super().__init__(message)
        self.capture = capture


class MalformedReportError(AuditCollectionError):
    """
    Raised when no parseable JSON report can be located in the audit output.
    """


class LibraryAuditError(AuditCollectionError):
    """
    Raised when the in-process audit call fails.
    """


class AllStrategiesFailedError(RuntimeError):
    """
    Raised when every collection strategy failed for one analysis.
    """

    def __init__(
        self,
        url: str,
        attempts: Sequence[tuple[str, Exception]],
    ) -> None:
        self.url = url
        self.attempts = tuple(attempts)
        summary = "; ".join(f"{name}: {exc}" for name, exc in self.attempts)
        super().__init__(f"All audit strategies failed for {url}. {summary}".strip())

    @property
    def last_error(self) -> Exception | None:
        if not self.attempts:
            return None
        return self.attempts[-1][1]


class InvalidTargetUrlError(ValueError):
    """
    Raised when the requested page URL is missing or cannot be audited.
    """
