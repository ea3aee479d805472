"""
app/schemas package marker.
"""

from app.schemas.dom_analysis import (
    DomAnalysisFailureResponse,
    DomAnalysisRequest,
    DomAnalysisResponse,
    HealthResponse,
)

__all__ = [
    "DomAnalysisFailureResponse",
    "DomAnalysisRequest",
    "DomAnalysisResponse",
    "HealthResponse",
]
