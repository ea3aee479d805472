"""
app/services package marker.
"""

from app.services.dom_analysis_service import (
    DomAnalysisService,
    build_orchestrator,
    normalize_target_url,
)

__all__ = [
    "DomAnalysisService",
    "build_orchestrator",
    "normalize_target_url",
]
