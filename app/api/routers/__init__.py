"""
app/api/routers package marker.
"""

from app.api.routers.dom_analysis import router as dom_analysis_router

__all__ = [
    "dom_analysis_router",
]
