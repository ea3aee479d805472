"""
app/api/dependencies.py

Shared FastAPI dependencies.
"""

from __future__ import annotations

from fastapi import Request

from app.services.dom_analysis_service import DomAnalysisService


def get_dom_analysis_service(request: Request) -> DomAnalysisService:
    """
    Return the service built by the application factory.
    """

    return request.app.state.dom_analysis_service
