from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import AuditSettings, get_audit_settings
from app.services.dom_analysis_service import DomAnalysisService


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(
    settings: AuditSettings | None = None,
    *,
    analysis_service: DomAnalysisService | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Settings are resolved once here and passed down explicitly; nothing
    downstream reads the environment.
    """

    _configure_logging()
    resolved = settings or get_audit_settings()

    application = FastAPI(
        title="Lighthouse DOM Analysis API",
        version="1.0.0",
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(resolved.cors_allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.state.settings = resolved
    application.state.dom_analysis_service = analysis_service or DomAnalysisService(settings=resolved)

    from app.api.routers import dom_analysis_router

    application.include_router(dom_analysis_router)

    logging.getLogger(__name__).info(
        "%s configured: port=%s lighthouse=%s timeout=%ss library_fallback=%s",
        resolved.service_name,
        resolved.port,
        resolved.lighthouse_binary,
        resolved.cli_timeout_seconds,
        resolved.library_fallback_enabled,
    )
    return application


app = create_app()
