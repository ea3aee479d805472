"""
app/api/routers/dom_analysis.py

Lighthouse DOM analysis endpoints.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from app.api.dependencies import get_dom_analysis_service
from app.audit.errors import AllStrategiesFailedError, InvalidTargetUrlError
from app.schemas.dom_analysis import (
    DomAnalysisFailureResponse,
    DomAnalysisRequest,
    DomAnalysisResponse,
    HealthResponse,
)
from app.services.dom_analysis_service import DomAnalysisService, normalize_target_url

router = APIRouter(tags=["dom-analysis"])


@router.get("/", response_model=HealthResponse)
@router.get("/health", response_model=HealthResponse)
def healthcheck(
    analysis_service: DomAnalysisService = Depends(get_dom_analysis_service),
) -> HealthResponse:
    return HealthResponse(
        service=analysis_service.service_name,
        timestamp=datetime.now(timezone.utc),
    )


@router.post(
    "/dom-analysis",
    response_model=DomAnalysisResponse,
    responses={500: {"model": DomAnalysisFailureResponse}},
)
async def analyze_dom(
    payload: DomAnalysisRequest,
    analysis_service: DomAnalysisService = Depends(get_dom_analysis_service),
) -> DomAnalysisResponse | JSONResponse:
    """
    Audit one page and return its DOM metrics and crawlability score.
    """

    target = payload.url
    try:
        target = normalize_target_url(payload.url)
        result = await analysis_service.analyze(target)
    except InvalidTargetUrlError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except AllStrategiesFailedError as exc:
        return _failure_response(
            url=exc.url,
            service=analysis_service.service_name,
            error=str(exc.last_error or exc),
        )
    except Exception:  # noqa: BLE001
        return _failure_response(
            url=target or "",
            service=analysis_service.service_name,
            error="DOM analysis failed; see server logs for details.",
        )

    return DomAnalysisResponse.from_result(result, service=analysis_service.service_name)


def _failure_response(*, url: str, service: str, error: str) -> JSONResponse:
    failure = DomAnalysisFailureResponse(url=url, service=service, error=error)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=failure.model_dump(mode="json"),
    )
