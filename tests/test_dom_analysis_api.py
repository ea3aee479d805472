"""
tests/test_dom_analysis_api.py

HTTP contract tests for the DOM analysis endpoints.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.audit.errors import AllStrategiesFailedError, AuditSpawnError, LibraryAuditError
from app.audit.orchestrator import FallbackOrchestrator
from app.audit.strategies import AuditCollection, CollectionStrategy
from app.config import AuditSettings
from app.domain.dom_analysis import (
    AnalysisResult,
    CaptureMethod,
    DomMetrics,
    ErrorReport,
    PenaltyEntry,
    RiskTier,
)
from app.main import create_app
from app.services.dom_analysis_service import DomAnalysisService, normalize_target_url
from risk.base import BaseRiskModel


class _StubService(DomAnalysisService):
    def __init__(self, *, result: AnalysisResult | None = None, error: Exception | None = None) -> None:
        super().__init__(settings=AuditSettings(service_name="Test DOM Service"), orchestrator=object())  # type: ignore[arg-type]
        self._result = result
        self._error = error
        self.urls: list[str | None] = []

    async def analyze(self, url: str | None) -> AnalysisResult:
        self.urls.append(url)
        normalize_target_url(url)
        if self._error is not None:
            raise self._error
        assert self._result is not None
        return self._result


def _result() -> AnalysisResult:
    return AnalysisResult(
        url="https://example.com/",
        dom_metrics=DomMetrics(node_count=2500, max_depth=20, max_children=30),
        crawlability_score=90,
        risk_tier=RiskTier.LOW,
        penalties=(PenaltyEntry(label="Excessive DOM size: 2500 nodes (limit 1500)", amount=10.0),),
        error_report=ErrorReport.empty(CaptureMethod.LIBRARY_FALLBACK),
        audit_tool_version="12.2.1",
    )


def _client(service: DomAnalysisService) -> TestClient:
    return TestClient(create_app(AuditSettings(service_name="Test DOM Service"), analysis_service=service))


@pytest.mark.parametrize("path", ["/", "/health"])
def test_healthcheck(path: str) -> None:
    response = _client(_StubService(result=_result())).get(path)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["service"] == "Test DOM Service"
    assert body["timestamp"]


def test_analysis_success_contract() -> None:
    service = _StubService(result=_result())
    response = _client(service).post("/dom-analysis", json={"url": "https://example.com/"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["url"] == "https://example.com/"
    assert body["dom_metrics"] == {"node_count": 2500, "max_depth": 20, "max_children": 30}
    assert body["crawlability_score"] == 90
    assert body["risk_tier"] == "LOW"
    assert body["penalties"] == [{"label": "Excessive DOM size: 2500 nodes (limit 1500)", "amount": 10.0}]
    assert body["error_report"]["capture_method"] == "library_fallback"
    assert body["error_report"]["raw_sample_lines"] == []
    assert body["audit_tool_version"] == "12.2.1"
    assert body["service"] == "Test DOM Service"
    assert service.urls == ["https://example.com/"]


@pytest.mark.parametrize("payload", [{}, {"url": ""}, {"url": "   "}])
def test_missing_url_is_rejected(payload: dict) -> None:
    response = _client(_StubService(result=_result())).post("/dom-analysis", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"] == "URL is required"


def test_unsupported_scheme_is_rejected() -> None:
    response = _client(_StubService(result=_result())).post("/dom-analysis", json={"url": "file:///etc/passwd"})
    assert response.status_code == 400


def test_all_strategies_failed_returns_500_with_url() -> None:
    error = AllStrategiesFailedError(
        "https://example.com/",
        [
            ("cli", AuditSpawnError("Could not start lighthouse")),
            ("library", LibraryAuditError("PageSpeed request failed with status 429.")),
        ],
    )
    response = _client(_StubService(error=error)).post("/dom-analysis", json={"url": "https://example.com/"})

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["url"] == "https://example.com/"
    assert body["error"] == "PageSpeed request failed with status 429."
    assert body["service"] == "Test DOM Service"


class _ReportStrategy(CollectionStrategy):
    name = "cli"

    def __init__(self, report: dict) -> None:
        self._report = report

    async def collect(self, url: str) -> AuditCollection:
        return AuditCollection(report=self._report, error_report=ErrorReport())


class _BrokenRiskModel(BaseRiskModel):
    def compute(self, dom_metrics, error_report):
        raise ValueError("cannot convert float NaN to integer")


def _real_client(report: dict, *, risk_model: BaseRiskModel | None = None) -> TestClient:
    settings = AuditSettings(service_name="Test DOM Service")
    orchestrator = FallbackOrchestrator(strategies=[_ReportStrategy(report)], risk_model=risk_model)
    service = DomAnalysisService(settings=settings, orchestrator=orchestrator)
    return TestClient(create_app(settings, analysis_service=service))


class TestInternalFailures:
    def test_non_finite_report_values_degrade_to_zero_metrics(self) -> None:
        report = {"audits": {"dom-size": {"details": {"items": [{"value": float("nan")}]}}}}
        response = _real_client(report).post("/dom-analysis", json={"url": "example.com"})

        assert response.status_code == 200
        body = response.json()
        assert body["dom_metrics"] == {"node_count": 0, "max_depth": 0, "max_children": 0}
        assert body["crawlability_score"] == 100
        assert body["url"] == "https://example.com"

    def test_internal_value_error_is_not_reported_as_bad_request(self) -> None:
        client = _real_client({"audits": {}}, risk_model=_BrokenRiskModel())
        response = client.post("/dom-analysis", json={"url": "https://example.com/"})

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["url"] == "https://example.com/"
        assert body["service"] == "Test DOM Service"
        assert "NaN" not in body["error"]
