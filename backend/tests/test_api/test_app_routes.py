"""Route wiring tests against the FastAPI app."""

import pytest
from fastapi.testclient import TestClient

from triage.api.deps import get_report_writer
from triage.main import app
from triage.services.report_writer import ReportWriter


@pytest.fixture
def client():
    app.dependency_overrides[get_report_writer] = lambda: ReportWriter(api_key="")
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestRoutes:
    def test_liveness(self, client):
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    def test_readiness_reports_fallback_mode(self, client):
        response = client.get("/health/ready")
        assert response.json()["components"]["report_writer"] == "fallback_only"

    def test_analyze_accepts_camel_case_and_answers_snake_case(self, client):
        response = client.post(
            "/api/v1/analyze",
            json={"findings": [{"cveId": "CVE-1", "dependency": "lodash", "filePath": "test/a.js"}]},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        fp = body["analysis"]["false_positives"][0]
        assert fp["cve_id"] == "CVE-1"
        assert fp["reason"] == "NON_REACHABLE"
        assert body["analysis"]["analysis_metadata"] == body["analysis"]["metadata"]

    def test_invalid_payload_is_422(self, client):
        response = client.post("/api/v1/analyze", json={"findings": [{"dependency": "lodash"}]})
        assert response.status_code == 422

    def test_empty_cve_id_is_422(self, client):
        response = client.post(
            "/api/v1/analyze", json={"findings": [{"cveId": "", "dependency": "lodash"}]}
        )
        assert response.status_code == 422

    def test_finding_without_dependency_is_analyzed(self, client):
        response = client.post("/api/v1/analyze", json={"findings": [{"cveId": "CVE-1"}]})
        assert response.status_code == 200
        vuln = response.json()["analysis"]["true_vulnerabilities"][0]
        assert vuln["dependency"] == "Unknown"

    def test_full_analysis_degrades_without_api_key(self, client):
        response = client.post(
            "/api/v1/full-analysis",
            json={"findings": [{"cveId": "CVE-1", "dependency": "lodash", "severity": "HIGH"}]},
        )
        assert response.status_code == 200
        assert response.json()["report"]["degraded"] is True

    def test_metrics(self, client):
        client.post("/api/v1/analyze", json={"findings": []})
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "analysis_runs_total" in response.text
