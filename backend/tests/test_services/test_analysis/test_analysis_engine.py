"""Tests for the end-to-end classification run."""

from unittest.mock import patch

import pytest

from tests.mocks.analysis import make_finding, make_manifest
from triage.models.finding import Finding
from triage.services.analysis.engine import AnalysisOutputError, run_analysis
from triage.services.analysis.validation import validate_analysis_output

MODULE = "triage.services.analysis.engine"


class TestRunAnalysis:
    def test_partition_completeness(self, npm_manifest):
        findings = [
            make_finding(cve_id="CVE-1", dependency="lodash", version="4.17.15"),
            make_finding(cve_id="CVE-2", dependency="jest", version="29.7.0"),
            make_finding(cve_id="CVE-3", dependency="axios", version="1.6.0"),
            make_finding(cve_id="CVE-4", dependency="express", version="4.18.2", severity="CRITICAL"),
            make_finding(cve_id="CVE-4", dependency="lodash", version="4.17.21"),
        ]
        result = run_analysis(findings, npm_manifest, project_name="shop")

        assert len(result.false_positives) + len(result.true_vulnerabilities) == len(findings)
        assert result.metadata.total_vulnerabilities_scanned == 5
        assert result.metadata.false_positives_identified == 3
        assert result.metadata.true_vulnerabilities_found == 2
        assert result.summary.false_positive_reasons == {
            "VERSION_MISMATCH": 1,
            "DEV_ONLY": 1,
            "UNUSED_TRANSITIVE": 1,
        }
        assert result.summary.false_positive_rate == 60
        assert result.summary.risk_score == 40
        assert result.summary.requires_immediate_action is True
        assert validate_analysis_output(result) == []

    def test_metadata(self, npm_manifest):
        result = run_analysis([make_finding()], npm_manifest, source_report_name="dependency-check.json")
        assert result.metadata.project_name == "Unknown Project"
        assert result.metadata.tool_version == "1.0.0"
        assert result.metadata.source_report_name == "dependency-check.json"
        assert result.metadata.analysis_timestamp.tzinfo is not None
        assert result.analysis_metadata == result.metadata

    def test_project_name_from_manifest(self):
        manifest = make_manifest(name="storefront")
        assert run_analysis([], manifest).metadata.project_name == "storefront"

    def test_without_manifest_or_call_graph(self):
        findings = [
            make_finding(cve_id="CVE-1", file_path=""),
            make_finding(cve_id="CVE-2", file_path="src/test/fixtures/vuln.js"),
        ]
        result = run_analysis(findings)
        assert [v.cve_id for v in result.true_vulnerabilities] == ["CVE-1"]
        assert result.false_positives[0].reason == "NON_REACHABLE"
        assert result.false_positives[0].confidence.value == "HIGH"
        assert result.summary.false_positive_rate == 50

    def test_empty_run(self):
        result = run_analysis([])
        assert result.false_positives == []
        assert result.true_vulnerabilities == []
        assert result.summary.false_positive_rate == 0
        assert result.summary.risk_score == 0

    def test_invalid_output_raises_with_all_errors(self):
        with patch(f"{MODULE}.validate_analysis_output", return_value=["a", "b"]):
            with pytest.raises(AnalysisOutputError) as exc_info:
                run_analysis([make_finding()])
        assert exc_info.value.errors == ["a", "b"]

    def test_explicit_target_platform(self):
        finding = make_finding(description="Only affects Windows")
        assert run_analysis([finding], target_platform="win32").false_positives == []
        assert run_analysis([finding]).false_positives[0].reason == "ENV_MISMATCH"

    def test_finding_without_dependency_is_classified(self):
        findings = [
            Finding(cveId="CVE-2024-0001"),
            Finding(cveId="CVE-2024-0002", filePath="src/test/x.js"),
        ]
        result = run_analysis(findings)
        assert result.true_vulnerabilities[0].dependency == "Unknown"
        assert result.false_positives[0].dependency == "Unknown"
        assert result.false_positives[0].reason == "NON_REACHABLE"
        assert validate_analysis_output(result) == []
