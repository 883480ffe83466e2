"""Tests for summary statistics and result partitioning."""

from triage.models.classification import DevOnly, FalsePositive, TrueVulnerability
from triage.models.finding import Confidence
from triage.schemas.analysis import FalsePositiveOut, TrueVulnerabilityOut
from triage.services.analysis.partition import partition_results
from triage.services.analysis.stats import (
    build_severity_breakdown,
    build_summary,
    calculate_false_positive_rate,
    calculate_risk_score,
)


def _vuln(severity="HIGH", cve_id="CVE-1", **kwargs):
    return TrueVulnerabilityOut(cve_id=cve_id, dependency="lodash", severity=severity, **kwargs)


def _fp(reason="DEV_ONLY", cve_id="CVE-1"):
    return FalsePositiveOut(
        cve_id=cve_id, dependency="jest", reason=reason, details="", confidence="HIGH"
    )


class TestFalsePositiveRate:
    def test_empty_run(self):
        assert calculate_false_positive_rate(0, 0) == 0

    def test_rounds_to_whole_percent(self):
        assert calculate_false_positive_rate(1, 2) == 33
        assert calculate_false_positive_rate(2, 1) == 67

    def test_half_rounds_up(self):
        assert calculate_false_positive_rate(1, 7) == 13  # 12.5
        assert calculate_false_positive_rate(1, 1) == 50

    def test_all_false_positives(self):
        assert calculate_false_positive_rate(4, 0) == 100


class TestRiskScore:
    def test_weights(self):
        vulns = [_vuln("CRITICAL"), _vuln("HIGH"), _vuln("MEDIUM"), _vuln("LOW")]
        assert calculate_risk_score(vulns) == 25 + 15 + 5 + 1

    def test_unknown_severity_counts_one(self):
        assert calculate_risk_score([_vuln("UNKNOWN")]) == 1

    def test_capped_at_100(self):
        assert calculate_risk_score([_vuln("CRITICAL") for _ in range(5)]) == 100

    def test_no_vulnerabilities(self):
        assert calculate_risk_score([]) == 0


class TestSeverityBreakdown:
    def test_counts_known_levels_only(self):
        breakdown = build_severity_breakdown(
            [_vuln("CRITICAL"), _vuln("HIGH"), _vuln("HIGH"), _vuln("UNKNOWN")]
        )
        assert breakdown.model_dump() == {"critical": 1, "high": 2, "medium": 0, "low": 0}


class TestBuildSummary:
    def test_summary(self):
        summary = build_summary(
            [_fp("DEV_ONLY"), _fp("DEV_ONLY"), _fp("NON_REACHABLE")],
            [_vuln("MEDIUM")],
        )
        assert summary.total_scanned == 4
        assert summary.false_positive_rate == 75
        assert summary.false_positive_reasons == {"DEV_ONLY": 2, "NON_REACHABLE": 1}
        assert summary.risk_score == 5
        assert summary.requires_immediate_action is False

    def test_requires_immediate_action(self):
        assert build_summary([], [_vuln("HIGH")]).requires_immediate_action is True
        assert build_summary([], [_vuln("CRITICAL")]).requires_immediate_action is True
        assert build_summary([], [_vuln("LOW")]).requires_immediate_action is False

    def test_empty(self):
        summary = build_summary([], [])
        assert summary.total_scanned == 0
        assert summary.false_positive_rate == 0
        assert summary.risk_score == 0


class TestPartitionResults:
    def test_splits_and_formats(self):
        results = [
            FalsePositive(
                cve_id="CVE-1",
                dependency="jest@29.7.0",
                reason=DevOnly(package="jest"),
                confidence=Confidence.HIGH,
            ),
            TrueVulnerability(
                cve_id="CVE-2",
                dependency="lodash",
                severity="HIGH",
                references=["r1", "r2", "r3", "r4", "r5"],
            ),
        ]
        false_positives, vulns = partition_results(results)

        assert len(false_positives) == 1
        assert false_positives[0].reason == "DEV_ONLY"
        assert false_positives[0].details.startswith("jest is only listed")
        assert len(vulns) == 1
        assert vulns[0].references == ["r1", "r2", "r3"]

    def test_keeps_input_order(self):
        results = [
            TrueVulnerability(cve_id=f"CVE-{i}", dependency="lodash", severity="LOW") for i in range(4)
        ]
        _, vulns = partition_results(results)
        assert [v.cve_id for v in vulns] == ["CVE-0", "CVE-1", "CVE-2", "CVE-3"]
