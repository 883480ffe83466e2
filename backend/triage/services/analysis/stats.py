"""
Summary statistics for an analysis run.

Everything here is recomputed from the partitioned results on each run.
"""

import math
from typing import Dict, List, Sequence

from triage.core.constants import (
    RISK_SCORE_CAP,
    RISK_SCORE_DEFAULT_WEIGHT,
    RISK_SCORE_WEIGHTS,
    SEVERITY_BREAKDOWN_LEVELS,
)
from triage.models.summary import AnalysisSummary, SeverityBreakdown
from triage.schemas.analysis import FalsePositiveOut, TrueVulnerabilityOut


def calculate_false_positive_rate(false_positive_count: int, true_count: int) -> int:
    """
    Percentage of findings judged false positives, rounded half up.

    Returns 0 for an empty run.
    """
    total = false_positive_count + true_count
    if total == 0:
        return 0
    # round() would round half to even (12.5 -> 12)
    return int(math.floor(false_positive_count / total * 100 + 0.5))


def calculate_risk_score(vulnerabilities: Sequence[TrueVulnerabilityOut]) -> int:
    """
    Weighted severity sum, capped at 100.

    CRITICAL=25, HIGH=15, MEDIUM=5, LOW=1, anything else counts as 1.
    """
    if not vulnerabilities:
        return 0

    score = sum(
        RISK_SCORE_WEIGHTS.get(vuln.severity.value, RISK_SCORE_DEFAULT_WEIGHT)
        for vuln in vulnerabilities
    )
    return min(RISK_SCORE_CAP, score)


def build_severity_breakdown(vulnerabilities: Sequence[TrueVulnerabilityOut]) -> SeverityBreakdown:
    counts: Dict[str, int] = {level: 0 for level in SEVERITY_BREAKDOWN_LEVELS}
    for vuln in vulnerabilities:
        level = vuln.severity.value.lower()
        # UNKNOWN and anything unrecognized is left out of the histogram
        if level in counts:
            counts[level] += 1
    return SeverityBreakdown(**counts)


def count_false_positive_reasons(false_positives: Sequence[FalsePositiveOut]) -> Dict[str, int]:
    reasons: Dict[str, int] = {}
    for fp in false_positives:
        reason = fp.reason or "UNKNOWN"
        reasons[reason] = reasons.get(reason, 0) + 1
    return reasons


def build_summary(
    false_positives: List[FalsePositiveOut],
    true_vulnerabilities: List[TrueVulnerabilityOut],
) -> AnalysisSummary:
    breakdown = build_severity_breakdown(true_vulnerabilities)
    return AnalysisSummary(
        total_scanned=len(false_positives) + len(true_vulnerabilities),
        false_positive_rate=calculate_false_positive_rate(
            len(false_positives), len(true_vulnerabilities)
        ),
        severity_breakdown=breakdown,
        false_positive_reasons=count_false_positive_reasons(false_positives),
        risk_score=calculate_risk_score(true_vulnerabilities),
        requires_immediate_action=breakdown.critical > 0 or breakdown.high > 0,
    )
