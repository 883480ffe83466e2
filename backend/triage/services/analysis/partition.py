from typing import List, Sequence, Tuple

from triage.core.constants import MAX_VULNERABILITY_REFERENCES
from triage.models.classification import ClassificationResult, FalsePositive, TrueVulnerability
from triage.schemas.analysis import FalsePositiveOut, TrueVulnerabilityOut


def format_false_positive(result: FalsePositive) -> FalsePositiveOut:
    return FalsePositiveOut(
        cve_id=result.cve_id,
        dependency=result.dependency,
        reason=result.reason_code,
        details=result.details,
        confidence=result.confidence,
    )


def format_true_vulnerability(result: TrueVulnerability) -> TrueVulnerabilityOut:
    return TrueVulnerabilityOut(
        cve_id=result.cve_id,
        dependency=result.dependency,
        severity=result.severity,
        cvss_score=result.cvss_score,
        description=result.description,
        references=result.references[:MAX_VULNERABILITY_REFERENCES],
        affected_versions=list(result.affected_versions),
    )


def partition_results(
    results: Sequence[ClassificationResult],
) -> Tuple[List[FalsePositiveOut], List[TrueVulnerabilityOut]]:
    """Split classification results into the two output buckets, keeping input order."""
    false_positives: List[FalsePositiveOut] = []
    true_vulnerabilities: List[TrueVulnerabilityOut] = []

    for result in results:
        if isinstance(result, FalsePositive):
            false_positives.append(format_false_positive(result))
        else:
            true_vulnerabilities.append(format_true_vulnerability(result))

    return false_positives, true_vulnerabilities
