import logging
import time
from typing import List, Optional, Sequence

from triage.core import utc_now
from triage.core.config import settings
from triage.core.constants import UNKNOWN_PROJECT
from triage.core.metrics import (
    analysis_duration_seconds,
    analysis_runs_total,
    analysis_validation_errors_total,
    record_classifications,
)
from triage.models.callgraph import CallGraph
from triage.models.finding import Finding
from triage.models.manifest import Manifest
from triage.schemas.analysis import AnalysisMetadata, AnalysisResult
from triage.services.analysis.partition import partition_results
from triage.services.analysis.stats import build_summary
from triage.services.analysis.validation import validate_analysis_output
from triage.services.analyzers.false_positive import classify_findings
from triage.services.analyzers.reachability import analyze_reachability

logger = logging.getLogger(__name__)


class AnalysisOutputError(Exception):
    """The produced result violates one or more output invariants."""

    def __init__(self, errors: List[str]):
        super().__init__(f"Analysis output failed validation: {'; '.join(errors)}")
        self.errors = errors


def run_analysis(
    findings: Sequence[Finding],
    manifest: Optional[Manifest] = None,
    call_graph: Optional[CallGraph] = None,
    project_name: Optional[str] = None,
    source_report_name: Optional[str] = None,
    target_platform: Optional[str] = None,
) -> AnalysisResult:
    """
    Classify findings into false positives and true vulnerabilities.

    Runs reachability analysis, the false-positive checks and the summary
    aggregation, then validates the result before returning it.

    Raises:
        AnalysisOutputError: if the produced result violates an output invariant
    """
    start_time = time.time()
    analysis_runs_total.labels(
        manifest=str(manifest is not None).lower(),
        call_graph=str(call_graph is not None).lower(),
    ).inc()

    logger.info(
        f"Analyzing {len(findings)} findings "
        f"(manifest: {manifest.type.value if manifest else 'none'}, "
        f"call graph: {'yes' if call_graph else 'no'})"
    )

    reachability = analyze_reachability(findings, manifest, call_graph)
    results = classify_findings(findings, manifest, reachability, target_platform)
    false_positives, true_vulnerabilities = partition_results(results)
    summary = build_summary(false_positives, true_vulnerabilities)

    metadata = AnalysisMetadata(
        analysis_timestamp=utc_now(),
        project_name=project_name or (manifest.name if manifest else None) or UNKNOWN_PROJECT,
        tool_version=settings.TOOL_VERSION,
        source_report_name=source_report_name,
        total_vulnerabilities_scanned=len(findings),
        false_positives_identified=len(false_positives),
        true_vulnerabilities_found=len(true_vulnerabilities),
    )
    result = AnalysisResult(
        false_positives=false_positives,
        true_vulnerabilities=true_vulnerabilities,
        metadata=metadata,
        analysis_metadata=metadata,
        summary=summary,
    )

    errors = validate_analysis_output(result)
    if errors:
        analysis_validation_errors_total.inc(len(errors))
        for error in errors:
            logger.error(f"Invalid analysis output: {error}")
        raise AnalysisOutputError(errors)

    record_classifications(summary.false_positive_reasons, len(true_vulnerabilities))
    analysis_duration_seconds.observe(time.time() - start_time)

    logger.info(
        f"Analysis complete: {len(false_positives)} false positives, "
        f"{len(true_vulnerabilities)} true vulnerabilities "
        f"({summary.false_positive_rate}% false positive rate, risk score {summary.risk_score})"
    )
    return result
