"""
Reachability Analysis

Combines manifest membership, file path classification and call graph
evidence into one ReachabilityRecord per finding.

The analysis is a small rule engine. Rules run in a fixed order and each
rule that fires overwrites the fields it returns, so the last matching rule
wins per field:

    1. baseline               reachable, MEDIUM
    2. manifest match         is_direct, matched version
    3. call graph             overwrites reachability, confidence, reason
    4. dev-only dependency    unreachable, HIGH
    5. production dependency  reachable, HIGH
    6. transitive dependency  is_direct=False, reachable
    7. non-production path    unreachable, HIGH
    8. optional dependency    unreachable, MEDIUM

Without a manifest only the baseline (reachable, LOW), call graph and path
rules apply.
"""

import logging
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from triage.core.constants import (
    REACHABILITY_SCORE_BASE,
    REACHABILITY_SCORE_DIRECT,
    REACHABILITY_SCORE_HIGH_CONFIDENCE,
    REACHABILITY_SCORE_NOT_DEV,
)
from triage.models.callgraph import CallGraph
from triage.models.finding import Confidence, Finding
from triage.models.manifest import Manifest, ManifestEntry
from triage.models.reachability import (
    CallGraphEvidence,
    PathClassification,
    ReachabilityRecord,
    ReachabilityReport,
)
from triage.services.analyzers.callgraph_evidence import assess_call_graph
from triage.services.analyzers.dependency_matcher import (
    DependencyMatch,
    extract_package_name,
    find_dependency_match,
)
from triage.services.analyzers.path_classifier import classify_path

logger = logging.getLogger(__name__)


class ReachabilityContext(NamedTuple):
    """Everything the rules may look at for one finding."""

    finding: Finding
    path_classification: PathClassification
    call_graph_evidence: Optional[CallGraphEvidence]
    direct_match: Optional[DependencyMatch] = None
    prod_match: Optional[DependencyMatch] = None
    dev_match: Optional[DependencyMatch] = None


Rule = Callable[[ReachabilityContext], Optional[Dict[str, Any]]]


def rule_baseline(ctx: ReachabilityContext) -> Dict[str, Any]:
    return {
        "is_reachable": True,
        "confidence": Confidence.MEDIUM,
        "reason": "No reachability blockers detected",
        "is_direct": False,
        "is_dev_dependency": False,
        "path_classification": ctx.path_classification,
    }


def rule_baseline_without_manifest(ctx: ReachabilityContext) -> Dict[str, Any]:
    return {
        "is_reachable": True,
        "confidence": Confidence.LOW,
        "reason": "No manifest provided - reachability assumed",
        "is_direct": None,
        "is_dev_dependency": None,
        "path_classification": ctx.path_classification,
    }


def rule_manifest_match(ctx: ReachabilityContext) -> Optional[Dict[str, Any]]:
    if not ctx.direct_match:
        return None
    return {
        "is_direct": True,
        "matched_dependency": ctx.direct_match.name,
        "actual_version": ctx.direct_match.version,
    }


def rule_call_graph(ctx: ReachabilityContext) -> Optional[Dict[str, Any]]:
    evidence = ctx.call_graph_evidence
    if evidence is None:
        return None
    return {
        "is_reachable": evidence.is_reachable,
        "confidence": evidence.confidence,
        "reason": evidence.reason,
        "call_graph_evidence": evidence.evidence,
    }


def rule_dev_only(ctx: ReachabilityContext) -> Optional[Dict[str, Any]]:
    if not (ctx.dev_match and not ctx.prod_match):
        return None
    return {
        "is_dev_dependency": True,
        "is_reachable": False,
        "confidence": Confidence.HIGH,
        "reason": "Development-only dependency - not included in production builds",
    }


def rule_production(ctx: ReachabilityContext) -> Optional[Dict[str, Any]]:
    if not (ctx.prod_match and not ctx.dev_match):
        return None
    return {
        "is_reachable": True,
        "confidence": Confidence.HIGH,
        "reason": "Direct production dependency - code is reachable",
    }


def rule_transitive(ctx: ReachabilityContext) -> Optional[Dict[str, Any]]:
    if ctx.direct_match:
        return None
    return {
        "is_direct": False,
        "is_reachable": True,
        "reason": "Transitive dependency - may or may not be reachable",
    }


def rule_non_prod_path(ctx: ReachabilityContext) -> Optional[Dict[str, Any]]:
    # Test and example code never ships, whatever scope the dependency has
    if ctx.path_classification != PathClassification.NON_PROD:
        return None
    return {
        "is_reachable": False,
        "confidence": Confidence.HIGH,
        "reason": "Vulnerability exists in non-production/test/example path",
    }


def rule_optional_dependency(ctx: ReachabilityContext) -> Optional[Dict[str, Any]]:
    if not ctx.direct_match or ctx.prod_match:
        return None
    entry = ctx.direct_match.entry
    if not (isinstance(entry, ManifestEntry) and entry.is_optional):
        return None
    return {
        "is_reachable": False,
        "confidence": Confidence.MEDIUM,
        "reason": "Optional dependency not included in production runtime",
    }


MANIFEST_RULES: Tuple[Rule, ...] = (
    rule_baseline,
    rule_manifest_match,
    rule_call_graph,
    rule_dev_only,
    rule_production,
    rule_transitive,
    rule_non_prod_path,
    rule_optional_dependency,
)

NO_MANIFEST_RULES: Tuple[Rule, ...] = (
    rule_baseline_without_manifest,
    rule_call_graph,
    rule_non_prod_path,
)


def apply_rules(
    rules: Sequence[Rule], ctx: ReachabilityContext
) -> Tuple[ReachabilityRecord, List[str]]:
    """
    Reduce the rules over an empty draft, later rules overriding earlier ones.

    Returns the frozen record and the names of the rules that fired.
    """
    draft: Dict[str, Any] = {}
    fired: List[str] = []
    for rule in rules:
        update = rule(ctx)
        if update:
            draft.update(update)
            fired.append(rule.__name__)
    return ReachabilityRecord(**draft), fired


def build_context(
    finding: Finding,
    manifest: Optional[Manifest],
    call_graph: Optional[CallGraph],
) -> ReachabilityContext:
    path_classification = classify_path(finding.file_path)
    evidence = assess_call_graph(finding, call_graph)

    if manifest is None:
        return ReachabilityContext(finding, path_classification, evidence)

    dep_name = extract_package_name(finding.dependency)
    return ReachabilityContext(
        finding=finding,
        path_classification=path_classification,
        call_graph_evidence=evidence,
        direct_match=find_dependency_match(dep_name, manifest.dependencies),
        prod_match=find_dependency_match(dep_name, manifest.production_dependencies),
        dev_match=find_dependency_match(dep_name, manifest.dev_dependencies),
    )


def analyze_finding_reachability(
    finding: Finding,
    manifest: Optional[Manifest] = None,
    call_graph: Optional[CallGraph] = None,
) -> ReachabilityRecord:
    """Build the reachability record for a single finding."""
    ctx = build_context(finding, manifest, call_graph)
    rules = MANIFEST_RULES if manifest is not None else NO_MANIFEST_RULES
    record, _ = apply_rules(rules, ctx)
    return record


def _append_unique(items: List[str], value: str) -> None:
    if value not in items:
        items.append(value)


def analyze_reachability(
    findings: Sequence[Finding],
    manifest: Optional[Manifest] = None,
    call_graph: Optional[CallGraph] = None,
) -> ReachabilityReport:
    """
    Analyze reachability of every finding.

    Each finding gets exactly one record, keyed by (cve_id, dependency).
    """
    report = ReachabilityReport()
    rules = MANIFEST_RULES if manifest is not None else NO_MANIFEST_RULES

    for finding in findings:
        ctx = build_context(finding, manifest, call_graph)
        record, fired = apply_rules(rules, ctx)

        if finding.key in report.records:
            logger.warning(
                f"Duplicate finding {finding.cve_id} for {finding.dependency}, keeping first record"
            )
            continue
        report.records[finding.key] = record

        if "rule_production" in fired:
            _append_unique(report.direct_dependencies, finding.dependency)
        if "rule_transitive" in fired:
            _append_unique(report.transitive_dependencies, finding.dependency)
        if not record.is_reachable:
            _append_unique(report.unreachable_dependencies, finding.dependency)

    logger.debug(
        f"Reachability: {len(report.records)} records, "
        f"{len(report.unreachable_dependencies)} unreachable dependencies"
    )
    return report


def reachability_score(record: Optional[ReachabilityRecord]) -> int:
    """
    Likelihood (0-100) that the vulnerable code is reachable.

    Base 50, +30 for a direct dependency, +15 when not a dev dependency,
    +5 for HIGH confidence.
    """
    if record is None:
        return REACHABILITY_SCORE_BASE

    score = REACHABILITY_SCORE_BASE
    if record.is_direct:
        score += REACHABILITY_SCORE_DIRECT
    if not record.is_dev_dependency:
        score += REACHABILITY_SCORE_NOT_DEV
    if record.confidence == Confidence.HIGH:
        score += REACHABILITY_SCORE_HIGH_CONFIDENCE
    return min(100, max(0, score))


def is_production_dependency(dep_name: str, manifest: Optional[Manifest]) -> bool:
    """Assume production when there is no manifest to say otherwise."""
    if manifest is None:
        return True
    return find_dependency_match(dep_name, manifest.production_dependencies) is not None
