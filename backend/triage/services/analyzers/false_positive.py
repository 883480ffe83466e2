"""
False-Positive Classification

Each finding runs through FALSE_POSITIVE_CHECKS in order. The first check
that returns an outcome decides the verdict; a finding no check fires for is
a true vulnerability.

Checks are pure functions of (finding, context) and never raise for
incomplete input: a missing manifest or reachability record just means the
check has nothing to say.
"""

import logging
import re
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from triage.core.config import settings
from triage.core.constants import ECOSYSTEM_CONFLICTS, PLATFORM_SIGNALS
from triage.models.classification import (
    CheckOutcome,
    ClassificationResult,
    DevOnly,
    EnvMismatch,
    FalsePositive,
    NonReachable,
    TrueVulnerability,
    UnusedTransitive,
    VersionMismatch,
)
from triage.models.finding import Confidence, Finding
from triage.models.manifest import Manifest
from triage.models.reachability import ReachabilityRecord, ReachabilityReport
from triage.services.analyzers.dependency_matcher import (
    extract_package_name,
    has_exact_match,
    normalize_package_name,
)
from triage.services.analyzers.versions import is_higher_version, is_known_version, versions_match

logger = logging.getLogger(__name__)


class FalsePositiveContext(NamedTuple):
    """Evidence shared by all checks for one finding."""

    manifest: Optional[Manifest]
    reachability: Optional[ReachabilityRecord]
    target_platform: str


Check = Callable[[Finding, FalsePositiveContext], Optional[CheckOutcome]]


def _mentions(text: str, keyword: str) -> bool:
    # Letter boundaries, so "ios" does not fire on "scenarios"
    return re.search(rf"(?<![a-z]){re.escape(keyword)}(?![a-z])", text) is not None


def check_version_mismatch(finding: Finding, ctx: FalsePositiveContext) -> Optional[CheckOutcome]:
    if ctx.manifest is None or not is_known_version(finding.version):
        return None

    normalized = normalize_package_name(extract_package_name(finding.dependency))
    if not normalized:
        return None

    for name, entry in ctx.manifest.dependencies.items():
        if normalize_package_name(name) != normalized:
            continue
        installed = entry.version
        if not is_known_version(installed) or versions_match(installed, finding.version):
            continue

        patched = is_higher_version(installed, finding.version)
        return CheckOutcome(
            reason=VersionMismatch(
                installed_version=installed,
                reported_version=finding.version,
                likely_patched=patched,
            ),
            confidence=Confidence.HIGH if patched else Confidence.MEDIUM,
        )
    return None


def check_environment_mismatch(finding: Finding, ctx: FalsePositiveContext) -> Optional[CheckOutcome]:
    description = finding.description.lower()
    if not description:
        return None

    mentioned = [
        (keyword, platforms)
        for keyword, platforms in PLATFORM_SIGNALS
        if _mentions(description, keyword)
    ]
    # "affects Linux and Windows" still applies to a linux deployment
    if mentioned and not any(ctx.target_platform in platforms for _, platforms in mentioned):
        return CheckOutcome(
            reason=EnvMismatch(signal=mentioned[0][0], target_platform=ctx.target_platform),
            confidence=Confidence.MEDIUM,
        )

    if ctx.manifest is not None:
        manifest_type = ctx.manifest.type.value
        conflict = ECOSYSTEM_CONFLICTS.get(manifest_type)
        if conflict and conflict[0] in description:
            return CheckOutcome(
                reason=EnvMismatch(
                    signal=conflict[0],
                    target_platform=ctx.target_platform,
                    manifest_type=manifest_type,
                ),
                confidence=Confidence.MEDIUM,
            )
    return None


def check_dev_only(finding: Finding, ctx: FalsePositiveContext) -> Optional[CheckOutcome]:
    if ctx.manifest is None:
        return None

    if ctx.reachability is not None and ctx.reachability.is_dev_dependency:
        return CheckOutcome(
            reason=DevOnly(package=finding.dependency, via_reachability=True),
            confidence=Confidence.HIGH,
        )

    dep_name = extract_package_name(finding.dependency)
    if has_exact_match(dep_name, ctx.manifest.dev_dependencies) and not has_exact_match(
        dep_name, ctx.manifest.production_dependencies
    ):
        return CheckOutcome(reason=DevOnly(package=dep_name), confidence=Confidence.HIGH)
    return None


def check_non_reachable(finding: Finding, ctx: FalsePositiveContext) -> Optional[CheckOutcome]:
    record = ctx.reachability
    if record is None or record.is_reachable:
        return None
    return CheckOutcome(
        reason=NonReachable(reachability_reason=record.reason),
        confidence=record.confidence,
    )


def check_unused_transitive(finding: Finding, ctx: FalsePositiveContext) -> Optional[CheckOutcome]:
    record = ctx.reachability
    if ctx.manifest is None or record is None:
        return None
    if record.is_direct or record.confidence == Confidence.HIGH:
        return None

    dep_name = extract_package_name(finding.dependency)
    if has_exact_match(dep_name, ctx.manifest.dependencies):
        return None
    return CheckOutcome(reason=UnusedTransitive(package=dep_name), confidence=Confidence.MEDIUM)


# Order matters: the first check that fires wins
FALSE_POSITIVE_CHECKS: Tuple[Check, ...] = (
    check_version_mismatch,
    check_environment_mismatch,
    check_dev_only,
    check_non_reachable,
    check_unused_transitive,
)


def format_dependency(dependency: str, version: Optional[str]) -> str:
    """name@version, or just the name when the version is unknown."""
    if is_known_version(version):
        return f"{dependency}@{version}"
    return dependency


def classify_finding(
    finding: Finding,
    ctx: FalsePositiveContext,
    checks: Sequence[Check] = FALSE_POSITIVE_CHECKS,
) -> ClassificationResult:
    for check in checks:
        outcome = check(finding, ctx)
        if outcome is not None:
            return FalsePositive(
                cve_id=finding.cve_id,
                dependency=format_dependency(finding.dependency, finding.version),
                reason=outcome.reason,
                confidence=outcome.confidence,
            )
    return TrueVulnerability.from_finding(finding)


def classify_findings(
    findings: Sequence[Finding],
    manifest: Optional[Manifest],
    report: ReachabilityReport,
    target_platform: Optional[str] = None,
) -> List[ClassificationResult]:
    """
    Classify every finding, preserving input order.

    target_platform defaults to the configured TARGET_PLATFORM, never to the
    platform of the host running the analysis.
    """
    platform = (target_platform or settings.TARGET_PLATFORM).lower()
    results: List[ClassificationResult] = []

    for finding in findings:
        ctx = FalsePositiveContext(
            manifest=manifest,
            reachability=report.get(finding.key),
            target_platform=platform,
        )
        result = classify_finding(finding, ctx)
        if isinstance(result, FalsePositive):
            logger.debug(
                f"{finding.cve_id} ({finding.dependency}): false positive "
                f"{result.reason_code} [{result.confidence.value}]"
            )
        results.append(result)

    return results
