"""
Call graph evidence

Decides whether the vulnerable dependency shows up in an externally supplied
call graph. Nodes must match the normalized dependency name exactly, edges
only need to contain it ("lodash" in "app.utils->lodash.merge").
"""

import logging
from typing import Optional

from triage.models.callgraph import CallGraph
from triage.models.finding import Confidence, Finding
from triage.models.reachability import CallGraphEvidence
from triage.services.analyzers.dependency_matcher import (
    extract_package_name,
    normalize_package_name,
)

logger = logging.getLogger(__name__)


def assess_call_graph(finding: Finding, call_graph: Optional[CallGraph]) -> Optional[CallGraphEvidence]:
    """
    Assess reachability of a finding's dependency from the call graph.

    Returns None when there is no call graph (or no dependency name to look
    for). Callers must treat None as "no evidence", never as unreachable.
    """
    if call_graph is None:
        return None

    normalized = normalize_package_name(extract_package_name(finding.dependency))
    if not normalized:
        return None

    referenced_by_node = any(
        normalize_package_name(node.identifier) == normalized for node in call_graph.nodes
    )
    referenced_by_edge = any(
        normalized in normalize_package_name(edge.caller)
        or normalized in normalize_package_name(edge.callee)
        for edge in call_graph.edges
    )

    if not referenced_by_node and not referenced_by_edge:
        logger.debug(f"{finding.cve_id}: {normalized} not referenced in call graph")
        return CallGraphEvidence(
            is_reachable=False,
            confidence=Confidence.HIGH,
            reason="Call graph analysis: no invocation path to the vulnerable component",
            evidence="No call graph nodes or edges reference this dependency",
        )

    return CallGraphEvidence(
        is_reachable=True,
        # An edge means something actually calls into it, a node only declares it
        confidence=Confidence.HIGH if referenced_by_edge else Confidence.MEDIUM,
        reason="Call graph analysis: vulnerable component is referenced in application call graph",
        evidence="Call graph contains references to the vulnerable component",
    )
