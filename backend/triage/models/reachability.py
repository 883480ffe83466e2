"""
Reachability Models

One ReachabilityRecord is built per finding by the reachability analyzer and
never changed afterwards. The false-positive classifier reads it as evidence.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from triage.models.finding import Confidence, FindingKey


class PathClassification(str, Enum):
    PROD = "prod"
    NON_PROD = "non_prod"
    UNKNOWN = "unknown"


class CallGraphEvidence(BaseModel):
    """Verdict derived from the optional call graph."""

    is_reachable: bool
    confidence: Confidence
    reason: str
    evidence: str

    model_config = ConfigDict(frozen=True)


class ReachabilityRecord(BaseModel):
    is_reachable: bool = True
    confidence: Confidence = Confidence.MEDIUM
    reason: str = ""
    is_direct: Optional[bool] = None
    is_dev_dependency: Optional[bool] = None
    path_classification: PathClassification = PathClassification.UNKNOWN
    call_graph_evidence: Optional[str] = None
    matched_dependency: Optional[str] = Field(None, description="Manifest entry the finding matched")
    actual_version: Optional[str] = Field(None, description="Version declared in the manifest")

    model_config = ConfigDict(frozen=True)


class ReachabilityReport(BaseModel):
    """Reachability records for a whole run, keyed by finding identity."""

    records: Dict[Tuple[str, str], ReachabilityRecord] = Field(default_factory=dict)
    direct_dependencies: List[str] = Field(default_factory=list)
    transitive_dependencies: List[str] = Field(default_factory=list)
    unreachable_dependencies: List[str] = Field(default_factory=list)

    def get(self, key: FindingKey) -> Optional[ReachabilityRecord]:
        return self.records.get(key)
