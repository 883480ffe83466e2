"""
Analysis Schemas

Request bodies for the analysis API and the structured result handed to the
report writer and presentation layer. The result shape is append-only:
consumers rely on every field below.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from triage.models.callgraph import CallGraph
from triage.models.finding import Confidence, Finding, Severity
from triage.models.manifest import Manifest
from triage.models.summary import AnalysisSummary

logger = logging.getLogger(__name__)


class FalsePositiveOut(BaseModel):
    cve_id: str
    dependency: str
    reason: str = Field(..., description="Reason code, e.g. VERSION_MISMATCH")
    details: str
    confidence: Confidence


class TrueVulnerabilityOut(BaseModel):
    cve_id: str
    dependency: str
    severity: Severity
    cvss_score: Optional[float] = None
    description: str = ""
    references: List[str] = Field(default_factory=list, description="At most 3 references")
    affected_versions: List[str] = Field(default_factory=list)


class AnalysisMetadata(BaseModel):
    analysis_timestamp: datetime
    project_name: str
    tool_version: str
    source_report_name: Optional[str] = None
    total_vulnerabilities_scanned: int
    false_positives_identified: int
    true_vulnerabilities_found: int


class AnalysisResult(BaseModel):
    false_positives: List[FalsePositiveOut] = Field(default_factory=list)
    true_vulnerabilities: List[TrueVulnerabilityOut] = Field(default_factory=list)
    metadata: AnalysisMetadata
    # Legacy consumers read the same metadata under this key
    analysis_metadata: AnalysisMetadata
    summary: AnalysisSummary


class AnalysisRequest(BaseModel):
    """Normalized findings plus optional manifest and call graph."""

    findings: List[Finding]
    manifest: Optional[Manifest] = None
    call_graph: Optional[CallGraph] = Field(
        None, description="Call graph object, or the same object JSON-encoded"
    )
    project_name: Optional[str] = None
    source_report_name: Optional[str] = None

    @field_validator("call_graph", mode="before")
    @classmethod
    def _parse_call_graph(cls, v: Any) -> Any:
        # A call graph that can't be parsed is no evidence, not an error
        if isinstance(v, str):
            if not v.strip():
                return None
            try:
                parsed = json.loads(v)
            except ValueError:
                logger.warning("Ignoring call graph: not valid JSON")
                return None
            return parsed if isinstance(parsed, dict) else None
        return v


class ReportRequest(BaseModel):
    analysis: AnalysisResult


class GeneratedReport(BaseModel):
    content: str = Field(..., description="Markdown report")
    model: str
    generated_at: datetime
    tokens_used: Optional[int] = None
    degraded: bool = Field(False, description="True when the local fallback report was used")
    error: Optional[str] = None


class AnalyzeResponse(BaseModel):
    success: bool = True
    analysis: AnalysisResult


class ReportResponse(BaseModel):
    success: bool = True
    report: GeneratedReport


class FullAnalysisResponse(BaseModel):
    success: bool = True
    analysis: AnalysisResult
    report: GeneratedReport


class ValidationErrorDetail(BaseModel):
    message: str
    errors: List[str]

    def as_detail(self) -> Dict[str, Any]:
        return self.model_dump()
