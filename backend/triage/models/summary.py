from typing import Dict

from pydantic import BaseModel, Field


class SeverityBreakdown(BaseModel):
    """Severity histogram over true vulnerabilities."""
    critical: int = Field(0, description="Count of critical vulnerabilities")
    high: int = Field(0, description="Count of high severity vulnerabilities")
    medium: int = Field(0, description="Count of medium severity vulnerabilities")
    low: int = Field(0, description="Count of low severity vulnerabilities")


class AnalysisSummary(BaseModel):
    total_scanned: int = Field(0, description="Number of findings classified")
    false_positive_rate: int = Field(0, description="Percentage of findings judged false positives")
    severity_breakdown: SeverityBreakdown = Field(default_factory=SeverityBreakdown)
    false_positive_reasons: Dict[str, int] = Field(
        default_factory=dict, description="Count of false positives per reason code"
    )
    risk_score: int = Field(0, description="Weighted severity score (0-100)")
    requires_immediate_action: bool = Field(
        False, description="True when any critical or high vulnerability remains"
    )
