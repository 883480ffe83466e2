from enum import Enum
from typing import Any, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from triage.core.constants import SEVERITY_ORDER, UNKNOWN_DEPENDENCY, map_cvss_to_severity


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    UNKNOWN = "UNKNOWN"


class Confidence(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class FindingKey(NamedTuple):
    """A report may list the same CVE against several dependencies."""

    cve_id: str
    dependency: str


class Finding(BaseModel):
    """A single reported vulnerability-in-dependency pair, as normalized upstream."""

    cve_id: str = Field(..., alias="cveId", min_length=1, description="CVE or advisory identifier")
    dependency: str = Field(UNKNOWN_DEPENDENCY, description="Raw dependency identifier from the scanner")
    version: Optional[str] = Field(None, description="Reported vulnerable version")
    cvss_score: Optional[float] = Field(None, alias="cvssScore", ge=0.0, le=10.0)
    severity: Severity = Field(Severity.UNKNOWN, description="Severity level")
    description: str = ""
    references: List[str] = Field(default_factory=list)
    file_path: str = Field("", alias="filePath", description="Location reported by the scanner")
    affected_versions: List[str] = Field(default_factory=list, alias="affectedVersions")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _derive_severity(cls, data: Any) -> Any:
        # Scanners that only report a CVSS score get a severity from it
        if not isinstance(data, dict):
            return data
        severity = str(data.get("severity") or "").upper()
        if severity in SEVERITY_ORDER and severity != Severity.UNKNOWN.value:
            return data
        cvss = data.get("cvss_score", data.get("cvssScore"))
        return {**data, "severity": map_cvss_to_severity(cvss)}

    @field_validator("severity", mode="before")
    @classmethod
    def _upper_severity(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("dependency", mode="before")
    @classmethod
    def _blank_to_unknown(cls, v: Any) -> Any:
        # Same placeholder the report parser uses when a scanner omits the name
        if v is None or (isinstance(v, str) and not v.strip()):
            return UNKNOWN_DEPENDENCY
        return v

    @field_validator("description", "file_path", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("references", "affected_versions", mode="before")
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def key(self) -> FindingKey:
        return FindingKey(self.cve_id, self.dependency)
