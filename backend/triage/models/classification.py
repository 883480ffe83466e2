"""
Classification Models

Every finding ends up as exactly one ClassificationResult: a FalsePositive
carrying a typed reason, or a TrueVulnerability.

False-positive reasons form a closed union discriminated by `code`. Each
variant carries its own payload and renders its own explanation, so adding a
reason means adding a variant here.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from triage.core.constants import ECOSYSTEM_CONFLICTS, UNKNOWN_VERSION
from triage.models.finding import Confidence, Finding, Severity


class FalsePositiveReasonCode(str, Enum):
    VERSION_MISMATCH = "VERSION_MISMATCH"
    NON_REACHABLE = "NON_REACHABLE"
    ENV_MISMATCH = "ENV_MISMATCH"
    UNUSED_TRANSITIVE = "UNUSED_TRANSITIVE"
    DEV_ONLY = "DEV_ONLY"


# Generic explanations, used when a variant has nothing more specific to say
REASON_DESCRIPTIONS = {
    FalsePositiveReasonCode.VERSION_MISMATCH: "The reported vulnerable version does not match the actual installed version",
    FalsePositiveReasonCode.NON_REACHABLE: "The vulnerable code path is not reachable from the application",
    FalsePositiveReasonCode.ENV_MISMATCH: "The vulnerability only affects environments or configurations not used by this project",
    FalsePositiveReasonCode.UNUSED_TRANSITIVE: "This is a transitive dependency that is not actually used by the application",
    FalsePositiveReasonCode.DEV_ONLY: "This dependency is only used in development and not included in production builds",
}


class VersionMismatch(BaseModel):
    code: Literal["VERSION_MISMATCH"] = "VERSION_MISMATCH"
    installed_version: str
    reported_version: str
    likely_patched: bool

    model_config = ConfigDict(frozen=True)

    @property
    def details(self) -> str:
        if self.likely_patched:
            return (
                f"Actual installed version ({self.installed_version}) is newer than the "
                f"reported vulnerable version ({self.reported_version}). "
                "The vulnerability is likely already patched."
            )
        return (
            f"Version mismatch: scanner reported {self.reported_version}, "
            f"but manifest shows {self.installed_version}."
        )


class EnvMismatch(BaseModel):
    code: Literal["ENV_MISMATCH"] = "ENV_MISMATCH"
    signal: str  # keyword found in the description
    target_platform: Optional[str] = None
    manifest_type: Optional[str] = None  # set for ecosystem conflicts

    model_config = ConfigDict(frozen=True)

    @property
    def details(self) -> str:
        if self.manifest_type and self.manifest_type in ECOSYSTEM_CONFLICTS:
            return ECOSYSTEM_CONFLICTS[self.manifest_type][1]
        return (
            f"Vulnerability is described as affecting {self.signal} environments, "
            f"but the target deployment platform is {self.target_platform}."
        )


class DevOnly(BaseModel):
    code: Literal["DEV_ONLY"] = "DEV_ONLY"
    package: str
    via_reachability: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def details(self) -> str:
        if self.via_reachability:
            return (
                f"{self.package} is listed as a devDependency and is not included in "
                "production builds. This vulnerability does not affect production deployments."
            )
        return (
            f"{self.package} is only listed in devDependencies. "
            "This vulnerability does not affect production deployments."
        )


class NonReachable(BaseModel):
    code: Literal["NON_REACHABLE"] = "NON_REACHABLE"
    reachability_reason: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def details(self) -> str:
        return self.reachability_reason or REASON_DESCRIPTIONS[FalsePositiveReasonCode.NON_REACHABLE]


class UnusedTransitive(BaseModel):
    code: Literal["UNUSED_TRANSITIVE"] = "UNUSED_TRANSITIVE"
    package: str

    model_config = ConfigDict(frozen=True)

    @property
    def details(self) -> str:
        return (
            f"{self.package} is a transitive dependency not directly declared in the project. "
            "It may be pulled in by another dependency but might not be actively used."
        )


FalsePositiveReason = Annotated[
    Union[VersionMismatch, EnvMismatch, DevOnly, NonReachable, UnusedTransitive],
    Field(discriminator="code"),
]


class CheckOutcome(BaseModel):
    """What a single false-positive check returns when it fires."""

    reason: FalsePositiveReason
    confidence: Confidence

    model_config = ConfigDict(frozen=True)


class FalsePositive(BaseModel):
    kind: Literal["false_positive"] = "false_positive"
    cve_id: str
    dependency: str  # name@version
    reason: FalsePositiveReason
    confidence: Confidence

    model_config = ConfigDict(frozen=True)

    @property
    def reason_code(self) -> str:
        return self.reason.code

    @property
    def details(self) -> str:
        return self.reason.details


class TrueVulnerability(BaseModel):
    kind: Literal["true_vulnerability"] = "true_vulnerability"
    cve_id: str
    dependency: str
    severity: Severity
    cvss_score: Optional[float] = None
    description: str = ""
    references: List[str] = Field(default_factory=list)
    affected_versions: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_finding(cls, finding: Finding) -> "TrueVulnerability":
        affected = list(finding.affected_versions)
        if not affected and finding.version and finding.version != UNKNOWN_VERSION:
            affected = [finding.version]
        return cls(
            cve_id=finding.cve_id,
            dependency=finding.dependency,
            severity=finding.severity,
            cvss_score=finding.cvss_score,
            description=finding.description,
            references=list(finding.references),
            affected_versions=affected,
        )


ClassificationResult = Annotated[
    Union[FalsePositive, TrueVulnerability],
    Field(discriminator="kind"),
]
