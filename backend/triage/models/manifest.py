from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ManifestType(str, Enum):
    NPM = "npm"
    MAVEN = "maven"
    PIP = "pip"


class ManifestEntry(BaseModel):
    """A dependency declared in the project manifest."""

    version: Optional[str] = None
    is_dev: bool = Field(False, alias="isDev")
    is_optional: bool = Field(False, alias="isOptional")
    is_peer: Optional[bool] = Field(None, alias="isPeer")
    scope: Optional[str] = None  # maven: compile, test, provided, runtime

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Manifest(BaseModel):
    """
    Normalized dependency manifest (package.json, pom.xml, requirements.txt, ...).

    `dependencies` holds every declared dependency, while the production and
    dev maps only carry name -> version for the respective group.
    """

    type: ManifestType
    name: Optional[str] = None
    dependencies: Dict[str, ManifestEntry] = Field(default_factory=dict)
    production_dependencies: Dict[str, Optional[str]] = Field(
        default_factory=dict, alias="productionDependencies"
    )
    dev_dependencies: Dict[str, Optional[str]] = Field(
        default_factory=dict, alias="devDependencies"
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("dependencies", mode="before")
    @classmethod
    def _coerce_entries(cls, v: Any) -> Any:
        # Some parsers emit plain "name": "version" pairs
        if not isinstance(v, dict):
            return v
        return {
            name: {"version": info} if isinstance(info, str) or info is None else info
            for name, info in v.items()
        }

    @field_validator("production_dependencies", "dev_dependencies", mode="before")
    @classmethod
    def _coerce_versions(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return v
        return {
            name: info.get("version") if isinstance(info, dict) else info
            for name, info in v.items()
        }
