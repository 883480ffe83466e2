"""
Dependency name matching

Scanners and manifests rarely agree on how a dependency is spelled. A report
may say "commons-text-1.9.jar", "org.apache.commons:commons-text:1.9" or
"@babel/core@7.0.0" while the manifest just says "commons-text" or
"@babel/core". These helpers reduce both sides to a comparable key.
"""

import re
from typing import Any, Mapping, NamedTuple, Optional

from triage.core.constants import ARCHIVE_EXTENSION_PATTERN, VERSION_SUFFIX_PATTERN
from triage.models.manifest import ManifestEntry

_ARCHIVE_RE = re.compile(ARCHIVE_EXTENSION_PATTERN, re.IGNORECASE)
_VERSION_SUFFIX_RE = re.compile(VERSION_SUFFIX_PATTERN)
_NPM_SCOPE_RE = re.compile(r"@[\w/-]+/")


class DependencyMatch(NamedTuple):
    """Manifest entry matched for a dependency name."""

    name: str  # name as declared in the manifest
    version: Optional[str]
    entry: Any  # ManifestEntry, or the raw version string for name -> version maps
    partial_match: bool = False


def extract_package_name(dependency: Optional[str]) -> str:
    """
    Extract the package name from a raw dependency identifier.

    Examples:
    - "lodash-4.17.21.jar" -> "lodash"
    - "org.apache.commons:commons-text:1.9" -> "commons-text"
    - "express@4.18.2" -> "express"
    - "@babel/core@7.0.0" -> "@babel/core"
    """
    if not dependency:
        return ""

    name = _ARCHIVE_RE.sub("", dependency)

    # Maven groupId:artifactId[:version]
    if ":" in name:
        parts = name.split(":")
        if len(parts) >= 2:
            return parts[1]

    # name@version
    if "@" in name and not name.startswith("@"):
        name = name.split("@")[0]

    # @scope/name@version
    if name.startswith("@"):
        at_index = name.find("@", 1)
        if at_index > 0:
            name = name[:at_index]

    return _VERSION_SUFFIX_RE.sub("", name)


def normalize_package_name(name: Optional[str]) -> str:
    """Lower-case, drop '-' and '_' and the npm scope prefix."""
    if not name:
        return ""
    normalized = name.lower().replace("-", "").replace("_", "")
    normalized = _NPM_SCOPE_RE.sub("", normalized, count=1)
    return normalized.strip()


def _entry_version(entry: Any) -> Optional[str]:
    if isinstance(entry, ManifestEntry):
        return entry.version
    if isinstance(entry, dict):
        return entry.get("version")
    return entry


def find_dependency_match(
    dep_name: Optional[str], dependencies: Optional[Mapping[str, Any]]
) -> Optional[DependencyMatch]:
    """
    Find the manifest entry for a dependency name.

    An exact normalized match wins. Otherwise the first entry whose normalized
    name contains, or is contained in, the normalized search name is returned
    with partial_match=True ("lodash" matches "lodash.merge").
    """
    if not dep_name or not dependencies:
        return None

    normalized_search = normalize_package_name(dep_name)
    if not normalized_search:
        return None

    candidates = []
    for name, entry in dependencies.items():
        normalized_name = normalize_package_name(name)
        if not normalized_name:
            continue
        if normalized_name == normalized_search:
            return DependencyMatch(name, _entry_version(entry), entry)
        candidates.append((name, normalized_name, entry))

    for name, normalized_name, entry in candidates:
        if normalized_search in normalized_name or normalized_name in normalized_search:
            return DependencyMatch(name, _entry_version(entry), entry, partial_match=True)

    return None


def has_exact_match(dep_name: Optional[str], dependencies: Optional[Mapping[str, Any]]) -> bool:
    """True when some key normalizes to exactly the same name."""
    if not dep_name or not dependencies:
        return False
    normalized_search = normalize_package_name(dep_name)
    if not normalized_search:
        return False
    return any(normalize_package_name(name) == normalized_search for name in dependencies)
