"""
Shared Constants

Centralized constants used across the triage pipeline to ensure consistency.
"""

from typing import Dict, List, Optional, Tuple

# Severity order for sorting (higher value = more severe)
SEVERITY_ORDER: Dict[str, int] = {
    "CRITICAL": 4,
    "HIGH": 3,
    "MEDIUM": 2,
    "LOW": 1,
    "UNKNOWN": 0,
}

# Severities counted in the summary histogram. Anything else is dropped.
SEVERITY_BREAKDOWN_LEVELS: Tuple[str, ...] = ("critical", "high", "medium", "low")

# Per-vulnerability contribution to the run-level risk score
RISK_SCORE_WEIGHTS: Dict[str, int] = {
    "CRITICAL": 25,
    "HIGH": 15,
    "MEDIUM": 5,
    "LOW": 1,
}
RISK_SCORE_DEFAULT_WEIGHT: int = 1
RISK_SCORE_CAP: int = 100

# CVSS lower bounds per severity, checked in order
CVSS_SEVERITY_THRESHOLDS: List[Tuple[float, str]] = [
    (9.0, "CRITICAL"),
    (7.0, "HIGH"),
    (4.0, "MEDIUM"),
]

MAX_VULNERABILITY_REFERENCES: int = 3

UNKNOWN_VERSION: str = "Unknown"
UNKNOWN_DEPENDENCY: str = "Unknown"
UNKNOWN_PROJECT: str = "Unknown Project"


def get_severity_value(severity: Optional[str]) -> int:
    """Get numeric value for severity. Higher = more severe."""
    if not severity:
        return 0
    return SEVERITY_ORDER.get(severity.upper(), 0)


def map_cvss_to_severity(cvss_score: Optional[float]) -> str:
    """Map a CVSS base score (0.0 - 10.0) to a severity level."""
    try:
        score = float(cvss_score or 0)
    except (TypeError, ValueError):
        score = 0.0

    for threshold, severity in CVSS_SEVERITY_THRESHOLDS:
        if score >= threshold:
            return severity
    if score > 0:
        return "LOW"
    return "UNKNOWN"


def sort_by_severity(items: list, key: str = "severity", reverse: bool = True) -> list:
    """
    Sort a list of dicts or models by severity, then by CVSS score.

    Args:
        items: List of dicts/objects with a severity field
        key: The key containing severity value
        reverse: If True, most severe first (default)
    """

    def _get(item, field):
        return item.get(field) if isinstance(item, dict) else getattr(item, field, None)

    return sorted(
        items,
        key=lambda x: (
            get_severity_value(_get(x, key)),
            float(_get(x, "cvss_score") or 0),
        ),
        reverse=reverse,
    )


# Archive suffixes stripped from raw dependency identifiers
ARCHIVE_EXTENSION_PATTERN: str = r"\.(jar|war|zip|tar\.gz|tgz|whl|egg)$"

# Trailing version suffix (package-1.2.3 -> package)
VERSION_SUFFIX_PATTERN: str = r"-\d+\.\d+(\.\d+)?([.-][\w.]+)?$"

# Leading range operators stripped before comparing versions
VERSION_RANGE_PREFIX_PATTERN: str = r"^[\^~>=<]+"

# Directory names marking code that never ships with the application
NON_PROD_PATH_MARKERS: Tuple[str, ...] = (
    "test",
    "__tests__",
    "spec",
    "__mocks__",
    "example",
    "examples",
    "demo",
    "sample",
    "fixture",
)

# Description keyword -> platforms (sys.platform style) the keyword refers to
PLATFORM_SIGNALS: List[Tuple[str, Tuple[str, ...]]] = [
    ("windows", ("win32",)),
    ("macos", ("darwin",)),
    ("os x", ("darwin",)),
    ("linux", ("linux",)),
    ("android", ("android",)),
    ("ios", ("ios",)),
]

# Manifest ecosystem -> (conflicting runtime keyword, explanation)
ECOSYSTEM_CONFLICTS: Dict[str, Tuple[str, str]] = {
    "npm": (
        "python",
        "Vulnerability targets Python environments, but the project manifest indicates a Node.js application.",
    ),
    "pip": (
        "node",
        "Vulnerability targets Node.js environments, but the project manifest indicates a Python application.",
    ),
    "maven": (
        "node",
        "Vulnerability targets Node.js ecosystems, but the project manifest indicates a JVM application.",
    ),
}

# Reachability score (0-100) contributions
REACHABILITY_SCORE_BASE: int = 50
REACHABILITY_SCORE_DIRECT: int = 30
REACHABILITY_SCORE_NOT_DEV: int = 15
REACHABILITY_SCORE_HIGH_CONFIDENCE: int = 5
