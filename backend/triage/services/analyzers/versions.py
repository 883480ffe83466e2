import re
from itertools import zip_longest
from typing import List, Optional

from triage.core.constants import UNKNOWN_VERSION, VERSION_RANGE_PREFIX_PATTERN

_RANGE_PREFIX_RE = re.compile(VERSION_RANGE_PREFIX_PATTERN)
_NON_DIGIT_RE = re.compile(r"\D")


def is_known_version(version: Optional[str]) -> bool:
    return bool(version) and version.strip() != "" and version != UNKNOWN_VERSION


def clean_version(version: Optional[str]) -> str:
    """Strip range operators (^, ~, >=, ...) and whitespace."""
    if not version or not isinstance(version, str):
        return UNKNOWN_VERSION
    cleaned = _RANGE_PREFIX_RE.sub("", version)
    return re.sub(r"\s+", "", cleaned).strip()


def versions_match(version1: Optional[str], version2: Optional[str]) -> bool:
    """
    Compare two versions after stripping range operators.

    A shorter version matches a longer one when it is a prefix on a component
    boundary: "1.5" matches "1.5.0", but "4.17.2" does not match "4.17.21".
    This is stricter than a plain string prefix check, under which "4.17.2"
    would match "4.17.21" and hide a real version mismatch.
    """
    if not version1 or not version2:
        return False

    clean1 = clean_version(version1)
    clean2 = clean_version(version2)

    if clean1 == clean2:
        return True
    return clean1.startswith(clean2 + ".") or clean2.startswith(clean1 + ".")


def _numeric_parts(version: str) -> List[int]:
    parts = []
    for part in version.split("."):
        digits = _NON_DIGIT_RE.sub("", part)
        parts.append(int(digits) if digits else 0)
    return parts


def is_higher_version(version1: Optional[str], version2: Optional[str]) -> bool:
    """
    True if version1 is numerically greater than version2.

    Components are compared left to right, non-numeric characters are dropped
    and missing components count as zero.
    """
    if not version1 or not version2:
        return False

    for p1, p2 in zip_longest(_numeric_parts(version1), _numeric_parts(version2), fillvalue=0):
        if p1 > p2:
            return True
        if p1 < p2:
            return False
    return False
