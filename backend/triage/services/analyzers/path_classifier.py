import re
from typing import Optional

from triage.core.constants import NON_PROD_PATH_MARKERS
from triage.models.reachability import PathClassification

_SEPARATOR_RE = re.compile(r"[\\/]")


def classify_path(file_path: Optional[str]) -> PathClassification:
    """
    Label a file path as production or non-production code.

    A path is non-production when any of its segments, split on both '/'
    and '\\', is one of the NON_PROD_PATH_MARKERS. Markers only match whole
    segments, so "latest/" or "testing/" stay production.
    """
    if not file_path:
        return PathClassification.UNKNOWN

    segments = _SEPARATOR_RE.split(file_path.lower())
    if any(segment in NON_PROD_PATH_MARKERS for segment in segments):
        return PathClassification.NON_PROD
    return PathClassification.PROD
