"""
Output validation

Checks a produced analysis result before it leaves the engine. Every violated
invariant is reported, so callers get the whole list instead of the first
failure.
"""

from typing import Any, Dict, List, Union

from pydantic import BaseModel

from triage.schemas.analysis import AnalysisResult


def _as_dict(output: Union[AnalysisResult, Dict[str, Any], Any]) -> Any:
    if isinstance(output, BaseModel):
        return output.model_dump(mode="json")
    return output


def validate_analysis_output(output: Union[AnalysisResult, Dict[str, Any]]) -> List[str]:
    """
    Validate an analysis result (model or plain dict).

    Returns:
        List of violated invariants, empty when the output is valid
    """
    data = _as_dict(output)
    if not isinstance(data, dict):
        return ["Analysis output is not an object"]

    errors: List[str] = []

    false_positives = data.get("false_positives")
    if not isinstance(false_positives, list):
        errors.append("Missing or invalid false_positives array")
        false_positives = []

    true_vulnerabilities = data.get("true_vulnerabilities")
    if not isinstance(true_vulnerabilities, list):
        errors.append("Missing or invalid true_vulnerabilities array")
        true_vulnerabilities = []

    metadata = data.get("metadata")
    if not isinstance(metadata, dict):
        errors.append("Missing metadata object")
    else:
        if not metadata.get("analysis_timestamp"):
            errors.append("Missing analysis_timestamp in metadata")
        if not metadata.get("project_name"):
            errors.append("Missing project_name in metadata")

        scanned = metadata.get("total_vulnerabilities_scanned")
        if scanned is not None and scanned != len(false_positives) + len(true_vulnerabilities):
            errors.append(
                f"Partition mismatch: {len(false_positives)} false positives + "
                f"{len(true_vulnerabilities)} vulnerabilities != {scanned} scanned"
            )

    for fp in false_positives:
        if not isinstance(fp, dict):
            errors.append("False positive entry is not an object")
            continue
        if not fp.get("cve_id"):
            errors.append("False positive missing cve_id")
        if not fp.get("dependency"):
            errors.append("False positive missing dependency")
        if not fp.get("reason"):
            errors.append("False positive missing reason")

    for vuln in true_vulnerabilities:
        if not isinstance(vuln, dict):
            errors.append("Vulnerability entry is not an object")
            continue
        if not vuln.get("cve_id"):
            errors.append("Vulnerability missing cve_id")
        if not vuln.get("dependency"):
            errors.append("Vulnerability missing dependency")
        if not vuln.get("severity"):
            errors.append("Vulnerability missing severity")

    return errors
