from triage.services.analysis.engine import AnalysisOutputError, run_analysis
from triage.services.analysis.partition import partition_results
from triage.services.analysis.stats import (
    build_summary,
    calculate_false_positive_rate,
    calculate_risk_score,
)
from triage.services.analysis.validation import validate_analysis_output

__all__ = [
    # Engine
    "AnalysisOutputError",
    "run_analysis",
    # Results
    "partition_results",
    "build_summary",
    "calculate_false_positive_rate",
    "calculate_risk_score",
    "validate_analysis_output",
]
