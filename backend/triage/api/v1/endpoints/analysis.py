import logging

from fastapi import Depends, HTTPException

from triage.api.deps import get_report_writer
from triage.api.router import CustomAPIRouter
from triage.schemas.analysis import (
    AnalysisRequest,
    AnalysisResult,
    AnalyzeResponse,
    FullAnalysisResponse,
    ReportRequest,
    ReportResponse,
    ValidationErrorDetail,
)
from triage.services.analysis.engine import AnalysisOutputError, run_analysis
from triage.services.report_writer import ReportWriter

logger = logging.getLogger(__name__)

router = CustomAPIRouter()


def _run(request: AnalysisRequest) -> AnalysisResult:
    try:
        return run_analysis(
            request.findings,
            manifest=request.manifest,
            call_graph=request.call_graph,
            project_name=request.project_name,
            source_report_name=request.source_report_name,
        )
    except AnalysisOutputError as e:
        raise HTTPException(
            status_code=500,
            detail=ValidationErrorDetail(
                message="Analysis produced invalid output", errors=e.errors
            ).as_detail(),
        )


@router.post("/analyze", summary="Classify Findings", response_model=AnalyzeResponse)
async def analyze(request: AnalysisRequest):
    """
    Classify normalized findings into false positives and true vulnerabilities.

    Manifest and call graph are optional. Without them the analysis falls back
    to path heuristics and assumes findings are reachable.
    """
    return AnalyzeResponse(analysis=_run(request))


@router.post("/generate-report", summary="Generate Report", response_model=ReportResponse)
async def generate_report(
    request: ReportRequest,
    writer: ReportWriter = Depends(get_report_writer),
):
    """
    Write a markdown report for an existing analysis result.

    Always succeeds: if the report API is unavailable the locally built
    fallback report is returned with `degraded: true`.
    """
    report = await writer.generate(request.analysis)
    return ReportResponse(report=report)


@router.post("/full-analysis", summary="Classify Findings and Generate Report", response_model=FullAnalysisResponse)
async def full_analysis(
    request: AnalysisRequest,
    writer: ReportWriter = Depends(get_report_writer),
):
    analysis = _run(request)
    report = await writer.generate(analysis)
    return FullAnalysisResponse(analysis=analysis, report=report)
