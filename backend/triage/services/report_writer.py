"""
Report Writer

Turns an analysis result into a markdown report through an OpenAI compatible
chat completions API. The call is retried with exponential backoff and bounded
by an overall timeout. When the API is not configured, keeps failing or runs
out of time, a deterministic report is built locally instead and marked as
degraded. generate() never raises.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, List, Optional

import httpx
from pydantic import ValidationError

from triage.core import utc_now
from triage.core.config import settings
from triage.core.constants import sort_by_severity
from triage.core.http_utils import HTTPRequestError, post_json
from triage.core.metrics import report_fallbacks_total
from triage.schemas.analysis import (
    AnalysisResult,
    FalsePositiveOut,
    GeneratedReport,
    TrueVulnerabilityOut,
)

logger = logging.getLogger(__name__)

FALLBACK_MODEL = "fallback"
SERVICE_NAME = "report_writer"
DESCRIPTION_PREVIEW_LENGTH = 200

SYSTEM_PROMPT = """You are a senior security analyst generating vulnerability assessment reports. Your reports should be:
- Clear and actionable
- Properly prioritized by severity
- Include specific remediation steps
- Professional in tone
- Well-formatted with markdown tables and headers

When presenting vulnerabilities:
- Group by severity (CRITICAL first, then HIGH, MEDIUM, LOW)
- Include CVE IDs for reference
- Provide clear upgrade paths when available

For false positives:
- Explain why each was classified as a false positive
- Group by reason category
- This helps teams understand the analysis methodology"""


class ReportGenerationError(Exception):
    """The report API could not produce a report."""


def _format_cvss(score: Optional[float]) -> str:
    return "N/A" if score is None else f"{score:.1f}"


def _format_false_positives_for_prompt(false_positives: List[FalsePositiveOut], limit: int) -> str:
    if not false_positives:
        return "No false positives identified."
    return "\n".join(
        f"- **{fp.cve_id}** in {fp.dependency}: {fp.reason} - {fp.details}"
        for fp in false_positives[:limit]
    )


def _format_vulnerabilities_for_prompt(
    vulnerabilities: List[TrueVulnerabilityOut], limit: int
) -> str:
    if not vulnerabilities:
        return "No true vulnerabilities identified."

    lines = []
    for vuln in sort_by_severity(vulnerabilities)[:limit]:
        description = vuln.description[:DESCRIPTION_PREVIEW_LENGTH] or "No description"
        lines.append(
            f"- **{vuln.cve_id}** [{vuln.severity.value}] in {vuln.dependency}: "
            f"CVSS {_format_cvss(vuln.cvss_score)} - {description}"
        )
    return "\n".join(lines)


def build_prompt(analysis: AnalysisResult, max_items: Optional[int] = None) -> str:
    """Build the user prompt for the report model."""
    limit = max_items if max_items is not None else settings.REPORT_MAX_PROMPT_ITEMS
    metadata = analysis.metadata
    summary = json.dumps(analysis.summary.model_dump(mode="json"), indent=2)

    return f"""Analyze the following vulnerability scan results and generate a comprehensive security report.

## Analysis Data

### Summary
- Total vulnerabilities scanned: {metadata.total_vulnerabilities_scanned}
- False positives identified: {metadata.false_positives_identified}
- True vulnerabilities found: {metadata.true_vulnerabilities_found}
- Project: {metadata.project_name}
- Analysis timestamp: {metadata.analysis_timestamp.isoformat()}

### False Positives ({len(analysis.false_positives)} items)
{_format_false_positives_for_prompt(analysis.false_positives, limit)}

### True Vulnerabilities ({len(analysis.true_vulnerabilities)} items)
{_format_vulnerabilities_for_prompt(analysis.true_vulnerabilities, limit)}

### Risk Summary
{summary}

Please generate a report with the following sections:
1. Executive Summary - A brief overview suitable for management
2. False Positives Table - Showing which vulnerabilities were identified as false positives and why
3. Actual Vulnerabilities Table - Showing real vulnerabilities with severity, CVSS score, and description
4. Remediation Recommendations - Prioritized list of actions to address the vulnerabilities
5. Risk Assessment - Overall risk posture and recommendations

Format the tables in markdown format for easy reading.
"""


def build_fallback_report(analysis: AnalysisResult, error: Optional[str] = None) -> GeneratedReport:
    """
    Build a basic markdown report locally.

    Only reads the analysis result, so the same input always gives the same
    report.
    """
    metadata = analysis.metadata
    summary = analysis.summary
    vulns = sort_by_severity(analysis.true_vulnerabilities)
    fps = analysis.false_positives

    lines = [
        "# Vulnerability Analysis Report",
        "",
        f"**Generated:** {metadata.analysis_timestamp.isoformat()}",
        f"**Project:** {metadata.project_name}",
        "",
        "> Note: Automated report generation was unavailable. This is a basic report.",
        "",
        "## Executive Summary",
        "",
        f"This analysis identified **{len(vulns)} genuine vulnerabilities** and "
        f"**{len(fps)} false positives** from a total of "
        f"{metadata.total_vulnerabilities_scanned} reported findings.",
        "",
        "**Severity Breakdown:**",
        f"- Critical: {summary.severity_breakdown.critical}",
        f"- High: {summary.severity_breakdown.high}",
        f"- Medium: {summary.severity_breakdown.medium}",
        f"- Low: {summary.severity_breakdown.low}",
        "",
        f"**Risk Score:** {summary.risk_score}/100",
        "",
        "## False Positives",
        "",
    ]

    if fps:
        lines += [
            "| CVE ID | Dependency | Reason | Confidence |",
            "|--------|------------|--------|------------|",
        ]
        lines += [
            f"| {fp.cve_id} | {fp.dependency} | {fp.reason} | {fp.confidence.value} |" for fp in fps
        ]
    else:
        lines.append("No false positives were identified.")
    lines += ["", "## Vulnerabilities Requiring Action", ""]

    if vulns:
        lines += [
            "| CVE ID | Dependency | Severity | CVSS Score |",
            "|--------|------------|----------|------------|",
        ]
        lines += [
            f"| {v.cve_id} | {v.dependency} | {v.severity.value} | {_format_cvss(v.cvss_score)} |"
            for v in vulns
        ]
        lines += ["", "## Remediation Recommendations", ""]
        for vuln in vulns:
            lines += [f"### {vuln.cve_id}", "Upgrade to the latest patched version.", ""]
    else:
        lines.append(
            "No actionable vulnerabilities were found. "
            "The identified issues were classified as false positives."
        )

    return GeneratedReport(
        content="\n".join(lines).rstrip() + "\n",
        model=FALLBACK_MODEL,
        generated_at=metadata.analysis_timestamp,
        tokens_used=0,
        degraded=True,
        error=error or "Unknown error",
    )


class ReportWriter:
    """Client for the report generation API."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        request_timeout: Optional[float] = None,
        total_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._api_url = (api_url or settings.REPORT_API_URL).rstrip("/")
        self._api_key = (api_key if api_key is not None else settings.REPORT_API_KEY).strip()
        self._model = model or settings.REPORT_MODEL
        self._max_retries = max_retries if max_retries is not None else settings.REPORT_MAX_RETRIES
        self._retry_delay = (
            retry_delay if retry_delay is not None else settings.REPORT_RETRY_BASE_DELAY
        )
        self._request_timeout = (
            request_timeout if request_timeout is not None else settings.REPORT_REQUEST_TIMEOUT
        )
        self._total_timeout = (
            total_timeout if total_timeout is not None else settings.REPORT_TOTAL_TIMEOUT
        )
        self._transport = transport
        self._sleep = sleep

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def _payload(self, analysis: AnalysisResult) -> dict:
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(analysis)},
            ],
            "temperature": settings.REPORT_TEMPERATURE,
            "max_tokens": settings.REPORT_MAX_TOKENS,
            "top_p": 1,
        }

    async def _request_report(self, client: httpx.AsyncClient, analysis: AnalysisResult) -> GeneratedReport:
        try:
            data = await post_json(
                client,
                f"{self._api_url}/chat/completions",
                self._payload(analysis),
                headers=self._headers(),
                timeout=self._request_timeout,
                service_name=SERVICE_NAME,
            )
        except HTTPRequestError as e:
            raise ReportGenerationError(str(e)) from e

        try:
            return self._parse_completion(data)
        except (AttributeError, IndexError, KeyError, TypeError, ValidationError) as e:
            raise ReportGenerationError(f"Malformed response from report API: {e}") from e

    def _parse_completion(self, data: Any) -> GeneratedReport:
        choices = data.get("choices") or []
        content = (choices[0].get("message") or {}).get("content") if choices else None
        if not content:
            raise ReportGenerationError("Empty response from report API")

        usage = data.get("usage") or {}
        return GeneratedReport(
            content=content,
            model=data.get("model") or self._model,
            generated_at=utc_now(),
            tokens_used=usage.get("total_tokens") or 0,
        )

    async def _generate_with_retries(self, analysis: AnalysisResult) -> GeneratedReport:
        last_error: Optional[Exception] = None

        async with httpx.AsyncClient(transport=self._transport) as client:
            for attempt in range(self._max_retries):
                try:
                    return await self._request_report(client, analysis)
                except ReportGenerationError as e:
                    last_error = e
                    logger.warning(
                        f"Report generation attempt {attempt + 1}/{self._max_retries} failed: {e}"
                    )
                    cause = e.__cause__
                    if isinstance(cause, HTTPRequestError) and not cause.is_retryable:
                        # Bad key or bad request, retrying won't help
                        break

                if attempt < self._max_retries - 1:
                    wait_time = self._retry_delay * (2**attempt)
                    logger.info(f"Retrying report generation in {wait_time}s")
                    await self._sleep(wait_time)

        raise ReportGenerationError(str(last_error) if last_error else "No attempts made")

    async def generate(self, analysis: AnalysisResult) -> GeneratedReport:
        """
        Generate a report for an analysis result.

        Falls back to build_fallback_report() when no API key is configured,
        when all attempts fail or when the total timeout is exceeded.
        """
        if not self.is_configured:
            logger.warning("Report API key not configured, using fallback report")
            report_fallbacks_total.inc()
            return build_fallback_report(analysis, "Report API key is not configured")

        try:
            return await asyncio.wait_for(
                self._generate_with_retries(analysis), timeout=self._total_timeout
            )
        except ReportGenerationError as e:
            error = str(e)
        except asyncio.TimeoutError:
            error = f"Report generation timed out after {self._total_timeout}s"

        logger.error(f"All report generation attempts failed, using fallback report: {error}")
        report_fallbacks_total.inc()
        return build_fallback_report(analysis, error)


async def generate_report(
    analysis: AnalysisResult, writer: Optional[ReportWriter] = None
) -> GeneratedReport:
    """Generate a report with the configured writer."""
    return await (writer or ReportWriter()).generate(analysis)
