"""
Prometheus metrics for the triage service.

Classification runs, per-verdict finding counts, report writer calls and the
HTTP layer. Everything is registered on the default registry and served on
/metrics.
"""

import logging
import re
import time
from contextlib import contextmanager
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from typing import Callable, Dict, Iterator

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

try:
    APP_VERSION = get_version("reachability-triage")
except PackageNotFoundError:
    # Running from a source checkout
    APP_VERSION = "unknown"

app_info = Info("triage_app", "Application information")
app_info.info({"version": APP_VERSION, "app_name": "Reachability Triage"})

# --- HTTP -------------------------------------------------------------------

http_requests_total = Counter(
    "triage_http_requests_total",
    "HTTP requests by method, route and status",
    ["method", "endpoint", "status"],
)
http_request_duration_seconds = Histogram(
    "triage_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# --- Classification ---------------------------------------------------------

analysis_runs_total = Counter(
    "analysis_runs_total",
    "Classification runs, by whether a manifest and call graph were supplied",
    ["manifest", "call_graph"],
)
analysis_findings_total = Counter(
    "analysis_findings_total",
    "Classified findings by verdict and false-positive reason",
    ["verdict", "reason"],
)
analysis_duration_seconds = Histogram(
    "analysis_duration_seconds",
    "Wall time of one classification run",
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5),
)
analysis_validation_errors_total = Counter(
    "analysis_validation_errors_total",
    "Output invariant violations caught before a result was returned",
)

# --- Report writer ----------------------------------------------------------

external_api_requests_total = Counter(
    "triage_external_api_requests_total",
    "Outbound API calls by service",
    ["service"],
)
external_api_errors_total = Counter(
    "triage_external_api_errors_total",
    "Failed outbound API calls by service",
    ["service"],
)
external_api_duration_seconds = Histogram(
    "triage_external_api_duration_seconds",
    "Latency of successful outbound API calls",
    ["service"],
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0),
)
report_fallbacks_total = Counter(
    "report_fallbacks_total",
    "Reports served from the local fallback generator",
)

# --- Process ----------------------------------------------------------------

uptime_seconds = Gauge("triage_uptime_seconds", "Seconds since the service started")
_started_at = time.time()


def update_uptime() -> None:
    uptime_seconds.set(time.time() - _started_at)


async def metrics_endpoint(request: Request) -> Response:
    """Prometheus scrape endpoint."""
    update_uptime()
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Records count and latency of every request except scrapes."""

    _NUMERIC_SEGMENT_RE = re.compile(r"/\d+")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        endpoint = self._NUMERIC_SEGMENT_RE.sub("/{id}", request.url.path)
        started = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        except Exception as e:
            logger.error(f"Unhandled error serving {request.method} {endpoint}: {e}")
            raise
        finally:
            http_request_duration_seconds.labels(
                method=request.method, endpoint=endpoint
            ).observe(time.perf_counter() - started)
            http_requests_total.labels(
                method=request.method, endpoint=endpoint, status=status
            ).inc()


@contextmanager
def track_external_api(service: str) -> Iterator[None]:
    """Count an outbound call, and its latency or failure."""
    external_api_requests_total.labels(service=service).inc()
    started = time.perf_counter()
    try:
        yield
    except Exception:
        external_api_errors_total.labels(service=service).inc()
        raise
    external_api_duration_seconds.labels(service=service).observe(time.perf_counter() - started)


def record_classifications(false_positive_reasons: Dict[str, int], true_vulnerability_count: int) -> None:
    """Add one run's verdicts to analysis_findings_total."""
    for reason, count in false_positive_reasons.items():
        analysis_findings_total.labels(verdict="false_positive", reason=reason).inc(count)
    if true_vulnerability_count:
        analysis_findings_total.labels(verdict="true_vulnerability", reason="none").inc(
            true_vulnerability_count
        )
