from fastapi import FastAPI

from triage.api import health
from triage.api.v1.endpoints import analysis
from triage.core.config import settings
from triage.core.logging import setup_logging
from triage.core.metrics import APP_VERSION, PrometheusMiddleware, metrics_endpoint

setup_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Reachability Triage API for separating false positives from real risk in dependency vulnerability scans.

    ## Features
    * **Reachability Analysis**: Manifest membership, file paths and call graphs decide whether vulnerable code can run.
    * **False-Positive Classification**: Version, environment, dev-only, reachability and transitive checks with confidence grades.
    * **Summary Statistics**: Severity breakdown, false-positive rate and risk score per run.
    * **Reports**: Markdown reports via an OpenAI compatible API, with a local fallback.

    """,
    version=APP_VERSION if APP_VERSION != "unknown" else settings.TOOL_VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
)

app.add_middleware(PrometheusMiddleware)

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(analysis.router, prefix=f"{settings.API_V1_STR}", tags=["analysis"])
app.add_route("/metrics", metrics_endpoint, include_in_schema=False)


@app.get("/")
async def root():
    return {"message": "Welcome to Reachability Triage API"}
