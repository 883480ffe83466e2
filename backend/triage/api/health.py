from fastapi import APIRouter

from triage.services.report_writer import ReportWriter

router = APIRouter()


@router.get("/live", summary="Liveness Probe")
async def liveness():
    """
    Liveness probe to check if the application process is running.
    """
    return {"status": "alive"}


@router.get("/ready", summary="Readiness Probe")
async def readiness():
    """
    Readiness probe.

    The classification pipeline has no external dependencies, so the service
    is always ready. The report writer is reported as degraded when no API key
    is configured, since every report then comes from the local fallback.
    """
    components = {
        "classifier": "operational",
        "report_writer": "configured" if ReportWriter().is_configured else "fallback_only",
    }
    return {"status": "ready", "components": components}
