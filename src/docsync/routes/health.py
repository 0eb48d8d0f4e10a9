"""Liveness and readiness probes for the sync service."""
import time
from typing import Literal

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from docsync import __version__

router = APIRouter(prefix="/health", tags=["health"])

CheckStatus = Literal["ok", "degraded", "failed"]


class LivenessResponse(BaseModel):
    status: Literal["alive"]
    version: str


class DependencyCheck(BaseModel):
    """Result of probing one dependency.

    Attributes:
        name: Dependency probed (store, search_engine, enrichment).
        status: ``degraded`` marks a dependency that is optional for
            readiness, such as unconfigured enrichment.
        latency_ms: Time spent on the probe.
        message: Failure or degradation detail.
    """

    name: str
    status: CheckStatus
    latency_ms: float
    message: str | None = None


class ReadinessResponse(BaseModel):
    status: Literal["ready", "not_ready"]
    index: str
    checks: list[DependencyCheck]


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _probe_store(request: Request) -> DependencyCheck:
    start = time.perf_counter()
    try:
        request.app.state.store.ping()
    except Exception as e:
        return DependencyCheck(
            name="store", status="failed", latency_ms=_elapsed_ms(start), message=str(e)
        )
    return DependencyCheck(name="store", status="ok", latency_ms=_elapsed_ms(start))


async def _probe_engine(request: Request) -> DependencyCheck:
    start = time.perf_counter()
    healthy = await request.app.state.engine.is_healthy()
    return DependencyCheck(
        name="search_engine",
        status="ok" if healthy else "failed",
        latency_ms=_elapsed_ms(start),
        message=None if healthy else "Search engine unavailable",
    )


def _probe_enrichment(request: Request) -> DependencyCheck:
    # Configuration only; the enrichment service is never called from a probe.
    if request.app.state.enrichment.enabled:
        return DependencyCheck(name="enrichment", status="ok", latency_ms=0.0)
    return DependencyCheck(
        name="enrichment",
        status="degraded",
        latency_ms=0.0,
        message="Enrichment base URL not configured; records are saved unenriched",
    )


@router.get("/live", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Report that the process is up, without touching dependencies."""
    return LivenessResponse(status="alive", version=__version__)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(request: Request) -> JSONResponse:
    """Probe the record store, search engine and enrichment configuration.

    Returns 503 when the store or engine fails. A degraded enrichment check
    does not make the service unready, since writes still succeed without it.

    Returns:
        Overall status, the managed index name and per-dependency results.
    """
    checks = [
        _probe_store(request),
        await _probe_engine(request),
        _probe_enrichment(request),
    ]
    ready = all(c.status != "failed" for c in checks)
    response = ReadinessResponse(
        status="ready" if ready else "not_ready",
        index=request.app.state.settings.index_name,
        checks=checks,
    )
    code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=response.model_dump(), status_code=code)
