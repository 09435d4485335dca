"""Health check endpoints for blobworks.

Provides Kubernetes-compatible liveness and readiness probes:
- /health/live  - Liveness probe (always returns OK if process is running)
- /health/ready - Readiness probe (checks the entry store and connector bootstrap)
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import ORJSONResponse

from blobworks.entity.base import EntityStorageConnector
from blobworks.persistence.db import health_check as db_health_check

router = APIRouter(tags=["health"])


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""

    name: str
    status: HealthStatus
    latency_ms: float
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            result["message"] = self.message
        return result


async def check_entry_storage(storage: EntityStorageConnector | None) -> ComponentHealth:
    """Check the entry store; SQL stores are pinged, memory stores are always up."""
    start = time.monotonic()
    engine = getattr(storage, "engine", None)
    if storage is None:
        return ComponentHealth("entries", HealthStatus.UNHEALTHY, 0.0, "Entry store not built")
    if engine is None:
        return ComponentHealth("entries", HealthStatus.HEALTHY, 0.0)

    try:
        healthy = await asyncio.wait_for(db_health_check(engine), timeout=5.0)
        message = None if healthy else "Database check failed"
    except asyncio.TimeoutError:
        healthy, message = False, "Database check timed out"
    latency = (time.monotonic() - start) * 1000
    return ComponentHealth(
        name="entries",
        status=HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY,
        latency_ms=latency,
        message=message,
    )


def check_connectors(bootstrap_results: dict[str, bool] | None) -> ComponentHealth:
    """Report connectors whose bootstrap failed at startup."""
    if not bootstrap_results:
        return ComponentHealth("connectors", HealthStatus.HEALTHY, 0.0)
    failed = [name for name, ok in bootstrap_results.items() if not ok and name != "entries"]
    if not failed:
        return ComponentHealth("connectors", HealthStatus.HEALTHY, 0.0)
    return ComponentHealth(
        "connectors",
        HealthStatus.DEGRADED,
        0.0,
        f"Bootstrap failed: {', '.join(sorted(failed))}",
    )


@router.get("/health/live")
async def live() -> dict[str, str]:
    """Liveness probe.

    Returns OK if the process is running.
    """
    return {"status": "ok"}


@router.get("/health/ready")
async def ready(request: Request) -> ORJSONResponse:
    """Readiness probe.

    Returns 200 when the entry store is reachable, 503 otherwise. Connectors
    that failed to bootstrap degrade the status without failing the probe.
    """
    state = request.app.state
    components = [
        await check_entry_storage(getattr(state, "entry_storage", None)),
        check_connectors(getattr(state, "bootstrap_results", None)),
    ]

    if all(c.status == HealthStatus.HEALTHY for c in components):
        overall_status = HealthStatus.HEALTHY
    elif any(c.status == HealthStatus.UNHEALTHY for c in components):
        overall_status = HealthStatus.UNHEALTHY
    else:
        overall_status = HealthStatus.DEGRADED

    result = {
        "status": overall_status.value,
        "components": [c.to_dict() for c in components],
    }
    status_code = 503 if overall_status == HealthStatus.UNHEALTHY else 200
    return ORJSONResponse(content=result, status_code=status_code)
