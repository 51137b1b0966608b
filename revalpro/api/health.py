"""Liveness and readiness probes.

/health always answers 200; its ``status`` field reports "degraded" when a
configured Redis is unreachable.  /ready stays 200 because the in-memory
store keeps the service usable without Redis.
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from revalpro.db.redis import redis_pool

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    checks: dict[str, str] = {}
    overall = "ok"

    if redis_pool is not None:
        try:
            await redis_pool.ping()  # type: ignore[misc]
            checks["redis"] = "ok"
        except Exception:
            checks["redis"] = "degraded"
            overall = "degraded"
    else:
        checks["redis"] = "not_configured"

    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    return Response(status_code=200)
