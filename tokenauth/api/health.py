"""Health and readiness endpoints.

  /health (liveness):  the process can answer.  Always 200; the body lists
                       which backing store is in use.
  /ready (readiness):  this instance can serve grants.  503 when a
                       database is configured but does not answer, so the
                       load balancer stops routing here until it recovers.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from tokenauth.db import engine as db_engine

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    checks: dict[str, str] = {}
    overall = "ok"

    if db_engine.engine is None:
        checks["database"] = "not_configured"
    elif await db_engine.ping():
        checks["database"] = "ok"
    else:
        checks["database"] = "degraded"
        overall = "degraded"

    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    # In-memory mode has nothing to wait for.
    if db_engine.engine is not None and not await db_engine.ping():
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
