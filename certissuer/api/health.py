"""Health and readiness endpoints.

  /health (liveness): the process answers; includes dependency checks
    and whether lifecycle mutations are currently paused.  Always 200;
    the ``status`` field carries "ok" or "degraded".

  /ready (readiness): 503 when a configured database is unreachable,
    so the load balancer stops routing writes to this instance.

  /metrics: Prometheus scrape target.  Restrict it to the internal
    network in production.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text

from certissuer.api.dependencies import ServiceDep
from certissuer.db import engine as db_engine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _database_check() -> str:
    if db_engine.engine is None:
        return "not_configured"
    try:
        with db_engine.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database health check failed")
        return "degraded"
    return "ok"


@router.get("/health")
def health(service: ServiceDep) -> dict:
    checks = {"database": _database_check()}
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {
        "status": overall,
        "checks": checks,
        "paused": service.is_paused(),
    }


@router.get("/ready")
def ready() -> Response:
    if _database_check() == "degraded":
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    """Prometheus text exposition, lifecycle counters included."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
