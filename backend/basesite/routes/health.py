"""
Base Example Site — Health Check Route
========================================

What:  JSON health endpoint for container probes and load balancers.
Why:   The site is only useful while the Base API answers; the probe reports
       that separately so an outage upstream is visible without paging
       through rendered error pages.
How:   Makes the cheapest authenticated call the client offers
       (BaseClient.health_check) and reports the aggregate status.

Status levels:
    healthy:   Base API reachable and the access token accepted
    degraded:  Site is up but the Base API is unreachable or rejects the token
"""

import logging
import time

from fastapi import APIRouter, Request

from basesite import __version__
from basesite.schemas.resources import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Probe the Base API and return the aggregate status with uptime."""
    client = request.app.state.base_client
    base_api = "available"
    overall = "healthy"

    # ── Check Base API ────────────────────────────────────────────────────
    if not await client.health_check():
        base_api = "unavailable"
        overall = "degraded"
        logger.warning("Health check: Base API unavailable at %s", client.url)

    return HealthResponse(
        status=overall,
        version=__version__,
        base_api=base_api,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
