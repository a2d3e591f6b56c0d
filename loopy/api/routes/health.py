"""GET /health for load balancers and the redirect edge. Exempt from the auth middleware."""

import os
from datetime import datetime, timezone

from fastapi import APIRouter

from loopy.api.schemas.health import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness only; does not touch the links database. version is the deployed GIT_SHA."""
    return HealthResponse(
        ok=True,
        version=os.getenv("GIT_SHA", "").strip() or "dev",
        time=datetime.now(timezone.utc).isoformat(),
    )
