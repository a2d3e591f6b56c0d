"""POST /api/check-link: run the destination health check for one of the caller's links.

Errors use {"error": ..., "details": ...} bodies rather than the API's {"detail": ...}
so existing dashboard callers keep working. The body is read by hand: a bad shape is
a 400, never a 422.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from loopy.api.services.errors import NotFoundError
from loopy.api.services.health_check import HealthCheckFailed, check_link as run_check
from loopy.api.services.user_context import UserId

logger = logging.getLogger(__name__)

router = APIRouter()

MISSING_LINK_ID = {"error": "Missing required field: linkId"}


async def _read_body(request: Request) -> tuple[str, list[str]]:
    """Returns (linkId, unexpected keys). linkId is "" unless the body carries a string one."""
    try:
        body = await request.json()
    except ValueError:
        return "", []
    if not isinstance(body, dict):
        return "", []
    value = body.get("linkId")
    extra = sorted(k for k in body if k != "linkId")
    return (value.strip() if isinstance(value, str) else ""), extra


@router.post("/check-link")
async def check_link(request: Request, user_id: UserId) -> JSONResponse:
    link_id, extra = await _read_body(request)
    if not link_id:
        return JSONResponse(status_code=400, content=MISSING_LINK_ID)
    if extra:
        # user_id is never read from the body
        return JSONResponse(status_code=400, content={"error": f"Unexpected field: {', '.join(extra)}"})
    try:
        # requests.post with HTTP_TIMEOUT; keep it off the event loop
        result = await run_in_threadpool(run_check, user_id, link_id)
    except NotFoundError:
        return JSONResponse(status_code=404, content={"error": "Link not found"})
    except HealthCheckFailed as e:
        return JSONResponse(status_code=500, content={"error": "Edge function failed", "details": e.details})
    except Exception as e:
        logger.exception("check-link failed link=%s", link_id)
        return JSONResponse(status_code=500, content={"error": "Unexpected error", "details": str(e)})
    return JSONResponse(status_code=200, content=result)
