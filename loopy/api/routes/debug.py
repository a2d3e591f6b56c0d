"""Debug endpoints for testing. Enabled only when ENV=test.

No DB access; auth tests use it to check user injection in isolation.
"""

from fastapi import APIRouter

from loopy.api.services.user_context import UserContextDep

router = APIRouter()


@router.get("/user")
async def debug_user(ctx: UserContextDep) -> dict:
    """Return the caller identity from auth. For testing only (ENV=test)."""
    return {"user_id": ctx.user_id, "email": ctx.email, "role": ctx.role}
