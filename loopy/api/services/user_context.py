"""Server-side user context injection.

The user comes from auth (Authorization header: Bearer user:<id> or a JWT whose
sub claim is the user id). Client-provided user_id in query/body is ignored.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request


@dataclass(frozen=True)
class UserContext:
    """User context from auth. user_id required; email/role optional (JWT claims)."""

    user_id: str
    email: str | None = None
    role: str | None = None


def get_user_id(request: Request) -> str:
    """FastAPI dependency: return user_id from request.state (set by auth middleware).
    Raises 401 if missing."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id or not str(user_id).strip():
        raise HTTPException(status_code=401, detail="User ID required")
    return str(user_id).strip()


def get_user_context(request: Request) -> UserContext:
    """FastAPI dependency: return UserContext from request.state."""
    user_id = get_user_id(request)
    return UserContext(
        user_id=user_id,
        email=getattr(request.state, "email", None),
        role=getattr(request.state, "role", None),
    )


# Type aliases for Depends()
UserId = Annotated[str, Depends(get_user_id)]
UserContextDep = Annotated[UserContext, Depends(get_user_context)]
