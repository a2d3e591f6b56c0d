"""Auth middleware: inject user_id from the Authorization header only.

The user comes from a JWT whose `sub` claim is the user id. Outside production,
when ENV=test or ALLOW_DEV_AUTH=1, the development form `Bearer user:<id>` and unsigned
JWTs (no JWT_SECRET) are also accepted. Production without JWT_SECRET rejects every
bearer. Client-provided user_id in query/body/headers is
ignored, except X-User-Debug when ENV=test AND ENABLE_TEST_USER_HEADER=1.
"""

import logging
import os
import re
from typing import Any, Literal

import jwt
from starlette.requests import Request
from starlette.responses import JSONResponse

from loopy.api.config import config, is_production, is_test

logger = logging.getLogger(__name__)

# "Bearer user:A" or "Bearer user=B"
BEARER_USER_PATTERN = re.compile(r"^Bearer\s+user[:=](.+)$", re.IGNORECASE)

JWT_AUDIENCE = "authenticated"

# Paths served without a user (health checks, OpenAPI docs)
PUBLIC_PATHS = frozenset({"/health", "/docs", "/openapi.json", "/redoc"})


def _allow_dev_auth() -> bool:
    """Development bearer forms: never in production; ENV=test or ALLOW_DEV_AUTH=1 otherwise."""
    if is_production():
        return False
    return is_test() or os.getenv("ALLOW_DEV_AUTH", "").lower() in ("1", "true", "yes")


def _allow_user_debug_header() -> bool:
    """Only allow X-User-Debug when ENV=test AND ENABLE_TEST_USER_HEADER=1."""
    if is_production() or not is_test():
        return False
    return os.getenv("ENABLE_TEST_USER_HEADER", "").lower() in ("1", "true", "yes")


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode a bearer JWT. Verifies HS256 signature and audience when JWT_SECRET is set.
    Without a secret the token is only trusted in development mode.
    Returns the claims, or None when the token is not a usable JWT."""
    secret = config.JWT_SECRET
    if not secret and not _allow_dev_auth():
        logger.warning("Rejected bearer token: JWT_SECRET is not configured")
        return None
    try:
        if secret:
            return jwt.decode(token, secret, algorithms=["HS256"], audience=JWT_AUDIENCE)
        return jwt.decode(token, options={"verify_signature": False, "verify_aud": False})
    except jwt.PyJWTError as e:
        logger.info("Rejected bearer token: %s", e.__class__.__name__)
        return None


def _extract_user(auth_header: str) -> tuple[str | Literal[False], dict[str, Any]]:
    """Parse user_id (and extra JWT claims) from a Bearer header. Returns (user_id, claims)."""
    if not auth_header or not auth_header.strip().lower().startswith("bearer "):
        return False, {}
    m = BEARER_USER_PATTERN.match(auth_header.strip())
    if m:
        if not _allow_dev_auth():
            return False, {}
        return m.group(1).strip() or False, {}
    token = auth_header.strip()[7:].strip()
    claims = decode_token(token)
    if not claims or not claims.get("sub"):
        return False, {}
    return str(claims["sub"]).strip() or False, claims


async def auth_middleware(request: Request, call_next):
    """Resolve the caller. Public paths pass through; everything else needs a user or gets 401."""

    if request.url.path.rstrip("/") in PUBLIC_PATHS or request.method == "OPTIONS":
        return await call_next(request)

    user_id: str | None = None
    claims: dict[str, Any] = {}

    auth_header = request.headers.get("Authorization")
    if auth_header:
        parsed, claims = _extract_user(auth_header)
        if parsed is not False:
            user_id = parsed

    if user_id is None and _allow_user_debug_header():
        user_id = (request.headers.get("X-User-Debug") or "").strip() or None

    if not user_id:
        return JSONResponse(
            status_code=401,
            content={"detail": "Missing or invalid user. Use Authorization: Bearer user:<id> or a JWT with sub"},
        )

    request.state.user_id = user_id
    if claims.get("email"):
        request.state.email = claims["email"]
    if claims.get("role"):
        request.state.role = claims["role"]
    return await call_next(request)
