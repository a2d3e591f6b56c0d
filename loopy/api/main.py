"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logging.basicConfig(level=logging.INFO)
from fastapi.middleware.cors import CORSMiddleware

from loopy.api.config import config, is_test
from loopy.api.db import ensure_tables
from loopy.api.routes import analytics, check_link, domains, health, links, profile
from loopy.api.services.auth import auth_middleware
from loopy.api.services.errors import ConflictError, NotFoundError, ValidationError
from loopy.api.services.user_guard import UserRequiredError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ensure tables exist on startup (SQLite / opt-in; Postgres uses Alembic)."""
    ensure_tables()
    yield


app = FastAPI(
    title="LoopyLink API",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: explicit origins only (no wildcard)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(auth_middleware)


@app.exception_handler(NotFoundError)
async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": exc.code})


@app.exception_handler(ValidationError)
async def _invalid(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": exc.code, "message": str(exc)})


@app.exception_handler(ConflictError)
async def _conflict(request: Request, exc: ConflictError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": exc.code, "message": str(exc)})


@app.exception_handler(UserRequiredError)
async def _user_required(request: Request, exc: UserRequiredError) -> JSONResponse:
    return JSONResponse(status_code=401, content={"detail": "User ID required"})


app.include_router(health.router, tags=["health"])
app.include_router(domains.router, prefix="/domains", tags=["domains"])
app.include_router(links.router, prefix="/links", tags=["links"])
app.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
app.include_router(profile.router, prefix="/profile", tags=["profile"])
app.include_router(check_link.router, prefix="/api", tags=["check-link"])

if is_test():
    from loopy.api.routes import debug

    app.include_router(debug.router, prefix="/debug", tags=["debug"])
