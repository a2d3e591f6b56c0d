"""Click ingestion app: POST / with the service-role bearer inserts one clicks row.

Deployed separately from the user API (uvicorn loopy.log_click.main:app). Callers are
the redirect edge, never end users, so there is no per-user auth here.
"""

import hmac
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

logging.basicConfig(level=logging.INFO)

from loopy.api.config import config
from loopy.api.services.service_repo import insert_click
from loopy.log_click.device_detection import fill_missing

logger = logging.getLogger(__name__)


class ClickIn(BaseModel):
    """One visitor hit as reported by the redirect edge."""

    model_config = ConfigDict(extra="ignore")

    link_id: str
    ip_address: str | None = None
    referrer: str | None = None
    user_agent: str | None = None
    country: str | None = None
    city: str | None = None
    device: str | None = None
    browser: str | None = None
    os: str | None = None
    is_broken: bool | None = None


def authorized(auth_header: str | None) -> bool:
    """Authorization must be exactly "Bearer <SERVICE_ROLE_KEY>" and the key must be configured."""
    key = config.SERVICE_ROLE_KEY
    if not key or not auth_header:
        return False
    return hmac.compare_digest(auth_header.encode(), f"Bearer {key}".encode())


app = FastAPI(title="LoopyLink log-click", version="0.1.0")


@app.post("/", response_class=PlainTextResponse)
async def log_click(request: Request) -> PlainTextResponse:
    if not authorized(request.headers.get("Authorization")):
        return PlainTextResponse("Unauthorized", status_code=401)
    try:
        click = ClickIn.model_validate(await request.json())
    except (ValueError, PydanticValidationError):
        return PlainTextResponse("Invalid payload", status_code=400)

    record = fill_missing(click.model_dump())
    record["timestamp"] = datetime.now(timezone.utc)
    try:
        click_id = insert_click(record)
    except SQLAlchemyError:
        logger.exception("Failed to log click link=%s", click.link_id)
        return PlainTextResponse("Failed to log click", status_code=500)
    logger.info("Click logged id=%s link=%s device=%s", click_id, click.link_id, record.get("device"))
    return PlainTextResponse("Click logged", status_code=200)
