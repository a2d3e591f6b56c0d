"""Link lifecycle. status is a plain field; "expired" is derived from expire_at at read time."""

from datetime import datetime, timezone
from typing import Any

STATUS_EXPIRED = "expired"


def as_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo); convert aware ones."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_expired(expire_at: datetime | None, now: datetime | None = None) -> bool:
    if expire_at is None:
        return False
    now = as_utc(now) or datetime.now(timezone.utc)
    return as_utc(expire_at) <= now


def effective_status(status: str, expire_at: datetime | None, now: datetime | None = None) -> str:
    """The status shown to users. Never written back to storage."""
    if is_expired(expire_at, now):
        return STATUS_EXPIRED
    return status


def status_display(status: str, expire_at: datetime | None, now: datetime | None = None) -> dict[str, Any]:
    """Label plus flags for the status dot next to a link."""
    expired = is_expired(expire_at, now)
    return {
        "label": "Expired" if expired else status[:1].upper() + status[1:],
        "effective_status": STATUS_EXPIRED if expired else status,
        "is_expired": expired,
        "strikethrough": status == "archived",
    }
