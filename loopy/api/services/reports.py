"""Dashboard reports: fetch the user's links and clicks through repo, then aggregate."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from loopy.api.config import config
from loopy.api.models.link import Link
from loopy.api.services import repo
from loopy.api.services.analytics import Filter, LinkInfo, build_link_report, build_report
from loopy.api.services.errors import NotFoundError, ValidationError
from loopy.api.services.lifecycle import as_utc

logger = logging.getLogger(__name__)


def link_info(link: Link) -> LinkInfo:
    return LinkInfo(
        id=link.id,
        slug=link.slug,
        domain=link.domain.domain if link.domain else "",
        destination_url=link.destination_url,
        epc=float(link.epc or 0),
        status=link.status,
        expire_at=as_utc(link.expire_at),
        tags=tuple(link.tags or ()),
    )


def resolve_range(
    start: datetime | None,
    end: datetime | None,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Default to the last DEFAULT_RANGE_DAYS days ending now. Both bounds in UTC."""
    now = as_utc(now) or datetime.now(timezone.utc)
    end = as_utc(end) or now
    start = as_utc(start) or end - timedelta(days=config.DEFAULT_RANGE_DAYS)
    if start > end:
        raise ValidationError("range_invalid", "start must not be after end")
    return start, end


def dashboard_report(
    user_id: str,
    start: datetime | None = None,
    end: datetime | None = None,
    filters: list[Filter] | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    now = as_utc(now) or datetime.now(timezone.utc)
    start, end = resolve_range(start, end, now)
    links = [link_info(link) for link in repo.list_links(user_id)]
    clicks = repo.list_clicks(user_id, [link.id for link in links], start=start, end=end)
    logger.info(
        "Dashboard report user=%s links=%d clicks=%d filters=%d",
        user_id,
        len(links),
        len(clicks),
        len(filters or []),
    )
    return build_report(links, clicks, start, end, filters=filters or [], now=now, top_n=config.TOP_N)


def link_report(
    user_id: str,
    link_id: str,
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    now = as_utc(now) or datetime.now(timezone.utc)
    start, end = resolve_range(start, end, now)
    link = repo.get_link(user_id, link_id)
    if link is None:
        raise NotFoundError("link")
    clicks = repo.list_clicks(user_id, [link.id], start=start, end=end)
    return build_link_report(link_info(link), clicks, start, end, now=now, top_n=config.TOP_N)
