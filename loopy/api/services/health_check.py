"""Destination health check. One outbound call to the check-broken-links function per request."""

import logging
from datetime import datetime, timezone
from typing import Any

import requests

from loopy.api.config import config
from loopy.api.services import repo
from loopy.api.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class HealthCheckFailed(RuntimeError):
    """The remote checker answered non-2xx. details carries its body text."""

    def __init__(self, details: str):
        super().__init__("Edge function failed")
        self.details = details


def call_checker(url: str, link_id: str) -> dict[str, Any]:
    """POST {url, linkId} to CHECK_BROKEN_LINKS_URL with the service-role bearer."""
    if not config.CHECK_BROKEN_LINKS_URL:
        raise RuntimeError("CHECK_BROKEN_LINKS_URL is not configured")
    resp = requests.post(
        config.CHECK_BROKEN_LINKS_URL,
        json={"url": url, "linkId": link_id},
        headers={
            "Authorization": f"Bearer {config.SERVICE_ROLE_KEY}",
            "Content-Type": "application/json",
        },
        timeout=config.HTTP_TIMEOUT,
    )
    if not resp.ok:
        logger.warning("Health check failed link=%s status=%s", link_id, resp.status_code)
        raise HealthCheckFailed(resp.text)
    return resp.json()


def check_link(user_id: str, link_id: str) -> dict[str, Any]:
    """Check the link's destination, persist is_broken/last_checked_broken, return the checker's JSON."""
    link = repo.get_link(user_id, link_id)
    if link is None:
        raise NotFoundError("link")
    result = call_checker(link.destination_url, link.id)
    broken = result.get("broken") if isinstance(result, dict) else None
    repo.set_link_broken(
        user_id,
        link.id,
        is_broken=None if broken is None else bool(broken),
        checked_at=datetime.now(timezone.utc),
    )
    logger.info("Health check link=%s broken=%s", link.id, broken)
    return result
