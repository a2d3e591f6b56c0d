"""Short link CRUD. Links live on a verified domain (root or group) owned by the same user."""

import logging
import re
from datetime import datetime
from typing import Any

from loopy.api.models.link import LINK_STATUSES, REDIRECT_TYPES, Link
from loopy.api.services import repo
from loopy.api.services.errors import NotFoundError, ValidationError
from loopy.api.services.url_utils import is_http_url

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

# Columns without a null state; an explicit null in a create or patch is an error
NOT_NULL_FIELDS = ("domain_id", "slug", "destination_url", "redirect_type", "status", "epc")


def full_url(link: Link, domain_name: str | None = None) -> str:
    """https://<domain>/<slug>. domain_name overrides the joined relationship."""
    name = domain_name if domain_name is not None else (link.domain.domain if link.domain else "")
    return f"https://{name}/{link.slug}"


def _clean_tags(tags: list[str] | None) -> list[str]:
    """Strip, drop empties, de-duplicate preserving first occurrence."""
    seen: dict[str, None] = {}
    for t in tags or []:
        t = (t or "").strip()
        if t:
            seen.setdefault(t, None)
    return list(seen)


def _validate(fields: dict[str, Any]) -> dict[str, Any]:
    """Validate the subset of link fields present in fields. Returns a cleaned copy."""
    out = dict(fields)
    for key in NOT_NULL_FIELDS:
        if key in out and out[key] is None:
            raise ValidationError(f"{key}_required", f"{key} cannot be null")
    if "slug" in out:
        slug = (out["slug"] or "").strip()
        if not SLUG_PATTERN.match(slug):
            raise ValidationError("slug_invalid", "Slug may contain letters, numbers, '-' and '_' only")
        out["slug"] = slug
    if "destination_url" in out:
        url = (out["destination_url"] or "").strip()
        if not is_http_url(url):
            raise ValidationError("destination_invalid", "Destination must be an http(s) URL")
        out["destination_url"] = url
    if "redirect_type" in out:
        out["redirect_type"] = str(out["redirect_type"])
        if out["redirect_type"] not in REDIRECT_TYPES:
            raise ValidationError("redirect_type_invalid", "redirect_type must be 301 or 307")
    if "status" in out:
        out["status"] = str(out["status"]).lower()
        if out["status"] not in LINK_STATUSES:
            raise ValidationError("status_invalid", f"status must be one of {', '.join(LINK_STATUSES)}")
    if "epc" in out:
        out["epc"] = float(out["epc"])
        if out["epc"] < 0:
            raise ValidationError("epc_invalid", "epc must be >= 0")
    if "tags" in out:
        out["tags"] = _clean_tags(out["tags"])
    if "utm_params" in out:
        out["utm_params"] = {str(k): str(v) for k, v in (out["utm_params"] or {}).items()}
    if "note" in out and out["note"] is not None:
        out["note"] = out["note"].strip() or None
    return out


def _require_verified_domain(user_id: str, domain_id: str):
    domain = repo.get_domain(user_id, domain_id)
    if domain is None:
        raise NotFoundError("domain")
    if not domain.verified:
        raise ValidationError("domain_not_verified", "Verify the domain before creating links on it")
    return domain


def create_link(
    user_id: str,
    *,
    domain_id: str,
    slug: str,
    destination_url: str,
    redirect_type: str = "307",
    status: str = "active",
    tags: list[str] | None = None,
    epc: float = 0.0,
    expire_at: datetime | None = None,
    note: str | None = None,
    utm_params: dict[str, str] | None = None,
) -> Link:
    """Create a link on one of the user's verified domains."""
    fields = _validate(
        {
            "domain_id": domain_id,
            "slug": slug,
            "destination_url": destination_url,
            "redirect_type": redirect_type,
            "status": status,
            "tags": tags,
            "epc": epc,
            "expire_at": expire_at,
            "note": note,
            "utm_params": utm_params,
        }
    )
    _require_verified_domain(user_id, domain_id)
    link = repo.insert_link(user_id, fields)
    logger.info("Link created user=%s id=%s slug=%s", user_id, link.id, link.slug)
    return link


def get_link(user_id: str, link_id: str) -> Link:
    link = repo.get_link(user_id, link_id)
    if link is None:
        raise NotFoundError("link")
    return link


def list_links(
    user_id: str,
    *,
    status: str | None = None,
    tag: str | None = None,
    domain_id: str | None = None,
) -> list[Link]:
    return repo.list_links(user_id, status=status, tag=tag, domain_id=domain_id)


def update_link(user_id: str, link_id: str, changes: dict[str, Any]) -> Link:
    """Partial update. Moving a link to another domain requires that domain to be verified."""
    fields = _validate(changes)
    if "domain_id" in fields:
        _require_verified_domain(user_id, fields["domain_id"])
    link = repo.update_link(user_id, link_id, fields)
    if link is None:
        raise NotFoundError("link")
    logger.info("Link updated user=%s id=%s fields=%s", user_id, link_id, sorted(fields))
    return link


def delete_link(user_id: str, link_id: str) -> None:
    if not repo.delete_link(user_id, link_id):
        raise NotFoundError("link")
    logger.info("Link deleted user=%s id=%s", user_id, link_id)


def list_tags(user_id: str) -> list[str]:
    return repo.list_tags(user_id)
