"""Repository layer. All functions require user_id as first argument; guard raises if None/empty.

RULE: Repo is the ONLY place allowed to run DB reads/writes (session.execute, get_db),
apart from service_repo.py for trusted service-role writes.
All user-scoped queries MUST use user_filters (select_*_for_user / user_where).

GUARD: Every function MUST call require_user_id(user_id) before any DB access.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from loopy.api.db import get_db
from loopy.api.models.click import Click
from loopy.api.models.domain import Domain
from loopy.api.models.link import Link
from loopy.api.models.profile import Profile
from loopy.api.repositories.user_filters import (
    select_click_for_user,
    select_domain_for_user,
    select_link_for_user,
    select_profile_for_user,
    user_where,
)
from loopy.api.services.errors import ConflictError
from loopy.api.services.user_guard import UserRequiredError, require_user_id

LINK_UPDATABLE_FIELDS = frozenset(
    {
        "domain_id",
        "slug",
        "destination_url",
        "tags",
        "redirect_type",
        "status",
        "note",
        "epc",
        "expire_at",
        "utm_params",
    }
)
PROFILE_UPDATABLE_FIELDS = frozenset({"first_name", "last_name", "username", "profile_image_url"})


# ---------------------------------------------------------------------------
# Domains
# ---------------------------------------------------------------------------


def insert_domain(
    user_id: str | None,
    *,
    domain: str,
    txt_record_value: str | None,
    is_primary: bool = True,
    primary_domain_id: str | None = None,
    verified: bool = False,
    verified_at: datetime | None = None,
    verification_method: str | None = None,
) -> Domain:
    """Insert one domain row. Raises ConflictError('domain_exists') on (user_id, domain) clash."""
    user_id = require_user_id(user_id)
    row = Domain(
        user_id=user_id,
        domain=domain,
        txt_record_value=txt_record_value,
        is_primary=is_primary,
        primary_domain_id=primary_domain_id,
        verified=verified,
        verified_at=verified_at,
        verification_method=verification_method,
    )
    try:
        with get_db() as session:
            session.add(row)
            session.flush()
    except IntegrityError as e:
        raise ConflictError("domain_exists", f"Domain {domain!r} already registered") from e
    return row


def get_domain(user_id: str | None, domain_id: str) -> Domain | None:
    """Return the domain if it belongs to user_id, else None."""
    user_id = require_user_id(user_id)
    stmt = select_domain_for_user(user_id).where(Domain.id == domain_id)
    with get_db() as session:
        return session.scalars(stmt).first()


def get_domain_by_name(user_id: str | None, name: str) -> Domain | None:
    user_id = require_user_id(user_id)
    stmt = select_domain_for_user(user_id).where(Domain.domain == name)
    with get_db() as session:
        return session.scalars(stmt).first()


def list_domains(user_id: str | None) -> list[Domain]:
    """All domain rows (roots and groups) for the user, oldest first."""
    user_id = require_user_id(user_id)
    stmt = select_domain_for_user(user_id).order_by(Domain.created_at.asc(), Domain.domain.asc())
    with get_db() as session:
        return list(session.scalars(stmt).all())


def mark_domain_verified(
    user_id: str | None,
    domain_id: str,
    *,
    method: str,
    verified_at: datetime,
) -> Domain | None:
    """Set verified/verification_method/verified_at on the domain and on its groups.
    Returns the updated domain, or None if it does not belong to the user."""
    user_id = require_user_id(user_id)
    with get_db() as session:
        row = session.scalars(select_domain_for_user(user_id).where(Domain.id == domain_id)).first()
        if row is None:
            return None
        row.verified = True
        row.verification_method = method
        row.verified_at = verified_at
        groups = session.scalars(
            select_domain_for_user(user_id).where(Domain.primary_domain_id == domain_id)
        ).all()
        for g in groups:
            g.verified = True
            g.verification_method = method
            g.verified_at = verified_at
            g.txt_record_value = row.txt_record_value
        session.flush()
        return row


def count_links_for_domain(user_id: str | None, domain_id: str) -> int:
    user_id = require_user_id(user_id)
    stmt = (
        select(func.count())
        .select_from(Link)
        .where(user_where(Link, user_id), Link.domain_id == domain_id)
    )
    with get_db() as session:
        return int(session.execute(stmt).scalar_one())


def count_groups_for_domain(user_id: str | None, domain_id: str) -> int:
    user_id = require_user_id(user_id)
    stmt = (
        select(func.count())
        .select_from(Domain)
        .where(user_where(Domain, user_id), Domain.primary_domain_id == domain_id)
    )
    with get_db() as session:
        return int(session.execute(stmt).scalar_one())


def delete_domain(user_id: str | None, domain_id: str) -> bool:
    """Delete the domain row. Returns False if nothing matched for this user."""
    user_id = require_user_id(user_id)
    stmt = delete(Domain).where(user_where(Domain, user_id), Domain.id == domain_id)
    with get_db() as session:
        result = session.execute(stmt)
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------


def _load_domain(session, row: Link) -> None:
    """(Re)load row.domain inside the session so callers can read it after close."""
    session.expire(row, ["domain"])
    _ = row.domain


def insert_link(user_id: str | None, fields: dict[str, Any]) -> Link:
    """Insert a link owned by user_id. Raises ConflictError('slug_taken') on (domain_id, slug) clash."""
    user_id = require_user_id(user_id)
    row = Link(user_id=user_id, **{k: v for k, v in fields.items() if k in LINK_UPDATABLE_FIELDS})
    try:
        with get_db() as session:
            session.add(row)
            session.flush()
            _load_domain(session, row)
    except IntegrityError as e:
        raise ConflictError("slug_taken", "Slug already used on this domain") from e
    return row


def get_link(user_id: str | None, link_id: str) -> Link | None:
    user_id = require_user_id(user_id)
    stmt = select_link_for_user(user_id).where(Link.id == link_id)
    with get_db() as session:
        return session.scalars(stmt).first()


def list_links(
    user_id: str | None,
    *,
    status: str | None = None,
    domain_id: str | None = None,
    tag: str | None = None,
) -> list[Link]:
    """Links for the user, newest first. tag filtering happens in Python (JSON column)."""
    user_id = require_user_id(user_id)
    stmt = select_link_for_user(user_id)
    if status is not None:
        stmt = stmt.where(Link.status == status)
    if domain_id is not None:
        stmt = stmt.where(Link.domain_id == domain_id)
    stmt = stmt.order_by(Link.created_at.desc(), Link.id.asc())
    with get_db() as session:
        rows = list(session.scalars(stmt).unique().all())
    if tag is not None:
        rows = [r for r in rows if tag in (r.tags or [])]
    return rows


def update_link(user_id: str | None, link_id: str, changes: dict[str, Any]) -> Link | None:
    """Apply allowed field changes. Returns None if the link is not the user's."""
    user_id = require_user_id(user_id)
    try:
        with get_db() as session:
            row = session.scalars(select_link_for_user(user_id).where(Link.id == link_id)).first()
            if row is None:
                return None
            for key, value in changes.items():
                if key in LINK_UPDATABLE_FIELDS:
                    setattr(row, key, value)
            session.flush()
            _load_domain(session, row)
            return row
    except IntegrityError as e:
        raise ConflictError("slug_taken", "Slug already used on this domain") from e


def set_link_broken(
    user_id: str | None,
    link_id: str,
    *,
    is_broken: bool | None,
    checked_at: datetime,
) -> Link | None:
    """Persist the outcome of a destination health check."""
    user_id = require_user_id(user_id)
    with get_db() as session:
        row = session.scalars(select_link_for_user(user_id).where(Link.id == link_id)).first()
        if row is None:
            return None
        row.is_broken = is_broken
        row.last_checked_broken = checked_at
        session.flush()
        return row


def delete_link(user_id: str | None, link_id: str) -> bool:
    """Delete a link (its clicks cascade). Returns False if nothing matched."""
    user_id = require_user_id(user_id)
    stmt = delete(Link).where(user_where(Link, user_id), Link.id == link_id)
    with get_db() as session:
        result = session.execute(stmt)
        return result.rowcount > 0


def list_tags(user_id: str | None) -> list[str]:
    """Distinct tags across the user's links, sorted."""
    user_id = require_user_id(user_id)
    stmt = select_link_for_user(user_id).with_only_columns(Link.tags)
    with get_db() as session:
        rows = session.execute(stmt).all()
    return sorted({t for (tags,) in rows for t in (tags or [])})


# ---------------------------------------------------------------------------
# Clicks (read side; inserts live in service_repo)
# ---------------------------------------------------------------------------


def list_clicks(
    user_id: str | None,
    link_ids: Iterable[str] | None = None,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Click]:
    """Clicks on the user's links, optionally narrowed to link_ids and [start, end], oldest first."""
    user_id = require_user_id(user_id)
    stmt = select_click_for_user(user_id)
    if link_ids is not None:
        ids = list(link_ids)
        if not ids:
            return []
        stmt = stmt.where(Click.link_id.in_(ids))
    if start is not None:
        stmt = stmt.where(Click.timestamp >= start)
    if end is not None:
        stmt = stmt.where(Click.timestamp <= end)
    stmt = stmt.order_by(Click.timestamp.asc(), Click.id.asc())
    with get_db() as session:
        return list(session.scalars(stmt).all())


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


def get_profile(user_id: str | None) -> Profile | None:
    user_id = require_user_id(user_id)
    with get_db() as session:
        return session.scalars(select_profile_for_user(user_id)).first()


def create_profile(user_id: str | None, fields: dict[str, Any] | None = None) -> Profile:
    """Insert the profile row for user_id. Plan defaults to free/user."""
    user_id = require_user_id(user_id)
    row = Profile(id=user_id, role="user", plan="free", **(fields or {}))
    try:
        with get_db() as session:
            session.add(row)
            session.flush()
    except IntegrityError as e:
        raise ConflictError("profile_exists") from e
    return row


def update_profile(user_id: str | None, changes: dict[str, Any]) -> Profile | None:
    """Apply display-field changes only. Plan/billing fields are ignored."""
    user_id = require_user_id(user_id)
    try:
        with get_db() as session:
            row = session.scalars(select_profile_for_user(user_id)).first()
            if row is None:
                return None
            for key, value in changes.items():
                if key in PROFILE_UPDATABLE_FIELDS:
                    setattr(row, key, value)
            session.flush()
            return row
    except IntegrityError as e:
        raise ConflictError("username_taken") from e


__all__: Sequence[str] = [
    "UserRequiredError",
    "count_groups_for_domain",
    "count_links_for_domain",
    "create_profile",
    "delete_domain",
    "delete_link",
    "get_domain",
    "get_domain_by_name",
    "get_link",
    "get_profile",
    "insert_domain",
    "insert_link",
    "list_clicks",
    "list_domains",
    "list_links",
    "list_tags",
    "mark_domain_verified",
    "set_link_broken",
    "update_link",
    "update_profile",
]
