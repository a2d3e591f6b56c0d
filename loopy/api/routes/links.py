"""Link endpoints. User from auth only; every lookup is scoped to the caller."""

from datetime import datetime, timezone

from fastapi import APIRouter, Query

from loopy.api.models.link import Link
from loopy.api.schemas.analytics import LinkAnalyticsReport
from loopy.api.schemas.links import LinkCreate, LinkOut, LinkUpdate
from loopy.api.services import links as link_service
from loopy.api.services import reports
from loopy.api.services.lifecycle import status_display
from loopy.api.services.user_context import UserId

router = APIRouter()


def link_out(link: Link, now: datetime | None = None) -> LinkOut:
    now = now or datetime.now(timezone.utc)
    return LinkOut(
        id=link.id,
        domain_id=link.domain_id,
        domain=link.domain.domain if link.domain else "",
        slug=link.slug,
        full_url=link_service.full_url(link),
        destination_url=link.destination_url,
        tags=list(link.tags or []),
        redirect_type=link.redirect_type,
        status=link.status,
        status_display=status_display(link.status, link.expire_at, now),
        note=link.note,
        epc=link.epc,
        expire_at=link.expire_at,
        is_broken=link.is_broken,
        last_checked_broken=link.last_checked_broken,
        utm_params=dict(link.utm_params or {}),
        created_at=link.created_at,
        updated_at=link.updated_at,
    )


@router.post("", response_model=LinkOut, status_code=201)
async def create_link(body: LinkCreate, user_id: UserId) -> LinkOut:
    """Create a link on one of the caller's verified domains."""
    link = link_service.create_link(user_id, **body.model_dump())
    return link_out(link)


@router.get("", response_model=list[LinkOut])
async def list_links(
    user_id: UserId,
    status: str | None = Query(None),
    tag: str | None = Query(None),
    domain_id: str | None = Query(None),
) -> list[LinkOut]:
    """Newest first. status filters the stored status, not the derived one."""
    now = datetime.now(timezone.utc)
    return [
        link_out(link, now)
        for link in link_service.list_links(user_id, status=status, tag=tag, domain_id=domain_id)
    ]


@router.get("/tags", response_model=list[str])
async def list_tags(user_id: UserId) -> list[str]:
    return link_service.list_tags(user_id)


@router.get("/{link_id}", response_model=LinkOut)
async def get_link(link_id: str, user_id: UserId) -> LinkOut:
    return link_out(link_service.get_link(user_id, link_id))


@router.patch("/{link_id}", response_model=LinkOut)
async def update_link(link_id: str, body: LinkUpdate, user_id: UserId) -> LinkOut:
    """Partial update: only fields present in the body are applied."""
    link = link_service.update_link(user_id, link_id, body.model_dump(exclude_unset=True))
    return link_out(link)


@router.delete("/{link_id}", status_code=204)
async def delete_link(link_id: str, user_id: UserId) -> None:
    link_service.delete_link(user_id, link_id)


@router.get("/{link_id}/analytics", response_model=LinkAnalyticsReport)
async def link_analytics(
    link_id: str,
    user_id: UserId,
    start: datetime | None = Query(None, description="Range start (default: end - 30 days)"),
    end: datetime | None = Query(None, description="Range end (default: now)"),
) -> LinkAnalyticsReport:
    """Series, facets and stats for one link."""
    return LinkAnalyticsReport.model_validate(reports.link_report(user_id, link_id, start, end))
