"""Dashboard analytics endpoint. User from auth only."""

from datetime import datetime

from fastapi import APIRouter, Query

from loopy.api.schemas.analytics import AnalyticsReport
from loopy.api.services import reports
from loopy.api.services.analytics import Filter, parse_filter, toggle_filter
from loopy.api.services.errors import ValidationError
from loopy.api.services.user_context import UserId

router = APIRouter()


def _parse_filters(raw: list[str]) -> list[Filter]:
    try:
        return [parse_filter(r) for r in raw]
    except ValueError as e:
        raise ValidationError("filter_invalid", str(e)) from e


@router.get("", response_model=AnalyticsReport)
async def get_analytics(
    user_id: UserId,
    start: datetime | None = Query(None, description="Range start (default: end - 30 days)"),
    end: datetime | None = Query(None, description="Range end (default: now)"),
    filter_: list[str] | None = Query(None, alias="filter", description="Facet filter type:value"),
    toggle: str | None = Query(None, description="Facet clicked in the dashboard, type:value"),
) -> AnalyticsReport:
    """Full dashboard view-model over [start, end].

    toggle applies dashboard click semantics to the filter set before aggregating;
    the resulting set is echoed back in filters.
    """
    filters = _parse_filters(filter_ or [])
    if toggle:
        clicked = _parse_filters([toggle])[0]
        filters = toggle_filter(filters, clicked.type, clicked.value)
    return AnalyticsReport.model_validate(reports.dashboard_report(user_id, start, end, filters))
