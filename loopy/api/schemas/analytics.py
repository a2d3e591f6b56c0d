"""Analytics dashboard response schemas. Shapes mirror services/analytics.py output."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from loopy.api.schemas.links import StatusDisplay


class _Out(BaseModel):
    model_config = ConfigDict(extra="forbid")


class FilterOut(_Out):
    type: str
    value: str


class ChartPoint(_Out):
    date: str
    label: str
    clicks: int
    unique_clicks: int
    earnings: float
    broken_clicks: int


class NameCount(_Out):
    name: str
    count: int


class CityCount(_Out):
    name: str
    country: str
    count: int


class ReferrerCount(_Out):
    referrer: str
    count: int


class DeviceBrowser(_Out):
    device: list[NameCount]
    os: list[NameCount]
    browser: list[NameCount]


class Stats(_Out):
    total_clicks: int
    unique_clicks: int
    broken_clicks: int
    total_links: int


class LinkRollup(_Out):
    id: str
    slug: str
    domain: str
    destination_url: str
    full_url: str
    epc: float
    status: str
    expire_at: datetime | None
    status_display: StatusDisplay
    total_clicks: int
    unique_clicks: int
    broken_clicks: int
    growth_rate: float
    click_history: list[int]


class BrokenClick(_Out):
    timestamp: datetime
    destination_url: str
    original_url: str
    domain: str
    slug: str
    referrer: str


class _Facets(_Out):
    start: datetime
    end: datetime
    chart_data: list[ChartPoint]
    stats: Stats
    device_browser: DeviceBrowser
    top_countries: list[NameCount]
    all_countries: list[NameCount]
    top_cities: list[CityCount]
    all_cities: list[CityCount]
    top_referrers: list[ReferrerCount]
    all_referrers: list[ReferrerCount]


class AnalyticsReport(_Facets):
    """GET /analytics."""

    filters: list[FilterOut]
    broken_clicks: list[BrokenClick]
    top_links: list[LinkRollup]
    trending_links: list[LinkRollup]
    expiring_links: list[LinkRollup]
    recently_expired: list[LinkRollup]


class LinkAnalyticsReport(_Facets):
    """GET /links/{id}/analytics."""

    link: LinkRollup
