"""Click aggregation for the analytics dashboard. Pure functions over already-fetched rows.

Flow: restrict clicks to [start, end] -> apply facet filters -> build independent views
(daily series, facet counts, stats, per-link rollups, expiring/broken lists).

A "unique" click is the key (ip_address, country, user_agent). This is a heuristic,
not an identity; unique counts are set sizes and do not depend on row order.
"""

from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Protocol

from loopy.api.services.lifecycle import as_utc, status_display
from loopy.api.services.url_utils import normalize_referrer

FILTER_TYPES = ("device", "browser", "os", "country", "city", "referrer", "domain", "link")
# Clicking a country or city adds to the selection; any other facet replaces its previous value
MULTI_VALUE_FILTERS = frozenset({"country", "city"})
CLICK_FIELD_FILTERS = frozenset({"device", "browser", "os", "country", "city"})

DEFAULT_TOP_N = 5


class ClickLike(Protocol):
    link_id: str
    timestamp: datetime
    ip_address: str | None
    country: str | None
    city: str | None
    user_agent: str | None
    referrer: str | None
    device: str | None
    os: str | None
    browser: str | None
    is_broken: bool | None


@dataclass(frozen=True)
class Filter:
    type: str
    value: str


@dataclass(frozen=True)
class LinkInfo:
    """The parts of a link the dashboard needs, detached from the ORM."""

    id: str
    slug: str
    domain: str
    destination_url: str
    epc: float = 0.0
    status: str = "active"
    expire_at: datetime | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def full_url(self) -> str:
        return f"https://{self.domain}/{self.slug}"

    @property
    def original_url(self) -> str:
        return f"{self.domain}/{self.slug}"


def parse_filter(raw: str) -> Filter:
    """Parse "type:value" (value may itself contain ':'). Raises ValueError on unknown type."""
    ftype, sep, value = (raw or "").partition(":")
    ftype = ftype.strip().lower()
    if not sep or ftype not in FILTER_TYPES or not value.strip():
        raise ValueError(f"filter_invalid: {raw!r}")
    return Filter(type=ftype, value=value.strip())


def toggle_filter(filters: Sequence[Filter], ftype: str, value: str) -> list[Filter]:
    """Dashboard filter-click semantics.

    - clicking an active filter removes it
    - country/city filters accumulate
    - any other type replaces the existing filter of that type
    """
    current = list(filters)
    target = Filter(type=ftype, value=value)
    if target in current:
        current.remove(target)
        return current
    if ftype not in MULTI_VALUE_FILTERS:
        current = [f for f in current if f.type != ftype]
    current.append(target)
    return current


def unique_key(click: ClickLike) -> tuple[str | None, str | None, str | None]:
    return (click.ip_address, click.country, click.user_agent)


def unique_count(clicks: Iterable[ClickLike]) -> int:
    return len({unique_key(c) for c in clicks})


def in_range(clicks: Iterable[ClickLike], start: datetime, end: datetime) -> list[ClickLike]:
    """Clicks with start <= timestamp <= end (UTC-normalized)."""
    start, end = as_utc(start), as_utc(end)
    return [c for c in clicks if start <= as_utc(c.timestamp) <= end]


def _matches(click: ClickLike, f: Filter, links_by_id: dict[str, LinkInfo]) -> bool:
    if f.type in CLICK_FIELD_FILTERS:
        return getattr(click, f.type) == f.value
    if f.type == "referrer":
        return bool(click.referrer) and f.value.lower() in click.referrer.lower()
    if f.type == "link":
        return click.link_id == f.value
    if f.type == "domain":
        link = links_by_id.get(click.link_id)
        return link is not None and link.domain == f.value
    return False


def apply_filters(
    clicks: Iterable[ClickLike],
    filters: Sequence[Filter],
    links_by_id: dict[str, LinkInfo],
) -> list[ClickLike]:
    """Different filter types are ANDed; several values of one type are ORed."""
    by_type: dict[str, list[Filter]] = defaultdict(list)
    for f in filters:
        by_type[f.type].append(f)
    return [
        c
        for c in clicks
        if all(any(_matches(c, f, links_by_id) for f in group) for group in by_type.values())
    ]


def day_range(start: datetime, end: datetime) -> list[date]:
    """Calendar days (UTC) from start to end inclusive. Empty when end < start."""
    first, last = as_utc(start).date(), as_utc(end).date()
    days = []
    current = first
    while current <= last:
        days.append(current)
        current += timedelta(days=1)
    return days


def click_day(click: ClickLike) -> date:
    return as_utc(click.timestamp).date()


def daily_series(
    clicks: Sequence[ClickLike],
    days: Sequence[date],
    epc_by_link: dict[str, float],
) -> list[dict[str, Any]]:
    """One point per day: clicks, unique clicks, earnings (sum of epc), broken clicks."""
    buckets: dict[date, dict[str, Any]] = {
        d: {"clicks": 0, "unique": set(), "earnings": 0.0, "broken_clicks": 0} for d in days
    }
    for c in clicks:
        bucket = buckets.get(click_day(c))
        if bucket is None:
            continue
        bucket["clicks"] += 1
        bucket["unique"].add(unique_key(c))
        bucket["earnings"] += epc_by_link.get(c.link_id, 0.0)
        if c.is_broken:
            bucket["broken_clicks"] += 1
    return [
        {
            "date": d.isoformat(),
            "label": d.strftime("%b %d"),
            "clicks": b["clicks"],
            "unique_clicks": len(b["unique"]),
            "earnings": round(b["earnings"], 2),
            "broken_clicks": b["broken_clicks"],
        }
        for d, b in sorted(buckets.items())
    ]


def count_by(values: Iterable[str | None]) -> list[dict[str, Any]]:
    """[{name, count}] for truthy values, count desc; ties keep first-seen order."""
    counts = Counter(v for v in values if v)
    return [{"name": name, "count": n} for name, n in sorted(counts.items(), key=lambda kv: -kv[1])]


def device_breakdown(clicks: Sequence[ClickLike]) -> dict[str, list[dict[str, Any]]]:
    return {
        "device": count_by(c.device for c in clicks),
        "os": count_by(c.os for c in clicks),
        "browser": count_by(c.browser for c in clicks),
    }


def city_counts(clicks: Sequence[ClickLike]) -> list[dict[str, Any]]:
    """Cities keyed by (city, country); same city name in two countries stays separate."""
    counts: Counter[tuple[str, str]] = Counter()
    for c in clicks:
        if c.city:
            counts[(c.city, c.country or "")] += 1
    return [
        {"name": city, "country": country, "count": n}
        for (city, country), n in sorted(counts.items(), key=lambda kv: -kv[1])
    ]


def referrer_counts(clicks: Sequence[ClickLike]) -> list[dict[str, Any]]:
    counts = Counter(normalize_referrer(c.referrer) for c in clicks if c.referrer)
    return [{"referrer": r, "count": n} for r, n in sorted(counts.items(), key=lambda kv: -kv[1])]


def split_point(start: datetime, end: datetime) -> datetime:
    start, end = as_utc(start), as_utc(end)
    return start + (end - start) / 2


def growth_rate(clicks: Sequence[ClickLike], start: datetime, end: datetime) -> float:
    """Percent change from the first half of [start, end] to the second half.

    0 when the first half has no clicks (instead of dividing by zero).
    """
    mid = split_point(start, end)
    first = sum(1 for c in clicks if as_utc(c.timestamp) < mid)
    second = len(clicks) - first
    if first == 0:
        return 0.0
    return (second - first) / first * 100


def link_rollup(
    link: LinkInfo,
    clicks: Sequence[ClickLike],
    start: datetime,
    end: datetime,
    days: Sequence[date],
    now: datetime,
) -> dict[str, Any]:
    per_day = Counter(click_day(c) for c in clicks)
    return {
        "id": link.id,
        "slug": link.slug,
        "domain": link.domain,
        "destination_url": link.destination_url,
        "full_url": link.full_url,
        "epc": link.epc,
        "status": link.status,
        "expire_at": link.expire_at,
        "status_display": status_display(link.status, link.expire_at, now),
        "total_clicks": len(clicks),
        "unique_clicks": unique_count(clicks),
        "broken_clicks": sum(1 for c in clicks if c.is_broken),
        "growth_rate": growth_rate(clicks, start, end),
        "click_history": [per_day.get(d, 0) for d in days],
    }


def broken_click_rows(clicks: Sequence[ClickLike], links_by_id: dict[str, LinkInfo]) -> list[dict[str, Any]]:
    rows = []
    for c in clicks:
        if not c.is_broken:
            continue
        link = links_by_id.get(c.link_id)
        rows.append(
            {
                "timestamp": as_utc(c.timestamp),
                "destination_url": link.destination_url if link else "Unknown",
                "original_url": link.original_url if link else "Unknown",
                "domain": link.domain if link else "Unknown",
                "slug": link.slug if link else "Unknown",
                "referrer": c.referrer or "Direct",
            }
        )
    return rows


def _expiring(rollups: list[dict[str, Any]], now: datetime, top_n: int) -> tuple[list, list]:
    """(upcoming, recently_expired): both ordered by expire_at ascending, top_n each."""
    dated = sorted((r for r in rollups if r["expire_at"] is not None), key=lambda r: as_utc(r["expire_at"]))
    upcoming = [r for r in dated if as_utc(r["expire_at"]) > now][:top_n]
    expired = [r for r in dated if as_utc(r["expire_at"]) <= now][:top_n]
    return upcoming, expired


def build_report(
    links: Sequence[LinkInfo],
    clicks: Iterable[ClickLike],
    start: datetime,
    end: datetime,
    *,
    filters: Sequence[Filter] = (),
    now: datetime,
    top_n: int = DEFAULT_TOP_N,
) -> dict[str, Any]:
    """Every dashboard view for one user over [start, end] with facet filters applied."""
    now = as_utc(now)
    links_by_id = {link.id: link for link in links}
    rows = apply_filters(in_range(clicks, start, end), filters, links_by_id)
    days = day_range(start, end)

    clicks_by_link: dict[str, list[ClickLike]] = defaultdict(list)
    for c in rows:
        clicks_by_link[c.link_id].append(c)
    rollups = [link_rollup(link, clicks_by_link.get(link.id, []), start, end, days, now) for link in links]

    countries = count_by(c.country for c in rows)
    cities = city_counts(rows)
    referrers = referrer_counts(rows)
    upcoming, recently_expired = _expiring(rollups, now, top_n)

    return {
        "start": as_utc(start),
        "end": as_utc(end),
        "filters": [{"type": f.type, "value": f.value} for f in filters],
        "chart_data": daily_series(rows, days, {link.id: link.epc for link in links}),
        "broken_clicks": broken_click_rows(rows, links_by_id),
        "stats": {
            "total_clicks": len(rows),
            "unique_clicks": unique_count(rows),
            "broken_clicks": sum(1 for c in rows if c.is_broken),
            "total_links": len(links),
        },
        "device_browser": device_breakdown(rows),
        "top_countries": countries[:top_n],
        "all_countries": countries,
        "top_cities": cities[:top_n],
        "all_cities": cities,
        "top_referrers": referrers,
        "all_referrers": referrers,
        "top_links": sorted(rollups, key=lambda r: -r["total_clicks"])[:top_n],
        "trending_links": sorted(rollups, key=lambda r: -r["growth_rate"])[:top_n],
        "expiring_links": upcoming,
        "recently_expired": recently_expired,
    }


def build_link_report(
    link: LinkInfo,
    clicks: Iterable[ClickLike],
    start: datetime,
    end: datetime,
    *,
    now: datetime,
    top_n: int = DEFAULT_TOP_N,
) -> dict[str, Any]:
    """Detail page for one link: series, facets and stats restricted to that link."""
    now = as_utc(now)
    rows = [c for c in in_range(clicks, start, end) if c.link_id == link.id]
    days = day_range(start, end)
    countries = count_by(c.country for c in rows)
    cities = city_counts(rows)
    referrers = referrer_counts(rows)
    return {
        "start": as_utc(start),
        "end": as_utc(end),
        "link": link_rollup(link, rows, start, end, days, now),
        "chart_data": daily_series(rows, days, {link.id: link.epc}),
        "stats": {
            "total_clicks": len(rows),
            "unique_clicks": unique_count(rows),
            "broken_clicks": sum(1 for c in rows if c.is_broken),
            "total_links": 1,
        },
        "device_browser": device_breakdown(rows),
        "top_countries": countries[:top_n],
        "all_countries": countries,
        "top_cities": cities[:top_n],
        "all_cities": cities,
        "top_referrers": referrers[:top_n],
        "all_referrers": referrers,
    }
