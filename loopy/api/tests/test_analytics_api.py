"""GET /analytics and GET /links/{id}/analytics against stored clicks."""

from datetime import datetime, timedelta, timezone

from loopy.api.services import repo
from loopy.api.tests.helpers import USER_A, USER_B, auth, make_click

START = datetime(2024, 5, 1, tzinfo=timezone.utc)
END = datetime(2024, 5, 10, 23, 59, tzinfo=timezone.utc)
RANGE = {"start": START.isoformat(), "end": END.isoformat()}


def _link(domain, slug: str, epc: float = 0.0):
    return repo.insert_link(
        USER_A,
        {"domain_id": domain.id, "slug": slug, "destination_url": f"https://shop.test/{slug}", "epc": epc},
    )


def test_dashboard_report_counts_and_series(client, verified_domain) -> None:
    a = _link(verified_domain, "a", epc=0.5)
    b = _link(verified_domain, "b")
    make_click(a.id, START + timedelta(hours=1), device="Mobile", referrer="https://t.co/x?y=1")
    make_click(a.id, START + timedelta(days=8), device="Desktop", is_broken=True)
    make_click(b.id, START + timedelta(days=9), ip_address="198.51.100.7", country="DE", city="Berlin")
    make_click(b.id, START - timedelta(days=3))

    resp = client.get("/analytics", params=RANGE, headers=auth(USER_A))
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["stats"] == {"total_clicks": 3, "unique_clicks": 2, "broken_clicks": 1, "total_links": 2}
    assert len(body["chart_data"]) == 10
    assert body["chart_data"][0]["earnings"] == 0.5
    assert sum(p["clicks"] for p in body["chart_data"]) == 3
    assert body["all_referrers"] == [{"referrer": "https://t.co/x", "count": 1}]
    assert body["all_cities"] == [{"name": "Berlin", "country": "DE", "count": 1}]
    assert body["broken_clicks"][0]["original_url"] == "go.example.com/a"
    assert body["broken_clicks"][0]["referrer"] == "Direct"


def test_dashboard_filters_and_toggle(client, verified_domain) -> None:
    a = _link(verified_domain, "a")
    make_click(a.id, START + timedelta(days=1), country="US")
    make_click(a.id, START + timedelta(days=1), country="FR")
    make_click(a.id, START + timedelta(days=1), country="DE")

    params = {**RANGE, "filter": ["country:US", "country:FR"]}
    body = client.get("/analytics", params=params, headers=auth(USER_A)).json()
    assert body["stats"]["total_clicks"] == 2

    params = {**RANGE, "filter": ["country:US", "country:FR"], "toggle": "country:FR"}
    body = client.get("/analytics", params=params, headers=auth(USER_A)).json()
    assert body["filters"] == [{"type": "country", "value": "US"}]
    assert body["stats"]["total_clicks"] == 1


def test_dashboard_rejects_bad_filter_and_range(client, db) -> None:
    resp = client.get("/analytics", params={"filter": "planet:mars"}, headers=auth(USER_A))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "filter_invalid"

    resp = client.get("/analytics", params={"start": END.isoformat(), "end": START.isoformat()}, headers=auth(USER_A))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "range_invalid"


def test_dashboard_default_range_is_thirty_days(client, db) -> None:
    body = client.get("/analytics", headers=auth(USER_A)).json()
    assert len(body["chart_data"]) == 31
    assert body["stats"]["total_links"] == 0


def test_other_users_clicks_are_invisible(client, verified_domain) -> None:
    a = _link(verified_domain, "a")
    make_click(a.id, START + timedelta(days=1))
    body = client.get("/analytics", params=RANGE, headers=auth(USER_B)).json()
    assert body["stats"]["total_clicks"] == 0
    assert client.get(f"/links/{a.id}/analytics", params=RANGE, headers=auth(USER_B)).status_code == 404


def test_link_detail_report(client, verified_domain) -> None:
    a = _link(verified_domain, "a")
    b = _link(verified_domain, "b")
    make_click(a.id, START + timedelta(days=1), browser="Firefox")
    make_click(a.id, START + timedelta(days=9), browser="Chrome")
    make_click(b.id, START + timedelta(days=2))

    resp = client.get(f"/links/{a.id}/analytics", params=RANGE, headers=auth(USER_A))
    assert resp.status_code == 200
    body = resp.json()
    assert body["link"]["id"] == a.id
    assert body["link"]["full_url"] == "https://go.example.com/a"
    assert body["stats"]["total_clicks"] == 2
    assert {x["name"] for x in body["device_browser"]["browser"]} == {"Firefox", "Chrome"}
    assert body["link"]["growth_rate"] == 0.0
