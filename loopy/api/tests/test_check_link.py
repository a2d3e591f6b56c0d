"""POST /api/check-link: error mapping and persistence of the checker's verdict."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from loopy.api.services import repo
from loopy.api.tests.helpers import USER_A, USER_B, auth


@pytest.fixture
def link(verified_domain):
    return repo.insert_link(
        USER_A,
        {"domain_id": verified_domain.id, "slug": "promo", "destination_url": "https://shop.test/p"},
    )


@pytest.fixture(autouse=True)
def _checker_env(monkeypatch):
    monkeypatch.setattr("loopy.api.config.Config.CHECK_BROKEN_LINKS_URL", "https://fn.test/check-broken-links")
    monkeypatch.setenv("SERVICE_ROLE_KEY", "service-key")


def _response(status: int, payload=None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.json.return_value = payload
    resp.text = text
    return resp


def test_missing_link_id_is_400(client) -> None:
    resp = client.post("/api/check-link", json={}, headers=auth(USER_A))
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required field: linkId"}


@pytest.mark.parametrize(
    "payload",
    [{"linkId": 42}, {"linkId": None}, {"linkId": "   "}, ["x"], "x"],
)
def test_non_string_link_id_is_400(client, payload) -> None:
    resp = client.post("/api/check-link", json=payload, headers=auth(USER_A))
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required field: linkId"}


def test_malformed_json_is_400(client) -> None:
    resp = client.post(
        "/api/check-link",
        content=b"{not json",
        headers={**auth(USER_A), "Content-Type": "application/json"},
    )
    assert resp.status_code == 400


def test_unknown_or_foreign_link_is_404(client, link) -> None:
    resp = client.post("/api/check-link", json={"linkId": "nope"}, headers=auth(USER_A))
    assert resp.status_code == 404
    assert resp.json() == {"error": "Link not found"}
    resp = client.post("/api/check-link", json={"linkId": link.id}, headers=auth(USER_B))
    assert resp.status_code == 404


def test_success_persists_verdict_and_returns_remote_json(client, link) -> None:
    remote = {"broken": True, "status": 503}
    with patch("loopy.api.services.health_check.requests.post", return_value=_response(200, remote)) as post:
        resp = client.post("/api/check-link", json={"linkId": link.id}, headers=auth(USER_A))

    assert resp.status_code == 200
    assert resp.json() == remote
    kwargs = post.call_args.kwargs
    assert post.call_args.args[0] == "https://fn.test/check-broken-links"
    assert kwargs["json"] == {"url": "https://shop.test/p", "linkId": link.id}
    assert kwargs["headers"]["Authorization"] == "Bearer service-key"

    stored = repo.get_link(USER_A, link.id)
    assert stored.is_broken is True
    assert stored.last_checked_broken is not None


def test_checker_non_2xx_is_500_with_details(client, link) -> None:
    with patch(
        "loopy.api.services.health_check.requests.post",
        return_value=_response(502, text="upstream exploded"),
    ):
        resp = client.post("/api/check-link", json={"linkId": link.id}, headers=auth(USER_A))
    assert resp.status_code == 500
    assert resp.json() == {"error": "Edge function failed", "details": "upstream exploded"}
    assert repo.get_link(USER_A, link.id).last_checked_broken is None


def test_unexpected_error_is_500(client, link) -> None:
    with patch("loopy.api.services.health_check.requests.post", side_effect=RuntimeError("boom")):
        resp = client.post("/api/check-link", json={"linkId": link.id}, headers=auth(USER_A))
    assert resp.status_code == 500
    assert resp.json() == {"error": "Unexpected error", "details": "boom"}


def test_checker_call_runs_off_the_event_loop(client, link) -> None:
    seen = {}

    def fake_post(*args, **kwargs):
        try:
            asyncio.get_running_loop()
            seen["on_loop"] = True
        except RuntimeError:
            seen["on_loop"] = False
        return _response(200, {"broken": False})

    with patch("loopy.api.services.health_check.requests.post", side_effect=fake_post):
        resp = client.post("/api/check-link", json={"linkId": link.id}, headers=auth(USER_A))
    assert resp.status_code == 200
    assert seen == {"on_loop": False}
