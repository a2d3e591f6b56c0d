"""Domain endpoints: add, list with groups, verify, delete. Outbound checks are patched."""

import asyncio
from unittest.mock import patch

from loopy.api.services import repo
from loopy.api.services.verification import VerificationResult
from loopy.api.tests.helpers import USER_A, USER_B, auth


def _add(client, name: str, user: str = USER_A) -> dict:
    resp = client.post("/domains", json={"domain": name}, headers=auth(user))
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_add_domain_normalizes_and_issues_token(client) -> None:
    body = _add(client, "https://Go.Example.COM./some/path")
    assert body["domain"] == "go.example.com"
    assert body["verified"] is False
    assert body["is_primary"] is True
    token = body["txt_record_value"]
    assert token.startswith("loopy-verification=")
    assert len(token) == len("loopy-verification=") + 16
    assert body["instructions"]["txt_record_value"] == token
    assert body["instructions"]["well_known_url"] == "https://go.example.com/.well-known/loopy-verification.txt"


def test_add_domain_rejects_invalid_and_duplicate(client) -> None:
    resp = client.post("/domains", json={"domain": "not a host"}, headers=auth(USER_A))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "domain_invalid"

    _add(client, "example.com")
    resp = client.post("/domains", json={"domain": "EXAMPLE.com"}, headers=auth(USER_A))
    assert resp.status_code == 409
    assert resp.json()["detail"] == "domain_exists"

    # Same hostname for another user is allowed
    _add(client, "example.com", user=USER_B)


def test_add_domain_rejects_user_id_in_payload(client) -> None:
    resp = client.post("/domains", json={"domain": "example.com", "user_id": "evil"}, headers=auth(USER_A))
    assert resp.status_code == 422


def test_list_domains_nests_groups_and_is_user_scoped(client) -> None:
    root = _add(client, "example.com")
    resp = client.post(f"/domains/{root['id']}/groups", json={"group_name": "promo"}, headers=auth(USER_A))
    assert resp.status_code == 201
    group = resp.json()
    assert group["domain"] == "example.com/promo"
    assert group["is_primary"] is False
    assert group["primary_domain_id"] == root["id"]
    assert group["txt_record_value"] == root["txt_record_value"]

    listing = client.get("/domains", headers=auth(USER_A)).json()
    assert len(listing) == 1
    assert [g["domain"] for g in listing[0]["groups"]] == ["example.com/promo"]

    assert client.get("/domains", headers=auth(USER_B)).json() == []
    assert client.get(f"/domains/{root['id']}", headers=auth(USER_B)).status_code == 404


def test_create_group_validation(client) -> None:
    root = _add(client, "example.com")
    resp = client.post(f"/domains/{root['id']}/groups", json={"group_name": "bad name!"}, headers=auth(USER_A))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "group_name_invalid"

    group = client.post(f"/domains/{root['id']}/groups", json={"group_name": "ok"}, headers=auth(USER_A)).json()
    resp = client.post(f"/domains/{group['id']}/groups", json={"group_name": "nested"}, headers=auth(USER_A))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "not_primary"

    resp = client.post(f"/domains/{root['id']}/groups", json={"group_name": "ok"}, headers=auth(USER_A))
    assert resp.status_code == 409


def test_verify_txt_success_marks_root_and_groups(client) -> None:
    root = _add(client, "example.com")
    client.post(f"/domains/{root['id']}/groups", json={"group_name": "promo"}, headers=auth(USER_A))

    with patch("loopy.api.services.verification.fetch_txt_records", return_value=[root["txt_record_value"]]):
        resp = client.post(f"/domains/{root['id']}/verify", json={"method": "txt"}, headers=auth(USER_A))

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["domain"]["verified"] is True
    assert body["domain"]["verification_method"] == "TXT"
    assert body["domain"]["verified_at"] is not None

    tree = client.get("/domains", headers=auth(USER_A)).json()[0]
    assert tree["groups"][0]["verified"] is True
    assert tree["groups"][0]["verification_method"] == "TXT"


def test_verify_failure_returns_reason_and_leaves_domain_unverified(client) -> None:
    root = _add(client, "example.com")
    with patch(
        "loopy.api.services.domains.check_well_known",
        return_value=VerificationResult(success=False, reason="File content does not match"),
    ):
        resp = client.post(f"/domains/{root['id']}/verify", json={"method": "file"}, headers=auth(USER_A))
    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is False
    assert body["reason"] == "File content does not match"
    assert body["domain"]["verified"] is False


def test_verify_group_goes_through_root(client) -> None:
    root = _add(client, "example.com")
    group = client.post(f"/domains/{root['id']}/groups", json={"group_name": "promo"}, headers=auth(USER_A)).json()
    with patch("loopy.api.services.domains.check_txt", return_value=VerificationResult(True, method="TXT")) as check:
        resp = client.post(f"/domains/{group['id']}/verify", json={"method": "txt"}, headers=auth(USER_A))
    check.assert_called_once_with("example.com", root["txt_record_value"])
    assert resp.json()["domain"]["verified"] is True
    assert repo.get_domain(USER_A, root["id"]).verified is True


def test_verify_rejects_unknown_method(client) -> None:
    root = _add(client, "example.com")
    resp = client.post(f"/domains/{root['id']}/verify", json={"method": "email"}, headers=auth(USER_A))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "method_invalid"


def test_delete_domain_requires_confirmation_and_no_dependents(client) -> None:
    root = _add(client, "example.com")
    resp = client.request("DELETE", f"/domains/{root['id']}", json={"confirmation": "delete"}, headers=auth(USER_A))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "confirmation_mismatch"

    group = client.post(f"/domains/{root['id']}/groups", json={"group_name": "promo"}, headers=auth(USER_A)).json()
    resp = client.request(
        "DELETE", f"/domains/{root['id']}", json={"confirmation": "delete this domain"}, headers=auth(USER_A)
    )
    assert resp.status_code == 409
    assert resp.json()["detail"] == "domain_has_groups"

    resp = client.request(
        "DELETE", f"/domains/{group['id']}", json={"confirmation": "delete this domain"}, headers=auth(USER_A)
    )
    assert resp.status_code == 204
    resp = client.request(
        "DELETE", f"/domains/{root['id']}", json={"confirmation": "delete this domain"}, headers=auth(USER_A)
    )
    assert resp.status_code == 204
    assert client.get("/domains", headers=auth(USER_A)).json() == []


def test_delete_domain_with_links_is_refused(client, verified_domain) -> None:
    repo.insert_link(
        USER_A,
        {"domain_id": verified_domain.id, "slug": "x", "destination_url": "https://shop.test"},
    )
    resp = client.request(
        "DELETE",
        f"/domains/{verified_domain.id}",
        json={"confirmation": "delete this domain"},
        headers=auth(USER_A),
    )
    assert resp.status_code == 409
    assert resp.json()["detail"] == "domain_has_links"


def test_delete_other_users_domain_is_404(client) -> None:
    root = _add(client, "example.com")
    resp = client.request(
        "DELETE", f"/domains/{root['id']}", json={"confirmation": "delete this domain"}, headers=auth(USER_B)
    )
    assert resp.status_code == 404


def test_verify_lookup_runs_off_the_event_loop(client) -> None:
    root = _add(client, "example.com")
    seen = {}

    def fake_check(hostname, token):
        try:
            asyncio.get_running_loop()
            seen["on_loop"] = True
        except RuntimeError:
            seen["on_loop"] = False
        return VerificationResult(success=False, reason="TXT value not found")

    with patch("loopy.api.services.domains.check_txt", side_effect=fake_check):
        resp = client.post(f"/domains/{root['id']}/verify", json={"method": "txt"}, headers=auth(USER_A))
    assert resp.status_code == 200
    assert seen == {"on_loop": False}
