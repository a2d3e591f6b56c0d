"""Profile endpoints: seeded defaults and read-only billing fields."""

from loopy.api.tests.helpers import USER_A, USER_B, auth


def test_get_profile_404_before_first_update(client) -> None:
    assert client.get("/profile", headers=auth(USER_A)).status_code == 404


def test_patch_seeds_free_profile_and_updates_display_fields(client) -> None:
    resp = client.patch("/profile", json={"first_name": " Ada ", "username": "ada"}, headers=auth(USER_A))
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == USER_A
    assert body["first_name"] == "Ada"
    assert body["username"] == "ada"
    assert body["plan"] == "free"
    assert body["role"] == "user"
    assert client.get("/profile", headers=auth(USER_A)).json()["username"] == "ada"


def test_patch_rejects_plan_and_billing_fields(client) -> None:
    resp = client.patch("/profile", json={"plan": "business"}, headers=auth(USER_A))
    assert resp.status_code == 422
    resp = client.patch("/profile", json={"stripe_customer_id": "cus_1"}, headers=auth(USER_A))
    assert resp.status_code == 422


def test_username_is_unique_across_users(client) -> None:
    client.patch("/profile", json={"username": "taken"}, headers=auth(USER_A))
    resp = client.patch("/profile", json={"username": "taken"}, headers=auth(USER_B))
    assert resp.status_code == 409
    assert resp.json()["detail"] == "username_taken"
