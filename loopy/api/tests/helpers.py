"""Shared test helpers: auth headers and click seeding."""

from datetime import datetime

from loopy.api.services.service_repo import insert_click

USER_A = "user-a"
USER_B = "user-b"


def auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer user:{user_id}"}


def make_click(link_id: str, timestamp: datetime, **fields) -> int:
    record = {
        "link_id": link_id,
        "timestamp": timestamp,
        "ip_address": "203.0.113.1",
        "country": "US",
        "user_agent": "ua",
    }
    record.update(fields)
    return insert_click(record)
