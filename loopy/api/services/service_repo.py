"""Service-role repository: writes made by trusted backend callers holding SERVICE_ROLE_KEY.

These bypass per-user scoping (the caller is not a user), so nothing here is
reachable from the user-facing API routers.
"""

from typing import Any

from loopy.api.db import get_db
from loopy.api.models.click import Click

CLICK_FIELDS = (
    "link_id",
    "timestamp",
    "ip_address",
    "referrer",
    "user_agent",
    "country",
    "city",
    "device",
    "browser",
    "os",
    "is_broken",
)


def insert_click(record: dict[str, Any]) -> int:
    """Insert one clicks row. Returns the new click id. Raises on constraint/DB failure."""
    row = Click(**{k: record[k] for k in CLICK_FIELDS if k in record})
    with get_db() as session:
        session.add(row)
        session.flush()
        return row.id
