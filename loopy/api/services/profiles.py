"""User profiles. Display fields are user-editable; plan and billing fields are not."""

import logging
from typing import Any

from loopy.api.models.profile import Profile
from loopy.api.services import repo
from loopy.api.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def get_profile(user_id: str) -> Profile:
    row = repo.get_profile(user_id)
    if row is None:
        raise NotFoundError("profile")
    return row


def get_or_create_profile(user_id: str) -> Profile:
    """Return the profile, seeding a free/user one for a first-time user id."""
    row = repo.get_profile(user_id)
    if row is not None:
        return row
    try:
        row = repo.create_profile(user_id)
    except ConflictError:
        # Concurrent first request created it
        return get_profile(user_id)
    logger.info("Profile created user=%s", user_id)
    return row


def update_profile(user_id: str, changes: dict[str, Any]) -> Profile:
    clean = {}
    for key, value in changes.items():
        if isinstance(value, str):
            value = value.strip() or None
        clean[key] = value
    row = repo.update_profile(user_id, clean)
    if row is None:
        raise NotFoundError("profile")
    return row
