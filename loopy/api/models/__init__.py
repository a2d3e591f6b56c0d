"""SQLAlchemy models. Every user-owned table carries user_id; queries MUST filter by it."""

from loopy.api.models.base import Base
from loopy.api.models.click import Click
from loopy.api.models.domain import Domain
from loopy.api.models.link import Link
from loopy.api.models.profile import Profile

__all__ = [
    "Base",
    "Click",
    "Domain",
    "Link",
    "Profile",
]
