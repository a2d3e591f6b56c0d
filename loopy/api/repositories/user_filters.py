"""User-scoped SQL helpers. All user-scoped queries MUST use these.

Provides:
  - user_where(model, user_id): binary expression for WHERE model.user_id == user_id
  - select_*_for_user(user_id): SQLAlchemy Select with the ownership filter applied
  - clicks carry no user_id; they are reached through an inner join on links,
    which carries the filter.
"""

from sqlalchemy import BinaryExpression, Select, select

from loopy.api.models.click import Click
from loopy.api.models.domain import Domain
from loopy.api.models.link import Link
from loopy.api.models.profile import Profile


def user_where(model: type, user_id: str) -> BinaryExpression[bool]:
    """Return WHERE clause: model.user_id == user_id. Use for filters and joins."""
    col = getattr(model, "user_id", None)
    if col is None:
        raise ValueError(f"Model {model.__name__} has no user_id column")
    return col == user_id


def select_domain_for_user(user_id: str) -> Select[tuple[Domain]]:
    """Select from domains with user filter. Add .where() for further filters."""
    return select(Domain).where(user_where(Domain, user_id))


def select_link_for_user(user_id: str) -> Select[tuple[Link]]:
    """Select from links with user filter. Add .where() for further filters."""
    return select(Link).where(user_where(Link, user_id))


def select_click_for_user(user_id: str) -> Select[tuple[Click]]:
    """Select clicks whose link belongs to the user."""
    return select(Click).join(Link, Click.link_id == Link.id).where(user_where(Link, user_id))


def select_profile_for_user(user_id: str) -> Select[tuple[Profile]]:
    """Profiles are keyed by the user id itself."""
    return select(Profile).where(Profile.id == user_id)
