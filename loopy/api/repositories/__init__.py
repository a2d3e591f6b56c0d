"""Repository layer: user-scoped queries and helpers."""

from loopy.api.repositories.user_filters import (
    select_click_for_user,
    select_domain_for_user,
    select_link_for_user,
    select_profile_for_user,
    user_where,
)

__all__ = [
    "user_where",
    "select_domain_for_user",
    "select_link_for_user",
    "select_click_for_user",
    "select_profile_for_user",
]
