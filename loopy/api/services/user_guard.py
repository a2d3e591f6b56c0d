"""Owner check for the repo layer.

Every link, domain, click and profile query is scoped to one LoopyLink account.
repo.py calls require_user_id before building any statement, then filters with
user_where, so an empty id fails loudly instead of matching every row.
"""

from loopy.api.repositories.user_filters import user_where


class UserRequiredError(ValueError):
    """No account id reached the repo layer. main.py answers 401."""


def require_user_id(user_id: str | None) -> str:
    """Stripped account id, or UserRequiredError when it is None/blank."""
    if not user_id or not str(user_id).strip():
        raise UserRequiredError("user_id is required and must be non-empty")
    return str(user_id).strip()


__all__ = ["UserRequiredError", "require_user_id", "user_where"]
