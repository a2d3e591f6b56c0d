"""Profile endpoints for the calling user."""

from fastapi import APIRouter

from loopy.api.schemas.profile import ProfileOut, ProfileUpdate
from loopy.api.services import profiles
from loopy.api.services.user_context import UserId

router = APIRouter()


@router.get("", response_model=ProfileOut)
async def get_profile(user_id: UserId) -> ProfileOut:
    """The caller's profile. 404 until it has been created."""
    return ProfileOut.model_validate(profiles.get_profile(user_id))


@router.patch("", response_model=ProfileOut)
async def update_profile(body: ProfileUpdate, user_id: UserId) -> ProfileOut:
    """Update display fields. A first-time user gets a free/user profile seeded first."""
    profiles.get_or_create_profile(user_id)
    return ProfileOut.model_validate(profiles.update_profile(user_id, body.model_dump(exclude_unset=True)))
