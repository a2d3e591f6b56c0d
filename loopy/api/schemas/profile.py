"""Profile schemas. Plan, limits and billing ids are read-only through the API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ProfileUpdate(BaseModel):
    """Body for PATCH /profile."""

    model_config = ConfigDict(extra="forbid")

    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    profile_image_url: str | None = None


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: str
    first_name: str | None
    last_name: str | None
    username: str | None
    profile_image_url: str | None
    role: str
    plan: str | None
    link_limit: int | None
    click_limit: int | None
    retention_limit: int | None
    trial_ends_at: datetime | None
    billing_status: str | None
    created_at: datetime
    updated_at: datetime
