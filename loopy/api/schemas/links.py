"""Link schemas. user_id is never accepted in payload."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LinkCreate(BaseModel):
    """Body for POST /links."""

    model_config = ConfigDict(extra="forbid")

    domain_id: str
    slug: str
    destination_url: str
    redirect_type: str = "307"
    status: str = "active"
    tags: list[str] = Field(default_factory=list)
    epc: float = 0.0
    expire_at: datetime | None = None
    note: str | None = None
    utm_params: dict[str, str] = Field(default_factory=dict)


class LinkUpdate(BaseModel):
    """Body for PATCH /links/{id}. Only fields that are sent are changed."""

    model_config = ConfigDict(extra="forbid")

    domain_id: str | None = None
    slug: str | None = None
    destination_url: str | None = None
    redirect_type: str | None = None
    status: str | None = None
    tags: list[str] | None = None
    epc: float | None = None
    expire_at: datetime | None = None
    note: str | None = None
    utm_params: dict[str, str] | None = None


class StatusDisplay(BaseModel):
    model_config = ConfigDict(extra="forbid")

    label: str
    effective_status: str
    is_expired: bool
    strikethrough: bool


class LinkOut(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    domain_id: str
    domain: str
    slug: str
    full_url: str
    destination_url: str
    tags: list[str]
    redirect_type: str
    status: str
    status_display: StatusDisplay
    note: str | None
    epc: float
    expire_at: datetime | None
    is_broken: bool | None
    last_checked_broken: datetime | None
    utm_params: dict[str, str]
    created_at: datetime
    updated_at: datetime
