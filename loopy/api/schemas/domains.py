"""Domain schemas. user_id is never accepted in payload; it comes from auth."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class DomainCreate(BaseModel):
    """Body for POST /domains."""

    model_config = ConfigDict(extra="forbid")

    domain: str = Field(..., description="Hostname; scheme, path and trailing dot are stripped")


class GroupCreate(BaseModel):
    """Body for POST /domains/{id}/groups."""

    model_config = ConfigDict(extra="forbid")

    group_name: str = Field(..., description="Letters, numbers and hyphens")


class VerifyRequest(BaseModel):
    """Body for POST /domains/{id}/verify."""

    model_config = ConfigDict(extra="forbid")

    method: str = Field("txt", description="'txt' (DNS TXT record) or 'file' (well-known file)")


class DeleteDomainRequest(BaseModel):
    """Body for DELETE /domains/{id}. confirmation must be 'delete this domain'."""

    model_config = ConfigDict(extra="forbid")

    confirmation: str


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class VerificationInstructions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    txt_record_name: str
    txt_record_value: str
    well_known_url: str


class DomainOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: str
    domain: str
    verified: bool
    verified_at: datetime | None
    is_primary: bool
    primary_domain_id: str | None
    verification_method: str | None
    txt_record_value: str | None
    created_at: datetime


class DomainDetailOut(DomainOut):
    """A domain with what the user must publish to verify it."""

    instructions: VerificationInstructions


class DomainTreeOut(DomainDetailOut):
    groups: list[DomainOut] = Field(default_factory=list)


class VerifyResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    success: bool
    method: str | None = None
    reason: str | None = None
    domain: DomainOut
