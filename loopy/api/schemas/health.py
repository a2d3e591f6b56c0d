"""Body of GET /health."""

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    """ok is always true when the LoopyLink API answers; time is UTC ISO-8601."""

    model_config = ConfigDict(extra="forbid")

    ok: bool
    version: str
    time: str
