from uuid import UUID

from pydantic import BaseModel, ConfigDict

from shared.constants import Role


class CurrentUser(BaseModel):
    """Identity carried in a session token; used by every protected route."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID
    email: str
    role: Role
