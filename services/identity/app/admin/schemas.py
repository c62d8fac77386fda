"""
Admin domain — Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints
from pydantic.alias_generators import to_camel

from shared.constants import Role


class _Base(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ── Requests ─────────────────────────────────────────────────────────────────

class AdminCreateUserRequest(_Base):
    """Body for POST /admin/users — provision a portal account."""

    email: EmailStr
    # Stored exactly as sent
    password: Annotated[
        str, StringConstraints(strip_whitespace=False, min_length=8, max_length=128)
    ]
    role: Role = Role.ASHA
    is_active: bool = True


# ── Responses ────────────────────────────────────────────────────────────────

class AdminUserResponse(BaseModel):
    """Single user record returned to the admin panel."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: uuid.UUID
    email: str
    role: Role
    is_active: bool
    is_locked: bool
    locked_at: datetime | None
    failed_login_attempts: int
    last_login_at: datetime | None
    created_at: datetime
