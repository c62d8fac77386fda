"""
Identity service — Pydantic V2 request/response schemas for the auth domain.

Separation of concerns:
  - *Request  models:  input from the client (strict extra="forbid")
  - *Response models:  output to the client (no write-only fields exposed)

Wire format is camelCase in both directions; snake_case names are accepted
on input too (populate_by_name).
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from shared.constants import Role


# ── Shared base ───────────────────────────────────────────────────────────────

# Compared byte for byte; exempt from the model-wide whitespace strip
Password = Annotated[
    str, StringConstraints(strip_whitespace=False, min_length=1, max_length=128)
]


class _Base(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class _Response(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ── Login ─────────────────────────────────────────────────────────────────────

class LoginRequest(_Base):
    """Body for POST /auth/login."""

    email: str = Field(min_length=1, max_length=255)
    password: Password


class LoginResponse(_Response):
    """Password accepted; an OTP has been issued for the second step."""

    user_id: uuid.UUID
    email: str
    role: Role
    requires_otp: bool = Field(default=True, alias="requiresOTP")
    # Present only in development with EXPOSE_DEV_OTP enabled
    otp: str | None = None


# ── OTP ───────────────────────────────────────────────────────────────────────

class VerifyOTPRequest(_Base):
    """Body for POST /auth/verify-otp."""

    user_id: uuid.UUID
    email: str = Field(min_length=1, max_length=255)
    otp: str = Field(min_length=1, max_length=16)


class ResendOTPRequest(_Base):
    """Body for POST /auth/resend-otp."""

    user_id: uuid.UUID
    email: str = Field(min_length=1, max_length=255)


class ResendOTPResponse(_Response):
    otp: str | None = None


# ── Tokens ────────────────────────────────────────────────────────────────────

class UserResponse(_Response):
    id: uuid.UUID
    email: str
    role: Role
    last_login: datetime | None = None


class AuthTokenResponse(_Response):
    token: str
    refresh_token: str
    expires_in: int = Field(description="Access-token lifetime in seconds")
    user: UserResponse


class RefreshRequest(_Base):
    """Body for POST /auth/refresh."""

    refresh_token: str = Field(min_length=1)


class RefreshResponse(_Response):
    token: str
    expires_in: int


class TokenClaims(_Response):
    id: uuid.UUID
    email: str
    role: Role


class ValidateTokenResponse(_Response):
    user: TokenClaims


class MeResponse(_Response):
    user: UserResponse


# ── Client session policy ─────────────────────────────────────────────────────

class SessionConfigResponse(_Response):
    idle_timeout_minutes: int
    warning_minutes: int
