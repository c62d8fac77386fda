"""
Session token issuance and verification.

Tokens are HS256 JWTs (python-jose) carrying the user id, email and role plus
the standard iat / exp / iss / aud claims.  A ``type`` claim separates the
short-lived access token from the 7-day refresh token so that one can never
be presented in place of the other.

Verification failures are split in two:
  - TokenExpired — signature is valid, the expiry has passed (re-login prompt)
  - TokenInvalid — anything else (tampering, wrong issuer/audience, garbage)
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JOSEError

from shared.auth.config import AuthSettings
from shared.constants import Role
from shared.exceptions import SigningError, TokenExpired, TokenInvalid
from shared.models.user import CurrentUser

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _payload_to_user(payload: dict[str, Any]) -> CurrentUser:
    user_id = payload.get("sub")
    if not user_id:
        raise ValueError("Missing sub in token")
    return CurrentUser(
        id=UUID(user_id),
        email=payload.get("email") or "",
        role=Role(payload.get("role")),
    )


def issue_token(
    claims: CurrentUser,
    settings: AuthSettings,
    *,
    expire_seconds: int | None = None,
    token_type: str = ACCESS_TOKEN_TYPE,
    now: datetime | None = None,
) -> str:
    """Sign a token for ``claims``. Raises SigningError when no secret is configured."""
    if not settings.secret:
        raise SigningError("JWT secret is not configured")

    now = now or datetime.now(timezone.utc)
    ttl = settings.expire_seconds if expire_seconds is None else expire_seconds
    payload = {
        "sub": str(claims.id),
        "email": claims.email,
        "role": claims.role.value,
        "type": token_type,
        "iat": now,
        "exp": now + timedelta(seconds=ttl),
        "iss": settings.issuer,
        "aud": settings.audience,
    }
    try:
        return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)
    except JOSEError as exc:
        raise SigningError("Failed to sign session token") from exc


def issue_refresh_token(
    claims: CurrentUser,
    settings: AuthSettings,
    *,
    now: datetime | None = None,
) -> str:
    return issue_token(
        claims,
        settings,
        expire_seconds=settings.refresh_expire_seconds,
        token_type=REFRESH_TOKEN_TYPE,
        now=now,
    )


def verify_token(
    token: str,
    settings: AuthSettings,
    *,
    expected_type: str = ACCESS_TOKEN_TYPE,
) -> CurrentUser:
    """Return the claims of a trusted token or raise TokenExpired / TokenInvalid."""
    try:
        payload = jwt.decode(
            token,
            settings.secret,
            algorithms=[settings.algorithm],
            issuer=settings.issuer,
            audience=settings.audience,
        )
    except ExpiredSignatureError:
        raise TokenExpired()
    except JOSEError:
        raise TokenInvalid()

    if payload.get("type") != expected_type:
        raise TokenInvalid()
    try:
        return _payload_to_user(payload)
    except ValueError:
        raise TokenInvalid()


def read_unverified_claims(token: str) -> dict[str, Any]:
    """Claims of a token without any trust decision (tokens are self-describing)."""
    try:
        return jwt.get_unverified_claims(token)
    except JOSEError:
        raise TokenInvalid()
