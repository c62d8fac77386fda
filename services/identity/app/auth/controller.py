"""
Identity service — auth controller (request orchestration layer).

Responsibilities:
  - Receive validated input from the router.
  - Call service / OTP store functions (which own business logic).
  - Compose and return the response model.

Login state machine:
  Anonymous → (login) → OtpPending → (verify-otp) → Authenticated
  Every failure ends the attempt; the client starts over from login or resend.

The request session rolls back when an exception escapes, so counters that
must survive a failure (failed logins, wrong OTP attempts) are committed here
before the error is raised.
"""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import otp as otp_store
from app.auth.delivery import deliver_otp
from app.auth.models import User
from app.auth.schemas import (
    AuthTokenResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    RefreshRequest,
    RefreshResponse,
    ResendOTPRequest,
    ResendOTPResponse,
    SessionConfigResponse,
    TokenClaims,
    UserResponse,
    ValidateTokenResponse,
    VerifyOTPRequest,
)
from app.auth.service import (
    assert_account_usable,
    compare_password,
    get_user_by_email,
    get_user_by_id,
    increment_login_attempts,
    record_login,
    reset_login_attempts,
)
from app.auth.utils import mask_email, normalize_email
from app.config import Settings
from app.exceptions import (
    AccountLocked,
    CodeExpiredOrExhausted,
    InvalidCode,
    InvalidCredentials,
    UserNotFound,
)
from shared.auth.tokens import (
    REFRESH_TOKEN_TYPE,
    issue_refresh_token,
    issue_token,
    verify_token,
)
from shared.exceptions import TokenInvalid
from shared.models.user import CurrentUser

logger = logging.getLogger(__name__)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _claims_for(user: User) -> CurrentUser:
    return CurrentUser(id=user.id, email=user.email, role=user.role)


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        role=user.role,
        last_login=user.last_login_at,
    )


def _build_token_pair(
    user: User, settings: Settings, now: datetime | None = None
) -> tuple[str, str]:
    """Return (access_token, refresh_token)."""
    auth_settings = settings.auth_settings()
    claims = _claims_for(user)
    access_token = issue_token(claims, auth_settings, now=now)
    refresh_token = issue_refresh_token(claims, auth_settings, now=now)
    return access_token, refresh_token


# ── Login (password step) ────────────────────────────────────────────────────

async def login(
    session: AsyncSession,
    body: LoginRequest,
    settings: Settings,
    *,
    now: datetime | None = None,
) -> LoginResponse:
    user = await get_user_by_email(session, body.email)
    if user is None:
        logger.info("Login failed for %s: unknown email", mask_email(body.email))
        raise InvalidCredentials()

    # Lock and active flags are checked before the password so that a locked
    # account never learns whether the password was right.
    assert_account_usable(user)

    if not compare_password(user, body.password):
        await increment_login_attempts(
            session, user, max_attempts=settings.max_failed_logins, now=now
        )
        await session.commit()
        logger.info(
            "Login failed for %s: wrong password (%d/%d)",
            mask_email(user.email),
            user.failed_login_attempts,
            settings.max_failed_logins,
        )
        raise InvalidCredentials()

    await reset_login_attempts(session, user)
    otp = await otp_store.create_otp_for_user(session, user.id, user.email, now=now)
    echo = settings.otp_echo_enabled
    deliver_otp(otp, echo=echo)

    return LoginResponse(
        user_id=user.id,
        email=user.email,
        role=user.role,
        requires_otp=True,
        otp=otp.code if echo else None,
    )


# ── Verify OTP (second factor) ───────────────────────────────────────────────

async def verify_otp(
    session: AsyncSession,
    body: VerifyOTPRequest,
    settings: Settings,
    *,
    now: datetime | None = None,
) -> AuthTokenResponse:
    try:
        await otp_store.verify_otp(session, body.user_id, body.email, body.otp, now=now)
    except (InvalidCode, CodeExpiredOrExhausted) as exc:
        await session.commit()
        logger.info(
            "OTP verification failed for %s: %s", mask_email(body.email), exc.code
        )
        raise

    user = await get_user_by_id(session, body.user_id)
    if user is None or not user.is_active:
        # A consumed OTP must belong to a live account
        logger.error(
            "OTP verified for user %s but the account is missing or inactive",
            body.user_id,
        )
        raise UserNotFound()
    if user.is_locked:
        # Locked by an administrator between the password and OTP steps
        raise AccountLocked()

    await record_login(session, user, now=now)
    access_token, refresh_token = _build_token_pair(user, settings, now=now)
    logger.info("User %s authenticated", mask_email(user.email))

    return AuthTokenResponse(
        token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.jwt_expire_seconds,
        user=_user_response(user),
    )


# ── Resend OTP ────────────────────────────────────────────────────────────────

async def resend_otp(
    session: AsyncSession,
    body: ResendOTPRequest,
    settings: Settings,
    *,
    now: datetime | None = None,
) -> ResendOTPResponse:
    user = await get_user_by_id(session, body.user_id)
    if (
        user is None
        or not user.is_active
        or user.email != normalize_email(body.email)
    ):
        raise UserNotFound()

    otp = await otp_store.create_otp_for_user(session, user.id, user.email, now=now)
    echo = settings.otp_echo_enabled
    deliver_otp(otp, echo=echo)
    return ResendOTPResponse(otp=otp.code if echo else None)


# ── Refresh ───────────────────────────────────────────────────────────────────

async def refresh(
    session: AsyncSession,
    body: RefreshRequest,
    settings: Settings,
) -> RefreshResponse:
    """
    Exchange a refresh token for a new access token.

    The account is re-read so that a lock or deactivation stops the exchange
    before the refresh token itself expires.
    """
    claims = verify_token(
        body.refresh_token, settings.auth_settings(), expected_type=REFRESH_TOKEN_TYPE
    )
    user = await get_user_by_id(session, claims.id)
    if user is None:
        raise TokenInvalid()
    assert_account_usable(user)

    token = issue_token(_claims_for(user), settings.auth_settings())
    return RefreshResponse(token=token, expires_in=settings.jwt_expire_seconds)


# ── Bearer-authenticated reads ────────────────────────────────────────────────

async def me(session: AsyncSession, current_user: CurrentUser) -> MeResponse:
    user = await get_user_by_id(session, current_user.id)
    if user is None:
        raise UserNotFound()
    return MeResponse(user=_user_response(user))


def validate_token(current_user: CurrentUser) -> ValidateTokenResponse:
    return ValidateTokenResponse(
        user=TokenClaims(
            id=current_user.id,
            email=current_user.email,
            role=current_user.role,
        )
    )


def logout(current_user: CurrentUser) -> None:
    """Tokens are stateless; the client discards its copy."""
    logger.info("User %s logged out", mask_email(current_user.email))


def session_config(settings: Settings) -> SessionConfigResponse:
    return SessionConfigResponse(
        idle_timeout_minutes=settings.session_idle_timeout_minutes,
        warning_minutes=settings.session_warning_minutes,
    )
