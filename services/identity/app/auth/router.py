"""
Identity service — auth router.

Only HTTP concerns live here:
  - Route declarations, HTTP methods, status codes, response_model
  - Dependency injection (session, settings, current user)
  - Wrapping controller results in the success envelope

Zero business logic. Zero DB queries.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import controller
from app.auth.dependencies import get_current_user, get_settings
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
    ValidateTokenResponse,
    VerifyOTPRequest,
)
from app.config import Settings
from app.database import get_db
from app.rate_limit import LOGIN_LIMIT, RESEND_OTP_LIMIT, VERIFY_OTP_LIMIT, limiter
from shared.models.envelope import ApiResponse
from shared.models.user import CurrentUser

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Two-step login ────────────────────────────────────────────────────────────

@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    response_model_exclude_none=True,
    summary="Check email + password and issue an OTP",
)
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ApiResponse[LoginResponse]:
    data = await controller.login(session, body, settings)
    return ApiResponse(
        message="Login successful. OTP sent for verification.", data=data
    )


@router.post(
    "/verify-otp",
    response_model=ApiResponse[AuthTokenResponse],
    summary="Verify the OTP and issue session tokens",
)
@limiter.limit(VERIFY_OTP_LIMIT)
async def verify_otp(
    request: Request,
    body: VerifyOTPRequest,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ApiResponse[AuthTokenResponse]:
    data = await controller.verify_otp(session, body, settings)
    return ApiResponse(message="OTP verified successfully.", data=data)


@router.post(
    "/resend-otp",
    response_model=ApiResponse[ResendOTPResponse],
    response_model_exclude_none=True,
    summary="Replace the pending OTP with a new one",
)
@limiter.limit(RESEND_OTP_LIMIT)
async def resend_otp(
    request: Request,
    body: ResendOTPRequest,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ApiResponse[ResendOTPResponse]:
    data = await controller.resend_otp(session, body, settings)
    return ApiResponse(message="OTP resent successfully.", data=data)


# ── Session ───────────────────────────────────────────────────────────────────

@router.post(
    "/refresh",
    response_model=ApiResponse[RefreshResponse],
    summary="Exchange a refresh token for a new access token",
)
async def refresh(
    body: RefreshRequest,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ApiResponse[RefreshResponse]:
    data = await controller.refresh(session, body, settings)
    return ApiResponse(message="Token refreshed.", data=data)


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    summary="Log out (client discards the token)",
)
async def logout(
    current_user: CurrentUser = Depends(get_current_user),
) -> ApiResponse[None]:
    controller.logout(current_user)
    return ApiResponse(message="Logged out successfully.")


@router.get(
    "/me",
    response_model=ApiResponse[MeResponse],
    summary="Account record for the bearer token",
)
async def me(
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[MeResponse]:
    data = await controller.me(session, current_user)
    return ApiResponse(message="User retrieved.", data=data)


@router.get(
    "/validate-token",
    response_model=ApiResponse[ValidateTokenResponse],
    summary="Claims carried by the bearer token",
)
async def validate_token(
    current_user: CurrentUser = Depends(get_current_user),
) -> ApiResponse[ValidateTokenResponse]:
    return ApiResponse(
        message="Token is valid.", data=controller.validate_token(current_user)
    )


@router.get(
    "/session-config",
    response_model=ApiResponse[SessionConfigResponse],
    summary="Idle-timeout policy for clients",
)
async def session_config(
    settings: Settings = Depends(get_settings),
) -> ApiResponse[SessionConfigResponse]:
    return ApiResponse(
        message="Session configuration.", data=controller.session_config(settings)
    )
