"""
Identity service — domain-specific HTTP exceptions.

All exceptions use preset status codes, detail messages and machine-readable
codes so that callers never need to specify these at the call site.  The
exception handlers registered from shared.middleware wrap them in the
standard error envelope.
"""
from fastapi import status

from shared.exceptions import ApiError


# ── Authentication ────────────────────────────────────────────────────────────

class InvalidCredentials(ApiError):
    """Unknown email and wrong password share one message (no user enumeration)."""

    code = "invalid_credentials"

    def __init__(self) -> None:
        super().__init__(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid email or password.",
        )


# ── Account state ─────────────────────────────────────────────────────────────

class AccountLocked(ApiError):
    code = "account_locked"

    def __init__(self) -> None:
        super().__init__(
            status.HTTP_423_LOCKED,
            "Account is locked due to too many failed login attempts. "
            "Please contact an administrator.",
        )


class AccountDeactivated(ApiError):
    code = "account_deactivated"

    def __init__(self) -> None:
        super().__init__(
            status.HTTP_403_FORBIDDEN,
            "This account has been deactivated.",
        )


class UserNotFound(ApiError):
    code = "user_not_found"

    def __init__(self) -> None:
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            "User not found.",
        )


class UserAlreadyExists(ApiError):
    code = "user_already_exists"

    def __init__(self) -> None:
        super().__init__(
            status.HTTP_409_CONFLICT,
            "A user with this email already exists.",
        )


# ── One-time password ─────────────────────────────────────────────────────────

class InvalidCode(ApiError):
    code = "invalid_code"

    def __init__(self, attempts_remaining: int | None = None) -> None:
        detail = "Invalid OTP."
        if attempts_remaining is not None:
            noun = "attempt" if attempts_remaining == 1 else "attempts"
            detail = f"Invalid OTP. {attempts_remaining} {noun} remaining."
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail)
        self.attempts_remaining = attempts_remaining


class CodeExpiredOrExhausted(ApiError):
    """The code expired or its attempt budget is spent. A resend is required."""

    code = "code_expired_or_exhausted"

    def __init__(self) -> None:
        super().__init__(
            status.HTTP_401_UNAUTHORIZED,
            "OTP has expired or too many attempts were made. Please request a new OTP.",
        )
