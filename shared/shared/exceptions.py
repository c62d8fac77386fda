"""
Cross-service HTTP exceptions.

Every error carries a preset status code, a human-readable message and a
machine-readable ``code`` so that clients can branch on the failure without
parsing the message.  Service-specific errors subclass ApiError in their own
``app/exceptions.py``.
"""
from fastapi import HTTPException, status


class ApiError(HTTPException):
    """Base for all errors rendered into the ``{success, message, code}`` envelope."""

    code: str = "error"

    def __init__(
        self,
        status_code: int,
        detail: str,
        *,
        code: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        if code is not None:
            self.code = code


class InvalidInput(ApiError):
    code = "invalid_input"

    def __init__(self, detail: str = "Invalid request.") -> None:
        super().__init__(status.HTTP_400_BAD_REQUEST, detail)


# ── Bearer authentication ─────────────────────────────────────────────────────

class NotAuthenticated(ApiError):
    code = "not_authenticated"

    def __init__(self) -> None:
        super().__init__(
            status.HTTP_401_UNAUTHORIZED,
            "Access denied. No token provided.",
            headers={"WWW-Authenticate": "Bearer"},
        )


class TokenInvalid(ApiError):
    """Bad format, bad signature, wrong issuer/audience or wrong token type."""

    code = "token_invalid"

    def __init__(self) -> None:
        super().__init__(
            status.HTTP_401_UNAUTHORIZED,
            "Token is invalid.",
            headers={"WWW-Authenticate": "Bearer"},
        )


class TokenExpired(ApiError):
    """Signature checks out but the expiry has passed. Clients should re-login."""

    code = "token_expired"

    def __init__(self) -> None:
        super().__init__(
            status.HTTP_401_UNAUTHORIZED,
            "Token has expired. Please log in again.",
            headers={"WWW-Authenticate": "Bearer"},
        )


class InsufficientRole(ApiError):
    code = "insufficient_role"

    def __init__(self) -> None:
        super().__init__(
            status.HTTP_403_FORBIDDEN,
            "Access denied. Insufficient permissions.",
        )


# ── Infrastructure ────────────────────────────────────────────────────────────

class SigningError(RuntimeError):
    """
    Token signing is unavailable (missing secret or a signing backend failure).

    Not an ApiError: it falls through to the catch-all handler, which logs the
    detail and returns a generic 500.
    """
