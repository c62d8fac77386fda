import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.exceptions import InvalidInput

logger = logging.getLogger(__name__)

_DEFAULT_CODES = {
    status.HTTP_400_BAD_REQUEST: "invalid_input",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
    status.HTTP_423_LOCKED: "locked",
    status.HTTP_429_TOO_MANY_REQUESTS: "rate_limit_exceeded",
}


def error_envelope(
    request: Request,
    status_code: int,
    message: str,
    code: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "code": code,
            "requestId": getattr(request.state, "request_id", None),
        },
        headers=headers,
    )


def _validation_message(errors: list[dict[str, Any]]) -> str:
    """First validation error as a short sentence, e.g. ``email is required``."""
    if not errors:
        return "Invalid request."
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if first.get("type") == "missing":
        return f"{field} is required." if field else "Request body is required."
    return f"{field}: {first.get('msg')}." if field else f"{first.get('msg')}."


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    code = getattr(exc, "code", None) or _DEFAULT_CODES.get(exc.status_code, "http_error")
    return error_envelope(
        request, exc.status_code, message, code, getattr(exc, "headers", None)
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = InvalidInput(_validation_message(list(exc.errors())))
    return error_envelope(request, error.status_code, error.detail, error.code)


def register_exception_handlers(app: FastAPI) -> None:
    """Render HTTP and validation errors as ``{success: false, message, code, requestId}``."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)


async def error_envelope_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return error_envelope(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error.",
            "internal_error",
        )
