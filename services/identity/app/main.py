import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.admin.router import router as admin_router
from app.auth.otp import run_otp_sweeper
from app.auth.router import router as auth_router
from app.config import Settings
from app.database import init_db
from app.rate_limit import limiter
from shared.database import create_all, dispose
from shared.middleware.error_handler import (
    error_envelope,
    error_envelope_middleware,
    register_exception_handlers,
)
from shared.middleware.request_id import request_id_middleware

logger = logging.getLogger(__name__)


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## ASHA Portal Identity Service

Authenticates portal users (ADMIN and ASHA workers) in two steps:

* **Password** — `POST /api/auth/login` checks email + password and issues a
  6-digit one-time password valid for 2 minutes (3 attempts).
* **OTP** — `POST /api/auth/verify-otp` checks the code and returns a signed
  access token (30 minutes) plus a refresh token (7 days).

Five consecutive wrong passwords lock the account until an administrator
unlocks it.

### Authentication
Protected endpoints require:
```
Authorization: Bearer <access_token>
```
Admin endpoints additionally require the `ADMIN` role in the token.

### Envelopes
Success: `{ "success": true, "message": "...", "data": {...} }`

Error: `{ "success": false, "message": "...", "code": "...", "requestId": "..." }`

### Rate limits
`429 Too Many Requests` (code `rate_limit_exceeded`) is returned when a limit
on login, OTP verification or OTP resend is exceeded.
"""

_TAGS_METADATA = [
    {
        "name": "auth",
        "description": (
            "Two-step login (password then OTP), OTP resend, token refresh, "
            "logout, current user, token validation and the client idle-session policy."
        ),
    },
    {
        "name": "admin-users",
        "description": (
            "**Admin only.** Provision, list, unlock, activate and deactivate accounts."
        ),
    },
]


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


# ── App factory ───────────────────────────────────────────────────────────────

def get_settings() -> Settings:
    return Settings()


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    return error_envelope(
        request,
        429,
        f"Too many requests. Limit: {exc.detail}.",
        "rate_limit_exceeded",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if getattr(app.state, "session_factory", None) is None:
        app.state.session_factory = init_db(settings.database_url)
    if settings.auto_create_tables:
        await create_all(app.state.session_factory)

    sweeper: asyncio.Task | None = None
    if settings.otp_sweep_interval_seconds > 0:
        sweeper = asyncio.create_task(
            run_otp_sweeper(
                app.state.session_factory, settings.otp_sweep_interval_seconds
            )
        )
    yield
    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
    await dispose(app.state.session_factory)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s:%(name)s: %(message)s",
    )
    if not settings.jwt_secret:
        logger.warning("JWT_SECRET is not set; token issuance will fail")

    app = FastAPI(
        title="ASHA Portal Identity Service",
        version="1.0.0",
        description=_DESCRIPTION,
        openapi_tags=_TAGS_METADATA,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.auth_settings = settings.auth_settings()
    app.state.session_factory = None

    # Attach rate limiter state before middleware
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    register_exception_handlers(app)

    # Middleware is applied in reverse-registration order (last added = outermost).
    # CORS must be outermost so ALL responses (including 429s) carry CORS headers.
    # request_id wraps error_envelope so 500s carry X-Request-ID too.
    app.add_middleware(SlowAPIMiddleware)
    app.middleware("http")(error_envelope_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    app.include_router(auth_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")

    @app.get("/health", response_model=HealthResponse, tags=["health"], include_in_schema=True)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="identity")

    return app


app = create_app()
