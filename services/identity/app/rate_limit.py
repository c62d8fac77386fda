"""
Global slowapi rate limiter.

Imported by auth/router.py for per-endpoint limits.  Mounted onto app.state in
main.py so slowapi middleware can find it.

Storage: in-memory by default; point RATE_LIMIT_STORAGE_URI at Redis
(redis://host:6379/0) when more than one API process shares the limits.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import env_files


class RateLimitSettings(BaseSettings):
    """RATE_LIMIT_* variables, from the environment or .env."""

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        env_file=env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = True
    storage_uri: str = "memory://"
    # Per-endpoint limits, in slowapi notation
    login: str = "5/15minutes"
    verify_otp: str = "10/15minutes"
    resend_otp: str = "3/5minutes"


def build_limiter(settings: RateLimitSettings) -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        storage_uri=settings.storage_uri,
        enabled=settings.enabled,
    )


# Route decorators bind their limits at import time
rate_limit_settings = RateLimitSettings()
limiter = build_limiter(rate_limit_settings)

LOGIN_LIMIT = rate_limit_settings.login
VERIFY_OTP_LIMIT = rate_limit_settings.verify_otp
RESEND_OTP_LIMIT = rate_limit_settings.resend_otp
