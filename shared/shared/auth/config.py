from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_files() -> list[str]:
    """Load .env from the repository root so JWT_* vars are always available."""
    base = Path(__file__).resolve().parents[3]  # shared/shared/auth/ → repo root
    return [str(base / ".env"), ".env"]


class AuthSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        env_file=_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    secret: str = ""
    algorithm: str = "HS256"
    issuer: str = "asha-portal"
    audience: str = "asha-portal-users"
    expire_seconds: int = 1800                 # 30 minutes (access token)
    refresh_expire_seconds: int = 604_800      # 7 days (refresh token)
