from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_files() -> list[str]:
    base = Path(__file__).resolve().parents[3]  # shared/shared/database/ → repo root
    return [str(base / ".env"), ".env"]


class DatabaseSSLSettings(BaseSettings):
    """DATABASE_SSL / RDS_SSL_CERT, from the environment or .env."""

    model_config = SettingsConfigDict(
        env_file=_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_ssl: str = ""   # "", "disable" or any other value to turn SSL on
    rds_ssl_cert: str = ""   # CA bundle path; without it SSL is "require"
