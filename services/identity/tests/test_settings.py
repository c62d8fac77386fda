from pathlib import Path

import pytest

from app.config import Settings
from app.rate_limit import RateLimitSettings, build_limiter
from shared.database import DatabaseSSLSettings
from shared.database.engine import _build_ssl_connect_args

RATE_LIMIT_VARS = (
    "RATE_LIMIT_ENABLED",
    "RATE_LIMIT_STORAGE_URI",
    "RATE_LIMIT_LOGIN",
    "RATE_LIMIT_VERIFY_OTP",
    "RATE_LIMIT_RESEND_OTP",
)


@pytest.fixture
def dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    for name in (*RATE_LIMIT_VARS, "DATABASE_SSL", "RDS_SSL_CERT", "JWT_SECRET"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / ".env"
    path.write_text(
        "JWT_SECRET=from-dotenv\n"
        "RATE_LIMIT_ENABLED=false\n"
        "RATE_LIMIT_STORAGE_URI=memory://\n"
        "RATE_LIMIT_LOGIN=2/minute\n"
        "DATABASE_SSL=require\n",
        encoding="utf-8",
    )
    return path


def test_rate_limits_read_from_env_file(dotenv: Path) -> None:
    settings = RateLimitSettings(_env_file=dotenv)
    assert settings.enabled is False
    assert settings.login == "2/minute"
    assert settings.verify_otp == "10/15minutes"
    assert build_limiter(settings).enabled is False


def test_rate_limit_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in RATE_LIMIT_VARS:
        monkeypatch.delenv(name, raising=False)
    settings = RateLimitSettings(_env_file=None)
    assert settings.enabled is True
    assert settings.storage_uri == "memory://"
    assert (settings.login, settings.resend_otp) == ("5/15minutes", "3/5minutes")


def test_process_env_overrides_env_file(
    dotenv: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "true")
    assert RateLimitSettings(_env_file=dotenv).enabled is True


def test_env_file_shared_with_service_settings(dotenv: Path) -> None:
    assert Settings(_env_file=dotenv).jwt_secret == "from-dotenv"
    assert RateLimitSettings(_env_file=dotenv).enabled is False


def test_database_ssl_read_from_env_file(dotenv: Path) -> None:
    ssl_settings = DatabaseSSLSettings(_env_file=dotenv)
    assert ssl_settings.database_ssl == "require"
    assert _build_ssl_connect_args(ssl_settings) == {"connect_args": {"ssl": "require"}}


def test_database_ssl_disabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_SSL", raising=False)
    assert _build_ssl_connect_args(DatabaseSSLSettings(_env_file=None)) == {}
    assert _build_ssl_connect_args(
        DatabaseSSLSettings(_env_file=None, database_ssl="disable")
    ) == {}
