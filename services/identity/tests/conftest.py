from collections.abc import AsyncGenerator, Awaitable, Callable, Generator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.auth.models import OTPCode, User
from app.auth.service import create_user
from app.config import Settings
from app.database import init_db
from app.main import create_app
from app.rate_limit import limiter
from shared.constants import Role
from shared.database import create_all, dispose

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_JWT_SECRET = "test-secret-do-not-use-in-production"


def _make_settings(**overrides) -> Settings:
    values = {
        "database_url": TEST_DATABASE_URL,
        "jwt_secret": TEST_JWT_SECRET,
        "env_name": "development",
        "expose_dev_otp": True,
        "otp_sweep_interval_seconds": 0,
        "log_level": "DEBUG",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(autouse=True)
def _disable_rate_limits() -> Generator[None, None, None]:
    previous = limiter.enabled
    limiter.enabled = False
    yield
    limiter.enabled = previous


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    return _make_settings


@pytest.fixture
def settings() -> Settings:
    return _make_settings()


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    factory = init_db(TEST_DATABASE_URL)
    await create_all(factory)
    yield factory
    await dispose(factory)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(settings: Settings, session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    application = create_app(settings)
    # ASGITransport does not run the lifespan; wire the test database directly
    application.state.session_factory = session_factory
    return application


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def client(settings: Settings) -> Generator[TestClient, None, None]:
    """Runs the real lifespan (engine, create_all) against an in-memory database."""
    with TestClient(create_app(settings)) as c:
        yield c


# ── Data helpers ──────────────────────────────────────────────────────────────

@pytest.fixture
def make_user(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[User]]:
    """Create and commit an account; extra keyword arguments set model flags."""

    async def _make(
        email: str, password: str, role: Role = Role.ASHA, **flags
    ) -> User:
        async with session_factory() as session:
            user = await create_user(
                session, email=email, password=password, role=role
            )
            for name, value in flags.items():
                setattr(user, name, value)
            await session.commit()
            return user

    return _make


@pytest.fixture
def fetch_otp(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[str], Awaitable[OTPCode | None]]:
    """Newest OTP row for an email, read in a fresh session."""

    async def _fetch(email: str) -> OTPCode | None:
        async with session_factory() as session:
            result = await session.execute(
                select(OTPCode)
                .where(OTPCode.email == email)
                .order_by(OTPCode.created_at.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

    return _fetch


@pytest_asyncio.fixture
async def admin_user(make_user) -> User:
    return await make_user("admin@gmail.com", "Admin@123", Role.ADMIN)


@pytest_asyncio.fixture
async def asha_user(make_user) -> User:
    return await make_user("sunita.dixit.asha@gmail.com", "Dixit.Sunita@123", Role.ASHA)
