import ssl
from pathlib import Path
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from shared.database.config import DatabaseSSLSettings

Base = declarative_base()


def _build_ssl_connect_args(
    ssl_settings: DatabaseSSLSettings | None = None,
) -> dict[str, Any]:
    """Return asyncpg ``connect_args`` for SSL when DATABASE_SSL is set."""
    ssl_settings = ssl_settings or DatabaseSSLSettings()
    mode = ssl_settings.database_ssl.lower()
    if not mode or mode == "disable":
        return {}

    cert_path = ssl_settings.rds_ssl_cert
    if cert_path and Path(cert_path).exists():
        ctx = ssl.create_default_context(cafile=cert_path)
        return {"connect_args": {"ssl": ctx}}

    # Fall back to simple 'require' (encrypted, no cert verification)
    return {"connect_args": {"ssl": "require"}}


def _is_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite")


def get_async_engine(database_url: str, **kwargs: Any) -> Any:
    if _is_sqlite(database_url):
        # One shared connection so an in-memory database outlives each session
        return create_async_engine(
            database_url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            **kwargs,
        )
    ssl_kwargs = _build_ssl_connect_args()
    merged = {**ssl_kwargs, **kwargs}
    return create_async_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,
        **merged,
    )


def get_async_session_factory(
    database_url: str,
    *,
    expire_on_commit: bool = False,
    **engine_kwargs: Any,
) -> async_sessionmaker[AsyncSession]:
    engine = get_async_engine(database_url, **engine_kwargs)
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=expire_on_commit,
        autoflush=False,
        autocommit=False,
    )


AsyncSessionFactory = async_sessionmaker[AsyncSession]


async def create_all(session_factory: AsyncSessionFactory) -> None:
    """Create every table registered on Base (idempotent)."""
    engine = session_factory.kw["bind"]
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose(session_factory: AsyncSessionFactory) -> None:
    await session_factory.kw["bind"].dispose()

