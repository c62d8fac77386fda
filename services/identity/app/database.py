from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shared.database import get_async_session_factory


def init_db(database_url: str) -> async_sessionmaker[AsyncSession]:
    """Build the session factory; the app factory keeps it on app.state."""
    return get_async_session_factory(database_url, expire_on_commit=False)


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    factory = getattr(request.app.state, "session_factory", None)
    if factory is None:
        raise RuntimeError("Database not initialized")
    return factory


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    factory = get_session_factory(request)
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
