from shared.database.config import DatabaseSSLSettings
from shared.database.engine import (
    AsyncSessionFactory,
    Base,
    create_all,
    dispose,
    get_async_session_factory,
)

__all__ = [
    "AsyncSessionFactory",
    "Base",
    "DatabaseSSLSettings",
    "create_all",
    "dispose",
    "get_async_session_factory",
]
