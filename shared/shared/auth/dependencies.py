from collections.abc import Awaitable, Callable
from functools import lru_cache

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shared.auth.config import AuthSettings
from shared.auth.policy import is_authorized
from shared.auth.tokens import verify_token
from shared.constants import Role
from shared.exceptions import InsufficientRole, NotAuthenticated
from shared.models.user import CurrentUser

http_bearer = HTTPBearer(auto_error=False)


@lru_cache
def _default_auth_settings() -> AuthSettings:
    return AuthSettings()


def get_auth_settings(request: Request) -> AuthSettings:
    """Settings attached by the app factory, falling back to the JWT_* environment."""
    settings = getattr(request.app.state, "auth_settings", None)
    return settings or _default_auth_settings()


async def get_current_user_required(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    settings: AuthSettings = Depends(get_auth_settings),
) -> CurrentUser:
    if not credentials or not credentials.credentials:
        raise NotAuthenticated()
    return verify_token(credentials.credentials, settings)


def require_roles(*allowed_roles: Role) -> Callable[..., Awaitable[CurrentUser]]:
    """Dependency factory: 401 without a valid token, 403 unless the role is allowed."""
    allowed = frozenset(allowed_roles)

    async def _guard(
        current_user: CurrentUser = Depends(get_current_user_required),
    ) -> CurrentUser:
        if not is_authorized(current_user.role, allowed):
            raise InsufficientRole()
        return current_user

    return _guard
