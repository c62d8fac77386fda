from shared.auth.config import AuthSettings
from shared.auth.dependencies import get_current_user_required, require_roles
from shared.auth.policy import is_authorized
from shared.auth.tokens import issue_refresh_token, issue_token, verify_token

__all__ = [
    "AuthSettings",
    "get_current_user_required",
    "require_roles",
    "is_authorized",
    "issue_token",
    "issue_refresh_token",
    "verify_token",
]
