"""
Identity service — auth-specific FastAPI dependencies.

These wrap the shared auth dependencies and add identity-service context
(settings lookup, role guards).
"""
from __future__ import annotations

from fastapi import Request

from app.config import Settings
from shared.auth.dependencies import get_current_user_required, require_roles
from shared.constants import Role


def get_settings(request: Request) -> Settings:
    """Settings the app factory was built with."""
    return request.app.state.settings


# ── Base user dependencies ────────────────────────────────────────────────────

# Alias the shared dependency so routes import from here, not from shared
# directly.  If we ever need to augment it (e.g. DB lookup), only this
# file changes.
get_current_user = get_current_user_required


# ── Role guards ───────────────────────────────────────────────────────────────

require_admin = require_roles(Role.ADMIN)
