from collections.abc import Iterable

from shared.constants import Role


def is_authorized(role: Role | str, allowed_roles: Iterable[Role | str]) -> bool:
    """True when ``role`` is one of ``allowed_roles``. Unknown role names are never authorized."""
    try:
        role = Role(role)
        allowed = {Role(r) for r in allowed_roles}
    except ValueError:
        return False
    return role in allowed
