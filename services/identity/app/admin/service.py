"""
Admin domain — pure business logic (zero FastAPI imports).
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import OTPCode, User
from app.auth.service import (
    create_user,
    get_user_by_email,
    get_user_by_id,
    set_user_active,
    unlock_user,
)
from app.auth.utils import mask_email
from app.exceptions import UserNotFound
from shared.constants import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedUser:
    email: str
    password: str
    role: Role


# Demo accounts for local environments (scripts/seed_users.py)
DEMO_USERS: tuple[SeedUser, ...] = (
    SeedUser("admin@gmail.com", "Admin@123", Role.ADMIN),
    SeedUser("sunita.dixit.asha@gmail.com", "Dixit.Sunita@123", Role.ASHA),
)


async def list_users(
    session: AsyncSession,
    *,
    page: int,
    size: int,
    role: Role | None = None,
    is_active: bool | None = None,
    is_locked: bool | None = None,
) -> tuple[list[User], int]:
    """
    Paginated user listing with optional filters.

    Returns (users, total_count).
    """
    base = sa.select(User)
    count_base = sa.select(sa.func.count()).select_from(User)

    filters = []
    if role is not None:
        filters.append(User.role == role)
    if is_active is not None:
        filters.append(User.is_active == is_active)
    if is_locked is not None:
        filters.append(User.is_locked == is_locked)

    for f in filters:
        base = base.where(f)
        count_base = count_base.where(f)

    total_result = await session.execute(count_base)
    total = total_result.scalar_one()

    offset = (page - 1) * size
    query = base.order_by(User.created_at.desc(), User.email).offset(offset).limit(size)
    result = await session.execute(query)
    users = list(result.scalars().all())

    return users, total


async def get_user_detail(
    session: AsyncSession,
    user_id: uuid.UUID,
) -> User:
    """Load a single user by PK for admin viewing."""
    user = await get_user_by_id(session, user_id)
    if user is None:
        raise UserNotFound()
    return user


async def unlock(session: AsyncSession, user_id: uuid.UUID) -> User:
    user = await get_user_detail(session, user_id)
    await unlock_user(session, user)
    logger.info("Account %s unlocked by administrator", mask_email(user.email))
    return user


async def set_active(
    session: AsyncSession, user_id: uuid.UUID, is_active: bool
) -> User:
    user = await get_user_detail(session, user_id)
    await set_user_active(session, user, is_active)
    logger.info(
        "Account %s %s by administrator",
        mask_email(user.email),
        "activated" if is_active else "deactivated",
    )
    return user


async def seed_users(
    session: AsyncSession, users: Iterable[SeedUser] = DEMO_USERS
) -> list[User]:
    """
    Create each account that does not exist yet.

    Existing accounts are left untouched, so running the seed twice is safe.
    Returns the accounts created by this call.
    """
    created: list[User] = []
    for seed in users:
        if await get_user_by_email(session, seed.email) is not None:
            continue
        created.append(
            await create_user(
                session, email=seed.email, password=seed.password, role=seed.role
            )
        )
    return created


async def delete_all_users(session: AsyncSession) -> int:
    """Remove every account and every OTP. Used by ``seed_users.py --reset``."""
    await session.execute(sa.delete(OTPCode))
    result = await session.execute(sa.delete(User))
    await session.flush()
    return result.rowcount or 0
