"""
Identity service — credential store.

Rules:
  - Zero FastAPI imports.
  - Zero direct DB driver calls — only SQLAlchemy async session.
  - All I/O functions are async def.
  - Mutations flush(); the controller decides when to commit.
  - Time is injectable (``now``) so lockout stamps are testable.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.constants import MAX_FAILED_LOGINS
from app.auth.models import User
from app.auth.utils import (
    hash_password,
    mask_email,
    normalize_email,
    utcnow,
    verify_password,
)
from app.exceptions import AccountDeactivated, AccountLocked, UserAlreadyExists
from shared.constants import Role

logger = logging.getLogger(__name__)


# ── User queries ──────────────────────────────────────────────────────────────

async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    # Emails are stored lowercase, so normalizing the input is enough
    result = await session.execute(
        select(User).where(User.email == normalize_email(email))
    )
    return result.scalar_one_or_none()


async def get_user_by_id(
    session: AsyncSession, user_id: uuid.UUID
) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


# ── Guard: ensure account is usable ──────────────────────────────────────────

def assert_account_usable(user: User) -> None:
    """
    Raise the appropriate HTTP exception for any account-level block.

    Lock is checked first so that a locked account answers 423 whatever the
    password was.  Also called on token refresh so that locks and
    deactivations take effect before the refresh token expires.
    """
    if user.is_locked:
        raise AccountLocked()
    if not user.is_active:
        raise AccountDeactivated()


# ── Provisioning ──────────────────────────────────────────────────────────────

async def create_user(
    session: AsyncSession,
    *,
    email: str,
    password: str,
    role: Role,
    is_active: bool = True,
) -> User:
    """Create an account. Uses flush() so the caller can use user.id without committing."""
    if await get_user_by_email(session, email) is not None:
        raise UserAlreadyExists()

    user = User(
        email=normalize_email(email),
        password_hash=hash_password(password),
        role=role,
        is_active=is_active,
    )
    session.add(user)
    await session.flush()
    return user


# ── Password check ────────────────────────────────────────────────────────────

def compare_password(user: User, plaintext: str) -> bool:
    return verify_password(plaintext, user.password_hash)


# ── Failed-login counter and lockout ─────────────────────────────────────────

async def increment_login_attempts(
    session: AsyncSession,
    user: User,
    *,
    max_attempts: int = MAX_FAILED_LOGINS,
    now: datetime | None = None,
) -> bool:
    """
    Count one failed password check.

    Returns True when this failure locked the account.  The lock stays until
    an administrator calls unlock_user.
    """
    user.failed_login_attempts += 1
    just_locked = False
    if not user.is_locked and user.failed_login_attempts >= max_attempts:
        user.is_locked = True
        user.locked_at = now or utcnow()
        just_locked = True
        logger.warning(
            "Account %s locked after %d failed login attempts",
            mask_email(user.email),
            user.failed_login_attempts,
        )
    await session.flush()
    return just_locked


async def reset_login_attempts(session: AsyncSession, user: User) -> None:
    if user.failed_login_attempts:
        user.failed_login_attempts = 0
        await session.flush()


async def unlock_user(session: AsyncSession, user: User) -> None:
    user.is_locked = False
    user.locked_at = None
    user.failed_login_attempts = 0
    await session.flush()


async def set_user_active(
    session: AsyncSession, user: User, is_active: bool
) -> None:
    user.is_active = is_active
    await session.flush()


# ── Audit: last login ─────────────────────────────────────────────────────────

async def record_login(
    session: AsyncSession, user: User, *, now: datetime | None = None
) -> None:
    """Stamp last_login_at without ending the transaction."""
    user.last_login_at = now or utcnow()
    await session.flush()
