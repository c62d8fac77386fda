"""
Identity service — one-time password store.

Codes live in the ``otp_codes`` table, one live row per (user, email).  The
session and the clock are passed in; nothing here keeps process state.

Verification outcomes:
  - InvalidCode             no live code for the pair, or a wrong code with
                            attempts left (the attempt is counted)
  - CodeExpiredOrExhausted  the code expired or the third wrong attempt was made
  - success                 the code is marked used
"""
from __future__ import annotations

import asyncio
import logging
import secrets
import uuid
from datetime import datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.auth.constants import OTP_EXPIRE_SECONDS, OTP_LENGTH, OTP_MAX_ATTEMPTS
from app.auth.models import OTPCode
from app.auth.utils import as_aware, normalize_email, utcnow
from app.exceptions import CodeExpiredOrExhausted, InvalidCode

logger = logging.getLogger(__name__)


def generate_otp_code() -> str:
    """Uniform over 000000-999999; leading zeros are kept."""
    return f"{secrets.randbelow(10 ** OTP_LENGTH):0{OTP_LENGTH}d}"


# ── Issue ─────────────────────────────────────────────────────────────────────

async def create_otp_for_user(
    session: AsyncSession,
    user_id: uuid.UUID,
    email: str,
    *,
    now: datetime | None = None,
) -> OTPCode:
    """
    Replace any code for (user_id, email) with a fresh one.

    The returned record carries the raw code for the delivery hook.
    """
    now = now or utcnow()
    email = normalize_email(email)
    await session.execute(
        delete(OTPCode).where(OTPCode.user_id == user_id, OTPCode.email == email)
    )
    otp = OTPCode(
        user_id=user_id,
        email=email,
        code=generate_otp_code(),
        attempts=0,
        is_used=False,
        expires_at=now + timedelta(seconds=OTP_EXPIRE_SECONDS),
        created_at=now,
    )
    session.add(otp)
    await session.flush()
    return otp


# ── Verify ────────────────────────────────────────────────────────────────────

async def get_live_otp(
    session: AsyncSession, user_id: uuid.UUID, email: str
) -> OTPCode | None:
    """Newest unused code for the pair, expired or not."""
    result = await session.execute(
        select(OTPCode)
        .where(
            OTPCode.user_id == user_id,
            OTPCode.email == normalize_email(email),
            OTPCode.is_used.is_(False),
        )
        .order_by(OTPCode.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


def is_otp_valid(otp: OTPCode, now: datetime) -> bool:
    return (
        not otp.is_used
        and as_aware(otp.expires_at) > now
        and otp.attempts < OTP_MAX_ATTEMPTS
    )


async def verify_otp(
    session: AsyncSession,
    user_id: uuid.UUID,
    email: str,
    candidate: str,
    *,
    now: datetime | None = None,
) -> OTPCode:
    """
    Check ``candidate`` against the live code and consume it on a match.

    A wrong guess is flushed before raising; the caller must commit it, since
    the request session rolls back on exceptions.
    """
    now = now or utcnow()
    otp = await get_live_otp(session, user_id, email)
    if otp is None:
        raise InvalidCode()
    if not is_otp_valid(otp, now):
        raise CodeExpiredOrExhausted()

    if not secrets.compare_digest(otp.code.encode(), candidate.strip().encode()):
        otp.attempts += 1
        await session.flush()
        remaining = OTP_MAX_ATTEMPTS - otp.attempts
        if remaining <= 0:
            raise CodeExpiredOrExhausted()
        raise InvalidCode(attempts_remaining=remaining)

    otp.is_used = True
    await session.flush()
    return otp


# ── Sweep ─────────────────────────────────────────────────────────────────────

async def sweep_expired_otps(
    session: AsyncSession, *, now: datetime | None = None
) -> int:
    """Delete every expired code. Returns the number of rows removed."""
    now = now or utcnow()
    result = await session.execute(
        delete(OTPCode)
        .where(OTPCode.expires_at <= now)
        .execution_options(synchronize_session=False)
    )
    await session.flush()
    return result.rowcount or 0


async def run_otp_sweeper(
    session_factory: async_sessionmaker[AsyncSession],
    interval_seconds: float,
) -> None:
    """Loop started from the app lifespan; cancelled on shutdown."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            async with session_factory() as session:
                removed = await sweep_expired_otps(session)
                await session.commit()
        except Exception:
            logger.exception("OTP sweep failed")
            continue
        if removed:
            logger.info("OTP sweep removed %d expired code(s)", removed)
