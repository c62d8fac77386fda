from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.service import (
    assert_account_usable,
    compare_password,
    create_user,
    get_user_by_email,
    get_user_by_id,
    increment_login_attempts,
    record_login,
    reset_login_attempts,
    unlock_user,
)
from app.exceptions import AccountDeactivated, AccountLocked, UserAlreadyExists
from shared.constants import Role


@pytest.mark.asyncio
async def test_create_user_normalizes_email_and_hashes(db_session: AsyncSession) -> None:
    user = await create_user(
        db_session, email="  Sunita@Gmail.COM ", password="Secret@123", role=Role.ASHA
    )
    assert user.email == "sunita@gmail.com"
    assert user.password_hash != "Secret@123"
    assert user.password_hash.startswith("$argon2")
    assert user.is_active is True
    assert user.is_locked is False
    assert user.failed_login_attempts == 0


@pytest.mark.asyncio
async def test_create_duplicate_raises(db_session: AsyncSession) -> None:
    await create_user(db_session, email="dup@gmail.com", password="pass", role=Role.ASHA)
    with pytest.raises(UserAlreadyExists):
        await create_user(db_session, email="DUP@gmail.com", password="other", role=Role.ADMIN)


@pytest.mark.asyncio
async def test_get_user_by_email_is_case_insensitive(db_session: AsyncSession) -> None:
    created = await create_user(
        db_session, email="admin@gmail.com", password="Admin@123", role=Role.ADMIN
    )
    found = await get_user_by_email(db_session, "ADMIN@gmail.com")
    assert found is not None
    assert found.id == created.id
    assert await get_user_by_email(db_session, "nobody@gmail.com") is None


@pytest.mark.asyncio
async def test_get_user_by_id(db_session: AsyncSession) -> None:
    created = await create_user(
        db_session, email="byid@gmail.com", password="pw", role=Role.ASHA
    )
    assert (await get_user_by_id(db_session, created.id)).email == "byid@gmail.com"


@pytest.mark.asyncio
async def test_compare_password(db_session: AsyncSession) -> None:
    user = await create_user(
        db_session, email="pw@gmail.com", password="right", role=Role.ASHA
    )
    assert compare_password(user, "right") is True
    assert compare_password(user, "wrong") is False


@pytest.mark.asyncio
async def test_compare_password_with_malformed_hash_is_false(db_session: AsyncSession) -> None:
    user = await create_user(
        db_session, email="broken@gmail.com", password="right", role=Role.ASHA
    )
    user.password_hash = "not-a-hash"
    assert compare_password(user, "right") is False


@pytest.mark.asyncio
async def test_fifth_failure_locks_account(db_session: AsyncSession) -> None:
    user = await create_user(
        db_session, email="lock@gmail.com", password="pw", role=Role.ASHA
    )
    now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    for _ in range(4):
        assert await increment_login_attempts(db_session, user, max_attempts=5, now=now) is False
    assert user.is_locked is False

    assert await increment_login_attempts(db_session, user, max_attempts=5, now=now) is True
    assert user.is_locked is True
    assert user.locked_at == now
    assert user.failed_login_attempts == 5

    with pytest.raises(AccountLocked):
        assert_account_usable(user)


@pytest.mark.asyncio
async def test_further_failures_do_not_relock(db_session: AsyncSession) -> None:
    user = await create_user(
        db_session, email="relock@gmail.com", password="pw", role=Role.ASHA
    )
    for _ in range(5):
        await increment_login_attempts(db_session, user, max_attempts=5)
    assert await increment_login_attempts(db_session, user, max_attempts=5) is False
    assert user.failed_login_attempts == 6


@pytest.mark.asyncio
async def test_reset_and_unlock(db_session: AsyncSession) -> None:
    user = await create_user(
        db_session, email="reset@gmail.com", password="pw", role=Role.ASHA
    )
    await increment_login_attempts(db_session, user, max_attempts=5)
    await reset_login_attempts(db_session, user)
    assert user.failed_login_attempts == 0

    for _ in range(5):
        await increment_login_attempts(db_session, user, max_attempts=5)
    await unlock_user(db_session, user)
    assert user.is_locked is False
    assert user.locked_at is None
    assert user.failed_login_attempts == 0
    assert_account_usable(user)


@pytest.mark.asyncio
async def test_inactive_account_is_not_usable(db_session: AsyncSession) -> None:
    user = await create_user(
        db_session, email="off@gmail.com", password="pw", role=Role.ASHA, is_active=False
    )
    with pytest.raises(AccountDeactivated):
        assert_account_usable(user)


@pytest.mark.asyncio
async def test_lock_is_reported_before_deactivation(db_session: AsyncSession) -> None:
    user = await create_user(
        db_session, email="both@gmail.com", password="pw", role=Role.ASHA, is_active=False
    )
    user.is_locked = True
    with pytest.raises(AccountLocked):
        assert_account_usable(user)


@pytest.mark.asyncio
async def test_record_login(db_session: AsyncSession) -> None:
    user = await create_user(
        db_session, email="seen@gmail.com", password="pw", role=Role.ASHA
    )
    now = datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)
    await record_login(db_session, user, now=now)
    assert user.last_login_at == now
