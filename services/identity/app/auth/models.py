"""
Identity service — SQLAlchemy ORM models for the auth domain.

Tables owned by this module:
  - users      Portal accounts (ADMIN / ASHA), password hash and lockout state
  - otp_codes  Short-lived one-time codes issued after a successful password check

Column types are portable (sa.Uuid, non-native enum) so the same models run on
Postgres in deployment and SQLite in the test suite.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from shared.constants import Role
from shared.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    # ── Primary key ──────────────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(),
        primary_key=True,
        default=uuid.uuid4,
    )

    # ── Authentication identifiers ────────────────────────────────────────────
    # Always stored lowercase; every lookup lowercases its input first
    email: Mapped[str] = mapped_column(
        sa.String(255), unique=True, nullable=False, index=True
    )
    password_hash: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    role: Mapped[Role] = mapped_column(
        sa.Enum(
            Role,
            name="userrole",
            native_enum=False,
            length=16,
            values_callable=lambda e: [x.value for x in e],
        ),
        nullable=False,
        index=True,
    )

    # ── Account flags ─────────────────────────────────────────────────────────
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean(),
        nullable=False,
        default=True,
        server_default=sa.true(),
        index=True,
    )
    # Set once failed_login_attempts reaches the configured maximum.
    # Cleared only by an administrator (PATCH /admin/users/{id}/unlock).
    is_locked: Mapped[bool] = mapped_column(
        sa.Boolean(),
        nullable=False,
        default=False,
        server_default=sa.false(),
        index=True,
    )
    locked_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    failed_login_attempts: Mapped[int] = mapped_column(
        sa.SmallInteger(),
        nullable=False,
        default=0,
        server_default=sa.text("0"),
    )
    last_login_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )

    # ── Audit timestamps ──────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )


class OTPCode(Base):
    """
    One-time code tied to a (user, email) pair.

    At most one row exists per pair: issuing a new code deletes the previous
    ones.  A code is valid while it is unused, unexpired and has fewer than
    OTP_MAX_ATTEMPTS failed verifications.  Exhausted rows are kept until the
    sweeper removes them after expiry.
    """

    __tablename__ = "otp_codes"
    __table_args__ = (
        sa.Index("ix_otp_codes_user_email", "user_id", "email"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(),
        sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_otp_codes_user_id"),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    # Six digits as a string so leading zeros survive ("004521")
    code: Mapped[str] = mapped_column(sa.String(6), nullable=False)
    attempts: Mapped[int] = mapped_column(
        sa.SmallInteger(),
        nullable=False,
        default=0,
        server_default=sa.text("0"),
    )
    is_used: Mapped[bool] = mapped_column(
        sa.Boolean(),
        nullable=False,
        default=False,
        server_default=sa.false(),
    )
    expires_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
