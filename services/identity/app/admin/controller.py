"""
Admin domain — request orchestration layer.
"""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.admin.schemas import AdminCreateUserRequest, AdminUserResponse
from app.admin.service import (
    get_user_detail as get_user_detail_svc,
    list_users as list_users_svc,
    set_active as set_active_svc,
    unlock as unlock_svc,
)
from app.auth.service import create_user
from shared.constants import Role
from shared.models.pagination import PaginatedResponse


async def create_account(
    session: AsyncSession,
    body: AdminCreateUserRequest,
) -> AdminUserResponse:
    user = await create_user(
        session,
        email=body.email,
        password=body.password,
        role=body.role,
        is_active=body.is_active,
    )
    return AdminUserResponse.model_validate(user)


async def list_users(
    session: AsyncSession,
    *,
    page: int,
    size: int,
    role: Role | None = None,
    is_active: bool | None = None,
    is_locked: bool | None = None,
) -> PaginatedResponse[AdminUserResponse]:
    users, total = await list_users_svc(
        session,
        page=page,
        size=size,
        role=role,
        is_active=is_active,
        is_locked=is_locked,
    )
    return PaginatedResponse[AdminUserResponse](
        items=[AdminUserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        page_size=size,
    )


async def get_user_detail(
    session: AsyncSession,
    user_id: uuid.UUID,
) -> AdminUserResponse:
    user = await get_user_detail_svc(session, user_id)
    return AdminUserResponse.model_validate(user)


async def unlock_user(
    session: AsyncSession,
    user_id: uuid.UUID,
) -> AdminUserResponse:
    user = await unlock_svc(session, user_id)
    return AdminUserResponse.model_validate(user)


async def set_active(
    session: AsyncSession,
    user_id: uuid.UUID,
    is_active: bool,
) -> AdminUserResponse:
    user = await set_active_svc(session, user_id, is_active)
    return AdminUserResponse.model_validate(user)
