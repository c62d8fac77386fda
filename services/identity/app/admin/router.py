"""
Admin domain — user management routes (ADMIN role only).

Routes:
  GET   /api/admin/users                         List accounts (filters + pagination)
  POST  /api/admin/users                         Provision an account
  GET   /api/admin/users/{user_id}               Single account
  PATCH /api/admin/users/{user_id}/unlock        Clear lockout and failed-login counter
  PATCH /api/admin/users/{user_id}/activate      Re-enable an account
  PATCH /api/admin/users/{user_id}/deactivate    Disable an account

Zero business logic. Zero DB queries.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.admin import controller as ctrl
from app.admin.schemas import AdminCreateUserRequest, AdminUserResponse
from app.auth.dependencies import require_admin
from app.database import get_db
from shared.constants import Role
from shared.models.envelope import ApiResponse
from shared.models.pagination import PaginatedResponse
from shared.models.user import CurrentUser

router = APIRouter(prefix="/admin/users", tags=["admin-users"])


@router.get(
    "",
    response_model=ApiResponse[PaginatedResponse[AdminUserResponse]],
    summary="[Admin] List accounts with filters and pagination",
)
async def list_users(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    role: Role | None = Query(None, description="Filter by role"),
    is_active: bool | None = Query(None, alias="isActive", description="Filter by active status"),
    is_locked: bool | None = Query(None, alias="isLocked", description="Filter by lock status"),
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[PaginatedResponse[AdminUserResponse]]:
    data = await ctrl.list_users(
        session,
        page=page,
        size=size,
        role=role,
        is_active=is_active,
        is_locked=is_locked,
    )
    return ApiResponse(message="Users retrieved.", data=data)


@router.post(
    "",
    response_model=ApiResponse[AdminUserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="[Admin] Provision a new account",
)
async def create_user(
    body: AdminCreateUserRequest,
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[AdminUserResponse]:
    data = await ctrl.create_account(session, body)
    return ApiResponse(message="User created.", data=data)


@router.get(
    "/{user_id}",
    response_model=ApiResponse[AdminUserResponse],
    summary="[Admin] Get a single account",
)
async def get_user_detail(
    user_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[AdminUserResponse]:
    data = await ctrl.get_user_detail(session, user_id)
    return ApiResponse(message="User retrieved.", data=data)


@router.patch(
    "/{user_id}/unlock",
    response_model=ApiResponse[AdminUserResponse],
    summary="[Admin] Unlock an account and reset its failed-login counter",
)
async def unlock_user(
    user_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[AdminUserResponse]:
    data = await ctrl.unlock_user(session, user_id)
    return ApiResponse(message="User unlocked.", data=data)


@router.patch(
    "/{user_id}/activate",
    response_model=ApiResponse[AdminUserResponse],
    summary="[Admin] Activate an account",
)
async def activate_user(
    user_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[AdminUserResponse]:
    data = await ctrl.set_active(session, user_id, True)
    return ApiResponse(message="User activated.", data=data)


@router.patch(
    "/{user_id}/deactivate",
    response_model=ApiResponse[AdminUserResponse],
    summary="[Admin] Deactivate an account",
)
async def deactivate_user(
    user_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[AdminUserResponse]:
    data = await ctrl.set_active(session, user_id, False)
    return ApiResponse(message="User deactivated.", data=data)
