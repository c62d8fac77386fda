import pytest
from httpx import AsyncClient

from app.auth.models import User
from shared.auth.tokens import issue_token
from shared.constants import Role
from shared.models.user import CurrentUser


@pytest.fixture
def admin_headers(settings, admin_user: User) -> dict[str, str]:
    claims = CurrentUser(id=admin_user.id, email=admin_user.email, role=Role.ADMIN)
    return {"Authorization": f"Bearer {issue_token(claims, settings.auth_settings())}"}


@pytest.fixture
def asha_headers(settings, asha_user: User) -> dict[str, str]:
    claims = CurrentUser(id=asha_user.id, email=asha_user.email, role=Role.ASHA)
    return {"Authorization": f"Bearer {issue_token(claims, settings.auth_settings())}"}


@pytest.mark.asyncio
async def test_requires_token(async_client: AsyncClient) -> None:
    resp = await async_client.get("/api/admin/users")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_asha_role_is_forbidden(async_client: AsyncClient, asha_headers) -> None:
    resp = await async_client.get("/api/admin/users", headers=asha_headers)
    assert resp.status_code == 403
    assert resp.json()["code"] == "insufficient_role"


@pytest.mark.asyncio
async def test_create_and_list(async_client: AsyncClient, admin_headers) -> None:
    resp = await async_client.post(
        "/api/admin/users",
        headers=admin_headers,
        json={"email": "Meera.ASHA@gmail.com", "password": "Meera@1234", "role": "ASHA"},
    )
    assert resp.status_code == 201
    created = resp.json()["data"]
    assert created["email"] == "meera.asha@gmail.com"
    assert created["role"] == "ASHA"
    assert created["isActive"] is True
    assert created["isLocked"] is False
    assert "passwordHash" not in created

    listing = await async_client.get("/api/admin/users", headers=admin_headers)
    assert listing.status_code == 200
    page = listing.json()["data"]
    assert page["total"] == 2
    assert page["page"] == 1
    assert page["pageSize"] == 20
    assert {u["email"] for u in page["items"]} == {"admin@gmail.com", "meera.asha@gmail.com"}

    only_asha = await async_client.get(
        "/api/admin/users", headers=admin_headers, params={"role": "ASHA"}
    )
    assert [u["email"] for u in only_asha.json()["data"]["items"]] == ["meera.asha@gmail.com"]


@pytest.mark.asyncio
async def test_create_duplicate(async_client: AsyncClient, admin_headers) -> None:
    resp = await async_client.post(
        "/api/admin/users",
        headers=admin_headers,
        json={"email": "ADMIN@gmail.com", "password": "Another@123", "role": "ADMIN"},
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "user_already_exists"


@pytest.mark.asyncio
async def test_create_rejects_bad_email(async_client: AsyncClient, admin_headers) -> None:
    resp = await async_client.post(
        "/api/admin/users",
        headers=admin_headers,
        json={"email": "not-an-email", "password": "Another@123"},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_create_keeps_password_whitespace(
    async_client: AsyncClient, admin_headers
) -> None:
    resp = await async_client.post(
        "/api/admin/users",
        headers=admin_headers,
        json={"email": "spaced.asha@gmail.com", "password": " Spaced@123 "},
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["email"] == "spaced.asha@gmail.com"

    trimmed = await async_client.post(
        "/api/auth/login", json={"email": "spaced.asha@gmail.com", "password": "Spaced@123"}
    )
    assert trimmed.status_code == 401

    exact = await async_client.post(
        "/api/auth/login", json={"email": "spaced.asha@gmail.com", "password": " Spaced@123 "}
    )
    assert exact.status_code == 200


@pytest.mark.asyncio
async def test_unlock_restores_login(
    async_client: AsyncClient, admin_headers, make_user
) -> None:
    locked = await make_user(
        "locked.asha@gmail.com", "Locked@123", is_locked=True, failed_login_attempts=5
    )

    filtered = await async_client.get(
        "/api/admin/users", headers=admin_headers, params={"isLocked": "true"}
    )
    assert [u["email"] for u in filtered.json()["data"]["items"]] == ["locked.asha@gmail.com"]

    before = await async_client.post(
        "/api/auth/login", json={"email": "locked.asha@gmail.com", "password": "Locked@123"}
    )
    assert before.status_code == 423

    resp = await async_client.patch(f"/api/admin/users/{locked.id}/unlock", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["isLocked"] is False
    assert data["failedLoginAttempts"] == 0
    assert data["lockedAt"] is None

    after = await async_client.post(
        "/api/auth/login", json={"email": "locked.asha@gmail.com", "password": "Locked@123"}
    )
    assert after.status_code == 200


@pytest.mark.asyncio
async def test_deactivate_and_activate(
    async_client: AsyncClient, admin_headers, asha_user: User
) -> None:
    resp = await async_client.patch(
        f"/api/admin/users/{asha_user.id}/deactivate", headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["isActive"] is False

    login = await async_client.post(
        "/api/auth/login",
        json={"email": asha_user.email, "password": "Dixit.Sunita@123"},
    )
    assert login.status_code == 403

    resp = await async_client.patch(
        f"/api/admin/users/{asha_user.id}/activate", headers=admin_headers
    )
    assert resp.json()["data"]["isActive"] is True


@pytest.mark.asyncio
async def test_unknown_user(async_client: AsyncClient, admin_headers) -> None:
    resp = await async_client.patch(
        "/api/admin/users/00000000-0000-0000-0000-000000000000/unlock",
        headers=admin_headers,
    )
    assert resp.status_code == 404
    assert resp.json()["code"] == "user_not_found"

    detail = await async_client.get(
        "/api/admin/users/00000000-0000-0000-0000-000000000000", headers=admin_headers
    )
    assert detail.status_code == 404
