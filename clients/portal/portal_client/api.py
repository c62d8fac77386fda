"""
Async client for the portal auth API.

Holds the session token in memory once the OTP step succeeds and keeps a
SessionActivityMonitor running for it.  The session ends (token dropped,
``on_logout`` called) when the monitor reports idle expiry or the server
answers ``token_expired``.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from portal_client.errors import PortalAPIError, SessionExpiredError
from portal_client.monitor import SessionActivityMonitor

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000/api"


class PortalClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        monitor: SessionActivityMonitor | None = None,
        on_logout: Callable[[], Any] | None = None,
        on_warning: Callable[[], Any] | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
        self.monitor = monitor or SessionActivityMonitor()
        self._on_logout = on_logout
        self._on_warning = on_warning
        self.token: str | None = None
        self.refresh_token: str | None = None
        self.user: dict[str, Any] | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    # ── Transport ─────────────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        auth: bool = False,
    ) -> Any:
        """Send a request and return the envelope's ``data``; raise PortalAPIError otherwise."""
        headers = {}
        if auth:
            if self.token is None:
                raise SessionExpiredError("Not logged in.")
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Portal request %s %s failed: %s", method, path, exc)
            raise PortalAPIError(
                0, "network_error", "Network error. Please check your connection."
            ) from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_error:
            code = body.get("code") or "http_error"
            message = body.get("message") or response.reason_phrase
            if code == "token_expired":
                self._end_session()
                raise SessionExpiredError(message)
            raise PortalAPIError(
                response.status_code, code, message, request_id=body.get("requestId")
            )
        return body.get("data")

    # ── Auth flow ─────────────────────────────────────────────────────────────

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """Password step. Returns ``{userId, email, role, requiresOTP}``."""
        return await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )

    async def verify_otp(self, user_id: str, email: str, otp: str) -> dict[str, Any]:
        """OTP step. Stores the tokens and starts idle monitoring."""
        data = await self._request(
            "POST",
            "/auth/verify-otp",
            json={"userId": str(user_id), "email": email, "otp": otp},
        )
        self.token = data["token"]
        self.refresh_token = data.get("refreshToken")
        self.user = data.get("user")
        self.monitor.start(self._handle_idle_expiry, self._on_warning)
        return data

    async def resend_otp(self, user_id: str, email: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/auth/resend-otp", json={"userId": str(user_id), "email": email}
        ) or {}

    async def logout(self) -> None:
        """Tell the server, then drop the session locally whatever it answered."""
        if self.token is None:
            return
        try:
            await self._request("POST", "/auth/logout", auth=True)
        except PortalAPIError as exc:
            logger.warning("Server-side logout failed: %s", exc.message)
        finally:
            self.monitor.clear()
            self._clear_credentials()

    # ── Session ───────────────────────────────────────────────────────────────

    async def me(self) -> dict[str, Any]:
        data = await self._request("GET", "/auth/me", auth=True)
        self.user = data["user"]
        return self.user

    async def validate_token(self) -> dict[str, Any]:
        data = await self._request("GET", "/auth/validate-token", auth=True)
        return data["user"]

    async def session_config(self) -> dict[str, Any]:
        """Fetch the server's idle policy and apply it to the monitor."""
        data = await self._request("GET", "/auth/session-config")
        self.monitor.update_config(
            timeout_seconds=data["idleTimeoutMinutes"] * 60,
            warning_seconds=data["warningMinutes"] * 60,
        )
        return data

    def record_activity(self, event: str = "click") -> bool:
        return self.monitor.record_activity(event)

    def _clear_credentials(self) -> None:
        self.token = None
        self.refresh_token = None
        self.user = None

    def _end_session(self) -> None:
        self.monitor.clear()
        self._clear_credentials()
        if self._on_logout is not None:
            self._on_logout()

    def _handle_idle_expiry(self) -> None:
        logger.info("Logging out after inactivity")
        self._clear_credentials()
        if self._on_logout is not None:
            self._on_logout()

    # ── Resource management ───────────────────────────────────────────────────

    async def aclose(self) -> None:
        self.monitor.clear()
        await self._client.aclose()

    async def __aenter__(self) -> PortalClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
