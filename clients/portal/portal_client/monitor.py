"""
Client-side idle-session monitor.

Tracks user activity and drives two one-shot timers: a warning at
``timeout - warning`` seconds of inactivity and a forced logout at
``timeout``.  Every tracked activity event cancels and reschedules both, so
the warning fires at most once per idle period.

Timers run on an event loop (anything with ``call_later`` and ``time``),
by default the running asyncio loop.  Tests inject a fake loop.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, Literal, Protocol

logger = logging.getLogger(__name__)

ACTIVITY_EVENTS: frozenset[str] = frozenset(
    {"mousedown", "mousemove", "keypress", "scroll", "touchstart", "click"}
)

ActivityStatus = Literal["active", "warning", "expired"]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerLoop(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...

    def time(self) -> float: ...


@dataclass(frozen=True)
class SessionTimeoutConfig:
    timeout_seconds: float = 30 * 60
    warning_seconds: float = 5 * 60

    @classmethod
    def from_minutes(cls, timeout_minutes: float, warning_minutes: float) -> SessionTimeoutConfig:
        return cls(timeout_seconds=timeout_minutes * 60, warning_seconds=warning_minutes * 60)


@dataclass(frozen=True)
class SessionState:
    is_active: bool
    last_activity: float


class SessionActivityMonitor:
    def __init__(
        self,
        config: SessionTimeoutConfig | None = None,
        *,
        loop: TimerLoop | None = None,
    ) -> None:
        self.config = config or SessionTimeoutConfig()
        self._loop_override = loop
        self._is_active = False
        self._last_activity = 0.0
        self._on_expired: Callable[[], Any] | None = None
        self._on_warning: Callable[[], Any] | None = None
        self._expiry_handle: TimerHandle | None = None
        self._warning_handle: TimerHandle | None = None

    @property
    def _loop(self) -> TimerLoop:
        return self._loop_override or asyncio.get_running_loop()

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(
        self,
        on_expired: Callable[[], Any],
        on_warning: Callable[[], Any] | None = None,
    ) -> None:
        self._on_expired = on_expired
        self._on_warning = on_warning
        self._is_active = True
        self._last_activity = self._loop.time()
        self._reset_timers()
        logger.info("Session started with %ss idle timeout", self.config.timeout_seconds)

    def clear(self) -> None:
        self._is_active = False
        self._cancel_timers()

    def update_config(
        self,
        *,
        timeout_seconds: float | None = None,
        warning_seconds: float | None = None,
    ) -> None:
        changes = {}
        if timeout_seconds is not None:
            changes["timeout_seconds"] = timeout_seconds
        if warning_seconds is not None:
            changes["warning_seconds"] = warning_seconds
        self.config = replace(self.config, **changes)
        if self._is_active:
            self._reset_timers()

    # ── Activity ──────────────────────────────────────────────────────────────

    def record_activity(self, event: str = "click") -> bool:
        """Register a user interaction. Returns False for untracked events or an inactive session."""
        if event not in ACTIVITY_EVENTS or not self._is_active:
            return False
        self._touch()
        return True

    def extend(self) -> None:
        """Manual "stay signed in" from the warning prompt."""
        if self._is_active:
            self._touch()

    # ── Queries ───────────────────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return SessionState(is_active=self._is_active, last_activity=self._last_activity)

    def time_remaining(self) -> float:
        if not self._is_active:
            return 0.0
        elapsed = self._loop.time() - self._last_activity
        return max(0.0, self.config.timeout_seconds - elapsed)

    def is_expiring(self) -> bool:
        remaining = self.time_remaining()
        return 0 < remaining <= self.config.warning_seconds

    def activity_status(self) -> ActivityStatus:
        if not self._is_active or self.time_remaining() <= 0:
            return "expired"
        if self.is_expiring():
            return "warning"
        return "active"

    def format_time_remaining(self) -> str:
        remaining = int(self.time_remaining())
        minutes, seconds = divmod(remaining, 60)
        return f"{minutes}:{seconds:02d}"

    # ── Timers ────────────────────────────────────────────────────────────────

    def _touch(self) -> None:
        self._last_activity = self._loop.time()
        self._reset_timers()

    def _reset_timers(self) -> None:
        self._cancel_timers()
        loop = self._loop
        warning_delay = self.config.timeout_seconds - self.config.warning_seconds
        if self._on_warning is not None and warning_delay > 0:
            self._warning_handle = loop.call_later(warning_delay, self._fire_warning)
        self._expiry_handle = loop.call_later(self.config.timeout_seconds, self._fire_expired)

    def _cancel_timers(self) -> None:
        for handle in (self._warning_handle, self._expiry_handle):
            if handle is not None:
                handle.cancel()
        self._warning_handle = None
        self._expiry_handle = None

    def _fire_warning(self) -> None:
        self._warning_handle = None
        if self._is_active and self._on_warning is not None:
            self._on_warning()

    def _fire_expired(self) -> None:
        self._expiry_handle = None
        if not self._is_active:
            return
        logger.info("Session expired due to inactivity")
        self.clear()
        if self._on_expired is not None:
            self._on_expired()
