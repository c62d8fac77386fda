from portal_client.api import PortalClient
from portal_client.errors import PortalAPIError, SessionExpiredError
from portal_client.monitor import (
    ACTIVITY_EVENTS,
    SessionActivityMonitor,
    SessionState,
    SessionTimeoutConfig,
)

__all__ = [
    "ACTIVITY_EVENTS",
    "PortalAPIError",
    "PortalClient",
    "SessionActivityMonitor",
    "SessionExpiredError",
    "SessionState",
    "SessionTimeoutConfig",
]
