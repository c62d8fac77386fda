class PortalAPIError(Exception):
    """Non-2xx answer from the portal API, carrying the error envelope fields."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        *,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.request_id = request_id

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, code={self.code!r}, message={self.message!r})"


class SessionExpiredError(PortalAPIError):
    """The access token expired or was never set; the client has logged out."""

    def __init__(self, message: str = "Session expired. Please log in again.") -> None:
        super().__init__(401, "token_expired", message)
