"""Client-facing errors for chatproxy.

Every error carries a ``code`` of the form ``<type>:<surface>`` so clients
can tell a rejected input apart from an exhausted quota or an unreachable
provider and render a specific message.
"""

from typing import Any


STATUS_BY_TYPE = {
    "bad_request": 400,
    "unauthorized": 401,
    "rate_limit": 429,
    "offline": 503,
}

MESSAGES_BY_CODE = {
    "bad_request:api": "The request couldn't be processed. Please check your input and try again.",
    "bad_request:chat": "The chat request couldn't be processed. Please check your input and try again.",
    "unauthorized:auth": "You need to sign in before continuing.",
    "unauthorized:chat": "You need to sign in to use this feature. Please sign in and try again.",
    "rate_limit:chat": "You have exceeded your maximum number of messages for the day. Please try again later.",
    "offline:chat": "We're having trouble reaching the AI service. Please check your connection and try again.",
}

DEFAULT_MESSAGE = "Something went wrong. Please try again later."


class ChatProxyException(Exception):
    """Base class for errors rendered to clients.

    Subclasses set ``error_type``; the HTTP status and user-facing message
    are derived from it and the surface.
    """
    error_type: str = "internal"

    def __init__(self, surface: str = "api", cause: str | None = None):
        self.surface = surface
        self.cause = cause
        super().__init__(cause or self.message)

    @property
    def code(self) -> str:
        return f"{self.error_type}:{self.surface}"

    @property
    def status_code(self) -> int:
        return STATUS_BY_TYPE.get(self.error_type, 500)

    @property
    def message(self) -> str:
        return MESSAGES_BY_CODE.get(self.code, DEFAULT_MESSAGE)

    def to_response(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "cause": self.cause}


class BadRequestError(ChatProxyException):
    """Missing input or provider-side validation rejection (HTTP 400)."""
    error_type = "bad_request"


class UnauthorizedError(ChatProxyException):
    """No session, or a session for an unknown user class (HTTP 401)."""
    error_type = "unauthorized"


class RateLimitError(ChatProxyException):
    """Daily quota exhausted (HTTP 429)."""
    error_type = "rate_limit"

    def __init__(
        self,
        surface: str = "chat",
        cause: str | None = None,
        limit: int | None = None,
        used: int | None = None,
    ):
        self.limit = limit
        self.used = used
        super().__init__(surface, cause)


class OfflineError(ChatProxyException):
    """Transport or infrastructure failure reaching an upstream (HTTP 503)."""
    error_type = "offline"


class CatalogError(Exception):
    """Raised by the strict catalog fetchers; rendered as HTTP 500."""
