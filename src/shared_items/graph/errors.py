"""Failures raised while fetching Graph API collections."""


class GraphError(Exception):
    """Base class for all collection fetch failures."""


class ConfigurationError(GraphError):
    """Raised when a transport is requested without a bearer token."""


class AuthenticationError(GraphError):
    """Raised when a fetch is started without a bearer token."""


class TransportError(GraphError):
    """Raised when a page request fails or returns a non-2xx status.

    ``status_code`` is None when no response was received at all
    (connection failure, timeout or cancellation).
    """

    def __init__(self, status_code: int | None, body: str) -> None:
        if status_code is None:
            super().__init__(f"Graph API request failed: {body}")
        else:
            super().__init__(f"Graph API request failed with status {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class ParseError(GraphError):
    """Raised when a response body is not a valid collection page."""

    def __init__(self, body: str, detail: str) -> None:
        super().__init__(f"Malformed Graph API page: {detail}")
        self.body = body
        self.detail = detail
