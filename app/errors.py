"""Gateway error taxonomy. Each error maps to one HTTP status and client-safe message."""
from fastapi import status


class GatewayError(Exception):
    """Base class for every failure the chat endpoint reports to the client."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Unexpected server error"

    def __init__(self, message: str | None = None) -> None:
        if message:
            self.message = message
        super().__init__(self.message)


class MethodNotAllowed(GatewayError):
    status_code = status.HTTP_405_METHOD_NOT_ALLOWED
    message = "Method not allowed"


class RateLimited(GatewayError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Rate limit exceeded. Try again soon."


class MisconfiguredServer(GatewayError):
    message = "Missing OPENAI_API_KEY"


class UpstreamUnreachable(GatewayError):
    message = "Upstream API unreachable"


class UpstreamError(GatewayError):
    message = "Upstream API error"

    def __init__(self, upstream_status: int) -> None:
        # The upstream status is for server logs only; the client sees the fixed message.
        self.upstream_status = upstream_status
        super().__init__()


class UnexpectedError(GatewayError):
    pass


class ClientDisconnected(GatewayError):
    status_code = 499
    message = "Client closed request"
