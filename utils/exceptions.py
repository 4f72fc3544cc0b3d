"""
Exception types raised by the gateway.
"""


class GatewayError(Exception):
    """Base class for gateway errors."""


class EmptyPayloadError(GatewayError, ValueError):
    """An image entry carried no data."""


class UpstreamError(GatewayError):
    """The upstream provider rejected a request or returned an unusable response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"upstream returned {self.status_code}: {self.message}"


class UpstreamUnavailableError(UpstreamError):
    """The model catalog could not be fetched and no cached copy exists."""


class UpstreamStreamError(GatewayError):
    """The upstream event stream broke or reported an error after it started."""
