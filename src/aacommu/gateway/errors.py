"""Error types for the suggestion gateway.

Custom exceptions for remote transcription/suggestion service calls.
"""


class GatewayError(Exception):
    """Base exception for suggestion gateway errors."""

    pass


class TransportError(GatewayError):
    """Raised when a service call fails on the network or with a non-success status."""

    def __init__(
        self,
        message: str,
        operation: str,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        """Initialize transport error.

        Args:
            message: Error message.
            operation: Gateway operation that failed (start, voice, select, end).
            status_code: HTTP status code if a response was received.
            body: Raw response body, kept for diagnostics.
        """
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
        self.body = body


class GatewayTimeoutError(TransportError):
    """Raised when a service call times out."""

    pass


class MalformedResponseError(TransportError):
    """Raised when the service answers with an unexpected payload."""

    pass


__all__ = [
    "GatewayError",
    "GatewayTimeoutError",
    "MalformedResponseError",
    "TransportError",
]
