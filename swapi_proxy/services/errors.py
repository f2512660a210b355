"""
Service layer exceptions.
"""


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, service_id: str | None = None):
        self.service_id = service_id
        super().__init__(message)


class UpstreamError(ServiceError):
    """Talking to the upstream API failed or returned an unexpected payload."""

    pass


class RequestTimeoutError(UpstreamError):
    """Request timed out."""

    def __init__(self, service_id: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"Request to service '{service_id}' timed out after {timeout}s",
            service_id=service_id,
        )


class ListingError(ServiceError):
    """A character listing could not be resolved.

    The message is safe to show to API callers; the underlying cause is
    chained via ``__cause__``.
    """

    DEFAULT_MESSAGE = "Failed to fetch Star Wars characters"

    def __init__(self, message: str = DEFAULT_MESSAGE, service_id: str | None = None):
        super().__init__(message, service_id=service_id)
