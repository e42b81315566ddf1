"""Custom exception hierarchy for the Salesforce AJAX proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class EndpointNotAllowed(ProxyError):
    """Raised when the requested destination is not a trusted Salesforce URL."""

    def __init__(self, endpoint: str | None) -> None:
        super().__init__(f"Endpoint not allowed: {endpoint!r}")
        self.endpoint = endpoint


class UpstreamError(ProxyError):
    """Raised when the upstream exchange fails.

    Attributes:
        message: Error message
        status_code: HTTP status code from upstream (optional)
        url: URL of the request that failed (optional)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class UpstreamTimeoutError(UpstreamError):
    """Raised when an upstream request times out."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message, status_code=None, url=url)


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to connect to the upstream host."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message, status_code=None, url=url)


class RedirectLimitExceeded(UpstreamError):
    """Raised when upstream redirects more times than allowed."""

    def __init__(self, message: str, status_code: int | None = None, url: str | None = None) -> None:
        super().__init__(message, status_code=status_code, url=url)
