"""This module defines the exceptions raised when talking to upstream services.

Upstream services are the PNCP registry, the public CNPJ registry and the
IBGE locality API. Repositories raise these exceptions and the web layer maps
each one to its own HTTP status.
"""


class UpstreamError(Exception):
    """Raised when an upstream service answers with a non-success status.

    Attributes:
        status: The HTTP status code returned by the upstream service, or
            None when the failure happened before any response was received.
        body: The response body, kept for diagnostics.
    """

    kind = "upstream_error"

    def __init__(self, status: int | None, body: str = "", message: str | None = None) -> None:
        """Initializes the error with the upstream status and body.

        Args:
            status: The HTTP status code, if a response was received.
            body: The raw response body.
            message: An optional human readable message.
        """
        self.status = status
        self.body = body
        super().__init__(message or f"Upstream returned {status}: {body}")


class UpstreamTimeoutError(UpstreamError):
    """Raised when an upstream call does not complete before its deadline."""

    kind = "timeout"

    def __init__(self, url: str, seconds: float) -> None:
        """Initializes the error with the request URL and the deadline.

        Args:
            url: The URL that was being requested.
            seconds: The deadline, in seconds, that elapsed.
        """
        self.url = url
        self.seconds = seconds
        super().__init__(None, message=f"Deadline of {seconds:g}s exceeded for {url}")


class UpstreamCancelledError(UpstreamError):
    """Raised when an in-flight upstream call is aborted by its caller."""

    kind = "cancelled"

    def __init__(self, url: str) -> None:
        """Initializes the error with the request URL.

        Args:
            url: The URL that was being requested.
        """
        self.url = url
        super().__init__(None, message=f"Request to {url} was cancelled")


class UpstreamRateLimitedError(UpstreamError):
    """Raised when an upstream service rejects a call with HTTP 429."""

    kind = "rate_limited"


class CompanyNotFoundError(UpstreamError):
    """Raised when the CNPJ registry has no company for the given tax id."""

    kind = "not_found"
