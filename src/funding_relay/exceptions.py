"""Exceptions raised while relaying a snapshot.

Every error carries the HTTP status and plain-text body the API returns for it,
so the request path can raise freely and a single app-level handler renders the
response. None of these terminate the serving process.
"""


class RelayError(Exception):
    """Base exception for all relay errors."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def body(self) -> str:
        """Response body; never includes upstream error details."""
        return self.default_message


class MethodNotAllowed(RelayError):
    """Raised for any verb other than GET on the relay endpoint."""

    status_code = 405
    default_message = "Method Not Allowed"


class Forbidden(RelayError):
    """Raised when the ProjectId header does not match the configured secret."""

    status_code = 403
    default_message = "Forbidden"


class UpstreamFetchError(RelayError):
    """Raised when the exchange call fails, times out, or returns a malformed payload.

    Safe for the caller to retry.
    """

    status_code = 502
    default_message = "Bad Gateway"


class PersistError(RelayError):
    """Raised when the document store upsert fails.

    Safe for the caller to retry: the upsert is idempotent by document key.
    """

    status_code = 500
    default_message = "Internal Server Error"
