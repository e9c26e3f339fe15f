"""Error taxonomy for the CelesTrak client.

Every failure surfaced by the client is a ``CelestrakError`` carrying an
``ErrorKind`` discriminant. Callers branch on ``error.kind`` (or the
``is_*`` predicates) instead of inspecting concrete classes, and the retry
loop classifies failures with :func:`is_retryable`.
"""

from enum import Enum

from celestrak.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_NOT_FOUND,
    HTTP_STATUS_SERVER_ERROR_MIN,
    HTTP_STATUS_TOO_MANY_REQUESTS,
)


class ErrorKind(str, Enum):
    """Classification of client errors.

    - QUERY: Local validation failure (selector, base URL, endpoint, context)
    - RESPONSE: Server-observed condition (4xx/5xx, 304 without cache,
      empty or oversize body)
    - TRANSPORT: Network-level failure (connect, DNS, read, timeout)
    - CONTEXT: Caller cancelled the request or its deadline expired
    - RETRIES_EXHAUSTED: Every attempt failed with a retryable error
    """

    QUERY = "QUERY"
    RESPONSE = "RESPONSE"
    TRANSPORT = "TRANSPORT"
    CONTEXT = "CONTEXT"
    RETRIES_EXHAUSTED = "RETRIES_EXHAUSTED"


class CelestrakError(Exception):
    """Base exception for all client errors."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"celestrak: {self.message}"

    @property
    def is_query_error(self) -> bool:
        """True for local validation failures."""
        return self.kind is ErrorKind.QUERY

    @property
    def is_response_error(self) -> bool:
        """True for server-observed error responses."""
        return self.kind is ErrorKind.RESPONSE

    @property
    def is_transport_error(self) -> bool:
        """True for network-level failures."""
        return self.kind is ErrorKind.TRANSPORT

    @property
    def is_context_error(self) -> bool:
        """True when the caller's context was cancelled or expired."""
        return self.kind is ErrorKind.CONTEXT

    @property
    def is_retries_exhausted(self) -> bool:
        """True when the retry budget ran out."""
        return self.kind is ErrorKind.RETRIES_EXHAUSTED

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert error to dictionary for logging.

        Returns:
            Dictionary representation of the error.
        """
        return {"kind": self.kind.value, "message": self.message}


class QueryError(CelestrakError):
    """Error in query construction or validation."""

    kind = ErrorKind.QUERY

    def __str__(self) -> str:
        return f"celestrak: query error: {self.message}"


class ErrorResponse(CelestrakError):
    """Error response observed from the server.

    Raised for non-2xx statuses, for 304 without a cached body, and for
    2xx responses whose body is empty or exceeds the size cap.
    """

    kind = ErrorKind.RESPONSE

    def __init__(self, status_code: int, status: str, message: str) -> None:
        """Initialize the error response.

        Args:
            status_code: HTTP status code.
            status: Status line, e.g. ``"404 Not Found"``.
            message: Body excerpt or description of the problem.
        """
        super().__init__(message)
        self.status_code = status_code
        self.status = status

    def __str__(self) -> str:
        return f"celestrak: {self.status}: {self.message}"

    @property
    def is_not_found(self) -> bool:
        """True for 404 Not Found."""
        return self.status_code == HTTP_STATUS_NOT_FOUND

    @property
    def is_rate_limit(self) -> bool:
        """True for 429 Too Many Requests."""
        return self.status_code == HTTP_STATUS_TOO_MANY_REQUESTS

    @property
    def is_server_error(self) -> bool:
        """True for 5xx statuses."""
        return self.status_code >= HTTP_STATUS_SERVER_ERROR_MIN

    @property
    def is_client_error(self) -> bool:
        """True for 4xx statuses."""
        return HTTP_STATUS_BAD_REQUEST <= self.status_code < HTTP_STATUS_SERVER_ERROR_MIN

    def to_dict(self) -> dict[str, str | int | None]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        data["status"] = self.status
        return data


class TransportError(CelestrakError):
    """Network-level failure while performing the request."""

    kind = ErrorKind.TRANSPORT

    def __str__(self) -> str:
        return f"celestrak: request failed: {self.message}"


class ContextError(CelestrakError):
    """The caller's context was cancelled or its deadline expired."""

    kind = ErrorKind.CONTEXT

    def __init__(self, message: str, *, deadline_exceeded: bool = False) -> None:
        """Initialize the context error.

        Args:
            message: Human-readable error message.
            deadline_exceeded: True if the deadline expired, False if the
                context was cancelled explicitly.
        """
        super().__init__(message)
        self.deadline_exceeded = deadline_exceeded

    def __str__(self) -> str:
        return f"celestrak: context error: {self.message}"


class RetriesExhaustedError(CelestrakError):
    """Every attempt failed with a retryable error.

    The last observed error is available as ``last_error`` and is also
    chained as ``__cause__``.
    """

    kind = ErrorKind.RETRIES_EXHAUSTED

    def __init__(self, max_retries: int, last_error: CelestrakError) -> None:
        """Initialize the error.

        Args:
            max_retries: Configured retry count.
            last_error: Error from the final attempt.
        """
        super().__init__(f"max retries ({max_retries}) exceeded: {last_error}")
        self.max_retries = max_retries
        self.last_error = last_error
        self.__cause__ = last_error


def is_retryable(error: CelestrakError) -> bool:
    """Decide whether a failed attempt may be retried.

    Args:
        error: Error raised by a single attempt.

    Returns:
        True if the failure is transient.
    """
    match error.kind:
        case ErrorKind.TRANSPORT:
            return True
        case ErrorKind.RESPONSE:
            return isinstance(error, ErrorResponse) and error.is_server_error
        case ErrorKind.QUERY | ErrorKind.CONTEXT | ErrorKind.RETRIES_EXHAUSTED:
            return False
