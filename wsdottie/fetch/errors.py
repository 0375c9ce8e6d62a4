"""Error types for the fetch pipeline.

Two layers live here. Stage errors (``TransportError`` and friends,
``InvalidResponseError``, ``InputValidationError``) are raised by the
individual pipeline stages. ``PipelineError`` is the single envelope the
pipeline hands to callers once a stage error has been classified.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class ErrorCategory(str, Enum):
    """Classification of pipeline failures.

    - NETWORK_ERROR: Connection or script load failure
    - API_ERROR: Upstream rejected the request (HTTP >= 400 or error payload)
    - VALIDATION: Caller input or response shape did not validate
    - TIMEOUT_ERROR: Request exceeded its time budget
    - CORS_ERROR: Cross-origin access was refused
    - INVALID_RESPONSE: Body was empty or not parseable
    - RATE_LIMIT_ERROR: Upstream throttled the caller (429)
    """

    NETWORK_ERROR = "NETWORK_ERROR"
    API_ERROR = "API_ERROR"
    VALIDATION = "VALIDATION"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    CORS_ERROR = "CORS_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"


USER_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.NETWORK_ERROR: (
        "Network error occurred. Please check your connection and try again."
    ),
    ErrorCategory.API_ERROR: "The API returned an error. Please try again later.",
    ErrorCategory.VALIDATION: "The request or response failed validation.",
    ErrorCategory.TIMEOUT_ERROR: "Request timed out. Please try again.",
    ErrorCategory.CORS_ERROR: "Cross-origin request blocked. Please try again later.",
    ErrorCategory.INVALID_RESPONSE: "Invalid response received from the server.",
    ErrorCategory.RATE_LIMIT_ERROR: (
        "Too many requests. Please wait a moment and try again."
    ),
}


class TransportError(Exception):
    """Base exception for transport strategy failures."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        api_error: bool = False,
    ) -> None:
        """Initialize the transport error.

        Args:
            message: Human-readable error message.
            status: HTTP status code if one was received.
            api_error: Whether the upstream API itself reported the failure.
        """
        super().__init__(message)
        self.message = message
        self.status = status
        self.api_error = api_error


class HttpStatusError(TransportError):
    """Raised when the upstream answers with a non-2xx status."""

    def __init__(self, status: int, reason: str = "") -> None:
        """Initialize from the response status line."""
        message = f"HTTP {status}: {reason}" if reason else f"HTTP {status}"
        super().__init__(message, status=status)


class EmptyResponseError(TransportError):
    """Raised when a 2xx response carries no body."""

    def __init__(self, status: int | None = None) -> None:
        """Initialize the empty response error."""
        super().__init__("Invalid response: empty body", status=status)


class TransportTimeoutError(TransportError):
    """Raised when a request exceeds its time budget."""


class TransportNetworkError(TransportError):
    """Raised when a connection could not be made or was dropped."""


class ScriptLoadError(TransportError):
    """Raised when the relay loader element fails to load."""

    def __init__(self) -> None:
        """Initialize the script load error."""
        super().__init__("Script load failed")


class ApiResponseError(TransportError):
    """Raised when the upstream returns an error envelope instead of data."""

    def __init__(self, message: str, status: int | None = None) -> None:
        """Initialize with the upstream's own message."""
        super().__init__(message, status=status, api_error=True)


class InvalidResponseError(Exception):
    """Raised when a response body cannot be parsed."""


class InputValidationError(Exception):
    """Raised when caller-supplied parameters are rejected before any I/O."""


class UrlParameterError(InputValidationError):
    """Raised when a parameter has no matching placeholder in the template."""

    def __init__(self, key: str, template: str) -> None:
        """Initialize the URL parameter error.

        Args:
            key: The unrecognized parameter name.
            template: The URL template being built.
        """
        super().__init__(f"Unknown parameter '{key}' for URL template {template}")
        self.key = key
        self.template = template


class PipelineError(Exception):
    """Uniform error envelope surfaced by every public fetch operation.

    Instances are never mutated after construction.
    """

    def __init__(
        self,
        category: ErrorCategory,
        message: str,
        *,
        endpoint: str | None = None,
        url: str | None = None,
        status: int | None = None,
        timestamp: datetime | None = None,
        user_message: str | None = None,
    ) -> None:
        """Initialize the pipeline error.

        Args:
            category: Classification of the failure.
            message: Original diagnostic message.
            endpoint: Identifier of the endpoint being fetched.
            url: Request URL with credentials redacted.
            status: HTTP status code if available.
            timestamp: When the failure was classified (default: now, UTC).
            user_message: Message suitable for end users.
        """
        super().__init__(message)
        self.category = category
        self.message = message
        self.endpoint = endpoint
        self.url = url
        self.status = status
        self.timestamp = timestamp or datetime.now(UTC)
        self.user_message = user_message or USER_MESSAGES[category]

    def __str__(self) -> str:
        return f"[{self.category.value}] {self.message}"

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "category": self.category.value,
            "message": self.message,
            "user_message": self.user_message,
            "endpoint": self.endpoint,
            "url": self.url,
            "status": self.status,
            "timestamp": self.timestamp.isoformat(),
        }


class EndpointConfigurationError(PipelineError):
    """Raised when an endpoint is asked to do something it was not built for.

    This signals a programming error (for example validation requested on
    an endpoint without a schema) rather than a runtime condition.
    """

    def __init__(self, message: str, endpoint: str | None = None) -> None:
        """Initialize the configuration error."""
        super().__init__(ErrorCategory.VALIDATION, message, endpoint=endpoint)


class ErrorRecord(BaseModel):
    """Serializable record of a pipeline failure."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    category: ErrorCategory
    message: Annotated[str, Field(min_length=1)]
    user_message: str
    endpoint: str | None = None
    url: str | None = None
    status: int | None = None
    timestamp: datetime

    @classmethod
    def from_error(cls, error: PipelineError) -> "ErrorRecord":
        """Create a record from a pipeline error.

        Args:
            error: The classified error.

        Returns:
            ErrorRecord instance.
        """
        return cls(
            category=error.category,
            message=error.message or error.category.value,
            user_message=error.user_message,
            endpoint=error.endpoint,
            url=error.url,
            status=error.status,
            timestamp=error.timestamp,
        )
