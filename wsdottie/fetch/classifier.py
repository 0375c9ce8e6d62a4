"""Classification of stage failures into pipeline errors."""

from datetime import datetime

from pydantic import ValidationError

from wsdottie.constants import HTTP_STATUS_BAD_REQUEST, HTTP_STATUS_TOO_MANY_REQUESTS
from wsdottie.fetch.errors import (
    ErrorCategory,
    InputValidationError,
    PipelineError,
    TransportError,
)
from wsdottie.fetch.redact import redact_access_code


# Message signals checked in order after the structural signals.
_MESSAGE_SIGNALS: tuple[tuple[tuple[str, ...], ErrorCategory], ...] = (
    (("timeout", "timed out"), ErrorCategory.TIMEOUT_ERROR),
    (("script load failed",), ErrorCategory.NETWORK_ERROR),
    (("cors", "cross-origin"), ErrorCategory.CORS_ERROR),
    (("network", "fetch"), ErrorCategory.NETWORK_ERROR),
    (("invalid response", "empty body"), ErrorCategory.INVALID_RESPONSE),
)


def _error_message(error: BaseException) -> str:
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    text = str(error)
    return text or type(error).__name__


def _categorize(
    error: BaseException, message: str, status: int | None
) -> ErrorCategory:
    if isinstance(error, ValidationError | InputValidationError):
        return ErrorCategory.VALIDATION
    if getattr(error, "api_error", False):
        return ErrorCategory.API_ERROR
    if status == HTTP_STATUS_TOO_MANY_REQUESTS:
        return ErrorCategory.RATE_LIMIT_ERROR
    if status is not None and status >= HTTP_STATUS_BAD_REQUEST:
        return ErrorCategory.API_ERROR

    lowered = message.lower()
    for needles, category in _MESSAGE_SIGNALS:
        if any(needle in lowered for needle in needles):
            return category
    return ErrorCategory.NETWORK_ERROR


def classify(
    error: BaseException,
    endpoint: str | None,
    *,
    url: str | None = None,
    status: int | None = None,
    now: datetime | None = None,
) -> PipelineError:
    """Wrap any failure into a PipelineError.

    Classification order is: pipeline errors pass through unchanged,
    validation failures become VALIDATION, then the API error marker,
    HTTP 429, HTTP >= 400, and finally message signals (timeout, script
    load failure, cross-origin, network/fetch, invalid response). Anything
    else is a NETWORK_ERROR.

    Args:
        error: The failure raised by a pipeline stage.
        endpoint: Identifier of the endpoint being fetched.
        url: Request URL, if it was built before the failure.
        status: HTTP status, if not already attached to the error.
        now: Classification timestamp override (for tests).

    Returns:
        PipelineError carrying the original message verbatim.
    """
    if isinstance(error, PipelineError):
        return error

    if status is None and isinstance(error, TransportError):
        status = error.status

    message = _error_message(error)
    category = _categorize(error, message, status)

    return PipelineError(
        category,
        message,
        endpoint=endpoint,
        url=redact_access_code(url) if url else None,
        status=status,
        timestamp=now,
    )
