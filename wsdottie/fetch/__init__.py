"""Request building, transport, normalization and error classification."""

from wsdottie.fetch.classifier import classify
from wsdottie.fetch.errors import (
    EndpointConfigurationError,
    ErrorCategory,
    ErrorRecord,
    PipelineError,
)
from wsdottie.fetch.normalize import ResponseNormalizer, rename_keys, transform_dates
from wsdottie.fetch.url import UrlBuilder


__all__ = [
    "EndpointConfigurationError",
    "ErrorCategory",
    "ErrorRecord",
    "PipelineError",
    "ResponseNormalizer",
    "UrlBuilder",
    "classify",
    "rename_keys",
    "transform_dates",
]
