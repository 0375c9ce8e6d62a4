"""Logging and metrics."""

from wsdottie.observability.logging import (
    bind_request_context,
    configure_logging,
    level_from_name,
)
from wsdottie.observability.metrics import PipelineMetrics


__all__ = [
    "PipelineMetrics",
    "bind_request_context",
    "configure_logging",
    "level_from_name",
]
