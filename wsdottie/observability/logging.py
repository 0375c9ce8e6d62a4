"""structlog setup for the client and the ``wsdottie`` CLI.

Log lines go to stderr so that fetched payloads on stdout stay parseable.
"""

import logging
import sys
from typing import Any, TextIO

import structlog

from wsdottie.fetch.redact import redact_access_code


def redact_urls(
    _logger: Any, _method: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask access codes in any ``url`` field before it is rendered."""
    url = event_dict.get("url")
    if isinstance(url, str):
        event_dict["url"] = redact_access_code(url)
    return event_dict


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Route fetch, flush-monitor and query-cache events to ``output``.

    Every event passes through ``redact_urls``, so a URL carrying the
    access code is never written out even if a caller logs it unmasked.

    Args:
        level: Minimum level; ``fetch_started``/``fetch_complete`` are
            DEBUG under the default log mode.
        output: Stream for log lines (default: stderr).
        json_format: JSON lines when True, the console renderer otherwise.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_urls,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    # httpx logs through the stdlib; keep it on the same stream and level.
    logging.basicConfig(
        format="%(message)s",
        stream=output,
        level=level,
    )


def level_from_name(name: str) -> int:
    """Translate a level name such as ``"debug"`` into a logging level.

    Unknown names fall back to INFO.
    """
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else logging.INFO


def bind_request_context(request_id: str) -> None:
    """Tag every later log line of this CLI invocation with ``request_id``."""
    structlog.contextvars.bind_contextvars(request_id=request_id)
