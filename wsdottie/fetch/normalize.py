"""Response parsing, date conversion and key renaming."""

import json
from typing import Any

from pydantic.alias_generators import to_snake

from wsdottie.fetch.dates import parse_date_string
from wsdottie.fetch.errors import InvalidResponseError


def normalize_key(key: str) -> str:
    """Rename an upstream PascalCase key to snake_case.

    ``ScheduleID`` becomes ``schedule_id`` and ``SchedulePDFUrl`` becomes
    ``schedule_pdf_url``. Keys already in snake_case are unchanged.
    """
    return to_snake(key)


def transform_dates(value: Any) -> Any:
    """Recursively convert upstream date strings into native values.

    Args:
        value: Parsed JSON value (dict, list, or scalar).

    Returns:
        A new structure with date strings replaced; other scalars are
        returned untouched.
    """
    if isinstance(value, dict):
        return {key: transform_dates(item) for key, item in value.items()}
    if isinstance(value, list):
        return [transform_dates(item) for item in value]
    if isinstance(value, str):
        parsed = parse_date_string(value)
        return value if parsed is None else parsed
    return value


def rename_keys(value: Any) -> Any:
    """Recursively rename dictionary keys with ``normalize_key``.

    Args:
        value: Parsed JSON value (dict, list, or scalar).

    Returns:
        A new structure with every dictionary key renamed.
    """
    if isinstance(value, dict):
        return {
            normalize_key(key) if isinstance(key, str) else key: rename_keys(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [rename_keys(item) for item in value]
    return value


class ResponseNormalizer:
    """Parses raw response bodies and converts upstream date strings.

    Key renaming is deliberately not part of ``normalize``: the pipeline
    applies it either through an output validator or through
    ``rename_keys``, never both.
    """

    def normalize(self, raw: str) -> Any:
        """Parse a raw body and convert its date strings.

        Args:
            raw: Response body text.

        Returns:
            Parsed, date-normalized data.

        Raises:
            InvalidResponseError: If the body is not valid JSON.
        """
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            msg = f"Invalid response: could not parse JSON ({e})"
            raise InvalidResponseError(msg) from e
        return transform_dates(parsed)
