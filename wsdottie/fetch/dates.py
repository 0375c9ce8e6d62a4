"""Upstream date string conventions.

WSF and WSDOT responses encode dates in several ways:

- ``/Date(1703123456789-0700)/``: epoch milliseconds with an optional UTC
  offset (also seen with escaped slashes, ``\\/Date(...)\\/``)
- ``MM/DD/YYYY`` and ``MM/DD/YYYY hh:mm:ss AM``: schedule validity fields
- ``YYYY-MM-DD`` and ISO-8601 datetimes

Outgoing parameters always use ``YYYY-MM-DD``.
"""

import re
from datetime import UTC, date, datetime, timedelta, timezone

from wsdottie.constants import DATE_FORMAT


_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_DOTNET_DATE = re.compile(r"^\\?/Date\((-?\d+)([+-]\d{4})?\)\\?/$")
_US_DATE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
_US_DATETIME = re.compile(
    r"^(\d{2})/(\d{2})/(\d{4}) (\d{1,2}):(\d{2}):(\d{2}) ([AP]M)$", re.IGNORECASE
)
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ISO_DATETIME = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d{1,6})?)?(Z|[+-]\d{2}:\d{2})?$"
)


def format_date(value: date) -> str:
    """Format a date (or datetime) using the outgoing calendar-date form.

    Args:
        value: Date to format.

    Returns:
        String in ``YYYY-MM-DD`` form.
    """
    return value.strftime(DATE_FORMAT)


def _offset_zone(offset: str) -> timezone:
    sign = -1 if offset[0] == "-" else 1
    hours, minutes = int(offset[1:3]), int(offset[3:5])
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_dotnet_date(value: str) -> datetime | None:
    """Parse a ``/Date(ms±zzzz)/`` string.

    The millisecond count is always relative to UTC; the offset only
    selects the zone of the returned aware datetime.

    Args:
        value: Candidate string.

    Returns:
        Aware datetime, or None if the string is not in this form.
    """
    match = _DOTNET_DATE.match(value)
    if match is None:
        return None
    millis, offset = match.groups()
    instant = _EPOCH + timedelta(milliseconds=int(millis))
    if offset:
        return instant.astimezone(_offset_zone(offset))
    return instant


def _parse_us_datetime(match: re.Match[str]) -> datetime:
    month, day, year, hour, minute, second, meridiem = match.groups()
    hour_24 = int(hour) % 12
    if meridiem.upper() == "PM":
        hour_24 += 12
    return datetime(
        int(year), int(month), int(day), hour_24, int(minute), int(second)
    )


def parse_date_string(value: str) -> date | datetime | None:
    """Convert an upstream date string into a native value.

    Args:
        value: Candidate string.

    Returns:
        The parsed date or datetime, or None when the string is not a
        recognised date form (or names an impossible calendar date).
    """
    if not value or value[0] not in "0123456789/\\":
        return None

    try:
        if (parsed := parse_dotnet_date(value)) is not None:
            return parsed
        if match := _US_DATETIME.match(value):
            return _parse_us_datetime(match)
        if match := _US_DATE.match(value):
            month, day, year = match.groups()
            return date(int(year), int(month), int(day))
        if _ISO_DATE.match(value):
            return date.fromisoformat(value)
        if _ISO_DATETIME.match(value):
            return datetime.fromisoformat(value)
    except ValueError:
        return None
    return None
