"""URL construction from endpoint templates."""

import re
from collections.abc import Mapping
from datetime import date
from urllib.parse import quote, urlsplit, urlunsplit

from wsdottie.constants import WSDOT_ACCESS_PARAM, WSF_ACCESS_PARAM, WSF_PATH_MARKER
from wsdottie.fetch.dates import format_date
from wsdottie.fetch.errors import UrlParameterError
from wsdottie.settings.app import ApiConfig


ParamValue = str | int | float | bool | date | None
ParamRecord = Mapping[str, ParamValue]

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def format_param_value(value: ParamValue) -> str:
    """Render a parameter value in the form the upstream expects.

    Args:
        value: Parameter value.

    Returns:
        ``YYYY-MM-DD`` for dates, ``true``/``false`` for booleans, and
        ``str(value)`` for everything else.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return format_date(value)
    return str(value)


def template_placeholders(template: str) -> list[str]:
    """List the placeholder names in a template, in order of appearance."""
    return _PLACEHOLDER.findall(template)


def access_param_name(path: str) -> str:
    """Return the credential query parameter name for a URL path.

    WSF endpoints (under ``/ferries/``) take ``apiaccesscode``; every other
    WSDOT endpoint takes ``AccessCode``.
    """
    if WSF_PATH_MARKER in path.lower():
        return WSF_ACCESS_PARAM
    return WSDOT_ACCESS_PARAM


class UrlBuilder:
    """Builds request URLs from templates, parameters and a credential."""

    def __init__(self, config: ApiConfig) -> None:
        """Initialize the builder.

        Args:
            config: Configuration carrying the access credential and host.
        """
        self._config = config

    def build(self, template: str, params: ParamRecord | None = None) -> str:
        """Build a complete request URL.

        Args:
            template: Absolute URL or host-relative path with ``{name}``
                placeholders.
            params: Values for the placeholders. ``None`` values are
                treated as omitted.

        Returns:
            URL with placeholders substituted, omitted optional segments
            removed, and the credential appended.

        Raises:
            UrlParameterError: If a parameter has no matching placeholder.
        """
        params = params or {}
        known = set(template_placeholders(template))
        for key in params:
            if key not in known:
                raise UrlParameterError(key, template)

        def _substitute(match: re.Match[str]) -> str:
            value = params.get(match.group(1))
            if value is None:
                return match.group(0)
            return quote(format_param_value(value), safe="")

        url = _PLACEHOLDER.sub(_substitute, self._absolute(template))
        scheme, netloc, path, query, fragment = urlsplit(url)

        segments = [s for s in path.split("/") if s and not _PLACEHOLDER.search(s)]
        path = "/" + "/".join(segments)

        pieces = [p for p in query.split("&") if p and not _PLACEHOLDER.search(p)]
        pieces.append(
            f"{access_param_name(path)}={quote(self._config.access_token, safe='')}"
        )

        return urlunsplit((scheme, netloc, path, "&".join(pieces), fragment))

    def _absolute(self, template: str) -> str:
        if template.startswith(("http://", "https://")):
            return template
        return f"{self._config.base_url.rstrip('/')}/{template.lstrip('/')}"
