"""Credential redaction utilities for logging."""

import re

from wsdottie.constants import WSDOT_ACCESS_PARAM, WSF_ACCESS_PARAM


REDACTED_VALUE = "[REDACTED]"

# Query parameters that carry the upstream access code
SENSITIVE_PARAMS = frozenset(
    {WSF_ACCESS_PARAM.lower(), WSDOT_ACCESS_PARAM.lower()}
)

_PARAM_PATTERN = re.compile(r"([?&])([^=&#]+)=([^&#]*)")


def is_sensitive_param(name: str) -> bool:
    """Check if a query parameter name carries a credential.

    Args:
        name: The parameter name to check.

    Returns:
        True if the value should be redacted.
    """
    return name.lower() in SENSITIVE_PARAMS


def redact_access_code(url: str) -> str:
    """Redact access codes from a URL.

    Handles URLs like https://host/api?apiaccesscode=secret&x=1

    Args:
        url: URL that may contain an access code.

    Returns:
        URL with credential values replaced by [REDACTED].
    """

    def _replace(match: re.Match[str]) -> str:
        separator, name, value = match.groups()
        if is_sensitive_param(name) and value:
            return f"{separator}{name}={REDACTED_VALUE}"
        return match.group(0)

    return _PARAM_PATTERN.sub(_replace, url)
