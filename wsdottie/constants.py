"""Shared constants for the wsdottie client."""

# Upstream hosts
WSDOT_HOST = "https://www.wsdot.wa.gov"
WSF_PATH_MARKER = "/ferries/"

# Credential query parameter names
WSF_ACCESS_PARAM = "apiaccesscode"
WSDOT_ACCESS_PARAM = "AccessCode"

# HTTP status codes
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_TOO_MANY_REQUESTS = 429

# Transport
DEFAULT_TIMEOUT_SECONDS = 30.0
RELAY_TIMEOUT_SECONDS = 30.0
RELAY_CALLBACK_PARAM = "callback"
RELAY_CALLBACK_PREFIX = "jsonp"
RELAY_SUFFIX_LENGTH = 7
USER_AGENT = "wsdottie/0.1"

# Outgoing date convention
DATE_FORMAT = "%Y-%m-%d"

# Cache flush polling interval (5 minutes)
FLUSH_POLL_INTERVAL_SECONDS = 300.0

# Log components
COMPONENT_PIPELINE = "pipeline"
COMPONENT_TRANSPORT = "transport"
COMPONENT_FLUSH = "cache_flush"
COMPONENT_QUERY = "query"
COMPONENT_CLI = "cli"
