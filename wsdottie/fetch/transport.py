"""Transport strategies and the direct HTTP implementation."""

from typing import Protocol

import httpx
import structlog

from wsdottie.constants import (
    COMPONENT_TRANSPORT,
    DEFAULT_TIMEOUT_SECONDS,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    USER_AGENT,
)
from wsdottie.fetch.errors import (
    EmptyResponseError,
    HttpStatusError,
    TransportNetworkError,
    TransportTimeoutError,
)
from wsdottie.fetch.redact import redact_access_code


logger = structlog.get_logger()


class TransportStrategy(Protocol):
    """Performs the network fetch for a built URL.

    Implementations return the raw body text or raise; they never return a
    sentinel for failure.
    """

    name: str

    async def fetch(self, url: str, *, expects_list: bool = False) -> str:
        """Fetch ``url`` and return the response body text."""
        ...


class DirectHttpStrategy:
    """Issues a plain HTTP GET with httpx.

    Non-2xx responses and empty 2xx bodies raise, so a caller never has to
    inspect a status code itself.
    """

    name = "direct"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the strategy.

        Args:
            client: Shared client to use. When omitted the strategy owns a
                lazily created client and closes it in ``aclose``.
            timeout: Request timeout in seconds for an owned client.
            transport: Optional httpx transport for an owned client (tests
                pass ``httpx.MockTransport`` here).
        """
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._transport = transport
        self._log = logger.bind(component=COMPONENT_TRANSPORT, strategy=self.name)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def fetch(self, url: str, *, expects_list: bool = False) -> str:
        """Fetch a URL and return its body.

        Args:
            url: Fully built request URL.
            expects_list: Unused by this strategy.

        Returns:
            Response body text.

        Raises:
            TransportTimeoutError: If the request timed out.
            TransportNetworkError: If the connection failed.
            HttpStatusError: If the status is outside 2xx.
            EmptyResponseError: If a 2xx response has an empty body.
        """
        client = self._get_client()
        try:
            response = await client.get(url)
        except httpx.TimeoutException as e:
            msg = f"Request timed out: {e}"
            raise TransportTimeoutError(msg) from e
        except httpx.TransportError as e:
            msg = f"Network request failed: {e}"
            raise TransportNetworkError(msg) from e

        self._log.debug(
            "http_response",
            url=redact_access_code(url),
            status_code=response.status_code,
            bytes=len(response.content),
        )

        if not HTTP_STATUS_OK_MIN <= response.status_code < HTTP_STATUS_OK_MAX:
            raise HttpStatusError(response.status_code, response.reason_phrase)

        body = response.text
        if not body.strip():
            raise EmptyResponseError(response.status_code)
        return body

    async def aclose(self) -> None:
        """Close the HTTP client if this strategy created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
