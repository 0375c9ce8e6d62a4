"""Script-injection relay transport for browser runtimes.

Upstream WSF/WSDOT servers do not send CORS headers, so a browser cannot
read their responses with a normal request. They do honour a
``callback=<name>`` query parameter and wrap the payload in a call to that
global function. The relay injects a ``<script>`` element pointing at the
URL and waits for the callback to fire.
"""

import asyncio
import json
import random
import string
import time
from collections.abc import Callable
from typing import Any, Protocol

import structlog

from wsdottie.constants import (
    COMPONENT_TRANSPORT,
    RELAY_CALLBACK_PARAM,
    RELAY_CALLBACK_PREFIX,
    RELAY_SUFFIX_LENGTH,
    RELAY_TIMEOUT_SECONDS,
)
from wsdottie.fetch.errors import ApiResponseError, ScriptLoadError, TransportTimeoutError
from wsdottie.fetch.redact import redact_access_code


logger = structlog.get_logger()

_BASE36 = string.digits + string.ascii_lowercase

# Fragments of upstream "Message" payloads that signal a rejected request
_ERROR_MESSAGE_MARKERS = ("failed", "invalid", "not valid", "cannot be used", "error")


class ScriptHost(Protocol):
    """The minimal DOM surface the relay needs."""

    def register_callback(self, name: str, callback: Callable[[Any], None]) -> None:
        """Expose ``callback`` as a global function called ``name``."""
        ...

    def unregister_callback(self, name: str) -> None:
        """Delete the global function ``name``."""
        ...

    def inject(self, src: str, on_error: Callable[[], None]) -> object:
        """Insert a loader element for ``src`` and return a handle to it."""
        ...

    def remove(self, element: object) -> None:
        """Remove a previously injected loader element."""
        ...


def make_callback_name() -> str:
    """Generate a per-call callback name (timestamp plus random suffix)."""
    suffix = "".join(random.choices(_BASE36, k=RELAY_SUFFIX_LENGTH))  # noqa: S311
    return f"{RELAY_CALLBACK_PREFIX}_{int(time.time() * 1000)}_{suffix}"


def with_callback(url: str, name: str) -> str:
    """Append the callback parameter to a URL."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{RELAY_CALLBACK_PARAM}={name}"


def encode_payload(payload: Any, expects_list: bool) -> str:
    """Turn a relayed payload back into response text.

    Args:
        payload: Value the upstream passed to the callback.
        expects_list: Whether the endpoint returns list-shaped data.

    Returns:
        JSON text; empty payloads become ``[]`` or ``{}``.

    Raises:
        ApiResponseError: If the payload is an upstream error envelope.
    """
    if payload is None or payload == {} or (
        isinstance(payload, str) and not payload.strip()
    ):
        return "[]" if expects_list else "{}"

    if isinstance(payload, dict):
        message = payload.get("Message")
        if isinstance(message, str) and any(
            marker in message.lower() for marker in _ERROR_MESSAGE_MARKERS
        ):
            raise ApiResponseError(message)

    return json.dumps(payload)


class ScriptRelayStrategy:
    """Fetches via an injected script element and a named global callback."""

    name = "relay"

    def __init__(
        self,
        host: ScriptHost,
        timeout: float = RELAY_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the relay.

        Args:
            host: DOM surface used to inject scripts and callbacks.
            timeout: Seconds to wait for the callback before failing.
        """
        self._host = host
        self._timeout = timeout
        self._log = logger.bind(component=COMPONENT_TRANSPORT, strategy=self.name)

    @property
    def timeout(self) -> float:
        """Seconds to wait for the callback."""
        return self._timeout

    async def fetch(self, url: str, *, expects_list: bool = False) -> str:
        """Fetch a URL through the script relay.

        Args:
            url: Fully built request URL.
            expects_list: Whether empty payloads should become ``[]``.

        Returns:
            Payload re-encoded as JSON text.

        Raises:
            TransportTimeoutError: If the callback did not fire in time.
            ScriptLoadError: If the loader element failed to load.
            ApiResponseError: If the upstream returned an error envelope.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()
        callback_name = make_callback_name()

        def _on_payload(payload: Any) -> None:
            if future.done():
                return
            try:
                future.set_result(encode_payload(payload, expects_list))
            except ApiResponseError as e:
                future.set_exception(e)

        def _on_error() -> None:
            if not future.done():
                future.set_exception(ScriptLoadError())

        element: object | None = None
        self._host.register_callback(callback_name, _on_payload)
        try:
            element = self._host.inject(with_callback(url, callback_name), _on_error)
            self._log.debug(
                "relay_injected",
                callback=callback_name,
                url=redact_access_code(url),
            )
            return await asyncio.wait_for(future, self._timeout)
        except TimeoutError as e:
            raise TransportTimeoutError("Request timeout") from e
        finally:
            self._cleanup(callback_name, element)

    def _cleanup(self, callback_name: str, element: object | None) -> None:
        try:
            if element is not None:
                self._host.remove(element)
        finally:
            self._host.unregister_callback(callback_name)


class PyodideScriptHost:
    """ScriptHost backed by the browser DOM under Pyodide."""

    def __init__(
        self,
        js: Any = None,
        create_proxy: Callable[[Callable[..., Any]], Any] | None = None,
    ) -> None:
        """Bind to the page's ``window`` and ``document``.

        Args:
            js: The Pyodide ``js`` module (imported when omitted).
            create_proxy: ``pyodide.ffi.create_proxy`` (imported when omitted).
        """
        if js is None:
            import js  # noqa: PLC0415
        if create_proxy is None:
            from pyodide.ffi import create_proxy  # noqa: PLC0415

        self._js = js
        self._create_proxy = create_proxy
        self._proxies: dict[str, Any] = {}
        # onerror proxies keyed by the id of their script element
        self._error_proxies: dict[int, Any] = {}

    def register_callback(self, name: str, callback: Callable[[Any], None]) -> None:
        """Expose ``callback`` on ``window``, converting JS values to Python."""

        def _receive(data: Any = None) -> None:
            callback(data.to_py() if hasattr(data, "to_py") else data)

        proxy = self._create_proxy(_receive)
        self._proxies[name] = proxy
        setattr(self._js.window, name, proxy)

    def unregister_callback(self, name: str) -> None:
        """Delete the global callback and release its proxy."""
        self._js.Reflect.deleteProperty(self._js.window, name)
        proxy = self._proxies.pop(name, None)
        if proxy is not None:
            proxy.destroy()

    def inject(self, src: str, on_error: Callable[[], None]) -> object:
        """Append a ``<script>`` element to the document head."""
        script = self._js.document.createElement("script")
        script.src = src
        proxy = self._create_proxy(lambda *_: on_error())
        self._error_proxies[id(script)] = proxy
        script.onerror = proxy
        self._js.document.head.appendChild(script)
        return script

    def remove(self, element: object) -> None:
        """Detach the element and release its error handler."""
        proxy = self._error_proxies.pop(id(element), None)
        if proxy is not None:
            element.onerror = None  # type: ignore[attr-defined]
            proxy.destroy()
        parent = getattr(element, "parentNode", None)
        if parent is not None:
            parent.removeChild(element)
