"""Unit tests for the script relay transport."""

import json
from types import SimpleNamespace
from typing import Any

import pytest

from tests.helpers.fakes import FakeScriptHost, callback_name
from wsdottie.constants import RELAY_TIMEOUT_SECONDS
from wsdottie.fetch.errors import (
    ApiResponseError,
    ScriptLoadError,
    TransportTimeoutError,
)
from wsdottie.fetch.relay import (
    PyodideScriptHost,
    ScriptRelayStrategy,
    encode_payload,
    make_callback_name,
    with_callback,
)


URL = "https://www.wsdot.wa.gov/ferries/api/vessels/rest/vessellocations?apiaccesscode=x"


class TestCallbackNames:
    """Tests for callback naming helpers."""

    def test_names_are_unique(self) -> None:
        """Test two names generated together differ."""
        names = {make_callback_name() for _ in range(50)}

        assert len(names) == 50

    def test_name_shape(self) -> None:
        """Test the name is a valid identifier with the relay prefix."""
        name = make_callback_name()

        assert name.startswith("jsonp_")
        assert name.isidentifier()

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://h/x?a=1", "https://h/x?a=1&callback=cb"),
            ("https://h/x", "https://h/x?callback=cb"),
        ],
    )
    def test_with_callback(self, url: str, expected: str) -> None:
        """Test the callback parameter is appended with the right separator."""
        assert with_callback(url, "cb") == expected


class TestEncodePayload:
    """Tests for encode_payload."""

    @pytest.mark.parametrize("payload", [None, {}, "", "   "])
    def test_empty_payloads(self, payload: object) -> None:
        """Test empty payloads become an empty container."""
        assert encode_payload(payload, expects_list=True) == "[]"
        assert encode_payload(payload, expects_list=False) == "{}"

    def test_error_envelope_raises(self) -> None:
        """Test upstream error envelopes raise ApiResponseError."""
        payload = {"Message": "The API Access Code is invalid."}

        with pytest.raises(ApiResponseError) as exc_info:
            encode_payload(payload, expects_list=False)

        assert exc_info.value.api_error
        assert exc_info.value.message == "The API Access Code is invalid."

    def test_plain_message_field_is_data(self) -> None:
        """Test a benign Message field is treated as data."""
        payload = {"Message": "Sailing on time"}

        assert json.loads(encode_payload(payload, expects_list=False)) == payload

    def test_data_round_trips(self) -> None:
        """Test ordinary payloads are re-encoded as JSON."""
        payload = [{"VesselID": 1, "VesselName": "Tacoma"}]

        assert json.loads(encode_payload(payload, expects_list=True)) == payload


class TestScriptRelayStrategy:
    """Tests for ScriptRelayStrategy.fetch."""

    def test_default_timeout(self) -> None:
        """Test the relay waits 30 seconds by default."""
        strategy = ScriptRelayStrategy(FakeScriptHost())

        assert strategy.timeout == RELAY_TIMEOUT_SECONDS == 30.0

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        """Test the callback payload is returned and everything is cleaned up."""
        host = FakeScriptHost(respond=lambda _src: [{"VesselID": 1}])
        strategy = ScriptRelayStrategy(host)

        body = await strategy.fetch(URL, expects_list=True)

        assert json.loads(body) == [{"VesselID": 1}]
        assert host.injected[0].startswith(URL + "&callback=jsonp_")
        assert host.callbacks == {}
        assert host.elements == []
        assert host.removed == 1

    @pytest.mark.asyncio
    async def test_callback_name_is_passed_in_url(self) -> None:
        """Test the injected URL names the registered callback."""
        seen: list[str] = []

        def _respond(src: str) -> dict[str, int]:
            seen.append(callback_name(src))
            return {"ok": 1}

        host = FakeScriptHost(respond=_respond)

        await ScriptRelayStrategy(host).fetch(URL)

        assert seen[0].startswith("jsonp_")

    @pytest.mark.asyncio
    async def test_empty_payload(self) -> None:
        """Test an empty relayed payload becomes an empty list."""
        host = FakeScriptHost(respond=lambda _src: None)

        body = await ScriptRelayStrategy(host).fetch(URL, expects_list=True)

        assert body == "[]"

    @pytest.mark.asyncio
    async def test_timeout_cleans_up(self) -> None:
        """Test a callback that never fires times out and is removed."""
        host = FakeScriptHost()
        strategy = ScriptRelayStrategy(host, timeout=0.01)

        with pytest.raises(TransportTimeoutError, match="Request timeout"):
            await strategy.fetch(URL)

        assert host.callbacks == {}
        assert host.elements == []

    @pytest.mark.asyncio
    async def test_load_failure(self) -> None:
        """Test loader errors raise ScriptLoadError and clean up."""
        host = FakeScriptHost(fail=True)

        with pytest.raises(ScriptLoadError, match="Script load failed"):
            await ScriptRelayStrategy(host).fetch(URL)

        assert host.callbacks == {}
        assert host.elements == []

    @pytest.mark.asyncio
    async def test_error_envelope(self) -> None:
        """Test an error envelope surfaces as ApiResponseError."""
        host = FakeScriptHost(respond=lambda _src: {"Message": "Request failed."})

        with pytest.raises(ApiResponseError):
            await ScriptRelayStrategy(host).fetch(URL)

        assert host.callbacks == {}


class FakeProxy:
    """Stand-in for a pyodide proxy that records destruction."""

    def __init__(self, fn: Any) -> None:
        self.fn = fn
        self.destroyed = False

    def destroy(self) -> None:
        self.destroyed = True


class FakeScript:
    """Minimal script element with a parent that can detach it."""

    def __init__(self) -> None:
        self.src = ""
        self.onerror: Any = None
        self.parentNode: Any = None

    def removeChild(self, child: "FakeScript") -> None:  # noqa: N802
        child.parentNode = None


class TestPyodideScriptHost:
    """Tests for the DOM-backed script host."""

    def _host(self) -> tuple[PyodideScriptHost, list[FakeProxy], FakeScript]:
        proxies: list[FakeProxy] = []
        script = FakeScript()

        def _create_proxy(fn: Any) -> FakeProxy:
            proxy = FakeProxy(fn)
            proxies.append(proxy)
            return proxy

        def _append(element: FakeScript) -> None:
            element.parentNode = FakeScript()

        js = SimpleNamespace(
            window=SimpleNamespace(),
            document=SimpleNamespace(
                createElement=lambda _tag: script,
                head=SimpleNamespace(appendChild=_append),
            ),
            Reflect=SimpleNamespace(
                deleteProperty=lambda target, name: delattr(target, name)
            ),
        )
        self.window = js.window
        return PyodideScriptHost(js=js, create_proxy=_create_proxy), proxies, script

    def test_remove_releases_error_handler(self) -> None:
        """Test removing a script destroys its onerror proxy and detaches it."""
        host, proxies, script = self._host()
        errors: list[bool] = []

        element = host.inject(
            "https://example.test/x?callback=cb", lambda: errors.append(True)
        )
        script.onerror.fn()
        host.remove(element)

        assert errors == [True]
        assert len(proxies) == 1
        assert proxies[0].destroyed
        assert script.onerror is None
        assert script.parentNode is None

    def test_unregister_releases_callback(self) -> None:
        """Test unregistering a callback deletes it and destroys its proxy."""
        host, proxies, _ = self._host()
        received: list[Any] = []

        host.register_callback("cb", received.append)
        self.window.cb.fn({"A": 1})
        host.unregister_callback("cb")

        assert received == [{"A": 1}]
        assert not hasattr(self.window, "cb")
        assert proxies[0].destroyed
