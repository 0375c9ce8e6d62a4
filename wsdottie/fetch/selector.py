"""Transport strategy selection."""

import os
import sys
from typing import Protocol

from wsdottie.fetch.errors import EndpointConfigurationError
from wsdottie.fetch.relay import PyodideScriptHost, ScriptRelayStrategy
from wsdottie.fetch.transport import DirectHttpStrategy, TransportStrategy


class EnvironmentDetector(Protocol):
    """Reports facts about the runtime that drive strategy selection."""

    def is_test_context(self) -> bool:
        """Whether the code runs under an automated test runner."""
        ...

    def has_dom(self) -> bool:
        """Whether a browser DOM is available."""
        ...


class RuntimeEnvironment:
    """Detects pytest runs and browser (Pyodide) runtimes."""

    def is_test_context(self) -> bool:
        """Check for a running pytest session."""
        return "PYTEST_CURRENT_TEST" in os.environ or "pytest" in sys.modules

    def has_dom(self) -> bool:
        """Check for a browser runtime."""
        return sys.platform == "emscripten"


class StrategySelector:
    """Chooses between the direct and relay transports.

    Rules, in order: an explicit relay override wins; test runs use the
    direct strategy; browser runtimes use the relay; everything else uses
    the direct strategy.
    """

    def __init__(
        self,
        direct: DirectHttpStrategy,
        relay: ScriptRelayStrategy | None = None,
        detector: EnvironmentDetector | None = None,
        force_relay: bool = False,
    ) -> None:
        """Initialize the selector.

        Args:
            direct: Direct HTTP strategy.
            relay: Relay strategy. When omitted and a DOM is present, one
                is created against the page on first use.
            detector: Environment detector (default: RuntimeEnvironment).
            force_relay: Default value of the relay override.
        """
        self._direct = direct
        self._relay = relay
        self._detector = detector or RuntimeEnvironment()
        self._force_relay = force_relay

    @property
    def direct(self) -> DirectHttpStrategy:
        """The direct HTTP strategy."""
        return self._direct

    def select(self, force_relay: bool | None = None) -> TransportStrategy:
        """Pick the strategy for the next request.

        Args:
            force_relay: Per-call override; None uses the selector default.

        Returns:
            The chosen transport strategy.

        Raises:
            EndpointConfigurationError: If the relay is forced but no
                script host is available.
        """
        forced = self._force_relay if force_relay is None else force_relay
        if forced:
            return self._relay_strategy()
        if self._detector.is_test_context():
            return self._direct
        if self._detector.has_dom():
            return self._relay_strategy()
        return self._direct

    def _relay_strategy(self) -> ScriptRelayStrategy:
        if self._relay is None:
            if not self._detector.has_dom():
                msg = "Relay transport requested but no script host is available"
                raise EndpointConfigurationError(msg)
            self._relay = ScriptRelayStrategy(PyodideScriptHost())
        return self._relay

    async def aclose(self) -> None:
        """Release transport resources."""
        await self._direct.aclose()
