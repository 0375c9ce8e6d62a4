"""Per-family cache flush state."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

import structlog

from wsdottie.constants import COMPONENT_FLUSH


logger = structlog.get_logger()


class FlushState(str, Enum):
    """Lifecycle of a family's flush observation.

    - UNOBSERVED: No probe has succeeded yet
    - OBSERVED: At least one flush value has been recorded
    """

    UNOBSERVED = "UNOBSERVED"
    OBSERVED = "OBSERVED"


# Valid state transitions
_VALID_TRANSITIONS: dict[FlushState, set[FlushState]] = {
    FlushState.UNOBSERVED: {FlushState.OBSERVED},
    FlushState.OBSERVED: {FlushState.OBSERVED},
}


class FlushStateTransitionError(Exception):
    """Raised when an illegal state transition is attempted."""

    def __init__(
        self,
        family: str,
        from_state: FlushState,
        to_state: FlushState,
    ) -> None:
        """Initialize the transition error.

        Args:
            family: Service family identifier.
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.family = family
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid flush state transition for {family}: "
            f"{from_state.value} -> {to_state.value}"
        )


class CacheFlushState:
    """Last observed flush value for one service family.

    Only the monitor's probe cycle writes to this object; readers may look
    at ``value`` at any time.
    """

    def __init__(self, family: str) -> None:
        """Initialize in the UNOBSERVED state.

        Args:
            family: Service family identifier.
        """
        self._family = family
        self._state = FlushState.UNOBSERVED
        self._value: Any = None
        self._observed_at: datetime | None = None
        self._log = logger.bind(component=COMPONENT_FLUSH, family=family)

    @property
    def family(self) -> str:
        """Service family identifier."""
        return self._family

    @property
    def state(self) -> FlushState:
        """Current state."""
        return self._state

    @property
    def value(self) -> Any:
        """Last observed flush value, or None before the first observation."""
        return self._value

    @property
    def observed_at(self) -> datetime | None:
        """When the last flush value was recorded."""
        return self._observed_at

    def can_transition_to(self, target: FlushState) -> bool:
        """Check if a transition to ``target`` is valid."""
        return target in _VALID_TRANSITIONS[self._state]

    def _transition(self, target: FlushState) -> None:
        if not self.can_transition_to(target):
            raise FlushStateTransitionError(self._family, self._state, target)
        self._state = target

    def observe(self, value: Any, now: datetime | None = None) -> bool:
        """Record a probe result.

        The first observation never reports a change. After that a change
        is reported only when the value differs from the stored one.
        ``None`` means the upstream had nothing to report and is ignored.

        Args:
            value: Flush value returned by the probe.
            now: Observation time override (for tests).

        Returns:
            True if listeners should invalidate cached data.
        """
        if value is None:
            return False

        previous_state = self._state
        previous_value = self._value
        self._transition(FlushState.OBSERVED)
        self._value = value
        self._observed_at = now or datetime.now(UTC)

        if previous_state == FlushState.UNOBSERVED:
            self._log.debug("flush_first_observation", value=str(value))
            return False

        changed = bool(value != previous_value)
        if changed:
            self._log.info(
                "flush_value_changed",
                previous=str(previous_value),
                current=str(value),
            )
        return changed
