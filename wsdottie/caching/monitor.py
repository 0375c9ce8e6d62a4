"""Polling monitor for per-family cache flush dates."""

import asyncio
import inspect
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import structlog
from pydantic import BaseModel

from wsdottie.apis import CATALOG, Catalog
from wsdottie.caching.state_machine import CacheFlushState
from wsdottie.constants import COMPONENT_FLUSH, FLUSH_POLL_INTERVAL_SECONDS
from wsdottie.endpoints.models import ServiceFamily
from wsdottie.fetch.errors import PipelineError
from wsdottie.fetch.pipeline import FetchPipeline, LogMode
from wsdottie.observability.metrics import PipelineMetrics


logger = structlog.get_logger()

ChangeCallback = Callable[[ServiceFamily, Any], Awaitable[None] | None]
Unsubscribe = Callable[[], None]


def extract_flush_value(payload: Any) -> Any:
    """Pull the flush timestamp out of a probe response.

    Probes answer either with a bare value or with an object holding a
    single timestamp field (``{"CacheFlushDate": ...}``).

    Args:
        payload: Normalized probe response.

    Returns:
        The flush value, or None when the response carries none.
    """
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()
    if isinstance(payload, dict):
        if len(payload) == 1:
            return next(iter(payload.values()))
        return payload.get("cache_flush_date")
    return payload


class FlushWatch:
    """Handle on a running poll loop for one family."""

    def __init__(
        self,
        monitor: "CacheFlushMonitor",
        family: ServiceFamily,
        task: asyncio.Task[None],
    ) -> None:
        """Initialize the handle.

        Args:
            monitor: Owning monitor.
            family: Family being polled.
            task: The poll loop task.
        """
        self._monitor = monitor
        self.family = family
        self._task = task

    @property
    def latest(self) -> Any:
        """Most recent flush value, or None before the first observation."""
        return self._monitor.state(self.family).value

    @property
    def task(self) -> asyncio.Task[None]:
        """The poll loop task."""
        return self._task

    @property
    def running(self) -> bool:
        """Whether the poll loop is still active."""
        return not self._task.done()

    async def changes(self) -> AsyncIterator[Any]:
        """Yield each new flush value as changes are detected."""
        queue: asyncio.Queue[Any] = asyncio.Queue()
        unsubscribe = self._monitor.on_change(
            self.family, lambda _family, value: queue.put_nowait(value)
        )
        try:
            while True:
                yield await queue.get()
        finally:
            unsubscribe()

    async def stop(self) -> None:
        """Cancel the poll loop and wait for it to finish."""
        await self._monitor.unwatch(self.family)


class CacheFlushMonitor:
    """Detects upstream data changes via per-family flush probes.

    Each cycle for a family runs probe, compare, then maybe signal, and a
    new cycle is skipped while the previous one is still in flight. Probe
    failures are logged and treated as "no new information".
    """

    def __init__(
        self,
        pipeline: FetchPipeline,
        catalog: Catalog = CATALOG,
        interval: float = FLUSH_POLL_INTERVAL_SECONDS,
    ) -> None:
        """Initialize the monitor.

        Args:
            pipeline: Pipeline used to call the probe endpoints.
            catalog: Catalog providing the probe endpoints.
            interval: Seconds between polls of a family.
        """
        self._pipeline = pipeline
        self._catalog = catalog
        self._interval = interval
        self._states: dict[ServiceFamily, CacheFlushState] = {}
        self._callbacks: dict[ServiceFamily, list[ChangeCallback]] = {}
        self._in_flight: set[ServiceFamily] = set()
        self._watches: dict[ServiceFamily, FlushWatch] = {}
        self._log = logger.bind(component=COMPONENT_FLUSH)

    @property
    def interval(self) -> float:
        """Seconds between polls of a family."""
        return self._interval

    def families(self) -> list[ServiceFamily]:
        """Families this monitor can poll."""
        return self._catalog.families_with_probes()

    def state(self, family: ServiceFamily | str) -> CacheFlushState:
        """Flush state for a family (created on first access)."""
        key = ServiceFamily(family)
        if key not in self._states:
            self._states[key] = CacheFlushState(key.value)
        return self._states[key]

    def on_change(
        self, family: ServiceFamily | str, callback: ChangeCallback
    ) -> Unsubscribe:
        """Register a callback for flush changes of a family.

        Args:
            family: Service family.
            callback: Called with ``(family, new_value)``; may be async.

        Returns:
            Function that removes the callback.
        """
        key = ServiceFamily(family)
        callbacks = self._callbacks.setdefault(key, [])
        callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in callbacks:
                callbacks.remove(callback)

        return _unsubscribe

    async def poll_once(self, family: ServiceFamily | str) -> bool:
        """Run one probe, compare and signal cycle.

        Args:
            family: Service family to probe.

        Returns:
            True if a change was detected and listeners were signalled.

        Raises:
            ValueError: If the family has no flush probe.
        """
        key = ServiceFamily(family)
        probe = self._catalog.probe_for(key)
        if probe is None:
            msg = f"{key.value} has no cache flush probe"
            raise ValueError(msg)

        log = self._log.bind(family=key.value)
        if key in self._in_flight:
            log.debug("flush_poll_skipped", reason="in_flight")
            return False

        self._in_flight.add(key)
        metrics = PipelineMetrics.get_instance()
        try:
            try:
                payload = await self._pipeline.fetch(probe, log_mode=LogMode.NONE)
            except PipelineError as e:
                metrics.record_flush_probe(failed=True)
                log.warning(
                    "flush_probe_failed",
                    category=e.category.value,
                    message=e.message,
                )
                return False

            metrics.record_flush_probe(failed=False)
            value = extract_flush_value(payload)
            changed = self.state(key).observe(value)
            if changed:
                metrics.record_invalidation(key.value)
                await self._notify(key, value)
            return changed
        finally:
            self._in_flight.discard(key)

    async def _notify(self, family: ServiceFamily, value: Any) -> None:
        for callback in list(self._callbacks.get(family, [])):
            try:
                result = callback(family, value)
                if inspect.isawaitable(result):
                    await result
            except Exception:  # noqa: BLE001
                self._log.exception("flush_callback_failed", family=family.value)

    async def _poll_loop(self, family: ServiceFamily) -> None:
        while True:
            await self.poll_once(family)
            await asyncio.sleep(self._interval)

    def watch(self, family: ServiceFamily | str) -> FlushWatch:
        """Start polling a family on the monitor's interval.

        The first poll runs immediately. Watching an already watched family
        returns the existing handle.

        Args:
            family: Service family to poll.

        Returns:
            Handle exposing the latest value and a ``stop`` method.
        """
        key = ServiceFamily(family)
        if self._catalog.probe_for(key) is None:
            msg = f"{key.value} has no cache flush probe"
            raise ValueError(msg)
        existing = self._watches.get(key)
        if existing is not None and existing.running:
            return existing

        task = asyncio.create_task(
            self._poll_loop(key), name=f"cache-flush-{key.value}"
        )
        watch = FlushWatch(self, key, task)
        self._watches[key] = watch
        self._log.info("flush_watch_started", family=key.value, interval=self._interval)
        return watch

    async def unwatch(self, family: ServiceFamily | str) -> None:
        """Stop polling a family and wait for its loop to exit."""
        key = ServiceFamily(family)
        watch = self._watches.pop(key, None)
        if watch is None:
            return
        watch.task.cancel()
        await asyncio.gather(watch.task, return_exceptions=True)
        self._log.info("flush_watch_stopped", family=key.value)

    def start(self) -> list[FlushWatch]:
        """Watch every family that exposes a flush probe."""
        return [self.watch(family) for family in self.families()]

    async def stop(self) -> None:
        """Cancel every poll loop and wait for them to finish."""
        for family in list(self._watches):
            await self.unwatch(family)

    async def __aenter__(self) -> "CacheFlushMonitor":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
