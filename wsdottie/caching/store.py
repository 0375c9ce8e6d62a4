"""Query cache contract and an in-memory implementation."""

import asyncio
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

import structlog

from wsdottie.constants import COMPONENT_QUERY
from wsdottie.endpoints.policies import RefreshProfile
from wsdottie.fetch.errors import ErrorCategory, PipelineError


logger = structlog.get_logger()

QueryKey = tuple[Hashable, ...]
QueryFn = Callable[[], Awaitable[Any]]


class QueryStatus(str, Enum):
    """State of a cache entry.

    - PENDING: No result yet
    - SUCCESS: Last fetch succeeded
    - ERROR: Last fetch failed after all retries
    """

    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


@dataclass(frozen=True)
class QueryResult:
    """Snapshot of a cache entry as seen by a caller.

    ``data`` keeps the last successful value even when a later refetch
    failed; ``error`` holds the failure of the most recent fetch.
    """

    status: QueryStatus
    data: Any = None
    error: BaseException | None = None
    updated_at: float | None = None
    is_stale: bool = False

    @property
    def is_loading(self) -> bool:
        """True until the first fetch finishes."""
        return self.status == QueryStatus.PENDING

    @property
    def is_success(self) -> bool:
        """True if the most recent fetch succeeded."""
        return self.status == QueryStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        """True if the most recent fetch failed."""
        return self.status == QueryStatus.ERROR


class Subscription(Protocol):
    """Live handle on an auto-refreshing cache key."""

    key: QueryKey

    @property
    def result(self) -> QueryResult:
        """Latest snapshot for the key."""
        ...

    async def stop(self) -> None:
        """Stop refreshing the key."""
        ...


class QueryCache(Protocol):
    """The caching collaborator contract the query binding relies on."""

    async def fetch(
        self, key: QueryKey, fn: QueryFn, options: RefreshProfile
    ) -> QueryResult:
        """Return a fresh cached result or run ``fn`` (with retries)."""
        ...

    def invalidate(self, prefix: QueryKey) -> int:
        """Mark every entry whose key starts with ``prefix`` as invalid."""
        ...

    def subscribe(
        self, key: QueryKey, fn: QueryFn, options: RefreshProfile
    ) -> Subscription:
        """Keep ``key`` fresh on the profile's refetch interval."""
        ...


def is_retryable(error: BaseException) -> bool:
    """Whether a failed fetch is worth repeating.

    Validation failures will fail identically on every attempt.
    """
    if isinstance(error, PipelineError):
        return error.category != ErrorCategory.VALIDATION
    return True


@dataclass
class _Entry:
    status: QueryStatus = QueryStatus.PENDING
    data: Any = None
    error: BaseException | None = None
    updated_at: float | None = None
    last_used: float = 0.0
    invalidated: bool = False
    generation: int = 0
    retention_seconds: float = 0.0
    stale_seconds: float = 0.0
    subscribers: int = 0
    in_flight: asyncio.Task[Any] | None = None
    wake: asyncio.Event = field(default_factory=asyncio.Event)


class InMemorySubscription:
    """Subscription backed by an asyncio task."""

    def __init__(
        self,
        cache: "InMemoryQueryCache",
        key: QueryKey,
        task: asyncio.Task[None],
    ) -> None:
        """Initialize the subscription handle."""
        self.key = key
        self._cache = cache
        self._task = task

    @property
    def result(self) -> QueryResult:
        """Latest snapshot for the key."""
        return self._cache.peek(self.key)

    @property
    def running(self) -> bool:
        """Whether the refresh loop is active."""
        return not self._task.done()

    async def stop(self) -> None:
        """Cancel the refresh loop and release the key."""
        if self._task.done():
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)


class InMemoryQueryCache:
    """Process-local query cache.

    Entries are fresh for the profile's stale time unless invalidated, are
    retried ``retry_count`` times with a fixed delay, and are dropped by
    ``collect_garbage`` once unused for longer than the retention time.
    Garbage is also collected on every ``fetch``.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the cache.

        Args:
            clock: Monotonic clock in seconds.
            sleep: Coroutine used for retry delays.
        """
        self._clock = clock
        self._sleep = sleep
        self._entries: dict[QueryKey, _Entry] = {}
        self._log = logger.bind(component=COMPONENT_QUERY)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> list[QueryKey]:
        """Keys currently cached."""
        return list(self._entries)

    def peek(self, key: QueryKey) -> QueryResult:
        """Snapshot an entry without fetching.

        Unknown keys report PENDING.
        """
        entry = self._entries.get(key)
        if entry is None:
            return QueryResult(status=QueryStatus.PENDING)
        return self._snapshot(entry)

    def _snapshot(self, entry: _Entry) -> QueryResult:
        return QueryResult(
            status=entry.status,
            data=entry.data,
            error=entry.error,
            updated_at=entry.updated_at,
            is_stale=self._is_stale(entry),
        )

    def _is_stale(self, entry: _Entry) -> bool:
        if entry.invalidated or entry.updated_at is None:
            return True
        return self._clock() - entry.updated_at >= entry.stale_seconds

    def _entry(self, key: QueryKey, options: RefreshProfile) -> _Entry:
        entry = self._entries.get(key)
        if entry is None:
            entry = _Entry()
            self._entries[key] = entry
        entry.stale_seconds = options.stale_seconds
        entry.retention_seconds = options.retention_seconds
        entry.last_used = self._clock()
        return entry

    async def fetch(
        self, key: QueryKey, fn: QueryFn, options: RefreshProfile
    ) -> QueryResult:
        """Return a cached result, refetching when stale or invalidated.

        Args:
            key: Cache key.
            fn: Coroutine factory producing fresh data.
            options: Timing profile for the key.

        Returns:
            Snapshot after any fetch; failures are reported in ``error``.
        """
        self.collect_garbage()
        entry = self._entry(key, options)
        if entry.status == QueryStatus.SUCCESS and not self._is_stale(entry):
            return self._snapshot(entry)
        await self._refresh(key, entry, fn, options)
        return self._snapshot(entry)

    async def _refresh(
        self, key: QueryKey, entry: _Entry, fn: QueryFn, options: RefreshProfile
    ) -> None:
        # Concurrent readers of one key share the running fetch.
        if entry.in_flight is None or entry.in_flight.done():
            entry.in_flight = asyncio.ensure_future(
                self._run_with_retry(key, entry, fn, options)
            )
        await asyncio.shield(entry.in_flight)

    async def _run_with_retry(
        self, key: QueryKey, entry: _Entry, fn: QueryFn, options: RefreshProfile
    ) -> None:
        log = self._log.bind(key=str(key[0]) if key else "")
        # An invalidation landing mid-fetch must survive the fetch.
        generation = entry.generation
        last_error: BaseException | None = None
        for attempt in range(options.retry_count + 1):
            if attempt > 0:
                log.debug(
                    "query_retry",
                    attempt=attempt,
                    delay_seconds=options.retry_delay_seconds,
                )
                await self._sleep(options.retry_delay_seconds)
            try:
                data = await fn()
            except Exception as e:  # noqa: BLE001
                last_error = e
                if not is_retryable(e):
                    break
                continue

            entry.status = QueryStatus.SUCCESS
            entry.data = data
            entry.error = None
            entry.updated_at = self._clock()
            entry.invalidated = entry.generation != generation
            return

        entry.status = QueryStatus.ERROR
        entry.error = last_error
        entry.invalidated = entry.generation != generation
        log.warning("query_failed", error=str(last_error))

    def invalidate(self, prefix: QueryKey) -> int:
        """Mark entries whose key starts with ``prefix`` as invalid.

        Subscribed entries are refetched right away.

        Args:
            prefix: Leading key elements to match.

        Returns:
            Number of entries invalidated.
        """
        count = 0
        for key, entry in self._entries.items():
            if key[: len(prefix)] == prefix:
                self._mark_invalid(entry)
                count += 1
        if count:
            self._log.info("query_invalidated", prefix=str(prefix), count=count)
        return count

    def _mark_invalid(self, entry: _Entry) -> None:
        entry.invalidated = True
        entry.generation += 1
        entry.wake.set()

    def remove(self, key: QueryKey) -> None:
        """Drop an entry."""
        self._entries.pop(key, None)

    def collect_garbage(self) -> int:
        """Drop unsubscribed entries unused for longer than their retention.

        Returns:
            Number of entries dropped.
        """
        now = self._clock()
        expired = [
            key
            for key, entry in self._entries.items()
            if entry.subscribers == 0
            and (entry.in_flight is None or entry.in_flight.done())
            and now - entry.last_used > entry.retention_seconds
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def subscribe(
        self, key: QueryKey, fn: QueryFn, options: RefreshProfile
    ) -> InMemorySubscription:
        """Keep a key fresh until the subscription is stopped.

        The key is fetched immediately (unless fresh), then again every
        ``refetch_interval_seconds`` or as soon as it is invalidated.

        Args:
            key: Cache key.
            fn: Coroutine factory producing fresh data.
            options: Timing profile for the key.

        Returns:
            Subscription handle.
        """
        entry = self._entry(key, options)
        entry.subscribers += 1
        task = asyncio.create_task(self._refetch_loop(key, entry, fn, options))
        return InMemorySubscription(self, key, task)

    async def _refetch_loop(
        self, key: QueryKey, entry: _Entry, fn: QueryFn, options: RefreshProfile
    ) -> None:
        try:
            while True:
                entry.wake.clear()
                entry.last_used = self._clock()
                if entry.status != QueryStatus.SUCCESS or self._is_stale(entry):
                    await self._refresh(key, entry, fn, options)
                interval = options.refetch_interval_seconds
                try:
                    await asyncio.wait_for(entry.wake.wait(), timeout=interval)
                except TimeoutError:
                    self._mark_invalid(entry)
        finally:
            entry.subscribers -= 1
