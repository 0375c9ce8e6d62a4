"""Binds pipeline fetches to the query cache and flush monitor."""

from collections.abc import Callable
from functools import partial
from typing import Any

import structlog

from wsdottie.caching.monitor import CacheFlushMonitor
from wsdottie.caching.store import (
    InMemoryQueryCache,
    QueryCache,
    QueryKey,
    QueryResult,
    Subscription,
)
from wsdottie.constants import COMPONENT_QUERY
from wsdottie.endpoints.models import EndpointDescriptor, ServiceFamily
from wsdottie.endpoints.policies import RefreshPolicy, RefreshProfile, profile_for
from wsdottie.fetch.pipeline import FetchPipeline
from wsdottie.fetch.url import ParamRecord


logger = structlog.get_logger()


def params_fingerprint(params: ParamRecord | None) -> tuple[tuple[str, Any], ...]:
    """Order-independent, hashable form of a parameter record.

    ``None`` values are dropped, since the URL builder treats them as
    omitted.
    """
    items = ((k, v) for k, v in (params or {}).items() if v is not None)
    return tuple(sorted(items, key=lambda item: item[0]))


def uses_flush_invalidation(endpoint: EndpointDescriptor) -> bool:
    """Whether an endpoint's freshness is driven by its family's flush probe.

    Probes themselves are excluded, as are endpoints whose data changes
    faster than the flush date tracks (any non-STATIC nominal policy).
    """
    return (
        endpoint.flush_family is not None
        and not endpoint.is_flush_probe
        and endpoint.refresh_policy == RefreshPolicy.STATIC
    )


class QueryBinding:
    """Caches pipeline results per endpoint and parameters."""

    def __init__(
        self,
        pipeline: FetchPipeline,
        cache: QueryCache | None = None,
        monitor: CacheFlushMonitor | None = None,
    ) -> None:
        """Initialize the binding.

        Args:
            pipeline: Pipeline used to fetch data.
            cache: Caching collaborator (default: InMemoryQueryCache).
            monitor: Flush monitor whose signals invalidate cached data.
        """
        self._pipeline = pipeline
        self._cache: QueryCache = cache or InMemoryQueryCache()
        self._monitor = monitor
        self._wired: dict[ServiceFamily, set[str]] = {}
        self._unsubscribers: dict[ServiceFamily, Callable[[], None]] = {}
        self._log = logger.bind(component=COMPONENT_QUERY)

    @property
    def cache(self) -> QueryCache:
        """The caching collaborator."""
        return self._cache

    @staticmethod
    def query_key(
        endpoint: EndpointDescriptor,
        params: ParamRecord | None = None,
        validate: bool = False,
    ) -> QueryKey:
        """Cache key for an endpoint call.

        The endpoint id comes first so that invalidating ``(endpoint.id,)``
        covers every parameter combination.
        """
        return (endpoint.id, params_fingerprint(params), validate)

    def resolve_policy(self, endpoint: EndpointDescriptor) -> RefreshPolicy:
        """Effective refresh policy for an endpoint."""
        if uses_flush_invalidation(endpoint):
            return RefreshPolicy.STATIC
        return endpoint.refresh_policy

    def profile(self, endpoint: EndpointDescriptor) -> RefreshProfile:
        """Effective timing profile for an endpoint."""
        return profile_for(self.resolve_policy(endpoint))

    def wired_endpoints(self, family: ServiceFamily | str) -> set[str]:
        """Endpoint ids currently invalidated by a family's flush signal."""
        return set(self._wired.get(ServiceFamily(family), set()))

    async def query(
        self,
        endpoint: EndpointDescriptor,
        params: ParamRecord | None = None,
        *,
        validate: bool = False,
    ) -> QueryResult:
        """Fetch through the cache.

        Args:
            endpoint: Endpoint to call.
            params: Parameter record.
            validate: Validate input and output with the endpoint schemas.

        Returns:
            Cache snapshot; a failed fetch is reported in ``error`` as a
            PipelineError rather than raised.
        """
        self._wire(endpoint)
        fn = partial(self._pipeline.fetch, endpoint, params, validate=validate)
        return await self._cache.fetch(
            self.query_key(endpoint, params, validate), fn, self.profile(endpoint)
        )

    def subscribe(
        self,
        endpoint: EndpointDescriptor,
        params: ParamRecord | None = None,
        *,
        validate: bool = False,
    ) -> Subscription:
        """Keep an endpoint call fresh in the cache.

        Returns:
            Subscription exposing the latest result and ``stop``.
        """
        self._wire(endpoint)
        fn = partial(self._pipeline.fetch, endpoint, params, validate=validate)
        return self._cache.subscribe(
            self.query_key(endpoint, params, validate), fn, self.profile(endpoint)
        )

    def _wire(self, endpoint: EndpointDescriptor) -> None:
        family = endpoint.flush_family
        if self._monitor is None or family is None:
            return
        if not uses_flush_invalidation(endpoint):
            return
        self._wired.setdefault(family, set()).add(endpoint.id)
        if family not in self._unsubscribers:
            self._unsubscribers[family] = self._monitor.on_change(
                family, self._on_flush
            )

    def _on_flush(self, family: ServiceFamily, value: Any) -> None:
        count = 0
        for endpoint_id in sorted(self._wired.get(family, set())):
            count += self._cache.invalidate((endpoint_id,))
        self._log.info(
            "flush_invalidation",
            family=family.value,
            flush_value=str(value),
            entries=count,
        )

    def close(self) -> None:
        """Detach from the flush monitor."""
        for unsubscribe in self._unsubscribers.values():
            unsubscribe()
        self._unsubscribers.clear()
        self._wired.clear()
