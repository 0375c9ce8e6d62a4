"""High-level client bundling the pipeline, cache and flush monitor."""

from collections import Counter
from typing import Any

from wsdottie.apis import CATALOG, Catalog
from wsdottie.caching.binding import QueryBinding
from wsdottie.caching.monitor import CacheFlushMonitor
from wsdottie.caching.store import QueryCache, QueryResult
from wsdottie.constants import FLUSH_POLL_INTERVAL_SECONDS
from wsdottie.endpoints.models import EndpointDescriptor
from wsdottie.fetch.pipeline import (
    FetchFunction,
    FetchPipeline,
    fetch_function_name,
    make_fetch_function,
)
from wsdottie.fetch.selector import StrategySelector
from wsdottie.fetch.url import ParamRecord
from wsdottie.settings.app import ApiConfig, get_settings


class WsdotClient:
    """Entry point for applications.

    Example::

        async with WsdotClient(start_monitor=True) as client:
            vessels = await client.fetch_vessel_locations(validate=True)
            today = await client.query("getScheduleTodayByRoute", {...})
    """

    def __init__(
        self,
        config: ApiConfig | None = None,
        *,
        catalog: Catalog = CATALOG,
        selector: StrategySelector | None = None,
        cache: QueryCache | None = None,
        flush_interval: float = FLUSH_POLL_INTERVAL_SECONDS,
        start_monitor: bool = False,
    ) -> None:
        """Initialize the client.

        Args:
            config: API configuration (default: built from environment).
            catalog: Endpoint catalog.
            selector: Transport selector override.
            cache: Caching collaborator override.
            flush_interval: Seconds between cache flush probes.
            start_monitor: Start flush polling when entering the context.
        """
        self.config = config or ApiConfig.from_settings(get_settings())
        self.catalog = catalog
        self.pipeline = FetchPipeline(self.config, selector)
        self.monitor = CacheFlushMonitor(self.pipeline, catalog, flush_interval)
        self.queries = QueryBinding(self.pipeline, cache, self.monitor)
        self._start_monitor = start_monitor

        counts = Counter(fetch_function_name(e) for e in catalog)
        self._functions: dict[str, FetchFunction] = {
            fetch_function_name(e): make_fetch_function(self.pipeline, e)
            for e in catalog
            if counts[fetch_function_name(e)] == 1
        }

    def __getattr__(self, name: str) -> FetchFunction:
        functions = self.__dict__.get("_functions", {})
        if name in functions:
            return functions[name]
        msg = f"{type(self).__name__!r} object has no attribute {name!r}"
        raise AttributeError(msg)

    def endpoint(self, name: str) -> EndpointDescriptor:
        """Look up an endpoint by id or function name."""
        return self.catalog.get(name)

    def fetch_function(self, name: str) -> FetchFunction:
        """Standalone fetch function for an endpoint id or function name."""
        return make_fetch_function(self.pipeline, self.endpoint(name))

    async def fetch(
        self,
        name: str,
        params: ParamRecord | None = None,
        **options: Any,
    ) -> Any:
        """Fetch an endpoint directly (no caching).

        Raises:
            PipelineError: On any failure.
        """
        return await self.pipeline.fetch(self.endpoint(name), params, **options)

    async def query(
        self,
        name: str,
        params: ParamRecord | None = None,
        *,
        validate: bool = False,
    ) -> QueryResult:
        """Fetch an endpoint through the cache."""
        return await self.queries.query(
            self.endpoint(name), params, validate=validate
        )

    async def aclose(self) -> None:
        """Stop polling and release network resources."""
        await self.monitor.stop()
        self.queries.close()
        await self.pipeline.aclose()

    async def __aenter__(self) -> "WsdotClient":
        if self._start_monitor:
            self.monitor.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
