"""Query caching and cache flush invalidation."""

from wsdottie.caching.binding import QueryBinding, uses_flush_invalidation
from wsdottie.caching.monitor import CacheFlushMonitor, FlushWatch
from wsdottie.caching.state_machine import CacheFlushState, FlushState
from wsdottie.caching.store import InMemoryQueryCache, QueryCache, QueryResult


__all__ = [
    "CacheFlushMonitor",
    "CacheFlushState",
    "FlushState",
    "FlushWatch",
    "InMemoryQueryCache",
    "QueryBinding",
    "QueryCache",
    "QueryResult",
    "uses_flush_invalidation",
]
