"""Metrics collection for the fetch pipeline and cache flush monitor."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class PipelineMetrics:
    """Counters for pipeline and flush monitor activity.

    Singleton class; tests call ``reset()`` between cases.
    """

    requests_total: dict[str, int] = field(default_factory=dict)
    failures_total: dict[str, int] = field(default_factory=dict)
    strategy_total: dict[str, int] = field(default_factory=dict)
    duration_ms_total: float = 0.0
    request_count: int = 0
    flush_probes_total: int = 0
    flush_probe_failures_total: int = 0
    flush_invalidations_total: dict[str, int] = field(default_factory=dict)

    _instance: ClassVar["PipelineMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "PipelineMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(self, endpoint_id: str, strategy: str) -> None:
        """Record a pipeline invocation.

        Args:
            endpoint_id: Endpoint identifier.
            strategy: Name of the transport strategy used.
        """
        self.requests_total[endpoint_id] = self.requests_total.get(endpoint_id, 0) + 1
        self.strategy_total[strategy] = self.strategy_total.get(strategy, 0) + 1
        self.request_count += 1

    def record_failure(self, category: str) -> None:
        """Record a classified failure.

        Args:
            category: Error category value.
        """
        self.failures_total[category] = self.failures_total.get(category, 0) + 1

    def record_duration(self, duration_ms: float) -> None:
        """Record request duration in milliseconds."""
        self.duration_ms_total += duration_ms

    def record_flush_probe(self, *, failed: bool) -> None:
        """Record a flush probe outcome."""
        self.flush_probes_total += 1
        if failed:
            self.flush_probe_failures_total += 1

    def record_invalidation(self, family: str) -> None:
        """Record a flush-driven invalidation signal for a family."""
        self.flush_invalidations_total[family] = (
            self.flush_invalidations_total.get(family, 0) + 1
        )

    def to_dict(self) -> dict[str, int | float | dict[str, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "requests_total": dict(self.requests_total),
            "failures_total": dict(self.failures_total),
            "strategy_total": dict(self.strategy_total),
            "duration_ms_total": self.duration_ms_total,
            "request_count": self.request_count,
            "flush_probes_total": self.flush_probes_total,
            "flush_probe_failures_total": self.flush_probe_failures_total,
            "flush_invalidations_total": dict(self.flush_invalidations_total),
        }

    @property
    def avg_duration_ms(self) -> float:
        """Average pipeline duration in milliseconds."""
        if self.request_count == 0:
            return 0.0
        return self.duration_ms_total / self.request_count
