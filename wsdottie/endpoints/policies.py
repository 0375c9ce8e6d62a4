"""Refresh policies for cached endpoint results."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


_MINUTE = 60.0
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR


class RefreshPolicy(str, Enum):
    """How often an endpoint's data changes.

    - REALTIME: Live data such as vessel positions
    - FREQUENT: Changes every few minutes (alerts, wait times)
    - MODERATE: Changes a few times a day
    - STATIC: Changes rarely; refreshed by cache flush signals
    """

    REALTIME = "REALTIME"
    FREQUENT = "FREQUENT"
    MODERATE = "MODERATE"
    STATIC = "STATIC"


class RefreshProfile(BaseModel):
    """Cache timing parameters for one refresh policy (seconds)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    stale_seconds: float = Field(ge=0, description="Age after which data is stale")
    retention_seconds: float = Field(
        ge=0, description="Age after which unused entries are dropped"
    )
    refetch_interval_seconds: float | None = Field(
        default=None, gt=0, description="Auto-refetch interval for subscriptions"
    )
    retry_count: int = Field(ge=0, le=10, description="Retries after a failure")
    retry_delay_seconds: float = Field(ge=0, description="Delay between retries")
    refetch_on_focus: bool = False


PROFILES: dict[RefreshPolicy, RefreshProfile] = {
    RefreshPolicy.REALTIME: RefreshProfile(
        stale_seconds=5.0,
        retention_seconds=_HOUR,
        refetch_interval_seconds=5.0,
        retry_count=1,
        retry_delay_seconds=5.0,
    ),
    RefreshPolicy.FREQUENT: RefreshProfile(
        stale_seconds=5 * _MINUTE,
        retention_seconds=_HOUR,
        refetch_interval_seconds=5 * _MINUTE,
        retry_count=3,
        retry_delay_seconds=5.0,
    ),
    RefreshPolicy.MODERATE: RefreshProfile(
        stale_seconds=_HOUR,
        retention_seconds=6 * _HOUR,
        refetch_interval_seconds=_HOUR,
        retry_count=5,
        retry_delay_seconds=30.0,
    ),
    RefreshPolicy.STATIC: RefreshProfile(
        stale_seconds=_DAY,
        retention_seconds=2 * _DAY,
        refetch_interval_seconds=_DAY,
        retry_count=5,
        retry_delay_seconds=5.0,
    ),
}


def profile_for(policy: RefreshPolicy) -> RefreshProfile:
    """Return the timing profile for a policy."""
    return PROFILES[policy]
