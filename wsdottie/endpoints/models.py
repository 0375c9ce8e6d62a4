"""Endpoint descriptor records."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from wsdottie.endpoints.policies import RefreshPolicy
from wsdottie.fetch.url import ParamValue, template_placeholders
from wsdottie.fetch.validation import Validator


class ServiceFamily(str, Enum):
    """Upstream API groups, each with its own base path.

    The four WSF families expose a ``cacheflushdate`` probe; the WSDOT
    traffic families do not.
    """

    WSF_VESSELS = "wsf-vessels"
    WSF_TERMINALS = "wsf-terminals"
    WSF_SCHEDULE = "wsf-schedule"
    WSF_FARES = "wsf-fares"
    WSDOT_HIGHWAY_ALERTS = "wsdot-highway-alerts"
    WSDOT_BORDER_CROSSINGS = "wsdot-border-crossings"
    WSDOT_MOUNTAIN_PASS_CONDITIONS = "wsdot-mountain-pass-conditions"

    @property
    def base_path(self) -> str:
        """Host-relative base path of the family's REST service."""
        return _BASE_PATHS[self]


_BASE_PATHS: dict[ServiceFamily, str] = {
    ServiceFamily.WSF_VESSELS: "/ferries/api/vessels/rest",
    ServiceFamily.WSF_TERMINALS: "/ferries/api/terminals/rest",
    ServiceFamily.WSF_SCHEDULE: "/ferries/api/schedule/rest",
    ServiceFamily.WSF_FARES: "/ferries/api/fares/rest",
    ServiceFamily.WSDOT_HIGHWAY_ALERTS: (
        "/Traffic/api/HighwayAlerts/HighwayAlertsREST.svc"
    ),
    ServiceFamily.WSDOT_BORDER_CROSSINGS: (
        "/Traffic/api/BorderCrossings/BorderCrossingsREST.svc"
    ),
    ServiceFamily.WSDOT_MOUNTAIN_PASS_CONDITIONS: (
        "/Traffic/api/MountainPassConditions/MountainPassConditionsREST.svc"
    ),
}


@dataclass(frozen=True)
class EndpointDescriptor:
    """Immutable description of one upstream endpoint.

    Attributes:
        api: Service family the endpoint belongs to.
        function_name: Logical function name, e.g. ``getVesselLocations``.
        url_template: Host-relative template with ``{Name}`` placeholders.
        description: Human-readable description.
        refresh_policy: Nominal refresh policy.
        input_validator: Optional parameter validator.
        output_validator: Optional response validator.
        sample_params: Example parameters for docs, tests and the CLI.
        flush_family: Family whose flush probe covers this endpoint.
        is_flush_probe: Whether this endpoint is a flush-date probe.
        expects_list: Whether the endpoint returns list-shaped data.
    """

    api: ServiceFamily
    function_name: str
    url_template: str
    description: str
    refresh_policy: RefreshPolicy
    input_validator: Validator | None = None
    output_validator: Validator | None = None
    sample_params: Mapping[str, ParamValue] = field(default_factory=dict)
    flush_family: ServiceFamily | None = None
    is_flush_probe: bool = False
    expects_list: bool = False

    def __post_init__(self) -> None:
        unknown = set(self.sample_params) - set(self.placeholders)
        if unknown:
            msg = f"{self.id}: sample params {sorted(unknown)} not in template"
            raise ValueError(msg)
        object.__setattr__(
            self, "sample_params", MappingProxyType(dict(self.sample_params))
        )

    @property
    def id(self) -> str:
        """Endpoint identifier, ``<api>:<function_name>``."""
        return f"{self.api.value}:{self.function_name}"

    @property
    def placeholders(self) -> list[str]:
        """Parameter names accepted by the URL template."""
        return template_placeholders(self.url_template)

    def describe(self) -> dict[str, Any]:
        """Summarize the endpoint for listings.

        Returns:
            Dictionary with id, template, policy and parameter names.
        """
        return {
            "id": self.id,
            "function": self.function_name,
            "url": self.url_template,
            "policy": self.refresh_policy.value,
            "params": self.placeholders,
            "flush_family": self.flush_family.value if self.flush_family else None,
            "description": self.description,
        }
