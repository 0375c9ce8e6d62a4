"""Endpoint catalog for the WSF and WSDOT APIs."""

from collections.abc import Iterable, Iterator

from wsdottie.apis import (
    wsdot_border_crossings,
    wsdot_highway_alerts,
    wsdot_mountain_pass_conditions,
    wsf_fares,
    wsf_schedule,
    wsf_terminals,
    wsf_vessels,
)
from wsdottie.endpoints.models import EndpointDescriptor, ServiceFamily


class UnknownEndpointError(LookupError):
    """Raised when an endpoint id or function name is not in the catalog."""


class Catalog:
    """Read-only registry of endpoint descriptors."""

    def __init__(self, endpoints: Iterable[EndpointDescriptor]) -> None:
        """Index the endpoints by id.

        Args:
            endpoints: Endpoint descriptors.

        Raises:
            ValueError: If two endpoints share an id, or a family declares
                more than one flush probe.
        """
        self._by_id: dict[str, EndpointDescriptor] = {}
        self._probes: dict[ServiceFamily, EndpointDescriptor] = {}
        for endpoint in endpoints:
            if endpoint.id in self._by_id:
                msg = f"Duplicate endpoint id: {endpoint.id}"
                raise ValueError(msg)
            self._by_id[endpoint.id] = endpoint
            if endpoint.is_flush_probe:
                if endpoint.api in self._probes:
                    msg = f"Family {endpoint.api.value} has more than one flush probe"
                    raise ValueError(msg)
                self._probes[endpoint.api] = endpoint

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[EndpointDescriptor]:
        return iter(self._by_id.values())

    def all(self) -> list[EndpointDescriptor]:
        """All endpoints in declaration order."""
        return list(self._by_id.values())

    def get(self, name: str) -> EndpointDescriptor:
        """Look up an endpoint by id or function name.

        Function names shared by several families (``getCacheFlushDate``)
        must be looked up by id.

        Args:
            name: ``<api>:<function>`` id or bare function name.

        Returns:
            The endpoint descriptor.

        Raises:
            UnknownEndpointError: If no single endpoint matches.
        """
        if name in self._by_id:
            return self._by_id[name]
        matches = [e for e in self._by_id.values() if e.function_name == name]
        if len(matches) == 1:
            return matches[0]
        if matches:
            ids = ", ".join(e.id for e in matches)
            msg = f"Ambiguous function name {name!r}; use one of: {ids}"
            raise UnknownEndpointError(msg)
        msg = f"Unknown endpoint: {name}"
        raise UnknownEndpointError(msg)

    def for_api(self, api: ServiceFamily | str) -> list[EndpointDescriptor]:
        """Endpoints belonging to one service family."""
        family = ServiceFamily(api)
        return [e for e in self._by_id.values() if e.api == family]

    def probe_for(self, family: ServiceFamily | str) -> EndpointDescriptor | None:
        """The flush probe of a family, if it has one."""
        return self._probes.get(ServiceFamily(family))

    def families_with_probes(self) -> list[ServiceFamily]:
        """Families that expose a flush probe."""
        return list(self._probes)


ENDPOINTS: tuple[EndpointDescriptor, ...] = (
    *wsf_vessels.ENDPOINTS,
    *wsf_terminals.ENDPOINTS,
    *wsf_schedule.ENDPOINTS,
    *wsf_fares.ENDPOINTS,
    *wsdot_highway_alerts.ENDPOINTS,
    *wsdot_border_crossings.ENDPOINTS,
    *wsdot_mountain_pass_conditions.ENDPOINTS,
)

CATALOG = Catalog(ENDPOINTS)


__all__ = ["CATALOG", "ENDPOINTS", "Catalog", "UnknownEndpointError"]
