"""WSF Terminals: terminal details, space availability and wait times."""

from datetime import datetime

from pydantic import Field

from wsdottie.apis.shared import NO_PARAMS, flush_probe
from wsdottie.endpoints.models import EndpointDescriptor, ServiceFamily
from wsdottie.endpoints.policies import RefreshPolicy
from wsdottie.fetch.validation import (
    InputModel,
    ParamsValidator,
    SchemaValidator,
    UpstreamModel,
)


FAMILY = ServiceFamily.WSF_TERMINALS
BASE = FAMILY.base_path


class TerminalIdParams(InputModel):
    """Selects a single terminal."""

    terminal_id: int = Field(alias="TerminalID", ge=0)


class TerminalBasic(UpstreamModel):
    """Basic terminal record."""

    terminal_id: int
    terminal_subject_id: int | None = None
    region_id: int | None = None
    terminal_name: str | None = None
    terminal_abbrev: str | None = None
    sort_seq: int | None = None
    overhead_passenger_loading: bool | None = None
    elevator: bool | None = None
    wait_time: bool | None = None
    ada_accessible: bool | None = None
    restroom: bool | None = None


class SpaceForArrivalTerminal(UpstreamModel):
    """Remaining drive-up space for one destination."""

    terminal_id: int
    terminal_name: str | None = None
    vessel_id: int | None = None
    vessel_name: str | None = None
    display_reservable_space: bool | None = None
    reservable_space_count: int | None = None
    display_drive_up_space: bool | None = None
    drive_up_space_count: int | None = None
    max_space_count: int | None = None


class DepartingSpace(UpstreamModel):
    """Space availability for one upcoming departure."""

    departure: datetime
    is_cancelled: bool = False
    vessel_id: int | None = None
    vessel_name: str | None = None
    max_space_count: int | None = None
    space_for_arrival_terminals: list[SpaceForArrivalTerminal] = Field(
        default_factory=list
    )


class TerminalSailingSpace(UpstreamModel):
    """Upcoming departures and their space for a terminal."""

    terminal_id: int
    terminal_name: str | None = None
    departing_spaces: list[DepartingSpace] = Field(default_factory=list)


ENDPOINTS: tuple[EndpointDescriptor, ...] = (
    flush_probe(FAMILY),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getTerminalBasics",
        url_template=f"{BASE}/terminalbasics",
        description="Basic details for every terminal.",
        refresh_policy=RefreshPolicy.STATIC,
        input_validator=NO_PARAMS,
        output_validator=SchemaValidator(list[TerminalBasic]),
        flush_family=FAMILY,
        expects_list=True,
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getTerminalBasicsByTerminalId",
        url_template=f"{BASE}/terminalbasics/{{TerminalID}}",
        description="Basic details for a single terminal.",
        refresh_policy=RefreshPolicy.STATIC,
        input_validator=ParamsValidator(TerminalIdParams),
        output_validator=SchemaValidator(TerminalBasic),
        sample_params={"TerminalID": 7},
        flush_family=FAMILY,
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getTerminalSailingSpace",
        url_template=f"{BASE}/terminalsailingspace",
        description="Remaining vehicle space on upcoming departures.",
        refresh_policy=RefreshPolicy.FREQUENT,
        input_validator=NO_PARAMS,
        output_validator=SchemaValidator(list[TerminalSailingSpace]),
        flush_family=FAMILY,
        expects_list=True,
    ),
)
