"""WSF Vessels: vessel details and real-time positions."""

from datetime import date, datetime

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


FAMILY = ServiceFamily.WSF_VESSELS
BASE = FAMILY.base_path


class VesselIdParams(InputModel):
    """Selects a single vessel."""

    vessel_id: int = Field(alias="VesselID", ge=0)


class VesselHistoryParams(InputModel):
    """Selects a vessel's history over a date range."""

    vessel_name: str = Field(alias="VesselName", min_length=1)
    date_start: date = Field(alias="DateStart")
    date_end: date = Field(alias="DateEnd")


class VesselClass(UpstreamModel):
    """Vessel class summary."""

    class_id: int
    class_subject_id: int | None = None
    class_name: str | None = None
    sort_seq: int | None = None


class VesselBasic(UpstreamModel):
    """Basic vessel record."""

    vessel_id: int
    vessel_subject_id: int | None = None
    vessel_name: str | None = None
    vessel_abbrev: str | None = None
    class_: VesselClass | None = Field(default=None, alias="class")
    status: int | None = None
    owned_by_wsf: bool | None = None


class VesselLocation(UpstreamModel):
    """Real-time vessel position."""

    vessel_id: int
    vessel_name: str | None = None
    mmsi: int | None = None
    departing_terminal_id: int | None = None
    departing_terminal_name: str | None = None
    arriving_terminal_id: int | None = None
    arriving_terminal_name: str | None = None
    latitude: float
    longitude: float
    speed: float | None = None
    heading: float | None = None
    in_service: bool
    at_dock: bool
    left_dock: datetime | None = None
    eta: datetime | None = None
    scheduled_departure: datetime | None = None
    op_route_abbrev: list[str] = Field(default_factory=list)
    time_stamp: datetime


class VesselHistory(UpstreamModel):
    """One historical sailing."""

    vessel_id: int
    vessel: str | None = None
    departing: str | None = None
    arriving: str | None = None
    scheduled_depart: datetime | None = None
    act_depart: datetime | None = None
    est_arrival: datetime | None = None
    date_: datetime | None = Field(default=None, alias="date")


ENDPOINTS: tuple[EndpointDescriptor, ...] = (
    flush_probe(FAMILY),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getVesselBasics",
        url_template=f"{BASE}/vesselbasics",
        description="Basic details for every vessel in the fleet.",
        refresh_policy=RefreshPolicy.STATIC,
        input_validator=NO_PARAMS,
        output_validator=SchemaValidator(list[VesselBasic]),
        flush_family=FAMILY,
        expects_list=True,
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getVesselBasicsByVesselId",
        url_template=f"{BASE}/vesselbasics/{{VesselID}}",
        description="Basic details for a single vessel.",
        refresh_policy=RefreshPolicy.STATIC,
        input_validator=ParamsValidator(VesselIdParams),
        output_validator=SchemaValidator(VesselBasic),
        sample_params={"VesselID": 74},
        flush_family=FAMILY,
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getVesselLocations",
        url_template=f"{BASE}/vessellocations",
        description="Current position and heading of every active vessel.",
        refresh_policy=RefreshPolicy.REALTIME,
        input_validator=NO_PARAMS,
        output_validator=SchemaValidator(list[VesselLocation]),
        flush_family=FAMILY,
        expects_list=True,
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getVesselLocationsByVesselId",
        url_template=f"{BASE}/vessellocations/{{VesselID}}",
        description="Current position of a single vessel.",
        refresh_policy=RefreshPolicy.REALTIME,
        input_validator=ParamsValidator(VesselIdParams),
        output_validator=SchemaValidator(VesselLocation),
        sample_params={"VesselID": 18},
        flush_family=FAMILY,
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getVesselHistoryByVesselAndDateRange",
        url_template=f"{BASE}/vesselhistory/{{VesselName}}/{{DateStart}}/{{DateEnd}}",
        description="Historical sailings of a vessel between two dates.",
        refresh_policy=RefreshPolicy.STATIC,
        input_validator=ParamsValidator(VesselHistoryParams),
        output_validator=SchemaValidator(list[VesselHistory]),
        sample_params={
            "VesselName": "Tacoma",
            "DateStart": "2025-09-01",
            "DateEnd": "2025-09-07",
        },
        flush_family=FAMILY,
        expects_list=True,
    ),
)
