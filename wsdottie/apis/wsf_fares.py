"""WSF Fares: fare line items and fare terminals."""

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


FAMILY = ServiceFamily.WSF_FARES
BASE = FAMILY.base_path


class TripDateParams(InputModel):
    """Selects fares valid on a trip date."""

    trip_date: date = Field(alias="TripDate")


class FareLineItemsParams(InputModel):
    """Selects fares for a terminal pair."""

    trip_date: date = Field(alias="TripDate")
    departing_terminal_id: int = Field(alias="DepartingTerminalID", ge=0)
    arriving_terminal_id: int = Field(alias="ArrivingTerminalID", ge=0)
    round_trip: bool = Field(alias="RoundTrip")


class FaresValidDateRange(UpstreamModel):
    """Range of dates for which fare data is published."""

    date_from: datetime
    date_thru: datetime


class FaresTerminal(UpstreamModel):
    """A terminal that has fares on a trip date."""

    terminal_id: int
    description: str | None = None


class FareLineItem(UpstreamModel):
    """One purchasable fare."""

    fare_line_item_id: int
    fare_line_item: str | None = None
    category: str | None = None
    directional_fare: bool | None = None
    amount: float


ENDPOINTS: tuple[EndpointDescriptor, ...] = (
    flush_probe(FAMILY),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getFaresValidDateRange",
        url_template=f"{BASE}/validdaterange",
        description="Date range for which fare data is available.",
        refresh_policy=RefreshPolicy.STATIC,
        input_validator=NO_PARAMS,
        output_validator=SchemaValidator(FaresValidDateRange),
        flush_family=FAMILY,
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getFaresTerminals",
        url_template=f"{BASE}/terminals/{{TripDate}}",
        description="Terminals with fares on a trip date.",
        refresh_policy=RefreshPolicy.STATIC,
        input_validator=ParamsValidator(TripDateParams),
        output_validator=SchemaValidator(list[FaresTerminal]),
        sample_params={"TripDate": "2025-10-17"},
        flush_family=FAMILY,
        expects_list=True,
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getFareLineItems",
        url_template=(
            f"{BASE}/farelineitems/{{TripDate}}/{{DepartingTerminalID}}"
            "/{ArrivingTerminalID}/{RoundTrip}"
        ),
        description="Fares for travel between two terminals.",
        refresh_policy=RefreshPolicy.STATIC,
        input_validator=ParamsValidator(FareLineItemsParams),
        output_validator=SchemaValidator(list[FareLineItem]),
        sample_params={
            "TripDate": "2025-10-17",
            "DepartingTerminalID": 3,
            "ArrivingTerminalID": 7,
            "RoundTrip": False,
        },
        flush_family=FAMILY,
        expects_list=True,
    ),
)
