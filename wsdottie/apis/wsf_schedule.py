"""WSF Schedule: sailing schedules, routes and service alerts."""

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


FAMILY = ServiceFamily.WSF_SCHEDULE
BASE = FAMILY.base_path


class ScheduleTodayParams(InputModel):
    """Selects today's schedule for a route."""

    route_id: int = Field(alias="RouteID", ge=0)
    only_remaining_times: bool = Field(alias="OnlyRemainingTimes")


class ScheduleByRouteParams(InputModel):
    """Selects a route's schedule on a trip date."""

    trip_date: date = Field(alias="TripDate")
    route_id: int = Field(alias="RouteID", ge=0)


class TripDateParams(InputModel):
    """Selects data valid on a trip date."""

    trip_date: date = Field(alias="TripDate")


class CacheFlushDate(UpstreamModel):
    """Schedule probe payload, which wraps the timestamp in an object."""

    cache_flush_date: datetime | None = None


class ScheduleTime(UpstreamModel):
    """One departure within a terminal combination."""

    departing_time: datetime
    arriving_time: datetime | None = None
    loading_rule: int | None = None
    vessel_id: int | None = None
    vessel_name: str | None = None
    vessel_handicap_accessible: bool | None = None
    vessel_position_num: int | None = None
    routes: list[int] = Field(default_factory=list)
    annotation_indexes: list[int] = Field(default_factory=list)


class TerminalCombo(UpstreamModel):
    """Departures between one pair of terminals."""

    departing_terminal_id: int
    departing_terminal_name: str | None = None
    arriving_terminal_id: int
    arriving_terminal_name: str | None = None
    sailing_notes: str | None = None
    annotations: list[str] = Field(default_factory=list)
    times: list[ScheduleTime] = Field(default_factory=list)
    annotations_ivr: list[str] = Field(default_factory=list)


class Schedule(UpstreamModel):
    """A sailing schedule for one or more routes."""

    schedule_id: int
    schedule_name: str | None = None
    schedule_season: int | None = None
    schedule_pdf_url: str | None = None
    schedule_start: datetime
    schedule_end: datetime
    all_routes: list[int] = Field(default_factory=list)
    terminal_combos: list[TerminalCombo] = Field(default_factory=list)


class Route(UpstreamModel):
    """A route active on a trip date."""

    route_id: int
    route_abbrev: str | None = None
    description: str | None = None
    region_id: int | None = None


class ValidDateRange(UpstreamModel):
    """Range of dates for which schedule data is published."""

    date_from: datetime
    date_thru: datetime


ENDPOINTS: tuple[EndpointDescriptor, ...] = (
    flush_probe(FAMILY, output=SchemaValidator(CacheFlushDate)),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getScheduleTodayByRoute",
        url_template=f"{BASE}/scheduletoday/{{RouteID}}/{{OnlyRemainingTimes}}",
        description="Today's sailings for a route.",
        refresh_policy=RefreshPolicy.STATIC,
        input_validator=ParamsValidator(ScheduleTodayParams),
        output_validator=SchemaValidator(Schedule),
        sample_params={"RouteID": 9, "OnlyRemainingTimes": False},
        flush_family=FAMILY,
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getScheduleByTripDateAndRouteId",
        url_template=f"{BASE}/schedule/{{TripDate}}/{{RouteID}}",
        description="Sailings for a route on a trip date.",
        refresh_policy=RefreshPolicy.STATIC,
        input_validator=ParamsValidator(ScheduleByRouteParams),
        output_validator=SchemaValidator(Schedule),
        sample_params={"TripDate": "2025-10-17", "RouteID": 9},
        flush_family=FAMILY,
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getRoutesByTripDate",
        url_template=f"{BASE}/routes/{{TripDate}}",
        description="Routes in service on a trip date.",
        refresh_policy=RefreshPolicy.STATIC,
        input_validator=ParamsValidator(TripDateParams),
        output_validator=SchemaValidator(list[Route]),
        sample_params={"TripDate": "2025-10-17"},
        flush_family=FAMILY,
        expects_list=True,
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getScheduleValidDateRange",
        url_template=f"{BASE}/validdaterange",
        description="Date range for which schedule data is available.",
        refresh_policy=RefreshPolicy.STATIC,
        input_validator=NO_PARAMS,
        output_validator=SchemaValidator(ValidDateRange),
        flush_family=FAMILY,
    ),
)
