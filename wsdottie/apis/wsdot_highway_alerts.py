"""WSDOT Highway Alerts: construction, incidents and closures."""

from datetime import datetime

from pydantic import Field

from wsdottie.apis.shared import NO_PARAMS
from wsdottie.endpoints.models import EndpointDescriptor, ServiceFamily
from wsdottie.endpoints.policies import RefreshPolicy
from wsdottie.fetch.validation import (
    InputModel,
    ParamsValidator,
    SchemaValidator,
    UpstreamModel,
)


FAMILY = ServiceFamily.WSDOT_HIGHWAY_ALERTS
BASE = FAMILY.base_path


class AlertIdParams(InputModel):
    """Selects a single alert."""

    alert_id: int = Field(alias="AlertID", ge=0)


class MapAreaParams(InputModel):
    """Selects alerts in a map area."""

    map_area: str = Field(alias="MapArea", min_length=1)


class RoadwayLocation(UpstreamModel):
    """Where an alert starts or ends."""

    description: str | None = None
    direction: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    mile_post: float | None = None
    road_name: str | None = None


class HighwayAlert(UpstreamModel):
    """A highway alert."""

    alert_id: int
    county: str | None = None
    event_category: str | None = None
    event_status: str | None = None
    headline_description: str | None = None
    extended_description: str | None = None
    priority: str | None = None
    region: str | None = None
    start_roadway_location: RoadwayLocation | None = None
    end_roadway_location: RoadwayLocation | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    last_updated_time: datetime | None = None


ENDPOINTS: tuple[EndpointDescriptor, ...] = (
    EndpointDescriptor(
        api=FAMILY,
        function_name="getHighwayAlerts",
        url_template=f"{BASE}/GetAlertsAsJson",
        description="All active highway alerts.",
        refresh_policy=RefreshPolicy.FREQUENT,
        input_validator=NO_PARAMS,
        output_validator=SchemaValidator(list[HighwayAlert]),
        expects_list=True,
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getHighwayAlertById",
        url_template=f"{BASE}/GetAlertAsJson?AlertID={{AlertID}}",
        description="A single highway alert.",
        refresh_policy=RefreshPolicy.FREQUENT,
        input_validator=ParamsValidator(AlertIdParams),
        output_validator=SchemaValidator(HighwayAlert),
        sample_params={"AlertID": 468632},
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getHighwayAlertsByMapArea",
        url_template=f"{BASE}/GetAlertsByMapAreaAsJson?MapArea={{MapArea}}",
        description="Highway alerts within a map area.",
        refresh_policy=RefreshPolicy.FREQUENT,
        input_validator=ParamsValidator(MapAreaParams),
        output_validator=SchemaValidator(list[HighwayAlert]),
        sample_params={"MapArea": "Seattle"},
        expects_list=True,
    ),
)
