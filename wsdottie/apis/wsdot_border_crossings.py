"""WSDOT Border Crossings: wait times at Canadian border crossings."""

from datetime import datetime

from wsdottie.apis.shared import NO_PARAMS
from wsdottie.endpoints.models import EndpointDescriptor, ServiceFamily
from wsdottie.endpoints.policies import RefreshPolicy
from wsdottie.fetch.validation import SchemaValidator, UpstreamModel


FAMILY = ServiceFamily.WSDOT_BORDER_CROSSINGS


class BorderCrossingLocation(UpstreamModel):
    description: str | None = None
    direction: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    mile_post: float | None = None
    road_name: str | None = None


class BorderCrossing(UpstreamModel):
    """Wait time at one crossing lane."""

    crossing_name: str | None = None
    border_crossing_location: BorderCrossingLocation | None = None
    time: datetime
    wait_time: int


ENDPOINTS: tuple[EndpointDescriptor, ...] = (
    EndpointDescriptor(
        api=FAMILY,
        function_name="getBorderCrossings",
        url_template=f"{FAMILY.base_path}/GetBorderCrossingsAsJson",
        description="Current wait times for every border crossing lane.",
        refresh_policy=RefreshPolicy.FREQUENT,
        input_validator=NO_PARAMS,
        output_validator=SchemaValidator(list[BorderCrossing]),
        expects_list=True,
    ),
)
