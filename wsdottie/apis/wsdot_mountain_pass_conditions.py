"""WSDOT Mountain Pass Conditions: pass weather and travel restrictions."""

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


FAMILY = ServiceFamily.WSDOT_MOUNTAIN_PASS_CONDITIONS
BASE = FAMILY.base_path


class PassConditionParams(InputModel):
    """Selects a single pass."""

    pass_condition_id: int = Field(alias="PassConditionID", ge=0)


class TravelRestriction(UpstreamModel):
    travel_direction: str | None = None
    restriction_text: str | None = None


class MountainPassCondition(UpstreamModel):
    """Conditions at one mountain pass."""

    mountain_pass_id: int
    mountain_pass_name: str | None = None
    date_updated: datetime | None = None
    elevation_in_feet: int | None = None
    latitude: float | None = None
    longitude: float | None = None
    road_condition: str | None = None
    weather_condition: str | None = None
    temperature_in_fahrenheit: int | None = None
    travel_advisory_active: bool = False
    restriction_one: TravelRestriction | None = None
    restriction_two: TravelRestriction | None = None


ENDPOINTS: tuple[EndpointDescriptor, ...] = (
    EndpointDescriptor(
        api=FAMILY,
        function_name="getMountainPassConditions",
        url_template=f"{BASE}/GetMountainPassConditionsAsJson",
        description="Current conditions at every monitored pass.",
        refresh_policy=RefreshPolicy.MODERATE,
        input_validator=NO_PARAMS,
        output_validator=SchemaValidator(list[MountainPassCondition]),
        expects_list=True,
    ),
    EndpointDescriptor(
        api=FAMILY,
        function_name="getMountainPassConditionById",
        # The upstream path really is spelled "AsJon".
        url_template=(
            f"{BASE}/GetMountainPassConditionAsJon?PassConditionID={{PassConditionID}}"
        ),
        description="Current conditions at a single pass.",
        refresh_policy=RefreshPolicy.MODERATE,
        input_validator=ParamsValidator(PassConditionParams),
        output_validator=SchemaValidator(MountainPassCondition),
        sample_params={"PassConditionID": 11},
    ),
)
