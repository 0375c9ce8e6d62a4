"""Building blocks shared by the endpoint catalog modules."""

from datetime import datetime

from wsdottie.endpoints.models import EndpointDescriptor, ServiceFamily
from wsdottie.endpoints.policies import RefreshPolicy
from wsdottie.fetch.validation import InputModel, ParamsValidator, SchemaValidator


CACHE_FLUSH_FUNCTION = "getCacheFlushDate"


class NoParams(InputModel):
    """Parameters for endpoints that take none."""


NO_PARAMS = ParamsValidator(NoParams)


def flush_probe(
    family: ServiceFamily,
    output: SchemaValidator | None = None,
) -> EndpointDescriptor:
    """Declare a family's ``cacheflushdate`` probe endpoint.

    Args:
        family: Service family the probe reports on.
        output: Response validator; defaults to a bare nullable datetime.

    Returns:
        Probe endpoint descriptor.
    """
    return EndpointDescriptor(
        api=family,
        function_name=CACHE_FLUSH_FUNCTION,
        url_template=f"{family.base_path}/cacheflushdate",
        description=(
            f"Time of the last change to cacheable {family.value} data."
        ),
        refresh_policy=RefreshPolicy.FREQUENT,
        input_validator=NO_PARAMS,
        output_validator=output or SchemaValidator(datetime | None),
        is_flush_probe=True,
    )
