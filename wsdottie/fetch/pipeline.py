"""Single request/response cycle for one endpoint."""

import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import structlog

from wsdottie.constants import COMPONENT_PIPELINE
from wsdottie.endpoints.models import EndpointDescriptor
from wsdottie.fetch.classifier import classify
from wsdottie.fetch.errors import EndpointConfigurationError
from wsdottie.fetch.normalize import ResponseNormalizer, normalize_key, rename_keys
from wsdottie.fetch.redact import redact_access_code
from wsdottie.fetch.selector import StrategySelector
from wsdottie.fetch.transport import DirectHttpStrategy
from wsdottie.fetch.url import ParamRecord, UrlBuilder
from wsdottie.observability.metrics import PipelineMetrics
from wsdottie.settings.app import ApiConfig


logger = structlog.get_logger()

FetchFunction = Callable[..., Awaitable[Any]]


class LogMode(str, Enum):
    """How much a single fetch logs."""

    NONE = "none"
    INFO = "info"
    DEBUG = "debug"


class FetchPipeline:
    """Builds, sends, parses and validates one request.

    Every failure leaves ``fetch`` as a ``PipelineError``. The pipeline
    never retries; retries belong to the caching layer.
    """

    def __init__(
        self,
        config: ApiConfig,
        selector: StrategySelector | None = None,
        normalizer: ResponseNormalizer | None = None,
        log_mode: LogMode = LogMode.DEBUG,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Credential and transport configuration.
            selector: Transport selector (default: direct HTTP with the
                configured timeout).
            normalizer: Response normalizer.
            log_mode: Default logging verbosity for fetches.
        """
        self._config = config
        self._urls = UrlBuilder(config)
        self._selector = selector or StrategySelector(
            DirectHttpStrategy(timeout=config.request_timeout_seconds),
            force_relay=config.force_relay,
        )
        self._normalizer = normalizer or ResponseNormalizer()
        self._log_mode = log_mode
        self._log = logger.bind(component=COMPONENT_PIPELINE)

    @property
    def url_builder(self) -> UrlBuilder:
        """The URL builder used by this pipeline."""
        return self._urls

    async def fetch(
        self,
        endpoint: EndpointDescriptor,
        params: ParamRecord | None = None,
        *,
        validate: bool = False,
        transport_override: bool | None = None,
        log_mode: LogMode | None = None,
    ) -> Any:
        """Fetch one endpoint.

        Args:
            endpoint: Endpoint to call.
            params: Parameter record for the URL template.
            validate: Validate input and output with the endpoint's
                schemas. Validated results are schema instances; otherwise
                the result is plain data with snake_case keys.
            transport_override: True forces the relay transport; None
                uses the configured default.
            log_mode: Logging verbosity for this call.

        Returns:
            Normalized (and optionally validated) response data.

        Raises:
            PipelineError: On any failure, already classified.
        """
        mode = log_mode or self._log_mode
        log = self._log.bind(endpoint=endpoint.id)
        metrics = PipelineMetrics.get_instance()
        start_ns = time.perf_counter_ns()
        url: str | None = None
        strategy_name = "none"

        try:
            output_validator = endpoint.output_validator if validate else None
            request_params: ParamRecord = dict(params or {})
            if validate:
                input_validator = endpoint.input_validator
                if input_validator is None or output_validator is None:
                    msg = f"Validation requested but {endpoint.id} lacks a schema"
                    raise EndpointConfigurationError(msg, endpoint=endpoint.id)
                request_params = input_validator.parse(request_params)

            url = self._urls.build(endpoint.url_template, request_params)
            strategy = self._selector.select(transport_override)
            strategy_name = strategy.name
            _emit(
                log,
                mode,
                "fetch_started",
                url=redact_access_code(url),
                strategy=strategy_name,
                validate=validate,
            )

            raw = await strategy.fetch(url, expects_list=endpoint.expects_list)
            data = self._normalizer.normalize(raw)

            # Exactly one key transform runs: the schema or rename_keys.
            if output_validator is not None:
                result = output_validator.parse(data)
            else:
                result = rename_keys(data)
        except Exception as e:
            error = classify(e, endpoint.id, url=url)
            metrics.record_request(endpoint.id, strategy_name)
            metrics.record_failure(error.category.value)
            if mode != LogMode.NONE:
                log.warning(
                    "fetch_failed",
                    url=error.url,
                    category=error.category.value,
                    status=error.status,
                    message=error.message,
                )
            if error is e:
                raise
            raise error from e

        duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        metrics.record_request(endpoint.id, strategy_name)
        metrics.record_duration(duration_ms)
        _emit(
            log,
            mode,
            "fetch_complete",
            strategy=strategy_name,
            duration_ms=round(duration_ms, 2),
        )
        return result

    async def aclose(self) -> None:
        """Release transport resources."""
        await self._selector.aclose()


def _emit(
    log: structlog.typing.FilteringBoundLogger,
    mode: LogMode,
    event: str,
    **kwargs: Any,
) -> None:
    if mode == LogMode.INFO:
        log.info(event, **kwargs)
    elif mode == LogMode.DEBUG:
        log.debug(event, **kwargs)


def fetch_function_name(endpoint: EndpointDescriptor) -> str:
    """Python name of an endpoint's fetch function.

    ``getVesselLocations`` becomes ``fetch_vessel_locations``.
    """
    name = normalize_key(endpoint.function_name)
    if name.startswith("get_"):
        return f"fetch_{name[4:]}"
    return name


def make_fetch_function(
    pipeline: FetchPipeline, endpoint: EndpointDescriptor
) -> FetchFunction:
    """Bind an endpoint to a pipeline as a standalone async function.

    Args:
        pipeline: Pipeline that performs the fetch.
        endpoint: Endpoint to bind.

    Returns:
        ``async fn(params=None, *, validate=False, transport_override=None,
        log_mode=None)``.
    """

    async def fetch_endpoint(
        params: ParamRecord | None = None,
        *,
        validate: bool = False,
        transport_override: bool | None = None,
        log_mode: LogMode | None = None,
    ) -> Any:
        return await pipeline.fetch(
            endpoint,
            params,
            validate=validate,
            transport_override=transport_override,
            log_mode=log_mode,
        )

    fetch_endpoint.__name__ = fetch_function_name(endpoint)
    fetch_endpoint.__qualname__ = fetch_endpoint.__name__
    fetch_endpoint.__doc__ = endpoint.description
    return fetch_endpoint
