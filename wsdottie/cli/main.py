"""CLI commands for the wsdottie client."""

import asyncio
import json
import logging
import sys
import uuid
from collections.abc import Callable
from typing import Any

import click
import structlog
from pydantic_core import to_jsonable_python

from wsdottie import __version__
from wsdottie.apis import CATALOG, UnknownEndpointError
from wsdottie.client import WsdotClient
from wsdottie.constants import COMPONENT_CLI
from wsdottie.fetch.errors import ErrorRecord, PipelineError
from wsdottie.observability.logging import (
    bind_request_context,
    configure_logging,
    level_from_name,
)
from wsdottie.settings.app import get_settings


logger = structlog.get_logger()

ClientFactory = Callable[[], WsdotClient]


def _setup_logging(quiet: bool) -> None:
    settings = get_settings()
    level = logging.ERROR if quiet else level_from_name(settings.log_level)
    configure_logging(level=level, json_format=settings.json_logs)
    bind_request_context(str(uuid.uuid4()))


def _client_factory(ctx: click.Context) -> ClientFactory:
    obj = ctx.obj or {}
    factory: ClientFactory = obj.get("client_factory", WsdotClient)
    return factory


def _dump(data: Any, pretty: bool) -> str:
    return json.dumps(
        data,
        default=to_jsonable_python,
        indent=2 if pretty else None,
        ensure_ascii=False,
    )


def _parse_params(raw: str | None) -> dict[str, Any] | None:
    if raw is None:
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        click.echo(f"Error: PARAMS is not valid JSON ({e.msg})", err=True)
        sys.exit(2)
    if not isinstance(parsed, dict):
        click.echo("Error: PARAMS must be a JSON object", err=True)
        sys.exit(2)
    return parsed


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Washington State Ferries and WSDOT traveler information CLI."""


@cli.command("list")
@click.option("--api", "api", default=None, help="Only list one service family.")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text.")
def list_endpoints(api: str | None, as_json: bool) -> None:
    """List the endpoints this client knows about."""
    try:
        endpoints = CATALOG.for_api(api) if api else CATALOG.all()
    except ValueError:
        click.echo(f"Error: Unknown API '{api}'", err=True)
        sys.exit(2)

    if as_json:
        click.echo(_dump([e.describe() for e in endpoints], pretty=True))
        return

    for endpoint in endpoints:
        params = ", ".join(endpoint.placeholders) or "-"
        click.echo(f"{endpoint.id:<55} {endpoint.refresh_policy.value:<9} {params}")


@cli.command()
@click.argument("function")
@click.argument("params", required=False)
@click.option("--validate", is_flag=True, help="Validate input and output schemas.")
@click.option("--pretty/--compact", default=True, help="Indent JSON output.")
@click.option("--quiet", is_flag=True, help="Only log errors.")
@click.option("--force-relay", is_flag=True, help="Use the script relay transport.")
@click.pass_context
def fetch(
    ctx: click.Context,
    function: str,
    params: str | None,
    validate: bool,
    pretty: bool,
    quiet: bool,
    force_relay: bool,
) -> None:
    """Fetch FUNCTION with optional JSON PARAMS.

    Without PARAMS the endpoint's sample parameters are used.
    """
    _setup_logging(quiet)
    log = logger.bind(component=COMPONENT_CLI, command="fetch", function=function)

    try:
        endpoint = CATALOG.get(function)
    except UnknownEndpointError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    parsed = _parse_params(params)
    request_params = dict(endpoint.sample_params) if parsed is None else parsed

    async def _run() -> Any:
        async with _client_factory(ctx)() as client:
            return await client.pipeline.fetch(
                endpoint,
                request_params,
                validate=validate,
                transport_override=True if force_relay else None,
            )

    try:
        data = asyncio.run(_run())
    except PipelineError as e:
        log.error("cli_fetch_failed", category=e.category.value)
        click.echo(_dump(ErrorRecord.from_error(e).model_dump(), pretty), err=True)
        sys.exit(1)

    click.echo(_dump(data, pretty))


@cli.command("watch-flush")
@click.argument("family")
@click.option(
    "--interval",
    type=float,
    default=300.0,
    show_default=True,
    help="Seconds between probes.",
)
@click.option("--count", type=int, default=1, show_default=True, help="Probes to run.")
@click.pass_context
def watch_flush(ctx: click.Context, family: str, interval: float, count: int) -> None:
    """Poll a service family's cache flush date COUNT times."""
    _setup_logging(quiet=False)

    async def _run() -> None:
        async with _client_factory(ctx)() as client:
            monitor = client.monitor
            for index in range(count):
                if index > 0:
                    await asyncio.sleep(interval)
                changed = await monitor.poll_once(family)
                value = monitor.state(family).value
                record = {"family": family, "value": value, "changed": changed}
                click.echo(_dump(record, pretty=False))

    try:
        asyncio.run(_run())
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)


if __name__ == "__main__":
    cli()
