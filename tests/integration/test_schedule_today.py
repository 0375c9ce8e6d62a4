"""End-to-end fetch of today's schedule through the public client."""

from datetime import UTC

import httpx
import pytest

from tests.helpers.fakes import TEST_TOKEN, FakeScriptHost, make_client
from tests.helpers.time import DOTNET_DATE, DOTNET_DATE_UTC
from wsdottie.apis.wsf_schedule import Schedule
from wsdottie.client import WsdotClient
from wsdottie.fetch.errors import ErrorCategory, PipelineError
from wsdottie.fetch.relay import ScriptRelayStrategy
from wsdottie.fetch.selector import StrategySelector
from wsdottie.fetch.transport import DirectHttpStrategy
from wsdottie.observability.metrics import PipelineMetrics
from wsdottie.settings.app import ApiConfig


SCHEDULE_TODAY = {
    "ScheduleID": 193,
    "ScheduleName": "Fall 2024",
    "ScheduleSeason": 3,
    "SchedulePDFUrl": "https://wsdot.com/ferries/schedule/pdf/193.pdf",
    "ScheduleStart": DOTNET_DATE,
    "ScheduleEnd": DOTNET_DATE,
    "AllRoutes": [9],
    "TerminalCombos": [
        {
            "DepartingTerminalID": 1,
            "DepartingTerminalName": "Anacortes",
            "ArrivingTerminalID": 10,
            "ArrivingTerminalName": "Friday Harbor",
            "SailingNotes": "",
            "Annotations": [],
            "Times": [
                {
                    "DepartingTime": DOTNET_DATE,
                    "ArrivingTime": None,
                    "LoadingRule": 3,
                    "VesselID": 38,
                    "VesselName": "Yakima",
                    "VesselHandicapAccessible": True,
                    "VesselPositionNum": 1,
                    "Routes": [9],
                    "AnnotationIndexes": [],
                }
            ],
            "AnnotationsIVR": [],
        }
    ],
}


class UpstreamStub:
    """Serves the schedule route and rejects requests without a credential."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.params.get("apiaccesscode") != TEST_TOKEN:
            return httpx.Response(401, json={"Message": "API access code invalid"})
        if request.url.path == "/ferries/api/schedule/rest/scheduletoday/9/false":
            return httpx.Response(200, json=SCHEDULE_TODAY)
        return httpx.Response(404)


class TestScheduleToday:
    """Integration tests for getScheduleTodayByRoute."""

    def setup_method(self) -> None:
        """Reset metrics before each test."""
        PipelineMetrics.reset()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_validated_schedule(self) -> None:
        """Test a validated fetch yields a typed schedule."""
        upstream = UpstreamStub()

        async with make_client(upstream) as client:
            schedule = await client.fetch_schedule_today_by_route(
                {"RouteID": 9, "OnlyRemainingTimes": False}, validate=True
            )

        assert isinstance(schedule, Schedule)
        assert schedule.schedule_id == 193
        assert schedule.schedule_pdf_url.endswith("193.pdf")
        assert schedule.schedule_start.astimezone(UTC) == DOTNET_DATE_UTC
        sailing = schedule.terminal_combos[0].times[0]
        assert sailing.vessel_name == "Yakima"
        assert sailing.departing_time == DOTNET_DATE_UTC
        assert sailing.arriving_time is None
        assert len(upstream.requests) == 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unvalidated_schedule(self) -> None:
        """Test a plain fetch yields snake_case data with native dates."""
        async with make_client(UpstreamStub()) as client:
            schedule = await client.fetch(
                "getScheduleTodayByRoute", {"RouteID": 9, "OnlyRemainingTimes": False}
            )

        combo = schedule["terminal_combos"][0]
        assert schedule["schedule_pdf_url"].endswith("193.pdf")
        assert combo["annotations_ivr"] == []
        assert combo["times"][0]["departing_time"] == DOTNET_DATE_UTC

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_wrong_credential(self) -> None:
        """Test an upstream rejection is an API error without the credential."""
        async with make_client(UpstreamStub(), token="wrong-token") as client:
            with pytest.raises(PipelineError) as exc_info:
                await client.fetch(
                    "getScheduleTodayByRoute",
                    {"RouteID": 9, "OnlyRemainingTimes": False},
                )

        error = exc_info.value
        assert error.category == ErrorCategory.API_ERROR
        assert error.status == 401
        assert error.url is not None
        assert "wrong-token" not in error.url

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_independent_clients_keep_their_credentials(self) -> None:
        """Test two clients in one process never share a credential."""
        upstream = UpstreamStub()
        params = {"RouteID": 9, "OnlyRemainingTimes": False}

        async with make_client(upstream) as good, make_client(
            upstream, token="other-token"
        ) as bad:
            await good.fetch("getScheduleTodayByRoute", params)
            with pytest.raises(PipelineError):
                await bad.fetch("getScheduleTodayByRoute", params)
            await good.fetch("getScheduleTodayByRoute", params)

        tokens = [r.url.params["apiaccesscode"] for r in upstream.requests]
        assert tokens == [TEST_TOKEN, "other-token", TEST_TOKEN]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_relay_matches_direct(self) -> None:
        """Test the relay transport yields the same validated result."""
        host = FakeScriptHost(respond=lambda _src: SCHEDULE_TODAY)
        selector = StrategySelector(
            DirectHttpStrategy(transport=httpx.MockTransport(UpstreamStub())),
            relay=ScriptRelayStrategy(host),
        )
        client = WsdotClient(ApiConfig(access_token=TEST_TOKEN), selector=selector)

        async with client:
            relayed = await client.fetch(
                "getScheduleTodayByRoute",
                {"RouteID": 9, "OnlyRemainingTimes": False},
                validate=True,
                transport_override=True,
            )
            direct = await client.fetch(
                "getScheduleTodayByRoute",
                {"RouteID": 9, "OnlyRemainingTimes": False},
                validate=True,
            )

        assert relayed == direct
        assert host.callbacks == {}
        assert PipelineMetrics.get_instance().strategy_total == {
            "relay": 1,
            "direct": 1,
        }
