"""Unit tests for URL building."""

import re
from datetime import date, datetime

import pytest

from wsdottie.fetch.errors import InputValidationError, UrlParameterError
from wsdottie.fetch.url import (
    UrlBuilder,
    access_param_name,
    format_param_value,
    template_placeholders,
)
from wsdottie.settings.app import ApiConfig


@pytest.fixture
def builder() -> UrlBuilder:
    """Create a builder with a fixed credential."""
    return UrlBuilder(ApiConfig(access_token="secret"))


class TestFormatParamValue:
    """Tests for outgoing parameter formatting."""

    def test_date_uses_calendar_form(self) -> None:
        """Test that dates render as YYYY-MM-DD."""
        assert format_param_value(date(2024, 3, 5)) == "2024-03-05"

    def test_datetime_drops_time(self) -> None:
        """Test that datetimes render as their calendar date."""
        assert format_param_value(datetime(2024, 3, 5, 18, 30)) == "2024-03-05"

    def test_booleans_are_lowercase(self) -> None:
        """Test that booleans render as true/false."""
        assert format_param_value(True) == "true"
        assert format_param_value(False) == "false"

    def test_numbers_use_str(self) -> None:
        """Test that numbers render with str()."""
        assert format_param_value(9) == "9"
        assert format_param_value(1.5) == "1.5"


class TestAccessParamName:
    """Tests for credential parameter naming."""

    def test_ferries_paths_use_apiaccesscode(self) -> None:
        """Test WSF endpoints take apiaccesscode."""
        assert access_param_name("/ferries/api/vessels/rest/vesselbasics") == (
            "apiaccesscode"
        )

    def test_match_is_case_insensitive(self) -> None:
        """Test that the ferries marker matches any case."""
        assert access_param_name("/Ferries/API/x") == "apiaccesscode"

    def test_traffic_paths_use_accesscode(self) -> None:
        """Test WSDOT traffic endpoints take AccessCode."""
        path = "/Traffic/api/HighwayAlerts/HighwayAlertsREST.svc/GetAlertsAsJson"
        assert access_param_name(path) == "AccessCode"


class TestBuild:
    """Tests for UrlBuilder.build."""

    def test_substitutes_every_placeholder(self, builder: UrlBuilder) -> None:
        """Test that a complete params record leaves no placeholders."""
        template = "/ferries/api/schedule/rest/schedule/{TripDate}/{RouteID}"

        url = builder.build(template, {"TripDate": date(2024, 10, 17), "RouteID": 9})

        assert not re.search(r"\{\w+\}", url)
        assert url == (
            "https://www.wsdot.wa.gov/ferries/api/schedule/rest/schedule/"
            "2024-10-17/9?apiaccesscode=secret"
        )

    def test_schedule_today_path(self, builder: UrlBuilder) -> None:
        """Test the scheduleToday template with positional params."""
        url = builder.build(
            "/ferries/api/schedule/rest/scheduleToday/{RouteID}/{OnlyRemainingTimes}",
            {"RouteID": 9, "OnlyRemainingTimes": False},
        )

        assert url.endswith("/scheduleToday/9/false?apiaccesscode=secret")

    def test_unknown_key_is_rejected(self, builder: UrlBuilder) -> None:
        """Test that a typo in a params key fails instead of being ignored."""
        with pytest.raises(UrlParameterError) as exc_info:
            builder.build("/x/{RouteID}", {"RouteID": 1, "RoutID": 2})

        assert exc_info.value.key == "RoutID"
        assert isinstance(exc_info.value, InputValidationError)

    def test_params_for_template_without_placeholders(
        self, builder: UrlBuilder
    ) -> None:
        """Test that any param is unknown for a parameterless template."""
        with pytest.raises(UrlParameterError):
            builder.build("/ferries/api/vessels/rest/vesselbasics", {"VesselID": 1})

    def test_omitted_path_placeholder_is_removed(self, builder: UrlBuilder) -> None:
        """Test that an omitted trailing path parameter leaves no fragment."""
        url = builder.build("/x/{a}/{b}", {"a": 1})

        assert url == "https://www.wsdot.wa.gov/x/1?AccessCode=secret"
        assert "b=" not in url
        assert "&&" not in url

    def test_omitted_query_placeholder_is_removed(self, builder: UrlBuilder) -> None:
        """Test that an omitted query parameter drops its whole segment."""
        url = builder.build(
            "/Traffic/api/x.svc/Get?StateRoute={StateRoute}&Region={Region}&Km={Km}",
            {"Region": "NW"},
        )

        assert url == "https://www.wsdot.wa.gov/Traffic/api/x.svc/Get?Region=NW&AccessCode=secret"

    def test_none_values_count_as_omitted(self, builder: UrlBuilder) -> None:
        """Test that None values are stripped like missing keys."""
        url = builder.build("/x/{a}/{b}", {"a": 1, "b": None})

        assert url == "https://www.wsdot.wa.gov/x/1?AccessCode=secret"

    def test_values_are_percent_encoded(self, builder: UrlBuilder) -> None:
        """Test that reserved characters in values are escaped."""
        url = builder.build(
            "/Traffic/api/x.svc/Get?MapArea={MapArea}", {"MapArea": "Snoqualmie Pass"}
        )

        assert "MapArea=Snoqualmie%20Pass" in url

    def test_absolute_template_is_kept(self, builder: UrlBuilder) -> None:
        """Test that absolute templates are not re-rooted."""
        url = builder.build("https://example.test/ferries/api/x")

        assert url == "https://example.test/ferries/api/x?apiaccesscode=secret"

    def test_credential_comes_from_config(self) -> None:
        """Test that two builders do not share credentials."""
        first = UrlBuilder(ApiConfig(access_token="one"))
        second = UrlBuilder(ApiConfig(access_token="two"))

        assert first.build("/x").endswith("AccessCode=one")
        assert second.build("/x").endswith("AccessCode=two")


class TestTemplatePlaceholders:
    """Tests for placeholder discovery."""

    def test_lists_in_order(self) -> None:
        """Test placeholders are listed in order of appearance."""
        assert template_placeholders("/a/{B}/{C}?d={D}") == ["B", "C", "D"]
