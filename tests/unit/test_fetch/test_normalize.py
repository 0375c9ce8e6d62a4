"""Unit tests for response normalization."""

from datetime import date, datetime

import pytest

from tests.helpers.time import DOTNET_DATE, DOTNET_DATE_UTC
from wsdottie.fetch.errors import InvalidResponseError
from wsdottie.fetch.normalize import (
    ResponseNormalizer,
    normalize_key,
    rename_keys,
    transform_dates,
)


class TestTransformDates:
    """Tests for recursive date conversion."""

    def test_nested_structures(self) -> None:
        """Test conversion inside nested objects and arrays."""
        value = {
            "ScheduleStart": DOTNET_DATE,
            "TerminalCombos": [
                {"Times": [{"DepartingTime": DOTNET_DATE, "VesselName": "Tacoma"}]}
            ],
        }

        result = transform_dates(value)

        assert result["ScheduleStart"] == DOTNET_DATE_UTC
        departing = result["TerminalCombos"][0]["Times"][0]
        assert isinstance(departing["DepartingTime"], datetime)
        assert departing["VesselName"] == "Tacoma"

    def test_other_scalars_untouched(self) -> None:
        """Test numbers, booleans and None pass through."""
        value = [1, 2.5, True, None, "text"]

        assert transform_dates(value) == value

    def test_does_not_mutate_input(self) -> None:
        """Test that a new structure is returned."""
        value = {"FromDate": "01/02/2024"}

        result = transform_dates(value)

        assert value == {"FromDate": "01/02/2024"}
        assert result == {"FromDate": date(2024, 1, 2)}


class TestRenameKeys:
    """Tests for PascalCase to snake_case key renaming."""

    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("ScheduleID", "schedule_id"),
            ("VesselName", "vessel_name"),
            ("SchedulePDFUrl", "schedule_pdf_url"),
            ("ADAAccessible", "ada_accessible"),
            ("OwnedByWSF", "owned_by_wsf"),
            ("already_snake", "already_snake"),
        ],
    )
    def test_normalize_key(self, key: str, expected: str) -> None:
        """Test individual key conversions."""
        assert normalize_key(key) == expected

    def test_recursive(self) -> None:
        """Test renaming reaches nested objects inside arrays."""
        value = [{"VesselID": 1, "Class": {"ClassName": "Jumbo Mark II"}}]

        assert rename_keys(value) == [
            {"vessel_id": 1, "class": {"class_name": "Jumbo Mark II"}}
        ]

    def test_values_are_not_renamed(self) -> None:
        """Test that string values keep their casing."""
        assert rename_keys({"RouteAbbrev": "SEA-BI"}) == {"route_abbrev": "SEA-BI"}


class TestResponseNormalizer:
    """Tests for ResponseNormalizer.normalize."""

    def test_parses_and_converts_dates(self) -> None:
        """Test JSON parsing followed by date conversion."""
        raw = f'{{"ScheduleID": 1, "ScheduleStart": "{DOTNET_DATE}"}}'

        result = ResponseNormalizer().normalize(raw)

        assert result == {"ScheduleID": 1, "ScheduleStart": DOTNET_DATE_UTC}

    def test_keys_are_not_renamed(self) -> None:
        """Test that normalize leaves key casing to a later step."""
        result = ResponseNormalizer().normalize('{"VesselID": 2}')

        assert "VesselID" in result

    def test_empty_array_is_valid(self) -> None:
        """Test that an empty result set is data, not an error."""
        assert ResponseNormalizer().normalize("[]") == []

    @pytest.mark.parametrize("raw", ["", "{not json", "<html></html>"])
    def test_malformed_body_raises(self, raw: str) -> None:
        """Test malformed bodies raise InvalidResponseError."""
        with pytest.raises(InvalidResponseError, match="Invalid response"):
            ResponseNormalizer().normalize(raw)
