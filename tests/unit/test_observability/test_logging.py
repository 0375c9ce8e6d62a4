"""Unit tests for logging configuration helpers."""

import io
import json
import logging

import structlog

from wsdottie.observability.logging import (
    bind_request_context,
    configure_logging,
    level_from_name,
    redact_urls,
)


class TestLevelFromName:
    """Tests for level_from_name."""

    def test_known_names(self) -> None:
        """Test names map case-insensitively."""
        assert level_from_name("debug") == logging.DEBUG
        assert level_from_name("WARNING") == logging.WARNING

    def test_unknown_name_falls_back(self) -> None:
        """Test unknown names fall back to INFO."""
        assert level_from_name("chatty") == logging.INFO


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output_with_request_context(self) -> None:
        """Test JSON lines carry the bound request id."""
        output = io.StringIO()
        configure_logging(level=logging.INFO, output=output, json_format=True)
        bind_request_context("req-1")
        try:
            structlog.get_logger().info("fetch_complete", endpoint="a:b")
        finally:
            structlog.contextvars.clear_contextvars()
            structlog.reset_defaults()

        record = json.loads(output.getvalue().strip().splitlines()[-1])
        assert record["event"] == "fetch_complete"
        assert record["request_id"] == "req-1"
        assert record["level"] == "info"

    def test_url_fields_are_redacted(self) -> None:
        """Test a URL logged with its access code is masked in the output."""
        output = io.StringIO()
        configure_logging(level=logging.INFO, output=output, json_format=True)
        try:
            structlog.get_logger().warning(
                "fetch_failed",
                url="https://www.wsdot.wa.gov/ferries/api/vessels/rest/vesselbasics?apiaccesscode=secret",
            )
        finally:
            structlog.reset_defaults()

        line = output.getvalue().strip().splitlines()[-1]
        assert "secret" not in line
        assert json.loads(line)["url"].startswith("https://www.wsdot.wa.gov/")


class TestRedactUrls:
    """Tests for the redact_urls processor."""

    def test_non_string_url_untouched(self) -> None:
        """Test events without a string url pass through unchanged."""
        event = {"event": "x", "url": None}

        assert redact_urls(None, "info", event) == {"event": "x", "url": None}
