"""Unit tests for environment settings and API configuration."""

import pytest
from pydantic import ValidationError

from wsdottie.constants import DEFAULT_TIMEOUT_SECONDS, WSDOT_HOST
from wsdottie.settings.app import ApiConfig, ApiSettings


class TestApiSettings:
    """Tests for ApiSettings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test defaults with no environment set."""
        for name in ("WSDOT_ACCESS_TOKEN", "FORCE_JSONP", "WSDOTTIE_TIMEOUT_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        settings = ApiSettings(_env_file=None)  # type: ignore[call-arg]

        assert settings.access_token is None
        assert settings.force_relay is False
        assert settings.request_timeout_seconds == DEFAULT_TIMEOUT_SECONDS

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test values are read from the documented variables."""
        monkeypatch.setenv("WSDOT_ACCESS_TOKEN", "env-token")
        monkeypatch.setenv("FORCE_JSONP", "true")
        monkeypatch.setenv("WSDOTTIE_TIMEOUT_SECONDS", "12.5")
        monkeypatch.setenv("WSDOTTIE_LOG_LEVEL", "debug")

        settings = ApiSettings(_env_file=None)  # type: ignore[call-arg]

        assert settings.access_token == "env-token"
        assert settings.force_relay is True
        assert settings.request_timeout_seconds == 12.5
        assert settings.log_level == "debug"

    def test_rejects_non_positive_timeout(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a zero timeout is rejected."""
        monkeypatch.setenv("WSDOTTIE_TIMEOUT_SECONDS", "0")

        with pytest.raises(ValidationError):
            ApiSettings(_env_file=None)  # type: ignore[call-arg]


class TestApiConfig:
    """Tests for ApiConfig."""

    def test_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the config carries the configured credential."""
        monkeypatch.setenv("WSDOT_ACCESS_TOKEN", "env-token")
        monkeypatch.setenv("FORCE_JSONP", "false")

        config = ApiConfig.from_settings(ApiSettings(_env_file=None))  # type: ignore[call-arg]

        assert config.access_token == "env-token"
        assert config.base_url == WSDOT_HOST
        assert config.force_relay is False

    def test_missing_token_becomes_empty(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test an unset credential becomes an empty string."""
        monkeypatch.delenv("WSDOT_ACCESS_TOKEN", raising=False)

        config = ApiConfig.from_settings(ApiSettings(_env_file=None))  # type: ignore[call-arg]

        assert config.access_token == ""

    def test_frozen(self) -> None:
        """Test configs cannot be mutated."""
        config = ApiConfig(access_token="a")

        with pytest.raises(ValidationError):
            config.access_token = "b"  # type: ignore[misc]

    def test_rejects_unknown_fields(self) -> None:
        """Test unknown fields are rejected."""
        with pytest.raises(ValidationError):
            ApiConfig(token="a")  # type: ignore[call-arg]
