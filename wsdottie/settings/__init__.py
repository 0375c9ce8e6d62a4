"""Environment-backed settings."""

from wsdottie.settings.app import ApiConfig, ApiSettings, get_settings


__all__ = ["ApiConfig", "ApiSettings", "get_settings"]
