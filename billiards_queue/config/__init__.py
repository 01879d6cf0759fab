"""Configuration loading and validation package."""

from .loader import load_app_config, load_secrets_config, load_settings_config
from .models import (
    ApiCredentialsConfig,
    AppConfig,
    RotationConfig,
    SettingsConfig,
    StorageConfig,
    TelegramCredentials,
    TelemetryConfig,
)

__all__ = [
    "ApiCredentialsConfig",
    "AppConfig",
    "RotationConfig",
    "SettingsConfig",
    "StorageConfig",
    "TelegramCredentials",
    "TelemetryConfig",
    "load_app_config",
    "load_secrets_config",
    "load_settings_config",
]
