"""Typed configuration models for the queue manager.

The config subsystem relies on pydantic to validate the YAML files and to hand
strongly-typed objects to the runtime. ``settings.yml`` carries the table rules,
storage location and logging switches; ``secrets.yaml`` carries the Telegram
credentials.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator


class RotationConfig(BaseModel):
    """Table rules.

    ``win_cap`` only seeds the first run: once a snapshot exists, the cap stored
    in it (and changed through ``/set_cap``) takes precedence.
    """

    win_cap: PositiveInt = Field(3, description="Consecutive wins before a forced exit")


class StorageConfig(BaseModel):
    """Where the JSON snapshot lives, relative to the project root."""

    state_dir: str = Field("runtime", min_length=1)
    filename: str = Field("table_state.json", min_length=1)


class TelemetryConfig(BaseModel):
    """Logging/telemetry switches."""

    log_level: str = Field("INFO")
    logs_dir: str = Field("data/logs")

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


class SettingsConfig(BaseModel):
    """Top-level ``settings.yml`` contents."""

    rotation: RotationConfig = Field(default_factory=RotationConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)


class TelegramCredentials(BaseModel):
    """Telegram bot token and the single chat allowed to operate the queue."""

    bot_token: str = Field(..., min_length=10)
    chat_id: int


class ApiCredentialsConfig(BaseModel):
    """Secrets used by the Telegram integration (mirrors credentials.example.yml)."""

    telegram: TelegramCredentials

    model_config = ConfigDict(frozen=True)


class AppConfig(BaseModel):
    """Runtime config composed of settings and secrets."""

    settings: SettingsConfig
    credentials: ApiCredentialsConfig
