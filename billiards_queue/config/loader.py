"""YAML loaders for the config subsystem.

Each helper consumes one YAML file, validates it via models.py and returns
typed objects to the caller.
"""
from __future__ import annotations

from pathlib import Path
from typing import Mapping

import yaml

from .models import ApiCredentialsConfig, AppConfig, SettingsConfig

_DEFAULT_CONFIG_DIR = Path("config")


def _read_yaml(path: Path) -> Mapping:
    """Read a YAML file and return a mapping (empty dict if file is blank)."""

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"YAML root must be a mapping in {path}")
    return data


def load_settings_config(path: Path | str = _DEFAULT_CONFIG_DIR / "settings.yml") -> SettingsConfig:
    """Load settings.yml (rotation rules, storage and telemetry sections).

    Every section is optional; missing ones fall back to model defaults.
    """

    data = _read_yaml(Path(path))
    return SettingsConfig.model_validate(data)


def load_secrets_config(path: Path | str = _DEFAULT_CONFIG_DIR / "secrets.yaml") -> ApiCredentialsConfig:
    """Load secrets.yaml (Telegram credentials).

    Uses the schema from credentials.example.yml. In production setups the file
    is gitignored; for tests it can point to a fixture.
    """

    data = _read_yaml(Path(path))
    return ApiCredentialsConfig.model_validate(data)


def load_app_config(
    *,
    settings_path: Path | str = _DEFAULT_CONFIG_DIR / "settings.yml",
    secrets_path: Path | str = _DEFAULT_CONFIG_DIR / "secrets.yaml",
) -> AppConfig:
    """Load and aggregate settings and secrets into a single AppConfig."""

    settings = load_settings_config(settings_path)
    credentials = load_secrets_config(secrets_path)
    return AppConfig(settings=settings, credentials=credentials)
