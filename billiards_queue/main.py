from __future__ import annotations

import os
import sys
from pathlib import Path

from billiards_queue.config.loader import load_app_config
from billiards_queue.config.models import AppConfig
from billiards_queue.core.errors import ConfigurationError
from billiards_queue.interfaces import TelegramBotInterface
from billiards_queue.rotation.rotation_engine import RotationEngine
from billiards_queue.runtime.session import TableSession
from billiards_queue.runtime.state import JsonSnapshotStore
from billiards_queue.telemetry import configure_logging
from billiards_queue.telemetry.storage import default_storage


def main() -> None:
    project_root = Path(os.environ.get("APP_ROOT") or Path.cwd()).resolve()
    config_dir = project_root / "config"
    config = _load_config(config_dir)

    telemetry_root = (project_root / config.settings.telemetry.logs_dir).resolve()
    logger = configure_logging(log_dir=telemetry_root / "logs", level=config.settings.telemetry.log_level)
    logger.info("Bootstrapping queue manager", extra={"project_root": str(project_root)})

    storage = config.settings.storage
    store = JsonSnapshotStore(
        project_root / storage.state_dir,
        default_cap=config.settings.rotation.win_cap,
        filename=storage.filename,
    )
    engine = RotationEngine(config.settings.rotation.win_cap, logger=logger.getChild("rotation"))
    session = TableSession(
        engine,
        store,
        telemetry=default_storage(telemetry_root),
        logger=logger.getChild("session"),
    )
    status = session.restore()
    logger.info(
        "Table state loaded",
        extra={"queue_length": len(status.queue), "cap": status.cap},
    )

    telegram_bot = TelegramBotInterface(
        token=config.credentials.telegram.bot_token,
        chat_id=config.credentials.telegram.chat_id,
        session=session,
        logger=logger.getChild("telegram"),
    )
    try:
        telegram_bot.run()
    finally:
        logger.info("Shutdown complete")


def _load_config(config_dir: Path) -> AppConfig:
    try:
        return load_app_config(
            settings_path=config_dir / "settings.yml",
            secrets_path=_resolve_secrets_path(config_dir),
        )
    except (FileNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration in {config_dir}: {exc}") from exc


def _resolve_secrets_path(config_dir: Path) -> Path:
    env_path = os.environ.get("APP_SECRETS_PATH")
    if env_path:
        return Path(env_path)
    candidate = config_dir / "secrets.yaml"
    if candidate.exists():
        return candidate
    fallback = config_dir / "credentials.example.yml"
    print(f"[bootstrap] secrets.yaml not found, using {fallback}")
    return fallback


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - top-level safety
        print(f"Fatal error: {exc}", file=sys.stderr)
        raise
