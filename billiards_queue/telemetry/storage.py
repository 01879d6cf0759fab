"""Helpers for persisting telemetry events."""
from __future__ import annotations

import json
from pathlib import Path

from billiards_queue.core.errors import TelemetryError
from billiards_queue.telemetry.events import TelemetryEvent


class TelemetryStorage:
    """Append structured telemetry events to daily JSON-lines files.

    The session layer records one ``match_result`` event per finished match so
    the operator keeps a history of who beat whom even though the engine only
    remembers current streaks.
    """

    def __init__(self, *, events_dir: Path) -> None:
        self._events_dir = events_dir
        self._events_dir.mkdir(parents=True, exist_ok=True)

    def append_event(self, event: TelemetryEvent) -> Path:
        """Append ``event`` as JSON to ``events_YYYYMMDD.jsonl``."""

        date_str = event.timestamp.strftime("%Y%m%d")
        path = self._events_dir / f"events_{date_str}.jsonl"
        try:
            with path.open("a", encoding="utf-8") as handle:
                json.dump(event.to_dict(), handle, ensure_ascii=False)
                handle.write("\n")
        except OSError as exc:  # pragma: no cover - filesystem errors are rare
            raise TelemetryError(f"Failed to write telemetry event: {exc}") from exc
        return path


def default_storage(base_dir: Path) -> TelemetryStorage:
    """Factory returning storage rooted under ``base_dir``."""

    return TelemetryStorage(events_dir=base_dir / "events")


__all__ = ["TelemetryStorage", "default_storage"]
