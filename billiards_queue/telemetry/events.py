"""Structured telemetry events."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict

from billiards_queue.rotation.models import MatchOutcome


@dataclass(slots=True)
class TelemetryEvent:
    """Generic event appended to ``events_YYYYMMDD.jsonl``."""

    timestamp: datetime
    event_type: str
    level: str = "INFO"
    payload: Dict[str, Any] = field(default_factory=dict)
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data

    @classmethod
    def match_result(cls, outcome: MatchOutcome, *, timestamp: datetime, cap: int) -> "TelemetryEvent":
        """Build the ``match_result`` event recorded after every finished match."""

        return cls(
            timestamp=timestamp,
            event_type="match_result",
            payload={
                "winner": outcome.winner.to_dict(),
                "loser": outcome.loser.to_dict(),
                "winner_streak": outcome.winner_streak,
                "capped_out": outcome.capped_out,
            },
            context={"cap": cap},
        )


__all__ = ["TelemetryEvent"]
