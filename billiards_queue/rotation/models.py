"""Datamodels describing people, match outcomes and engine snapshots.

:class:`Person` is the identity record that moves between the waiting line and
the two table seats. :class:`Snapshot` is the full-state projection handed to
the storage adapter; it round-trips through ``to_dict``/``from_dict`` so the
JSON store never needs to know how the engine is laid out internally.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from billiards_queue.core.types import JSONLike

DEFAULT_WIN_CAP = 3
SEAT_NAME_PLACEHOLDER = "-"


@dataclass(frozen=True, slots=True)
class Person:
    """Participant in the rotation; two people are equal when their ids match."""

    id: str
    name: str = field(compare=False)

    @classmethod
    def create(cls, name: str) -> "Person":
        return cls(id=uuid.uuid4().hex, name=name.strip())

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, payload: JSONLike) -> "Person":
        return cls(id=str(payload["id"]), name=str(payload.get("name") or ""))


@dataclass(frozen=True, slots=True)
class MatchOutcome:
    """What happened at the table after one recorded result."""

    winner: Person
    loser: Person
    winner_streak: int
    capped_out: bool


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable copy of the queue, both seats, the streak map and the cap.

    ``slot1``/``slot2`` are ``None`` for an empty seat. ``streaks`` is a
    read-only copy of the mapping it was built from and may hold entries for ids
    that are no longer queued or seated.
    """

    queue: Tuple[Person, ...] = ()
    slot1: Person | None = None
    slot2: Person | None = None
    streaks: Mapping[str, int] = field(default_factory=dict, hash=False)
    cap: int = DEFAULT_WIN_CAP

    def __post_init__(self) -> None:
        object.__setattr__(self, "streaks", MappingProxyType(dict(self.streaks)))

    @classmethod
    def empty(cls, cap: int = DEFAULT_WIN_CAP) -> "Snapshot":
        return cls(cap=cap)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "queue": [person.to_dict() for person in self.queue],
            "slot1": self.slot1.to_dict() if self.slot1 else None,
            "slot2": self.slot2.to_dict() if self.slot2 else None,
            "streaks": dict(self.streaks),
            "cap": self.cap,
        }

    @classmethod
    def from_dict(cls, payload: JSONLike, *, default_cap: int = DEFAULT_WIN_CAP) -> "Snapshot":
        queue = tuple(Person.from_dict(entry) for entry in payload.get("queue") or [])
        streaks = {str(key): int(value) for key, value in (payload.get("streaks") or {}).items()}
        cap = int(payload.get("cap", default_cap))
        if cap < 1:
            raise ValueError(f"cap must be at least 1, got {cap}")
        return cls(
            queue=queue,
            slot1=_parse_seat(payload.get("slot1")),
            slot2=_parse_seat(payload.get("slot2")),
            streaks=streaks,
            cap=cap,
        )


def _parse_seat(value: Any) -> Person | None:
    if not value or not value.get("id"):
        return None
    return Person(id=str(value["id"]), name=value.get("name") or SEAT_NAME_PLACEHOLDER)


__all__ = ["DEFAULT_WIN_CAP", "MatchOutcome", "Person", "SEAT_NAME_PLACEHOLDER", "Snapshot"]
