"""Operator-facing command layer around the rotation engine.

``TableSession`` is what front ends talk to. It applies one engine command at a
time under a lock and saves a fresh snapshot once the command succeeded. A
command that raises is not persisted. If the save itself fails, the engine is
rolled back to the snapshot taken before the command, so memory and disk agree.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Tuple, TypeVar

from billiards_queue.core.enums import TableSlot
from billiards_queue.core.errors import StorageUnavailableError, TelemetryError
from billiards_queue.rotation.models import MatchOutcome, Person
from billiards_queue.rotation.rotation_engine import RotationEngine
from billiards_queue.runtime.state import SnapshotStore
from billiards_queue.telemetry.events import TelemetryEvent
from billiards_queue.telemetry.storage import TelemetryStorage

LOGGER = logging.getLogger("billiards_queue.session")

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class TableStatus:
    """Read-only view rendered by front ends after every command."""

    queue: Tuple[Person, ...]
    slot1: Person | None
    slot2: Person | None
    slot1_streak: int
    slot2_streak: int
    cap: int


class TableSession:
    """Serialize operator commands and persist the engine after each mutation."""

    def __init__(
        self,
        engine: RotationEngine,
        store: SnapshotStore,
        *,
        lock: threading.Lock | None = None,
        telemetry: TelemetryStorage | None = None,
        logger: logging.Logger | None = None,
        now_fn: Callable[[], datetime] | None = None,
    ) -> None:
        self.engine = engine
        self._store = store
        self._lock = lock or threading.Lock()
        self._telemetry = telemetry
        self._logger = logger or LOGGER
        self._now = now_fn or (lambda: datetime.now(tz=timezone.utc))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def restore(self) -> TableStatus:
        """Load the persisted snapshot into the engine."""

        with self._lock:
            snapshot = self._store.load()
            self.engine.import_snapshot(snapshot)
        self._logger.info(
            "State restored",
            extra={"queue_length": len(snapshot.queue), "cap": snapshot.cap},
        )
        return self.status()

    def status(self) -> TableStatus:
        with self._lock:
            slot1, slot2 = self.engine.table
            return TableStatus(
                queue=self.engine.queue,
                slot1=slot1,
                slot2=slot2,
                slot1_streak=self.engine.streak_of(slot1.id) if slot1 else 0,
                slot2_streak=self.engine.streak_of(slot2.id) if slot2 else 0,
                cap=self.engine.cap,
            )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def join(self, name: str) -> Person:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValueError("Name must not be blank")
        person = Person.create(cleaned)
        self._apply("join", lambda: self.engine.join(person))
        return person

    def start_match(self) -> None:
        self._apply("start_match", self.engine.start_match)

    def record_result(self, winner_slot: TableSlot | int) -> MatchOutcome:
        outcome = self._apply("record_result", lambda: self.engine.record_result(winner_slot))
        self._record_match(outcome)
        return outcome

    def clear_table(self) -> None:
        self._apply("clear_table", self.engine.clear_table)

    def clear_queue(self) -> None:
        self._apply("clear_queue", self.engine.clear_queue)

    def clear_all(self) -> None:
        self._apply("clear_all", self.engine.clear_all)

    def remove_from_table(self, position: TableSlot | int) -> bool:
        return self._apply("remove_from_table", lambda: self.engine.remove_from_table(position))

    def remove_by_id(self, person_id: str) -> bool:
        cleaned = (person_id or "").strip()
        if not cleaned:
            raise ValueError("Id must not be blank")
        return self._apply("remove_by_id", lambda: self.engine.remove_by_id(cleaned))

    def remove_by_name(self, name: str) -> int:
        if not (name or "").strip():
            raise ValueError("Name must not be blank")
        return self._apply("remove_by_name", lambda: self.engine.remove_by_name(name))

    def remove_by_index(self, index: int) -> bool:
        return self._apply("remove_by_index", lambda: self.engine.remove_by_index(index))

    def remove_person(self, person: Person) -> bool:
        return self._apply("remove_person", lambda: self.engine.remove_person(person))

    def set_cap(self, value: int) -> int:
        def _set() -> int:
            self.engine.cap = value
            return self.engine.cap

        return self._apply("set_cap", _set)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _apply(self, command: str, action: Callable[[], T]) -> T:
        with self._lock:
            before = self.engine.export_snapshot()
            result = action()
            try:
                self._store.save(self.engine.export_snapshot())
            except StorageUnavailableError:
                self.engine.import_snapshot(before)
                raise
        self._logger.debug("Command applied", extra={"command": command})
        return result

    def _record_match(self, outcome: MatchOutcome) -> None:
        if self._telemetry is None:
            return
        event = TelemetryEvent.match_result(outcome, timestamp=self._now(), cap=self.engine.cap)
        try:
            self._telemetry.append_event(event)
        except TelemetryError as exc:
            self._logger.warning("Failed to log match result: %s", exc)


__all__ = ["TableSession", "TableStatus"]
