"""Table rotation state machine.

``RotationEngine`` owns the waiting line, the two table seats, the
consecutive-win counters and the win cap. Every public method is one complete
transaction: preconditions are checked before anything moves, so a failed call
leaves the state untouched. People are matched by ``id`` only; names are for
display and removal-by-name.

A person is in exactly one place at a time (queue, slot 1 or slot 2). Losing,
leaving the table or hitting the cap sends a player to the back of the queue and
resets their streak; only the explicit removal operations forget a person.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Tuple

from billiards_queue.core.enums import TableSlot
from billiards_queue.core.errors import InsufficientPlayersError, NoMatchInProgressError
from billiards_queue.core.types import StreakMap
from billiards_queue.rotation.models import DEFAULT_WIN_CAP, MatchOutcome, Person, Snapshot


class RotationEngine:
    """Queue + two-seat table with a consecutive-win cap."""

    def __init__(self, cap: int = DEFAULT_WIN_CAP, *, logger: logging.Logger | None = None) -> None:
        self._queue: Deque[Person] = deque()
        self._slot1: Person | None = None
        self._slot2: Person | None = None
        self._streaks: StreakMap = {}
        self._cap = _validate_cap(cap)
        self.logger = logger or logging.getLogger("billiards_queue.rotation")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def queue(self) -> Tuple[Person, ...]:
        return tuple(self._queue)

    @property
    def slot1(self) -> Person | None:
        return self._slot1

    @property
    def slot2(self) -> Person | None:
        return self._slot2

    @property
    def table(self) -> Tuple[Person | None, Person | None]:
        return (self._slot1, self._slot2)

    @property
    def streaks(self) -> StreakMap:
        return dict(self._streaks)

    @property
    def cap(self) -> int:
        return self._cap

    @cap.setter
    def cap(self, value: int) -> None:
        self._cap = _validate_cap(value)
        self.logger.info("Win cap updated", extra={"cap": self._cap})

    @property
    def has_match(self) -> bool:
        return self._slot1 is not None and self._slot2 is not None

    def streak_of(self, person_id: str) -> int:
        return self._streaks.get(person_id, 0)

    # ------------------------------------------------------------------
    # Match flow
    # ------------------------------------------------------------------
    def join(self, person: Person) -> None:
        """Append ``person`` to the tail of the queue."""

        if not person.id:
            raise ValueError("person.id must not be empty")
        self._queue.append(person)
        self.logger.debug("Joined queue", extra={"person_id": person.id, "queue_length": len(self._queue)})

    def start_match(self) -> None:
        """Seat people from the head of the queue until both slots are taken.

        Raises :class:`InsufficientPlayersError` without seating anyone when the
        queue cannot fill every empty slot. A full table is a no-op.
        """

        empty_slots = (self._slot1 is None) + (self._slot2 is None)
        if empty_slots > len(self._queue):
            raise InsufficientPlayersError(
                f"Not enough players to start a match: {empty_slots} empty seat(s), {len(self._queue)} waiting"
            )
        if self._slot1 is None:
            self._slot1 = self._queue.popleft()
        if self._slot2 is None:
            self._slot2 = self._queue.popleft()
        self.logger.info(
            "Match started",
            extra={"slot1": self._slot1.id, "slot2": self._slot2.id},
        )

    def record_result(self, winner_slot: TableSlot | int) -> MatchOutcome:
        """Apply a finished match won by the player in ``winner_slot``.

        The loser goes to the back of the queue with a reset streak. The winner
        keeps slot 1 and faces the new queue head, unless their streak reached the
        cap: then they follow the loser to the back of the queue (tail ends with
        ``[..., loser, winner]``), their streak resets and the table is cleared.
        """

        slot = TableSlot(winner_slot)
        if self._slot1 is None or self._slot2 is None:
            raise NoMatchInProgressError("No match in progress: both table slots must be occupied")

        if slot is TableSlot.ONE:
            winner, loser = self._slot1, self._slot2
        else:
            winner, loser = self._slot2, self._slot1

        self._streaks[winner.id] = self._streaks.get(winner.id, 0) + 1
        self._streaks[loser.id] = 0
        self._queue.append(loser)
        winner_streak = self._streaks[winner.id]

        if winner_streak >= self._cap:
            self._queue.append(winner)
            self._streaks[winner.id] = 0
            self._slot1 = None
            self._slot2 = None
            self.logger.info(
                "Win cap reached, table cleared",
                extra={"winner_id": winner.id, "loser_id": loser.id, "cap": self._cap},
            )
            return MatchOutcome(winner=winner, loser=loser, winner_streak=winner_streak, capped_out=True)

        self._slot1 = winner
        self._slot2 = self._queue.popleft() if self._queue else None
        self.logger.info(
            "Result recorded",
            extra={
                "winner_id": winner.id,
                "loser_id": loser.id,
                "winner_streak": winner_streak,
                "challenger_id": self._slot2.id if self._slot2 else None,
            },
        )
        return MatchOutcome(winner=winner, loser=loser, winner_streak=winner_streak, capped_out=False)

    # ------------------------------------------------------------------
    # Bulk clearing
    # ------------------------------------------------------------------
    def clear_table(self) -> None:
        """Send both seated players (slot 1 first) to the back of the queue."""

        for slot in TableSlot:
            self._unseat(slot)

    def clear_queue(self) -> None:
        """Drop everyone waiting; streaks survive only for seated players."""

        seated = {person.id for person in self.table if person is not None}
        self._streaks = {pid: wins for pid, wins in self._streaks.items() if pid in seated}
        dropped = len(self._queue)
        self._queue.clear()
        self.logger.info("Queue cleared", extra={"dropped": dropped})

    def clear_all(self) -> None:
        self.clear_table()
        self.clear_queue()
        self._streaks.clear()

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------
    def remove_from_table(self, position: TableSlot | int) -> bool:
        """Move the player at ``position`` to the back of the queue (no-op if empty)."""

        return self._unseat(TableSlot(position))

    def remove_by_id(self, person_id: str) -> bool:
        removed = self._remove_where(lambda person: person.id == person_id)
        return bool(removed)

    def remove_by_name(self, name: str) -> int:
        """Remove every queued person whose trimmed name matches, ignoring case."""

        target = name.strip().casefold()
        removed = self._remove_where(lambda person: person.name.strip().casefold() == target)
        return len(removed)

    def remove_by_index(self, index: int) -> bool:
        if index < 0 or index >= len(self._queue):
            return False
        person = self._queue[index]
        del self._queue[index]
        self._streaks.pop(person.id, None)
        self.logger.info("Removed from queue", extra={"person_id": person.id, "index": index})
        return True

    def remove_person(self, person: Person) -> bool:
        """Take ``person`` off the table if seated, otherwise out of the queue."""

        for slot in TableSlot:
            seated = self._seat(slot)
            if seated is not None and seated.id == person.id:
                return self._unseat(slot)
        return self.remove_by_id(person.id)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def export_snapshot(self) -> Snapshot:
        return Snapshot(
            queue=tuple(self._queue),
            slot1=self._slot1,
            slot2=self._slot2,
            streaks=dict(self._streaks),
            cap=self._cap,
        )

    def import_snapshot(self, snapshot: Snapshot) -> None:
        """Replace the whole state with ``snapshot`` as-is."""

        cap = _validate_cap(snapshot.cap)
        self._queue = deque(snapshot.queue)
        self._slot1 = snapshot.slot1
        self._slot2 = snapshot.slot2
        self._streaks = dict(snapshot.streaks)
        self._cap = cap
        self.logger.debug(
            "Snapshot imported",
            extra={"queue_length": len(self._queue), "cap": self._cap},
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _seat(self, slot: TableSlot) -> Person | None:
        return self._slot1 if slot is TableSlot.ONE else self._slot2

    def _set_seat(self, slot: TableSlot, person: Person | None) -> None:
        if slot is TableSlot.ONE:
            self._slot1 = person
        else:
            self._slot2 = person

    def _unseat(self, slot: TableSlot) -> bool:
        person = self._seat(slot)
        if person is None:
            return False
        self._streaks[person.id] = 0
        self._queue.append(person)
        self._set_seat(slot, None)
        self.logger.info("Left the table", extra={"person_id": person.id, "slot": int(slot)})
        return True

    def _remove_where(self, predicate: Callable[[Person], bool]) -> list[Person]:
        removed = [person for person in self._queue if predicate(person)]
        if not removed:
            return removed
        self._queue = deque(person for person in self._queue if not predicate(person))
        for person in removed:
            self._streaks.pop(person.id, None)
        self.logger.info(
            "Removed from queue",
            extra={"person_ids": [person.id for person in removed]},
        )
        return removed


def _validate_cap(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"win cap must be a positive integer, got {value!r}")
    return value


__all__ = ["RotationEngine"]
