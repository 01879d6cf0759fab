from __future__ import annotations

import random

from billiards_queue.rotation.models import Person, Snapshot
from billiards_queue.rotation.rotation_engine import RotationEngine


def _ids(people) -> list[str]:
    return [p.id for p in people]


def _assert_no_duplicates(engine: RotationEngine) -> None:
    located = _ids(engine.queue) + [p.id for p in engine.table if p is not None]
    assert len(located) == len(set(located)), located


def _engine_with_streak_leader(engine_factory) -> RotationEngine:
    """A (1 win) vs C seated, D and B waiting."""

    engine = engine_factory("A", "B", "C", "D")
    engine.start_match()
    engine.record_result(1)
    assert _ids(engine.table) == ["a", "c"]
    assert _ids(engine.queue) == ["d", "b"]
    return engine


def test_clear_table_should_requeue_slot_one_then_slot_two(engine_factory) -> None:
    engine = engine_factory("A", "B", "C")
    engine.start_match()
    engine.record_result(1)
    engine.clear_table()
    assert engine.table == (None, None)
    assert _ids(engine.queue) == ["b", "a", "c"]
    assert engine.streak_of("a") == 0
    assert engine.streak_of("c") == 0


def test_clear_table_should_be_noop_on_empty_table(engine_factory) -> None:
    engine = engine_factory("A")
    engine.clear_table()
    assert _ids(engine.queue) == ["a"]
    assert engine.streaks == {}


def test_clear_queue_should_keep_only_seated_streaks(engine_factory) -> None:
    engine = _engine_with_streak_leader(engine_factory)
    engine.clear_queue()
    assert engine.queue == ()
    assert _ids(engine.table) == ["a", "c"]
    assert engine.streaks == {"a": 1}


def test_clear_all_should_empty_everything(engine_factory) -> None:
    engine = _engine_with_streak_leader(engine_factory)
    engine.clear_all()
    assert engine.queue == ()
    assert engine.table == (None, None)
    assert engine.streaks == {}


def test_remove_from_table_should_requeue_and_reset(engine_factory) -> None:
    engine = _engine_with_streak_leader(engine_factory)
    assert engine.remove_from_table(1) is True
    assert engine.slot1 is None
    assert engine.slot2.id == "c"
    assert _ids(engine.queue) == ["d", "b", "a"]
    assert engine.streak_of("a") == 0
    assert engine.remove_from_table(1) is False
    assert _ids(engine.queue) == ["d", "b", "a"]


def test_remove_by_id_should_drop_queue_entry_and_streak(engine_factory, person) -> None:
    engine = RotationEngine()
    engine.import_snapshot(
        Snapshot(queue=(person("A"), person("B"), person("C")), streaks={"b": 2, "a": 1})
    )
    assert engine.remove_by_id("b") is True
    assert _ids(engine.queue) == ["a", "c"]
    assert engine.streaks == {"a": 1}
    assert engine.remove_by_id("zz") is False
    assert _ids(engine.queue) == ["a", "c"]


def test_remove_by_id_should_ignore_table(engine_factory) -> None:
    engine = engine_factory("A", "B")
    engine.start_match()
    assert engine.remove_by_id("a") is False
    assert engine.slot1.id == "a"


def test_remove_by_name_should_ignore_case_and_whitespace(engine: RotationEngine) -> None:
    engine.join(Person(id="x", name=" Ana "))
    assert engine.remove_by_name("ana") == 1
    assert engine.queue == ()


def test_remove_by_name_should_remove_all_matches_but_not_seated(engine: RotationEngine) -> None:
    for pid, name in [("s1", "ana"), ("s2", "Bob"), ("q1", "Ana"), ("q2", "Carl"), ("q3", "ANA  ")]:
        engine.join(Person(id=pid, name=name))
    engine.start_match()
    assert engine.remove_by_name("  ana") == 2
    assert _ids(engine.queue) == ["q2"]
    assert engine.slot1.id == "s1"
    assert engine.remove_by_name("nobody") == 0


def test_remove_by_name_should_not_match_partial_names(engine: RotationEngine) -> None:
    engine.join(Person(id="x", name="Anabel"))
    assert engine.remove_by_name("Ana") == 0
    assert _ids(engine.queue) == ["x"]


def test_remove_by_index_should_respect_bounds(engine_factory) -> None:
    engine = engine_factory("A", "B")
    assert engine.remove_by_index(2) is False
    assert engine.remove_by_index(-1) is False
    assert _ids(engine.queue) == ["a", "b"]
    assert engine.remove_by_index(0) is True
    assert _ids(engine.queue) == ["b"]


def test_remove_by_index_should_preserve_order_of_rest(engine_factory) -> None:
    engine = engine_factory("A", "B", "C", "D")
    assert engine.remove_by_index(1) is True
    assert _ids(engine.queue) == ["a", "c", "d"]


def test_remove_person_should_take_seated_player_off_table(engine_factory) -> None:
    engine = _engine_with_streak_leader(engine_factory)
    assert engine.remove_person(Person(id="a", name="renamed")) is True
    assert engine.slot1 is None
    assert engine.slot2.id == "c"
    assert _ids(engine.queue) == ["d", "b", "a"]
    assert engine.streak_of("a") == 0


def test_remove_person_should_remove_queued_player_only(engine_factory, person) -> None:
    engine = _engine_with_streak_leader(engine_factory)
    assert engine.remove_person(person("D")) is True
    assert _ids(engine.table) == ["a", "c"]
    assert _ids(engine.queue) == ["b"]
    assert engine.remove_person(person("Z")) is False


def test_operations_should_never_duplicate_people(person) -> None:
    rng = random.Random(20240601)
    engine = RotationEngine(cap=2)
    counter = 0
    for _ in range(2_000):
        choice = rng.randrange(11)
        if choice <= 2:
            counter += 1
            engine.join(person(f"P{counter}"))
        elif choice == 3:
            if engine.has_match or len(engine.queue) >= 2:
                engine.start_match()
        elif choice == 4:
            if engine.has_match:
                engine.record_result(rng.choice([1, 2]))
        elif choice == 5:
            engine.remove_from_table(rng.choice([1, 2]))
        elif choice == 6:
            engine.remove_by_index(rng.randrange(-1, len(engine.queue) + 1))
        elif choice == 7 and engine.queue:
            engine.remove_person(rng.choice(engine.queue))
        elif choice == 8 and engine.table[0] is not None:
            engine.remove_person(engine.table[0])
        elif choice == 9 and rng.random() < 0.05:
            engine.clear_table()
        elif choice == 10 and rng.random() < 0.02:
            engine.clear_queue()
        _assert_no_duplicates(engine)
        assert all(wins < engine.cap for wins in engine.streaks.values())
