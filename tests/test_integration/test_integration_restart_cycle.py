from __future__ import annotations

import json

from billiards_queue.rotation.rotation_engine import RotationEngine
from billiards_queue.runtime.session import TableSession
from billiards_queue.runtime.state import JsonSnapshotStore


def _names(people) -> list[str]:
    return [p.name for p in people]


def test_evening_should_survive_restart(tmp_path) -> None:
    state_dir = tmp_path / "runtime"
    session = TableSession(RotationEngine(), JsonSnapshotStore(state_dir, default_cap=2))
    session.restore()
    assert session.status().cap == 2

    for name in ("Ana", "Bob", "Cy", "Dee"):
        session.join(name)
    session.start_match()
    first = session.record_result(1)
    assert first.capped_out is False
    assert _names(session.status().queue) == ["Dee", "Bob"]

    second = session.record_result(1)
    assert second.capped_out is True
    assert second.winner.name == "Ana"
    assert second.loser.name == "Cy"
    before_restart = session.status()
    assert _names(before_restart.queue) == ["Dee", "Bob", "Cy", "Ana"]
    assert before_restart.slot1 is None and before_restart.slot2 is None

    # Configured cap only seeds the first run; the persisted one wins afterwards.
    restarted = TableSession(RotationEngine(), JsonSnapshotStore(state_dir, default_cap=7))
    after_restart = restarted.restore()
    assert after_restart == before_restart
    assert restarted.engine.streaks == session.engine.streaks

    restarted.start_match()
    status = restarted.status()
    assert status.slot1.name == "Dee"
    assert status.slot2.name == "Bob"
    assert _names(status.queue) == ["Cy", "Ana"]


def test_state_file_should_hold_plain_json(tmp_path) -> None:
    store = JsonSnapshotStore(tmp_path)
    session = TableSession(RotationEngine(), store)
    ana = session.join("Ana")
    session.set_cap(4)

    payload = json.loads(store.state_path.read_text(encoding="utf-8"))
    assert payload["queue"] == [{"id": ana.id, "name": "Ana"}]
    assert payload["slot1"] is None
    assert payload["slot2"] is None
    assert payload["cap"] == 4
