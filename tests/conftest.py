from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from billiards_queue.rotation.models import Person
from billiards_queue.rotation.rotation_engine import RotationEngine
from billiards_queue.runtime.session import TableSession
from billiards_queue.runtime.state import JsonSnapshotStore


@pytest.fixture
def person() -> Callable[[str], Person]:
    def _factory(name: str, person_id: str | None = None) -> Person:
        return Person(id=name.strip().lower() if person_id is None else person_id, name=name)

    return _factory


@pytest.fixture
def engine() -> RotationEngine:
    return RotationEngine()


@pytest.fixture
def engine_factory(person) -> Callable[..., RotationEngine]:
    """Build an engine with ``names`` joined in order."""

    def _factory(*names: str, cap: int = 3) -> RotationEngine:
        built = RotationEngine(cap)
        for name in names:
            built.join(person(name))
        return built

    return _factory


@pytest.fixture
def state_dir(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("runtime")


@pytest.fixture
def store(state_dir: Path) -> JsonSnapshotStore:
    return JsonSnapshotStore(state_dir)


@pytest.fixture
def session(engine: RotationEngine, store: JsonSnapshotStore) -> TableSession:
    return TableSession(engine, store)

