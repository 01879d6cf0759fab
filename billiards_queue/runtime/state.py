"""Snapshot persistence for the rotation engine.

The engine never touches storage itself: the session layer exports a
:class:`Snapshot` after each command and hands it to a :class:`SnapshotStore`.
The JSON implementation keeps the whole state in one file that is replaced
atomically, so a crash mid-write leaves the previous snapshot readable.
"""
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

from billiards_queue.core.errors import StorageUnavailableError
from billiards_queue.rotation.models import DEFAULT_WIN_CAP, Snapshot


class SnapshotStore(Protocol):
    """Storage adapter contract consumed by :class:`~billiards_queue.runtime.session.TableSession`."""

    def load(self) -> Snapshot:
        ...

    def save(self, snapshot: Snapshot) -> None:
        ...


class JsonSnapshotStore:
    """File-based store holding the latest engine snapshot."""

    def __init__(
        self,
        state_dir: Path,
        *,
        default_cap: int = DEFAULT_WIN_CAP,
        filename: str = "table_state.json",
    ) -> None:
        self.state_dir = state_dir
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot create state directory {state_dir}: {exc}") from exc
        self.state_path = self.state_dir / filename
        self.default_cap = default_cap

    def load(self) -> Snapshot:
        if not self.state_path.exists():
            return Snapshot.empty(self.default_cap)
        try:
            payload = json.loads(self.state_path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise StorageUnavailableError(f"Failed to read {self.state_path.name}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise StorageUnavailableError(f"Corrupted {self.state_path.name}: {exc}") from exc
        if not isinstance(payload, dict):
            raise StorageUnavailableError(f"{self.state_path.name} must contain a JSON object")
        try:
            return Snapshot.from_dict(payload, default_cap=self.default_cap)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise StorageUnavailableError(f"Invalid snapshot in {self.state_path.name}: {exc}") from exc

    def save(self, snapshot: Snapshot) -> None:
        data = json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False)
        tmp_path: str | None = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.state_dir, prefix=".table_state.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(data)
            os.replace(tmp_path, self.state_path)
            tmp_path = None
        except OSError as exc:
            raise StorageUnavailableError(f"Failed to write {self.state_path.name}: {exc}") from exc
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)


__all__ = ["JsonSnapshotStore", "SnapshotStore"]
