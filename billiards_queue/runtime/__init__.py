"""Runtime helpers: snapshot persistence and the operator command session."""

from .session import TableSession, TableStatus
from .state import JsonSnapshotStore, SnapshotStore

__all__ = ["JsonSnapshotStore", "SnapshotStore", "TableSession", "TableStatus"]
