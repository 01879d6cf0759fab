"""Table rotation package: people, snapshots and the rotation engine."""
from .models import DEFAULT_WIN_CAP, MatchOutcome, Person, Snapshot
from .rotation_engine import RotationEngine

__all__ = ["DEFAULT_WIN_CAP", "MatchOutcome", "Person", "RotationEngine", "Snapshot"]
