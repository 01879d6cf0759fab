"""Error hierarchy shared by the queue manager subsystems.

Engine precondition failures derive from :class:`RotationError` so the
presentation layer can report them to the operator, while storage and config
problems surface as their own types. Submodules should raise the most specific
error available.
"""
from __future__ import annotations


class CoreError(Exception):
    """Base class for all custom exceptions in the application."""


class ConfigurationError(CoreError):
    """Raised when configuration files are missing or invalid."""


class RotationError(CoreError):
    """Raised when a table command is not allowed in the current state."""


class InsufficientPlayersError(RotationError):
    """Raised when a match cannot start because fewer than two people are available."""


class NoMatchInProgressError(RotationError):
    """Raised when a result is recorded while a table slot is empty."""


class StorageUnavailableError(CoreError):
    """Raised when the snapshot backend cannot be read or written."""


class TelemetryError(CoreError):
    """Raised for telemetry/logging persistence issues."""
