"""Core primitives shared across all subsystems.

Enums, type aliases and error classes live here so higher level packages can
import them without introducing circular dependencies.
"""

from . import enums, errors, types

__all__ = ["enums", "errors", "types"]
