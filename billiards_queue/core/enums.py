"""Enumerations shared across subsystems."""
from __future__ import annotations

from enum import IntEnum


class TableSlot(IntEnum):
    """The two seats at the table, numbered the way operators call them."""

    ONE = 1
    TWO = 2
