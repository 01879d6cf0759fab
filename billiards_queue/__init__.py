"""Top-level package for the billiards table queue manager.

The subpackages mirror the runtime layers: ``rotation`` owns the queue/table
state machine, ``runtime`` persists snapshots and serializes operator commands,
``interfaces`` exposes those commands over Telegram, and ``config``/``telemetry``
carry the shared plumbing.
"""

__all__: list[str] = []
