"""
Block timestamps.

Blocks are stamped with whole seconds since the epoch. Inside a
TimestampScope the clock is replaced by a per-thread counter starting
at 0, which makes block hashes reproducible in tests.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from typing import Any

_local = threading.local()


def get_timestamp() -> int:
    """Get the timestamp for a new block."""
    counter = getattr(_local, "counter", None)
    if counter is None:
        return int(datetime.now(UTC).timestamp())
    _local.counter = counter + 1
    return counter


class TimestampScope:
    """Deterministic timestamps for the current thread.

    Example:
        with TimestampScope():
            chain.add_data("data 1")  # timestamp 0
            chain.add_data("data 2")  # timestamp 1
    """

    def __init__(self, start: int = 0) -> None:
        self.start = start
        self._previous: int | None = None

    def __enter__(self) -> TimestampScope:
        self._previous = getattr(_local, "counter", None)
        _local.counter = self.start
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        _local.counter = self._previous
