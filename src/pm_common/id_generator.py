"""Snowflake-style ID generator for trade and market IDs.

Generates monotonically increasing, unique string IDs within one process.
"""

import threading
import time


class SnowflakeIdGenerator:
    """Layout (63 bits used):
      - 41 bits: millisecond timestamp since a custom epoch
      - 10 bits: node_id (0-1023)
      - 12 bits: sequence within one millisecond
    """

    _EPOCH_MS = 1_700_000_000_000
    _NODE_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, node_id: int = 0) -> None:
        if not (0 <= node_id < (1 << self._NODE_BITS)):
            raise ValueError(f"node_id must be 0-{(1 << self._NODE_BITS) - 1}")
        self._node_id = node_id
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            ms = self._now_ms()
            if ms < self._last_ms:
                # clock stepped back; keep ids monotonic
                ms = self._last_ms
            if ms == self._last_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    ms = self._wait_until_after(ms)
            else:
                self._sequence = 0
            self._last_ms = ms
            return str(
                ((ms - self._EPOCH_MS) << (self._NODE_BITS + self._SEQUENCE_BITS))
                | (self._node_id << self._SEQUENCE_BITS)
                | self._sequence
            )

    @staticmethod
    def _now_ms() -> int:
        return time.time_ns() // 1_000_000

    def _wait_until_after(self, last_ms: int) -> int:
        ms = self._now_ms()
        while ms <= last_ms:
            ms = self._now_ms()
        return ms


_default_generator = SnowflakeIdGenerator()


def generate_id(prefix: str = "") -> str:
    """Next id from the process-wide generator, e.g. generate_id("trd_")."""
    return f"{prefix}{_default_generator.next_id()}"
