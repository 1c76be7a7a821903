"""Board id generation.

Board ids are 'BRD-' followed by a decimal snowflake, so ids sort by creation
time within one process. worker_id keeps ids from several API processes apart.
"""

import threading
import time
from collections.abc import Callable

BOARD_ID_PREFIX = "BRD-"


def _wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


class BoardIdGenerator:
    """Snowflake layout: 41 bits ms since epoch, 10 bits worker, 12 bits sequence."""

    EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
    WORKER_BITS = 10
    SEQUENCE_BITS = 12

    def __init__(self, worker_id: int = 0, clock: Callable[[], int] = _wall_clock_ms) -> None:
        if not 0 <= worker_id < (1 << self.WORKER_BITS):
            raise ValueError(f"worker_id must be in [0, {(1 << self.WORKER_BITS) - 1}]")
        self._worker_id = worker_id
        self._clock = clock
        self._last_ms = -1
        self._sequence = 0
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            now_ms = self._clock()
            if now_ms > self._last_ms:
                self._sequence = 0
            else:
                # same millisecond, or the clock stepped back
                now_ms = self._last_ms
                self._sequence = (self._sequence + 1) % (1 << self.SEQUENCE_BITS)
                if self._sequence == 0:
                    now_ms = self._spin_past(self._last_ms)
            self._last_ms = now_ms
            return str(self._pack(now_ms, self._sequence))

    def _pack(self, ms: int, sequence: int) -> int:
        shifted_ms = (ms - self.EPOCH_MS) << (self.WORKER_BITS + self.SEQUENCE_BITS)
        return shifted_ms | (self._worker_id << self.SEQUENCE_BITS) | sequence

    def _spin_past(self, last_ms: int) -> int:
        now_ms = self._clock()
        while now_ms <= last_ms:
            now_ms = self._clock()
        return now_ms


_board_ids = BoardIdGenerator()


def generate_board_id() -> str:
    return f"{BOARD_ID_PREFIX}{_board_ids.next_id()}"
