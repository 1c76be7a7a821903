"""Tests for sq_common.id_generator and sq_common.datetime_utils."""

from datetime import UTC, datetime
from itertools import count

import pytest

from src.sq_common.datetime_utils import utc_now
from src.sq_common.id_generator import BOARD_ID_PREFIX, BoardIdGenerator, generate_board_id

_START_MS = BoardIdGenerator.EPOCH_MS + 1_000


class TestBoardIdGenerator:
    def test_unique_ids(self) -> None:
        gen = BoardIdGenerator(worker_id=1)
        ids = {gen.next_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_monotonically_increasing(self) -> None:
        gen = BoardIdGenerator(worker_id=1)
        prev = int(gen.next_id())
        for _ in range(100):
            current = int(gen.next_id())
            assert current > prev
            prev = current

    def test_worker_id_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            BoardIdGenerator(worker_id=1024)

    def test_workers_differ_at_same_instant(self) -> None:
        a = BoardIdGenerator(worker_id=1, clock=lambda: _START_MS)
        b = BoardIdGenerator(worker_id=2, clock=lambda: _START_MS)
        assert a.next_id() != b.next_id()

    def test_sequence_rollover_waits_for_next_ms(self) -> None:
        ticks = count()

        def clock() -> int:
            # frozen long enough for the 12-bit sequence to wrap
            return _START_MS if next(ticks) < 4097 else _START_MS + 1

        gen = BoardIdGenerator(clock=clock)
        ids = [int(gen.next_id()) for _ in range(4097)]
        assert ids == sorted(ids)
        assert len(set(ids)) == 4097

    def test_clock_step_back_stays_increasing(self) -> None:
        times = iter([_START_MS + 5, _START_MS + 2])
        gen = BoardIdGenerator(clock=lambda: next(times))
        assert int(gen.next_id()) < int(gen.next_id())


class TestGenerateBoardId:
    def test_prefix(self) -> None:
        assert generate_board_id().startswith(BOARD_ID_PREFIX)

    def test_distinct(self) -> None:
        assert generate_board_id() != generate_board_id()


class TestUtcHelpers:
    def test_utc_now_is_aware(self) -> None:
        now = utc_now()
        assert isinstance(now, datetime)
        assert now.tzinfo == UTC
