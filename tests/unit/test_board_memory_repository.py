"""Tests for InMemoryBoardRepository — snapshots and compare-and-swap claims."""

from datetime import timedelta
from typing import Any

import pytest

from src.sq_board.domain.factory import create_board
from src.sq_board.domain.lifecycle import lock_board, open_board
from src.sq_board.domain.models import Board, Cell, CellOwner
from src.sq_board.infrastructure.memory import InMemoryBoardRepository
from src.sq_common.datetime_utils import utc_now
from src.sq_common.enums import BoardShape, BoardStatus


def _make_board(**kwargs: Any) -> Board:
    defaults: dict[str, Any] = {
        "name": "Memory Board",
        "price_per_cell": 100,
        "home_team": "KC",
        "away_team": "PHI",
    }
    defaults.update(kwargs)
    return create_board(BoardShape.FIVE_BY_FIVE, **defaults)


def _owned(row: int, col: int, user_id: str) -> Cell:
    return Cell(row=row, col=col, owner=CellOwner(user_id, user_id.title(), utc_now()))


@pytest.fixture
def repo() -> InMemoryBoardRepository:
    return InMemoryBoardRepository()


class TestInsertAndGet:
    @pytest.mark.asyncio
    async def test_round_trip_is_a_copy(self, repo: InMemoryBoardRepository) -> None:
        board = _make_board()
        await repo.insert(board)
        loaded = await repo.get_by_id(board.id)
        assert loaded is not None
        assert loaded is not board
        assert loaded.row_headers == board.row_headers
        loaded.name = "mutated"
        again = await repo.get_by_id(board.id)
        assert again is not None and again.name == "Memory Board"

    @pytest.mark.asyncio
    async def test_missing(self, repo: InMemoryBoardRepository) -> None:
        assert await repo.get_by_id("BRD-missing") is None

    @pytest.mark.asyncio
    async def test_duplicate_insert(self, repo: InMemoryBoardRepository) -> None:
        board = _make_board()
        await repo.insert(board)
        with pytest.raises(ValueError):
            await repo.insert(board)


class TestClaimCell:
    @pytest.mark.asyncio
    async def test_first_claim_wins(self, repo: InMemoryBoardRepository) -> None:
        board = _make_board()
        open_board(board)
        await repo.insert(board)
        assert await repo.claim_cell(board.id, _owned(1, 1, "alice"))
        assert not await repo.claim_cell(board.id, _owned(1, 1, "bob"))
        stored = await repo.get_by_id(board.id)
        assert stored is not None
        assert stored.cell(1, 1).owner.user_id == "alice"  # type: ignore[union-attr]

    @pytest.mark.asyncio
    async def test_requires_open_board(self, repo: InMemoryBoardRepository) -> None:
        board = _make_board()
        await repo.insert(board)
        assert not await repo.claim_cell(board.id, _owned(0, 0, "alice"))

    @pytest.mark.asyncio
    async def test_unknown_board_or_cell(self, repo: InMemoryBoardRepository) -> None:
        board = _make_board()
        open_board(board)
        await repo.insert(board)
        assert not await repo.claim_cell("BRD-nope", _owned(0, 0, "alice"))
        assert not await repo.claim_cell(board.id, _owned(9, 9, "alice"))
        assert not await repo.claim_cell(board.id, Cell(row=0, col=0))


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_never_overwrites_owners(self, repo: InMemoryBoardRepository) -> None:
        board = _make_board()
        open_board(board)
        await repo.insert(board)
        stale = await repo.get_by_id(board.id)
        assert stale is not None
        await repo.claim_cell(board.id, _owned(2, 2, "alice"))

        lock_board(stale)
        await repo.update(stale)

        stored = await repo.get_by_id(board.id)
        assert stored is not None
        assert stored.status == BoardStatus.LOCKED
        assert stored.cell(2, 2).owner is not None

    @pytest.mark.asyncio
    async def test_update_unknown(self, repo: InMemoryBoardRepository) -> None:
        with pytest.raises(KeyError):
            await repo.update(_make_board())


class TestListBoards:
    @pytest.mark.asyncio
    async def test_newest_first_with_filter_and_limit(self, repo: InMemoryBoardRepository) -> None:
        base = utc_now()
        boards = []
        for i in range(3):
            b = _make_board(name=f"Board {i}")
            b.created_at = base + timedelta(seconds=i)
            boards.append(b)
        open_board(boards[1])
        for b in boards:
            await repo.insert(b)

        listed = await repo.list_boards(None, 10)
        assert [b.name for b in listed] == ["Board 2", "Board 1", "Board 0"]
        assert [b.name for b in await repo.list_boards("OPEN", 10)] == ["Board 1"]
        assert len(await repo.list_boards(None, 2)) == 2
