"""Unit tests for BoardRepository using MagicMock AsyncSession."""

import json
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.sq_board.domain.factory import create_board
from src.sq_board.domain.models import Board, Cell, CellOwner, PeriodResult
from src.sq_board.infrastructure.persistence import BoardRepository
from src.sq_common.enums import BoardShape, BoardStatus, Sport

_NOW = datetime(2026, 2, 8, 18, 0, tzinfo=UTC)


def _make_board_row(**kwargs: Any) -> MagicMock:
    """Build a mock boards row; JSONB columns arrive as str from asyncpg."""
    row = MagicMock()
    row.id = kwargs.get("id", "BRD-1")
    row.name = kwargs.get("name", "Super Bowl")
    row.shape = kwargs.get("shape", "FIVE_BY_FIVE")
    row.status = kwargs.get("status", "OPEN")
    row.price_per_cell = 100
    row.home_team = "KC"
    row.away_team = "PHI"
    row.sport = "nfl"
    row.payout_schedule = json.dumps([1600, 2400, 1600, 3200])
    row.row_headers = json.dumps([[0, 1], [2, 3], [4, 5], [6, 7], [8, 9]])
    row.col_headers = json.dumps([[9, 8], [7, 6], [5, 4], [3, 2], [1, 0]])
    row.band_headers = "[]"
    row.shuffle_seed = "seed"
    row.external_game_id = None
    row.starts_at = None
    row.created_by = "user-1"
    row.max_cells_per_claimant = None
    row.period_results = kwargs.get("period_results", "{}")
    row.opened_at = _NOW
    row.locked_at = None
    row.completed_at = None
    row.cancelled_at = None
    row.created_at = _NOW
    row.updated_at = _NOW
    return row


def _make_cell_row(r: int, c: int, owner: str | None = None, **kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.row_idx = r
    row.col_idx = c
    row.owner_user_id = owner
    row.owner_display_name = owner.title() if owner else None
    row.claimed_at = _NOW if owner else None
    row.is_winner = kwargs.get("is_winner", False)
    row.winning_periods = kwargs.get("winning_periods", [])
    return row


def _make_board() -> Board:
    return create_board(
        BoardShape.FIVE_BY_FIVE,
        name="Super Bowl",
        price_per_cell=100,
        home_team="KC",
        away_team="PHI",
    )


def _result(fetchone: Any = None, fetchall: Any = None, rowcount: int = 0) -> MagicMock:
    r = MagicMock()
    r.fetchone.return_value = fetchone
    r.fetchall.return_value = fetchall or []
    r.rowcount = rowcount
    return r


@pytest.fixture
def db() -> MagicMock:
    return MagicMock()


class TestGetById:
    @pytest.mark.asyncio
    async def test_maps_board_and_cells(self, db: MagicMock) -> None:
        cells = [_make_cell_row(r, c) for r in range(5) for c in range(5)]
        cells[7] = _make_cell_row(1, 2, "alice", is_winner=True, winning_periods="[3]")
        results = json.dumps({
            "3": {
                "home_score": 24, "away_score": 17, "matched": [[1, 2]],
                "winners": [[1, 2]], "resolved_at": _NOW.isoformat(),
            }
        })
        db.execute = AsyncMock(
            side_effect=[
                _result(fetchone=_make_board_row(period_results=results)),
                _result(fetchall=cells),
            ]
        )

        board = await BoardRepository().get_by_id("BRD-1", db)

        assert board is not None
        assert board.shape == BoardShape.FIVE_BY_FIVE
        assert board.status == BoardStatus.OPEN
        assert board.sport == Sport.NFL
        assert board.row_headers[0] == (0, 1)
        assert board.total_cells == 25
        cell = board.cell(1, 2)
        assert cell.owner is not None and cell.owner.display_name == "Alice"
        assert cell.is_winner and cell.winning_periods == [3]
        assert board.period_results[3].winners == [(1, 2)]
        assert board.period_results[3].resolved_at == _NOW

    @pytest.mark.asyncio
    async def test_returns_none_when_not_found(self, db: MagicMock) -> None:
        db.execute = AsyncMock(return_value=_result(fetchone=None))
        assert await BoardRepository().get_by_id("BRD-missing", db) is None
        assert db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_for_update_locks_row(self, db: MagicMock) -> None:
        db.execute = AsyncMock(return_value=_result(fetchone=None))
        await BoardRepository().get_by_id("BRD-1", db, for_update=True)
        sql = str(db.execute.call_args_list[0].args[0])
        assert "FOR UPDATE" in sql


class TestInsert:
    @pytest.mark.asyncio
    async def test_inserts_board_and_every_cell(self, db: MagicMock) -> None:
        db.execute = AsyncMock()
        board = _make_board()

        await BoardRepository().insert(board, db)

        assert db.execute.await_count == 2
        board_params = db.execute.call_args_list[0].args[1]
        assert board_params["id"] == board.id
        assert board_params["status"] == "DRAFT"
        assert json.loads(board_params["payout_schedule"]) == [1600, 2400, 1600, 3200]
        assert len(json.loads(board_params["row_headers"])) == 5
        cell_params = db.execute.call_args_list[1].args[1]
        assert len(cell_params) == 25


class TestUpdate:
    @pytest.mark.asyncio
    async def test_writes_board_and_only_winner_cells(self, db: MagicMock) -> None:
        db.execute = AsyncMock()
        board = _make_board()
        board.status = BoardStatus.LOCKED
        cell = board.cell(1, 2)
        cell.owner = CellOwner("alice", "Alice", _NOW)
        cell.is_winner = True
        cell.winning_periods = [0]
        board.period_results[0] = PeriodResult(0, 1, 3, [(1, 2)], [(1, 2)], _NOW)

        await BoardRepository().update(board, db)

        assert db.execute.await_count == 2
        sql, params = db.execute.call_args_list[0].args
        assert "owner_user_id" not in str(sql)
        assert params["status"] == "LOCKED"
        assert json.loads(params["period_results"])["0"]["winners"] == [[1, 2]]
        winner_params = db.execute.call_args_list[1].args[1]
        assert winner_params == [
            {"board_id": board.id, "row_idx": 1, "col_idx": 2, "winning_periods": "[0]"}
        ]

    @pytest.mark.asyncio
    async def test_no_winners_single_statement(self, db: MagicMock) -> None:
        db.execute = AsyncMock()
        await BoardRepository().update(_make_board(), db)
        assert db.execute.await_count == 1


class TestClaimCell:
    @pytest.mark.asyncio
    async def test_success_when_row_updated(self, db: MagicMock) -> None:
        db.execute = AsyncMock(side_effect=[_result(rowcount=1), _result()])
        cell = Cell(row=0, col=1, owner=CellOwner("alice", "Alice", _NOW))

        assert await BoardRepository().claim_cell("BRD-1", cell, db)

        sql, params = db.execute.call_args_list[0].args
        assert "owner_user_id IS NULL" in str(sql)
        assert "status = 'OPEN'" in str(sql)
        assert params["user_id"] == "alice"

    @pytest.mark.asyncio
    async def test_lost_race_when_no_row_updated(self, db: MagicMock) -> None:
        db.execute = AsyncMock(return_value=_result(rowcount=0))
        cell = Cell(row=0, col=1, owner=CellOwner("bob", "Bob", _NOW))
        assert not await BoardRepository().claim_cell("BRD-1", cell, db)
        assert db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_unowned_cell_is_not_written(self, db: MagicMock) -> None:
        db.execute = AsyncMock()
        assert not await BoardRepository().claim_cell("BRD-1", Cell(row=0, col=0), db)
        db.execute.assert_not_awaited()


class TestListBoards:
    @pytest.mark.asyncio
    async def test_loads_cells_per_board(self, db: MagicMock) -> None:
        rows = [_make_board_row(id=f"BRD-{i}") for i in range(2)]
        cells = [_make_cell_row(r, c) for r in range(5) for c in range(5)]
        db.execute = AsyncMock(
            side_effect=[_result(fetchall=rows), _result(fetchall=cells), _result(fetchall=cells)]
        )

        boards = await BoardRepository().list_boards("OPEN", 20, db)

        assert [b.id for b in boards] == ["BRD-0", "BRD-1"]
        assert db.execute.call_args_list[0].args[1] == {"status": "OPEN", "limit": 20}
