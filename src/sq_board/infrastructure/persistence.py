"""BoardRepository — concrete implementation of BoardRepositoryProtocol.

All queries use raw text() SQL (no ORM). JSONB columns are written as JSON
strings and CAST on the way in; asyncpg hands them back as str, decoded here.
Ownership is only ever written by _CLAIM_CELL_SQL, a conditional UPDATE whose
rowcount tells the caller whether it won the race.
"""

import json
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sq_board.domain.models import Board, Cell, CellOwner, PeriodResult
from src.sq_common.enums import BoardShape, BoardStatus, Sport

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_BOARD_COLUMNS = """
    id, name, shape, status, price_per_cell, home_team, away_team, sport,
    payout_schedule, row_headers, col_headers, band_headers, shuffle_seed,
    external_game_id, starts_at, created_by, max_cells_per_claimant,
    period_results, opened_at, locked_at, completed_at, cancelled_at,
    created_at, updated_at
"""

_INSERT_BOARD_SQL = text("""
    INSERT INTO boards (id, name, shape, status, price_per_cell, home_team, away_team, sport,
        payout_schedule, row_headers, col_headers, band_headers, shuffle_seed,
        external_game_id, starts_at, created_by, max_cells_per_claimant,
        period_results, created_at, updated_at)
    VALUES (:id, :name, :shape, :status, :price_per_cell, :home_team, :away_team, :sport,
        CAST(:payout_schedule AS JSONB), CAST(:row_headers AS JSONB),
        CAST(:col_headers AS JSONB), CAST(:band_headers AS JSONB), :shuffle_seed,
        :external_game_id, :starts_at, :created_by, :max_cells_per_claimant,
        CAST(:period_results AS JSONB), :created_at, :updated_at)
""")

_INSERT_CELL_SQL = text("""
    INSERT INTO cells (board_id, row_idx, col_idx)
    VALUES (:board_id, :row_idx, :col_idx)
""")

_GET_BOARD_SQL = text(f"SELECT {_BOARD_COLUMNS} FROM boards WHERE id = :board_id")

_GET_BOARD_FOR_UPDATE_SQL = text(
    f"SELECT {_BOARD_COLUMNS} FROM boards WHERE id = :board_id FOR UPDATE"
)

_GET_CELLS_SQL = text("""
    SELECT row_idx, col_idx, owner_user_id, owner_display_name, claimed_at,
           is_winner, winning_periods
    FROM cells
    WHERE board_id = :board_id
    ORDER BY row_idx, col_idx
""")

_UPDATE_BOARD_SQL = text("""
    UPDATE boards
    SET status = :status,
        row_headers = CAST(:row_headers AS JSONB),
        col_headers = CAST(:col_headers AS JSONB),
        band_headers = CAST(:band_headers AS JSONB),
        shuffle_seed = :shuffle_seed,
        period_results = CAST(:period_results AS JSONB),
        opened_at = :opened_at,
        locked_at = :locked_at,
        completed_at = :completed_at,
        cancelled_at = :cancelled_at,
        updated_at = :updated_at
    WHERE id = :id
""")

# Winner flags are monotonic, so only winning cells are ever rewritten.
_MARK_WINNER_SQL = text("""
    UPDATE cells
    SET is_winner = TRUE,
        winning_periods = CAST(:winning_periods AS JSONB)
    WHERE board_id = :board_id AND row_idx = :row_idx AND col_idx = :col_idx
""")

_CLAIM_CELL_SQL = text("""
    UPDATE cells
    SET owner_user_id = :user_id,
        owner_display_name = :display_name,
        claimed_at = :claimed_at
    WHERE board_id = :board_id
      AND row_idx = :row_idx
      AND col_idx = :col_idx
      AND owner_user_id IS NULL
      AND EXISTS (SELECT 1 FROM boards WHERE id = :board_id AND status = 'OPEN')
""")

_TOUCH_BOARD_SQL = text("UPDATE boards SET updated_at = :updated_at WHERE id = :board_id")

_LIST_BOARDS_SQL = text(f"""
    SELECT {_BOARD_COLUMNS}
    FROM boards
    WHERE (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _load_json(value: Any, default: Any) -> Any:
    if value is None:
        return default
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


def _period_results_to_json(board: Board) -> str:
    return json.dumps({
        str(period): {
            "home_score": r.home_score,
            "away_score": r.away_score,
            "matched": [list(c) for c in r.matched],
            "winners": [list(c) for c in r.winners],
            "resolved_at": r.resolved_at.isoformat(),
        }
        for period, r in board.period_results.items()
    })


def _period_results_from_json(value: Any) -> dict[int, PeriodResult]:
    raw: dict[str, dict[str, Any]] = _load_json(value, {})
    return {
        int(period): PeriodResult(
            period=int(period),
            home_score=r["home_score"],
            away_score=r["away_score"],
            matched=[(c[0], c[1]) for c in r["matched"]],
            winners=[(c[0], c[1]) for c in r["winners"]],
            resolved_at=datetime.fromisoformat(r["resolved_at"]),
        )
        for period, r in raw.items()
    }


def _row_to_cell(row: Any) -> Cell:
    owner = None
    if row.owner_user_id is not None:
        owner = CellOwner(
            user_id=row.owner_user_id,
            display_name=row.owner_display_name,
            claimed_at=row.claimed_at,
        )
    return Cell(
        row=row.row_idx,
        col=row.col_idx,
        owner=owner,
        is_winner=bool(row.is_winner),
        winning_periods=list(_load_json(row.winning_periods, [])),
    )


def _row_to_board(row: Any, cell_rows: list[Any]) -> Board:
    cells = [_row_to_cell(r) for r in cell_rows]
    return Board(
        id=row.id,
        name=row.name,
        shape=BoardShape(row.shape),
        price_per_cell=row.price_per_cell,
        home_team=row.home_team,
        away_team=row.away_team,
        sport=Sport(row.sport),
        payout_schedule=list(_load_json(row.payout_schedule, [])),
        status=BoardStatus(row.status),
        cells={c.coord: c for c in cells},
        created_at=row.created_at,
        updated_at=row.updated_at,
        row_headers=[tuple(label) for label in _load_json(row.row_headers, [])],
        col_headers=[tuple(label) for label in _load_json(row.col_headers, [])],
        band_headers=[list(band) for band in _load_json(row.band_headers, [])],
        external_game_id=row.external_game_id,
        starts_at=row.starts_at,
        created_by=row.created_by,
        max_cells_per_claimant=row.max_cells_per_claimant,
        shuffle_seed=row.shuffle_seed,
        period_results=_period_results_from_json(row.period_results),
        opened_at=row.opened_at,
        locked_at=row.locked_at,
        completed_at=row.completed_at,
        cancelled_at=row.cancelled_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class BoardRepository:
    """Postgres implementation of BoardRepositoryProtocol using raw SQL."""

    async def insert(self, board: Board, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_BOARD_SQL,
            {
                "id": board.id,
                "name": board.name,
                "shape": board.shape.value,
                "status": board.status.value,
                "price_per_cell": board.price_per_cell,
                "home_team": board.home_team,
                "away_team": board.away_team,
                "sport": board.sport.value,
                "payout_schedule": json.dumps(board.payout_schedule),
                "row_headers": json.dumps([list(x) for x in board.row_headers]),
                "col_headers": json.dumps([list(x) for x in board.col_headers]),
                "band_headers": json.dumps(board.band_headers),
                "shuffle_seed": board.shuffle_seed,
                "external_game_id": board.external_game_id,
                "starts_at": board.starts_at,
                "created_by": board.created_by,
                "max_cells_per_claimant": board.max_cells_per_claimant,
                "period_results": _period_results_to_json(board),
                "created_at": board.created_at,
                "updated_at": board.updated_at,
            },
        )
        await db.execute(
            _INSERT_CELL_SQL,
            [
                {"board_id": board.id, "row_idx": c.row, "col_idx": c.col}
                for c in board.cells.values()
            ],
        )

    async def get_by_id(
        self, board_id: str, db: AsyncSession, for_update: bool = False
    ) -> Board | None:
        sql = _GET_BOARD_FOR_UPDATE_SQL if for_update else _GET_BOARD_SQL
        row = (await db.execute(sql, {"board_id": board_id})).fetchone()
        if row is None:
            return None
        cell_rows = (await db.execute(_GET_CELLS_SQL, {"board_id": board_id})).fetchall()
        return _row_to_board(row, list(cell_rows))

    async def update(self, board: Board, db: AsyncSession) -> None:
        await db.execute(
            _UPDATE_BOARD_SQL,
            {
                "id": board.id,
                "status": board.status.value,
                "row_headers": json.dumps([list(x) for x in board.row_headers]),
                "col_headers": json.dumps([list(x) for x in board.col_headers]),
                "band_headers": json.dumps(board.band_headers),
                "shuffle_seed": board.shuffle_seed,
                "period_results": _period_results_to_json(board),
                "opened_at": board.opened_at,
                "locked_at": board.locked_at,
                "completed_at": board.completed_at,
                "cancelled_at": board.cancelled_at,
                "updated_at": board.updated_at,
            },
        )
        winners = board.winning_cells()
        if winners:
            await db.execute(
                _MARK_WINNER_SQL,
                [
                    {
                        "board_id": board.id,
                        "row_idx": c.row,
                        "col_idx": c.col,
                        "winning_periods": json.dumps(c.winning_periods),
                    }
                    for c in winners
                ],
            )

    async def claim_cell(self, board_id: str, cell: Cell, db: AsyncSession) -> bool:
        if cell.owner is None:
            return False
        result = await db.execute(
            _CLAIM_CELL_SQL,
            {
                "board_id": board_id,
                "row_idx": cell.row,
                "col_idx": cell.col,
                "user_id": cell.owner.user_id,
                "display_name": cell.owner.display_name,
                "claimed_at": cell.owner.claimed_at,
            },
        )
        if result.rowcount != 1:
            return False
        await db.execute(
            _TOUCH_BOARD_SQL, {"board_id": board_id, "updated_at": cell.owner.claimed_at}
        )
        return True

    async def list_boards(
        self, status: str | None, limit: int, db: AsyncSession
    ) -> list[Board]:
        rows = (
            await db.execute(_LIST_BOARDS_SQL, {"status": status, "limit": limit})
        ).fetchall()
        boards: list[Board] = []
        for row in rows:
            cell_rows = (await db.execute(_GET_CELLS_SQL, {"board_id": row.id})).fetchall()
            boards.append(_row_to_board(row, list(cell_rows)))
        return boards
