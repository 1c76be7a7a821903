"""Board Factory — builds empty boards and draws their header digits."""

import logging
import random
from collections.abc import Sequence
from datetime import datetime

from src.sq_board.domain.constants import (
    BOARD_NAME_MAX_LENGTH,
    BOARD_NAME_MIN_LENGTH,
    GRID_DIMENSIONS,
    MAX_CELL_PRICE_CENTS,
    MIN_CELL_PRICE_CENTS,
    SHOTGUN_BAND_COUNT,
    SHOTGUN_BAND_SIZE,
)
from src.sq_board.domain.models import Board, Cell, Coordinate
from src.sq_board.domain.shuffler import (
    generate_digits,
    generate_seed,
    is_digit_permutation,
    seeded_rng,
    shuffle,
)
from src.sq_common.cents import validate_cell_price
from src.sq_common.datetime_utils import utc_now
from src.sq_common.enums import BoardShape, BoardStatus, Sport
from src.sq_common.errors import InvalidBoardConfigError, InvalidShapeConfigurationError
from src.sq_common.id_generator import generate_board_id
from src.sq_payout.domain.payout import default_schedule, validate_schedule
from src.sq_scoring.domain.periods import period_count

logger = logging.getLogger(__name__)


def grid_dimensions(shape: BoardShape | str) -> tuple[int, int]:
    return GRID_DIMENSIONS[BoardShape(shape)]


def total_cells(shape: BoardShape | str) -> int:
    rows, cols = grid_dimensions(shape)
    return rows * cols


def create_empty_cells(shape: BoardShape | str) -> dict[Coordinate, Cell]:
    rows, cols = grid_dimensions(shape)
    return {(r, c): Cell(row=r, col=c) for r in range(rows) for c in range(cols)}


def create_board(
    shape: BoardShape | str,
    *,
    name: str,
    price_per_cell: int,
    home_team: str,
    away_team: str,
    sport: Sport | str = Sport.NFL,
    payout_schedule: Sequence[int] | None = None,
    external_game_id: str | None = None,
    starts_at: datetime | None = None,
    created_by: str | None = None,
    max_cells_per_claimant: int | None = None,
    seed: str | None = None,
    board_id: str | None = None,
) -> Board:
    """Allocate a DRAFT board with every cell unclaimed and headers drawn."""
    try:
        shape = BoardShape(shape)
        sport = Sport(sport)
    except ValueError as exc:
        raise InvalidBoardConfigError(str(exc)) from exc

    _validate_config(name, price_per_cell, home_team, away_team, max_cells_per_claimant)

    if payout_schedule is None:
        schedule = default_schedule(shape, period_count(sport))
    else:
        schedule = validate_schedule(payout_schedule)
        if len(schedule) != period_count(sport):
            raise InvalidBoardConfigError(
                f"{sport.value} has {period_count(sport)} scoring periods, "
                f"schedule has {len(schedule)}"
            )

    now = utc_now()
    board = Board(
        id=board_id or generate_board_id(),
        name=name.strip(),
        shape=shape,
        price_per_cell=price_per_cell,
        home_team=home_team,
        away_team=away_team,
        sport=sport,
        payout_schedule=schedule,
        status=BoardStatus.DRAFT,
        cells=create_empty_cells(shape),
        created_at=now,
        updated_at=now,
        external_game_id=external_game_id,
        starts_at=starts_at,
        created_by=created_by,
        max_cells_per_claimant=max_cells_per_claimant,
    )
    assign_headers(board, seed=seed)
    logger.info(
        "Board created: id=%s shape=%s cells=%d price=%d",
        board.id, shape.value, board.total_cells, price_per_cell,
    )
    return board


def assign_headers(board: Board, seed: str | None = None) -> None:
    """Draw header digits. Refuses to redraw once a board has headers."""
    if board.has_headers:
        raise InvalidShapeConfigurationError(f"board {board.id} already has headers")

    board.shuffle_seed = seed or generate_seed()
    rng: random.Random = seeded_rng(board.shuffle_seed)
    if board.shape == BoardShape.SHOTGUN:
        digits = list(range(SHOTGUN_BAND_SIZE))
        board.band_headers = [shuffle(digits, rng) for _ in range(SHOTGUN_BAND_COUNT)]
    else:
        rows, cols = grid_dimensions(board.shape)
        board.row_headers = generate_digits(rows, rng)
        board.col_headers = generate_digits(cols, rng)
    validate_headers(board)
    board.updated_at = utc_now()


def validate_headers(board: Board) -> None:
    """Each axis (or shotgun band) must cover the digits 0-9 exactly once."""
    if board.shape == BoardShape.SHOTGUN:
        if len(board.band_headers) != SHOTGUN_BAND_COUNT:
            raise InvalidShapeConfigurationError(
                f"expected {SHOTGUN_BAND_COUNT} bands, got {len(board.band_headers)}"
            )
        for band in board.band_headers:
            if not is_digit_permutation(band):
                raise InvalidShapeConfigurationError(f"band {band} is not a permutation of 0-9")
        return

    rows, cols = grid_dimensions(board.shape)
    for axis, labels, expected in (
        ("row", board.row_headers, rows),
        ("col", board.col_headers, cols),
    ):
        if len(labels) != expected:
            raise InvalidShapeConfigurationError(
                f"expected {expected} {axis} headers, got {len(labels)}"
            )
        if not is_digit_permutation(labels):
            raise InvalidShapeConfigurationError(
                f"{axis} headers {labels} are not a permutation of 0-9"
            )


def _validate_config(
    name: str,
    price_per_cell: int,
    home_team: str,
    away_team: str,
    max_cells_per_claimant: int | None,
) -> None:
    stripped = (name or "").strip()
    if not (BOARD_NAME_MIN_LENGTH <= len(stripped) <= BOARD_NAME_MAX_LENGTH):
        raise InvalidBoardConfigError(
            f"name must be {BOARD_NAME_MIN_LENGTH}-{BOARD_NAME_MAX_LENGTH} characters"
        )
    try:
        validate_cell_price(price_per_cell, MIN_CELL_PRICE_CENTS, MAX_CELL_PRICE_CENTS)
    except ValueError as exc:
        raise InvalidBoardConfigError(str(exc)) from exc
    if not home_team or not away_team:
        raise InvalidBoardConfigError("home and away teams are required")
    if home_team == away_team:
        raise InvalidBoardConfigError("home and away teams must differ")
    if max_cells_per_claimant is not None and max_cells_per_claimant < 1:
        raise InvalidBoardConfigError("max_cells_per_claimant must be at least 1")
