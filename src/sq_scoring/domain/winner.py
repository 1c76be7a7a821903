"""Winner Resolver — maps a live score to the winning cell(s) of a board.

TEN_BY_TEN:   column whose label is the home last digit x row whose label is the
              away last digit; exactly one cell.
FIVE_BY_FIVE: every column whose pair-label contains the home digit x every row
              whose pair-label contains the away digit. The pairs of one axis
              partition 0-9, so this is always one cell.
SHOTGUN:      (home + away) last digits mod 10, looked up in the band that pays
              for the period (halftime band 0, final band 1); other periods
              never produce a shotgun winner.

Resolution is monotonic: winner flags are only ever set, and resolving the
same period again with the same scores changes nothing.
"""

import logging
from datetime import datetime

from src.sq_board.domain.constants import FINAL_BAND, HALFTIME_BAND, SHOTGUN_BAND_SIZE
from src.sq_board.domain.factory import validate_headers
from src.sq_board.domain.lifecycle import ensure_resolvable, transition
from src.sq_board.domain.models import Board, Coordinate, HeaderLabel, PeriodResult
from src.sq_common.datetime_utils import utc_now
from src.sq_common.enums import BoardShape, BoardStatus
from src.sq_common.errors import (
    BoardNotInPlayError,
    InvalidPeriodError,
    InvalidScoreError,
    PeriodAlreadyResolvedError,
)
from src.sq_scoring.domain.periods import final_period, halftime_period

logger = logging.getLogger(__name__)


def last_digit(score: int) -> int:
    if isinstance(score, bool) or not isinstance(score, int):
        raise InvalidScoreError(f"score must be an integer, got {score!r}")
    if score < 0:
        raise InvalidScoreError(f"score must not be negative, got {score}")
    return score % 10


def shotgun_band_for_period(period: int, period_count: int) -> int | None:
    """Band paying for period, or None when the period does not pay on shotgun."""
    if period == final_period(period_count):
        return FINAL_BAND
    if period == halftime_period(period_count):
        return HALFTIME_BAND
    return None


def _indices_containing(labels: list[HeaderLabel], digit: int) -> list[int]:
    return [i for i, label in enumerate(labels) if digit in label]


def match_cells(board: Board, home_score: int, away_score: int, period: int) -> list[Coordinate]:
    """Coordinates whose headers match the score, regardless of ownership."""
    home_digit = last_digit(home_score)
    away_digit = last_digit(away_score)
    validate_headers(board)

    if board.shape == BoardShape.SHOTGUN:
        band = shotgun_band_for_period(period, board.period_count)
        if band is None:
            return []
        combined = (home_digit + away_digit) % 10
        position = board.band_headers[band].index(combined)
        return [(0, band * SHOTGUN_BAND_SIZE + position)]

    cols = _indices_containing(board.col_headers, home_digit)
    rows = _indices_containing(board.row_headers, away_digit)
    if board.shape == BoardShape.TEN_BY_TEN:
        # validate_headers guarantees one hit per axis
        cols, rows = cols[:1], rows[:1]
    return [(r, c) for r in rows for c in cols]


def resolve_winners(
    board: Board,
    home_score: int,
    away_score: int,
    period: int,
    now: datetime | None = None,
) -> set[Coordinate]:
    """Mark and return the owned cells winning this period (empty set if none).

    The first result on a LOCKED board starts the game, so a board with
    recorded results can no longer be cancelled.
    """
    if isinstance(period, bool) or not isinstance(period, int) or not (
        0 <= period < board.period_count
    ):
        raise InvalidPeriodError(period)

    existing = board.period_results.get(period)
    if existing is not None:
        if (existing.home_score, existing.away_score) == (home_score, away_score):
            logger.debug("Period %d of %s already resolved; no change", period, board.id)
            return set(existing.winners)
        if board.status == BoardStatus.COMPLETED:
            raise BoardNotInPlayError(board.id, BoardStatus.COMPLETED.value)
        raise PeriodAlreadyResolvedError(board.id, period)

    ensure_resolvable(board)
    matched = match_cells(board, home_score, away_score, period)
    now = now or utc_now()
    if board.status == BoardStatus.LOCKED:
        transition(board, BoardStatus.IN_PROGRESS, now)
    winners = [coord for coord in matched if board.cells[coord].owner is not None]
    for coord in winners:
        cell = board.cells[coord]
        cell.is_winner = True
        if period not in cell.winning_periods:
            cell.winning_periods.append(period)

    board.period_results[period] = PeriodResult(
        period=period,
        home_score=home_score,
        away_score=away_score,
        matched=matched,
        winners=winners,
        resolved_at=now,
    )
    board.updated_at = now
    logger.info(
        "Board %s period %d (%d-%d): matched=%s winners=%s",
        board.id, period, home_score, away_score, matched, winners,
    )
    return set(winners)
