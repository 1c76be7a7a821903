"""Board Lifecycle — the state machine gating every other board operation.

DRAFT -> OPEN -> LOCKED -> IN_PROGRESS -> COMPLETED
CANCELLED is reachable from DRAFT, OPEN and LOCKED only, and never once a
period has been resolved.
"""

import logging
from datetime import datetime

from src.sq_board.domain.factory import assign_headers, validate_headers
from src.sq_board.domain.models import Board
from src.sq_common.datetime_utils import utc_now
from src.sq_common.enums import BoardStatus
from src.sq_common.errors import (
    BoardNotInPlayError,
    BoardNotOpenError,
    InvalidTransitionError,
)
from src.sq_scoring.domain.periods import final_period

logger = logging.getLogger(__name__)

_ALLOWED_TRANSITIONS: dict[BoardStatus, frozenset[BoardStatus]] = {
    BoardStatus.DRAFT: frozenset({BoardStatus.OPEN, BoardStatus.CANCELLED}),
    BoardStatus.OPEN: frozenset({BoardStatus.LOCKED, BoardStatus.CANCELLED}),
    BoardStatus.LOCKED: frozenset({BoardStatus.IN_PROGRESS, BoardStatus.CANCELLED}),
    BoardStatus.IN_PROGRESS: frozenset({BoardStatus.COMPLETED}),
    BoardStatus.COMPLETED: frozenset(),
    BoardStatus.CANCELLED: frozenset(),
}

_RESOLVABLE = frozenset({BoardStatus.LOCKED, BoardStatus.IN_PROGRESS})


def can_transition(current: BoardStatus | str, target: BoardStatus | str) -> bool:
    return BoardStatus(target) in _ALLOWED_TRANSITIONS[BoardStatus(current)]


def transition(board: Board, target: BoardStatus | str, now: datetime | None = None) -> Board:
    """Move board to target or raise InvalidTransitionError; never coerces state."""
    target = BoardStatus(target)
    current = BoardStatus(board.status)
    if not can_transition(current, target):
        raise InvalidTransitionError(board.id, current.value, target.value)

    now = now or utc_now()
    if target == BoardStatus.OPEN:
        if board.has_headers:
            validate_headers(board)
        else:
            assign_headers(board)
        board.opened_at = now
    elif target == BoardStatus.LOCKED:
        board.locked_at = now
    elif target == BoardStatus.COMPLETED:
        if final_period(board.period_count) not in board.period_results:
            raise InvalidTransitionError(
                board.id, current.value, f"{target.value} (final period unresolved)"
            )
        board.completed_at = now
    elif target == BoardStatus.CANCELLED:
        if board.period_results:
            raise InvalidTransitionError(
                board.id, current.value, f"{target.value} (periods already resolved)"
            )
        board.cancelled_at = now

    board.status = target
    board.updated_at = now
    logger.info("Board %s: %s -> %s", board.id, current.value, target.value)
    return board


def open_board(board: Board) -> Board:
    return transition(board, BoardStatus.OPEN)


def lock_board(board: Board) -> Board:
    return transition(board, BoardStatus.LOCKED)


def start_game(board: Board) -> Board:
    return transition(board, BoardStatus.IN_PROGRESS)


def complete_game(board: Board) -> Board:
    return transition(board, BoardStatus.COMPLETED)


def cancel_board(board: Board) -> Board:
    return transition(board, BoardStatus.CANCELLED)


def ensure_claimable(board: Board) -> None:
    if board.status != BoardStatus.OPEN:
        raise BoardNotOpenError(board.id, BoardStatus(board.status).value)


def ensure_resolvable(board: Board) -> None:
    if board.status not in _RESOLVABLE:
        raise BoardNotInPlayError(board.id, BoardStatus(board.status).value)
