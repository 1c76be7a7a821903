"""Cell Ledger — authoritative claims plus the non-binding selection soft-hold.

claim_cell / claim_selected mutate the in-memory Board only; the caller
(BoardEngine) serializes them per board and persists through the repository's
compare-and-swap, so a lost race always surfaces as AlreadyClaimedError.
"""

import logging
from datetime import datetime

from src.sq_board.domain.lifecycle import ensure_claimable
from src.sq_board.domain.models import Board, Cell, CellOwner, Claimant, Coordinate
from src.sq_common.datetime_utils import utc_now
from src.sq_common.enums import BoardStatus
from src.sq_common.errors import (
    AlreadyClaimedError,
    CellLimitExceededError,
    MissingClaimantError,
)

logger = logging.getLogger(__name__)


def validate_claimant(claimant: Claimant | None) -> None:
    if (
        claimant is None
        or not (claimant.user_id or "").strip()
        or not (claimant.display_name or "").strip()
    ):
        raise MissingClaimantError()


def claim_cell(
    board: Board, row: int, col: int, claimant: Claimant, now: datetime | None = None
) -> Cell:
    """Assign ownership iff the board is OPEN and the cell is unowned."""
    validate_claimant(claimant)
    ensure_claimable(board)
    cell = board.cell(row, col)
    if cell.owner is not None:
        raise AlreadyClaimedError(board.id, row, col)
    limit = board.max_cells_per_claimant
    if limit is not None and len(board.cells_owned_by(claimant.user_id)) >= limit:
        raise CellLimitExceededError(limit)

    now = now or utc_now()
    cell.owner = CellOwner(
        user_id=claimant.user_id,
        display_name=claimant.display_name,
        claimed_at=now,
    )
    board.updated_at = now
    logger.info("Cell (%d, %d) on %s claimed by %s", row, col, board.id, claimant.user_id)
    return cell


def ensure_within_limit(board: Board, user_id: str, coords: list[Coordinate]) -> None:
    """Raise CellLimitExceededError if claiming the still-unowned coords would
    take user_id past the board's per-claimant limit."""
    limit = board.max_cells_per_claimant
    if limit is None:
        return
    available = [c for c in coords if c in board.cells and board.cells[c].owner is None]
    if len(available) + len(board.cells_owned_by(user_id)) > limit:
        raise CellLimitExceededError(limit)


class Selection:
    """One claimant's soft-hold on cells they intend to buy.

    Purely local: it grants no exclusivity and never changes ownership.
    Every mutator is a silent no-op when it does not apply.
    """

    def __init__(self, board_id: str, user_id: str) -> None:
        self.board_id = board_id
        self.user_id = user_id
        self._coords: dict[Coordinate, None] = {}  # insertion-ordered set

    def __len__(self) -> int:
        return len(self._coords)

    def __contains__(self, coord: object) -> bool:
        return coord in self._coords

    @property
    def coords(self) -> list[Coordinate]:
        return list(self._coords)

    def is_selected(self, row: int, col: int) -> bool:
        return (row, col) in self._coords

    def select(self, board: Board, row: int, col: int) -> bool:
        """Returns True only when the cell was newly added."""
        if board.id != self.board_id or board.status != BoardStatus.OPEN:
            return False
        cell = board.cells.get((row, col))
        if cell is None or cell.owner is not None or (row, col) in self._coords:
            return False
        limit = board.max_cells_per_claimant
        if limit is not None and len(self._coords) + len(board.cells_owned_by(self.user_id)) >= limit:
            return False
        self._coords[(row, col)] = None
        return True

    def deselect(self, row: int, col: int) -> bool:
        return self._coords.pop((row, col), False) is None

    def toggle(self, board: Board, row: int, col: int) -> bool:
        """Returns whether the cell is selected afterwards."""
        if self.is_selected(row, col):
            return not self.deselect(row, col)
        return self.select(board, row, col)

    def discard(self, coord: Coordinate) -> None:
        self._coords.pop(coord, None)

    def clear(self) -> None:
        self._coords.clear()

    def reconcile(self, board: Board) -> list[Coordinate]:
        """Drop cells that became owned since they were selected; return them."""
        stale = [
            coord for coord in self._coords
            if coord not in board.cells or board.cells[coord].owner is not None
        ]
        for coord in stale:
            self.discard(coord)
        return stale

    def total_price(self, board: Board) -> int:
        return len(self._coords) * board.price_per_cell


def claim_selected(
    board: Board, selection: Selection, claimant: Claimant, now: datetime | None = None
) -> list[Cell]:
    """Claim every selected, still-unowned cell for one claimant.

    Cells taken by someone else meanwhile are skipped and dropped from the
    selection; the selection is empty afterwards.
    """
    validate_claimant(claimant)
    ensure_claimable(board)
    ensure_within_limit(board, claimant.user_id, selection.coords)

    now = now or utc_now()
    claimed: list[Cell] = []
    for coord in selection.coords:
        selection.discard(coord)
        cell = board.cells.get(coord)
        if cell is None or cell.owner is not None:
            logger.debug("Skipping %s on %s: no longer available", coord, board.id)
            continue
        claimed.append(claim_cell(board, coord[0], coord[1], claimant, now))
    return claimed
