"""BoardEngine — stateful orchestrator for per-board mutations.

Every mutating call runs load -> domain rule -> persist while holding the
board's asyncio.Lock, so two requests in one process never interleave on the
same board. Cross-process races are settled by the repository: rows are loaded
FOR UPDATE and ownership goes through the claim_cell compare-and-swap.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager, nullcontext
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.sq_board.domain import factory, ledger, lifecycle
from src.sq_board.domain.models import Board, Cell, Claimant, Coordinate
from src.sq_board.domain.repository import BoardRepositoryProtocol
from src.sq_common.enums import BoardShape, BoardStatus, Sport
from src.sq_common.errors import AlreadyClaimedError, BoardNotFoundError, NotBoardCreatorError
from src.sq_payout.domain.settlement import WinnerPayout, period_payouts
from src.sq_scoring.domain.periods import final_period, period_index, period_labels
from src.sq_scoring.domain.winner import last_digit, resolve_winners

logger = logging.getLogger(__name__)


@dataclass
class ScoreOutcome:
    """What one score delivery did to a board."""

    board: Board
    period: int
    period_label: str
    winners: list[Coordinate]
    payouts: list[WinnerPayout] = field(default_factory=list)
    completed: bool = False
    duplicate: bool = False


def _savepoint(db: AsyncSession | None) -> AbstractAsyncContextManager[Any]:
    return db.begin_nested() if db is not None else nullcontext()


class BoardEngine:
    def __init__(self, repo: BoardRepositoryProtocol) -> None:
        self._repo = repo
        self._board_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def repo(self) -> BoardRepositoryProtocol:
        return self._repo

    def _get_or_create_lock(self, board_id: str) -> asyncio.Lock:
        return self._board_locks[board_id]

    async def _load(self, board_id: str, db: AsyncSession | None, for_update: bool) -> Board:
        board = await self._repo.get_by_id(board_id, db, for_update=for_update)
        if board is None:
            raise BoardNotFoundError(board_id)
        return board

    @staticmethod
    def _check_creator(board: Board, user_id: str | None) -> None:
        # user_id None: trusted internal caller such as the score feed
        if user_id is not None and board.created_by != user_id:
            raise NotBoardCreatorError(board.id)

    # ------------------------------------------------------------------
    # Creation & queries
    # ------------------------------------------------------------------

    async def create_board(
        self,
        db: AsyncSession | None,
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
    ) -> Board:
        board = factory.create_board(
            shape,
            name=name,
            price_per_cell=price_per_cell,
            home_team=home_team,
            away_team=away_team,
            sport=sport,
            payout_schedule=payout_schedule,
            external_game_id=external_game_id,
            starts_at=starts_at,
            created_by=created_by,
            max_cells_per_claimant=max_cells_per_claimant,
            seed=seed,
        )
        async with _savepoint(db):
            await self._repo.insert(board, db)
        return board

    async def get_board(self, board_id: str, db: AsyncSession | None) -> Board:
        return await self._load(board_id, db, for_update=False)

    async def list_boards(
        self, db: AsyncSession | None, status: str | None = None, limit: int = 20
    ) -> list[Board]:
        return await self._repo.list_boards(status, limit, db)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def transition(
        self,
        board_id: str,
        target: BoardStatus | str,
        db: AsyncSession | None,
        *,
        user_id: str | None = None,
    ) -> Board:
        async with self._get_or_create_lock(board_id):
            async with _savepoint(db):
                board = await self._load(board_id, db, for_update=True)
                self._check_creator(board, user_id)
                lifecycle.transition(board, target)
                await self._repo.update(board, db)
        return board

    async def open_board(self, board_id: str, db: AsyncSession | None) -> Board:
        return await self.transition(board_id, BoardStatus.OPEN, db)

    async def lock_board(self, board_id: str, db: AsyncSession | None) -> Board:
        return await self.transition(board_id, BoardStatus.LOCKED, db)

    async def start_game(self, board_id: str, db: AsyncSession | None) -> Board:
        return await self.transition(board_id, BoardStatus.IN_PROGRESS, db)

    async def cancel_board(self, board_id: str, db: AsyncSession | None) -> Board:
        return await self.transition(board_id, BoardStatus.CANCELLED, db)

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------

    async def claim(
        self,
        board_id: str,
        row: int,
        col: int,
        claimant: Claimant,
        db: AsyncSession | None,
    ) -> Cell:
        """Claim one cell; exactly one of any set of concurrent callers wins."""
        async with self._get_or_create_lock(board_id):
            async with _savepoint(db):
                board = await self._load(board_id, db, for_update=True)
                cell = ledger.claim_cell(board, row, col, claimant)
                if not await self._repo.claim_cell(board_id, cell, db):
                    raise AlreadyClaimedError(board_id, row, col)
        return cell

    async def claim_selected(
        self,
        board_id: str,
        selection: ledger.Selection,
        claimant: Claimant,
        db: AsyncSession | None,
    ) -> list[Cell]:
        """Claim a claimant's selection; cells lost to a racing claim are skipped."""
        async with self._get_or_create_lock(board_id):
            async with _savepoint(db):
                board = await self._load(board_id, db, for_update=True)
                cells = ledger.claim_selected(board, selection, claimant)
                claimed: list[Cell] = []
                for cell in cells:
                    if await self._repo.claim_cell(board_id, cell, db):
                        claimed.append(cell)
                    else:
                        logger.debug("Lost race for %s on %s", cell.coord, board_id)
                        cell.owner = None
        logger.info(
            "Board %s: %s claimed %d of %d selected cells",
            board_id, claimant.user_id, len(claimed), len(cells),
        )
        return claimed

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    async def record_score(
        self,
        board_id: str,
        home_score: int,
        away_score: int,
        period: int | str,
        db: AsyncSession | None,
        *,
        user_id: str | None = None,
    ) -> ScoreOutcome:
        """Resolve one period's winners, starting and completing the game as needed."""
        last_digit(home_score)
        last_digit(away_score)
        async with self._get_or_create_lock(board_id):
            async with _savepoint(db):
                board = await self._load(board_id, db, for_update=True)
                self._check_creator(board, user_id)
                index = period_index(board.sport, period)
                duplicate = index in board.period_results

                winners = resolve_winners(board, home_score, away_score, index)

                completed = False
                if (
                    not duplicate
                    and index == final_period(board.period_count)
                    and board.status == BoardStatus.IN_PROGRESS
                ):
                    lifecycle.complete_game(board)
                    completed = True

                if not duplicate:
                    await self._repo.update(board, db)

        labels = period_labels(board.sport)
        return ScoreOutcome(
            board=board,
            period=index,
            period_label=labels[index],
            winners=sorted(winners),
            payouts=period_payouts(board, index),
            completed=completed,
            duplicate=duplicate,
        )
