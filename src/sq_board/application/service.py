"""BoardApplicationService — composition layer between the router and BoardEngine.

Mutating methods commit on success and roll back on any error. With the
in-memory store the session is None and both are skipped.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sq_board.application.schemas import (
    BoardDetail,
    BoardListItem,
    BoardListResponse,
    CellOut,
    ClaimRequest,
    ClaimResponse,
    CreateBoardRequest,
    PaymentPayloadOut,
    ScoreRequest,
    ScoreResponse,
    SettlementResponse,
    WinnerPayoutOut,
)
from src.sq_board.domain.ledger import Selection, ensure_within_limit
from src.sq_board.domain.lifecycle import ensure_claimable
from src.sq_board.domain.models import Claimant
from src.sq_board.domain.repository import BoardRepositoryProtocol
from src.sq_board.engine.engine import BoardEngine
from src.sq_board.infrastructure.memory import InMemoryBoardRepository
from src.sq_board.infrastructure.persistence import BoardRepository
from src.sq_common.enums import BoardStatus
from src.sq_payout.domain.payout import percentages_to_bps
from src.sq_payout.domain.settlement import (
    build_payment_payload,
    settle_board,
    winner_summary,
)


_engine: BoardEngine | None = None


def get_board_engine() -> BoardEngine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        repo: BoardRepositoryProtocol = (
            InMemoryBoardRepository() if settings.BOARD_STORE == "memory" else BoardRepository()
        )
        _engine = BoardEngine(repo)
    return _engine


@asynccontextmanager
async def _transaction(db: AsyncSession | None) -> AsyncGenerator[None, None]:
    try:
        yield
        if db is not None:
            await db.commit()
    except Exception:
        if db is not None:
            await db.rollback()
        raise


class BoardApplicationService:
    def __init__(self, engine: BoardEngine | None = None) -> None:
        self._engine_override = engine

    @property
    def _engine(self) -> BoardEngine:
        return self._engine_override or get_board_engine()

    async def create_board(
        self, db: AsyncSession | None, req: CreateBoardRequest, claimant: Claimant
    ) -> BoardDetail:
        schedule = req.payout_schedule_bps
        if req.payout_percentages is not None:
            schedule = percentages_to_bps(req.payout_percentages)
        limit = req.max_cells_per_claimant
        if limit is None:
            limit = settings.MAX_CELLS_PER_CLAIMANT
        async with _transaction(db):
            board = await self._engine.create_board(
                db,
                req.shape,
                name=req.name,
                price_per_cell=req.price_per_cell_cents,
                home_team=req.home_team,
                away_team=req.away_team,
                sport=req.sport,
                payout_schedule=schedule,
                external_game_id=req.external_game_id,
                starts_at=req.starts_at,
                created_by=claimant.user_id,
                max_cells_per_claimant=limit,
                seed=req.seed,
            )
        return BoardDetail.from_domain(board)

    async def get_board(self, db: AsyncSession | None, board_id: str) -> BoardDetail:
        board = await self._engine.get_board(board_id, db)
        return BoardDetail.from_domain(board)

    async def list_boards(
        self, db: AsyncSession | None, status: str | None, limit: int
    ) -> BoardListResponse:
        boards = await self._engine.list_boards(db, status, limit)
        return BoardListResponse(items=[BoardListItem.from_domain(b) for b in boards])

    async def transition(
        self, db: AsyncSession | None, board_id: str, target: BoardStatus, claimant: Claimant
    ) -> BoardDetail:
        async with _transaction(db):
            board = await self._engine.transition(
                board_id, target, db, user_id=claimant.user_id
            )
        return BoardDetail.from_domain(board)

    async def claim(
        self, db: AsyncSession | None, board_id: str, req: ClaimRequest, claimant: Claimant
    ) -> ClaimResponse:
        requested = list(dict.fromkeys((c.row, c.col) for c in req.cells))
        async with _transaction(db):
            if len(requested) == 1:
                row, col = requested[0]
                cells = [await self._engine.claim(board_id, row, col, claimant, db)]
            else:
                board = await self._engine.get_board(board_id, db)
                ensure_claimable(board)
                ensure_within_limit(board, claimant.user_id, requested)
                selection = Selection(board_id, claimant.user_id)
                for row, col in requested:
                    selection.select(board, row, col)
                cells = await self._engine.claim_selected(board_id, selection, claimant, db)
            board = await self._engine.get_board(board_id, db)

        claimed = [c.coord for c in cells]
        payload = build_payment_payload(board, claimed, req.provider)
        return ClaimResponse(
            board_id=board_id,
            claimed=[CellOut.from_domain(board.cells[c]) for c in sorted(claimed)],
            skipped=[list(c) for c in requested if c not in set(claimed)],
            payment=PaymentPayloadOut.from_domain(payload),
        )

    async def record_score(
        self, db: AsyncSession | None, board_id: str, req: ScoreRequest, claimant: Claimant
    ) -> ScoreResponse:
        async with _transaction(db):
            outcome = await self._engine.record_score(
                board_id, req.home_score, req.away_score, req.period, db,
                user_id=claimant.user_id,
            )
        return ScoreResponse(
            board_id=board_id,
            status=outcome.board.status.value,
            period=outcome.period,
            period_label=outcome.period_label,
            winners=[list(c) for c in outcome.winners],
            payouts=[WinnerPayoutOut.from_domain(p) for p in outcome.payouts],
            completed=outcome.completed,
            duplicate=outcome.duplicate,
        )

    async def settlement(self, db: AsyncSession | None, board_id: str) -> SettlementResponse:
        board = await self._engine.get_board(board_id, db)
        report = settle_board(board)
        summary = sorted(
            winner_summary(report.payouts).values(),
            key=lambda s: (-s.total_payout, s.user_id),
        )
        return SettlementResponse.from_report(report, board.status.value, summary)
