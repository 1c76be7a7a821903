"""sq_board REST endpoints.

POST /boards                          — create a DRAFT board (headers drawn)
GET  /boards                          — list, newest first
GET  /boards/{board_id}               — full detail with cells and results
POST /boards/{board_id}/open|lock|start|cancel — lifecycle transitions
POST /boards/{board_id}/claims        — claim one or more cells
POST /boards/{board_id}/scores        — record a period score, resolve winners
GET  /boards/{board_id}/settlement    — per-winner payouts and house total

Lifecycle and score endpoints are restricted to the board's creator (403).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sq_board.application.schemas import ClaimRequest, CreateBoardRequest, ScoreRequest
from src.sq_board.application.service import BoardApplicationService
from src.sq_board.domain.models import Claimant
from src.sq_common.database import get_db_session
from src.sq_common.enums import BoardStatus
from src.sq_common.response import ApiResponse, success_response
from src.sq_gateway.auth.dependencies import get_claimant

router = APIRouter(prefix="/boards", tags=["boards"])

_service = BoardApplicationService()


def _respond(request: Request, data: object) -> ApiResponse:
    return success_response(data, getattr(request.state, "request_id", None))


@router.post("", status_code=201)
async def create_board(
    req: CreateBoardRequest,
    request: Request,
    claimant: Annotated[Claimant, Depends(get_claimant)],
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_board(db, req, claimant)
    return _respond(request, result.model_dump(mode="json"))


@router.get("")
async def list_boards(
    request: Request,
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
    status: BoardStatus | None = Query(None, description="Filter by board status"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    result = await _service.list_boards(db, status.value if status else None, limit)
    return _respond(request, result.model_dump(mode="json"))


@router.get("/{board_id}")
async def get_board(
    board_id: str,
    request: Request,
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_board(db, board_id)
    return _respond(request, result.model_dump(mode="json"))


async def _transition(
    board_id: str,
    target: BoardStatus,
    claimant: Claimant,
    request: Request,
    db: AsyncSession | None,
) -> ApiResponse:
    result = await _service.transition(db, board_id, target, claimant)
    return _respond(request, result.model_dump(mode="json"))


@router.post("/{board_id}/open")
async def open_board(
    board_id: str,
    request: Request,
    claimant: Annotated[Claimant, Depends(get_claimant)],
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    return await _transition(board_id, BoardStatus.OPEN, claimant, request, db)


@router.post("/{board_id}/lock")
async def lock_board(
    board_id: str,
    request: Request,
    claimant: Annotated[Claimant, Depends(get_claimant)],
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    return await _transition(board_id, BoardStatus.LOCKED, claimant, request, db)


@router.post("/{board_id}/start")
async def start_game(
    board_id: str,
    request: Request,
    claimant: Annotated[Claimant, Depends(get_claimant)],
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    return await _transition(board_id, BoardStatus.IN_PROGRESS, claimant, request, db)


@router.post("/{board_id}/cancel")
async def cancel_board(
    board_id: str,
    request: Request,
    claimant: Annotated[Claimant, Depends(get_claimant)],
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    return await _transition(board_id, BoardStatus.CANCELLED, claimant, request, db)


@router.post("/{board_id}/claims")
async def claim_cells(
    board_id: str,
    req: ClaimRequest,
    request: Request,
    claimant: Annotated[Claimant, Depends(get_claimant)],
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.claim(db, board_id, req, claimant)
    return _respond(request, result.model_dump(mode="json"))


@router.post("/{board_id}/scores")
async def record_score(
    board_id: str,
    req: ScoreRequest,
    request: Request,
    claimant: Annotated[Claimant, Depends(get_claimant)],
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.record_score(db, board_id, req, claimant)
    return _respond(request, result.model_dump(mode="json"))


@router.get("/{board_id}/settlement")
async def get_settlement(
    board_id: str,
    request: Request,
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.settlement(db, board_id)
    return _respond(request, result.model_dump(mode="json"))
