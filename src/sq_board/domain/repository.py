# src/sq_board/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Ownership is written only through claim_cell (compare-and-swap); update()
persists everything else and must never touch cell owners, so a stale Board
snapshot can never overwrite a concurrent claim.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sq_board.domain.models import Board, Cell


class BoardRepositoryProtocol(Protocol):
    async def insert(self, board: Board, db: AsyncSession | None) -> None: ...

    async def get_by_id(
        self, board_id: str, db: AsyncSession | None, for_update: bool = False
    ) -> Board | None: ...

    async def update(self, board: Board, db: AsyncSession | None) -> None: ...

    async def claim_cell(self, board_id: str, cell: Cell, db: AsyncSession | None) -> bool:
        """Set cell.owner iff still unowned and the board is OPEN. True on success."""
        ...

    async def list_boards(
        self, status: str | None, limit: int, db: AsyncSession | None
    ) -> list[Board]: ...
