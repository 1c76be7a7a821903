"""InMemoryBoardRepository — process-local BoardRepositoryProtocol implementation.

Stores deep copies so callers mutate private snapshots, exactly as they would
with rows loaded from Postgres. A threading.Lock makes claim_cell a true
compare-and-swap even when several event loops share one repository.
"""

import copy
import threading

from sqlalchemy.ext.asyncio import AsyncSession

from src.sq_board.domain.models import Board, Cell
from src.sq_common.enums import BoardStatus


class InMemoryBoardRepository:
    def __init__(self) -> None:
        self._boards: dict[str, Board] = {}
        self._lock = threading.Lock()

    async def insert(self, board: Board, db: AsyncSession | None = None) -> None:
        with self._lock:
            if board.id in self._boards:
                raise ValueError(f"Board {board.id} already exists")
            self._boards[board.id] = copy.deepcopy(board)

    async def get_by_id(
        self, board_id: str, db: AsyncSession | None = None, for_update: bool = False
    ) -> Board | None:
        with self._lock:
            stored = self._boards.get(board_id)
            return copy.deepcopy(stored) if stored is not None else None

    async def update(self, board: Board, db: AsyncSession | None = None) -> None:
        with self._lock:
            stored = self._boards.get(board.id)
            if stored is None:
                raise KeyError(board.id)
            snapshot = copy.deepcopy(board)
            # Owners are authoritative in the store; keep them.
            for coord, cell in snapshot.cells.items():
                cell.owner = copy.deepcopy(stored.cells[coord].owner)
            self._boards[board.id] = snapshot

    async def claim_cell(self, board_id: str, cell: Cell, db: AsyncSession | None = None) -> bool:
        with self._lock:
            stored = self._boards.get(board_id)
            if stored is None or stored.status != BoardStatus.OPEN:
                return False
            target = stored.cells.get(cell.coord)
            if target is None or target.owner is not None or cell.owner is None:
                return False
            target.owner = copy.deepcopy(cell.owner)
            stored.updated_at = cell.owner.claimed_at
            return True

    async def list_boards(
        self, status: str | None, limit: int, db: AsyncSession | None = None
    ) -> list[Board]:
        with self._lock:
            boards = [
                b for b in self._boards.values() if status is None or b.status == status
            ]
            boards.sort(key=lambda b: (b.created_at, b.id), reverse=True)
            return [copy.deepcopy(b) for b in boards[:limit]]
