"""Domain models for sq_board — pure dataclasses, no SQLAlchemy dependency.

Cells are owned by their Board and addressed by (row, col). Shotgun boards use a
single row, so a shotgun cell's linear index equals its col.
"""

from dataclasses import dataclass, field
from datetime import datetime

from src.sq_common.enums import BoardShape, BoardStatus, Sport
from src.sq_common.errors import CellNotFoundError
from src.sq_payout.domain.payout import pot_total

# A header label lists the digits it covers: (7,) on 10x10, (0, 7) on 5x5.
HeaderLabel = tuple[int, ...]
Coordinate = tuple[int, int]


@dataclass(frozen=True)
class Claimant:
    """Identity supplied by the auth collaborator."""

    user_id: str
    display_name: str


@dataclass
class CellOwner:
    user_id: str
    display_name: str
    claimed_at: datetime


@dataclass
class Cell:
    row: int
    col: int
    owner: CellOwner | None = None
    is_winner: bool = False
    winning_periods: list[int] = field(default_factory=list)

    @property
    def coord(self) -> Coordinate:
        return (self.row, self.col)

    @property
    def is_claimed(self) -> bool:
        return self.owner is not None


@dataclass
class PeriodResult:
    """Audit record of one resolved scoring period."""

    period: int
    home_score: int
    away_score: int
    matched: list[Coordinate]   # cells whose headers matched, owned or not
    winners: list[Coordinate]   # matched cells that had an owner
    resolved_at: datetime


@dataclass
class Board:
    id: str
    name: str
    shape: BoardShape
    price_per_cell: int                     # cents
    home_team: str
    away_team: str
    sport: Sport
    payout_schedule: list[int]              # bps per scoring period
    status: BoardStatus
    cells: dict[Coordinate, Cell]
    created_at: datetime
    updated_at: datetime
    row_headers: list[HeaderLabel] = field(default_factory=list)
    col_headers: list[HeaderLabel] = field(default_factory=list)
    band_headers: list[list[int]] = field(default_factory=list)  # shotgun only
    external_game_id: str | None = None
    starts_at: datetime | None = None
    created_by: str | None = None
    max_cells_per_claimant: int | None = None
    shuffle_seed: str | None = None
    period_results: dict[int, PeriodResult] = field(default_factory=dict)
    opened_at: datetime | None = None
    locked_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None

    @property
    def total_cells(self) -> int:
        return len(self.cells)

    @property
    def pot_total(self) -> int:
        return pot_total(self.shape, self.price_per_cell)

    @property
    def period_count(self) -> int:
        return len(self.payout_schedule)

    @property
    def has_headers(self) -> bool:
        if self.shape == BoardShape.SHOTGUN:
            return bool(self.band_headers)
        return bool(self.row_headers) and bool(self.col_headers)

    @property
    def claimed_count(self) -> int:
        return sum(1 for c in self.cells.values() if c.owner is not None)

    @property
    def available_count(self) -> int:
        return self.total_cells - self.claimed_count

    @property
    def completion_percentage(self) -> int:
        if not self.cells:
            return 0
        return self.claimed_count * 100 // self.total_cells

    def cell(self, row: int, col: int) -> Cell:
        found = self.cells.get((row, col))
        if found is None:
            raise CellNotFoundError(row, col)
        return found

    def cell_at_index(self, index: int) -> Cell:
        """Row-major linear addressing; the shotgun layout's natural index."""
        cols = max(c for _, c in self.cells) + 1
        return self.cell(index // cols, index % cols)

    def cells_owned_by(self, user_id: str) -> list[Cell]:
        return [
            c for c in self.cells.values() if c.owner is not None and c.owner.user_id == user_id
        ]

    def winning_cells(self) -> list[Cell]:
        return [c for c in self.cells.values() if c.is_winner]
