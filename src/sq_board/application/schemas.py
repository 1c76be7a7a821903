"""Pydantic schemas for sq_board API requests and responses.

Money fields are integer cents (`*_cents`) with a display string alongside.
Payout schedules travel as basis points; a create request may instead give
whole percentages, converted with percentages_to_bps.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from src.sq_board.domain.constants import DEFAULT_CELL_PRICE_CENTS
from src.sq_board.domain.models import Board, Cell, PeriodResult
from src.sq_board.domain.shuffler import label_text
from src.sq_common.cents import cents_to_display
from src.sq_payout.domain.payout import payout_breakdown
from src.sq_payout.domain.settlement import (
    OwnerSummary,
    PaymentPayload,
    SettlementReport,
    WinnerPayout,
)
from src.sq_scoring.domain.periods import period_labels

ShapeLiteral = Literal["SHOTGUN", "FIVE_BY_FIVE", "TEN_BY_TEN"]
SportLiteral = Literal["nfl", "nba", "ncaaf", "ncaab", "nhl", "other"]

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateBoardRequest(BaseModel):
    name: str
    shape: ShapeLiteral = "TEN_BY_TEN"
    price_per_cell_cents: int = DEFAULT_CELL_PRICE_CENTS
    home_team: str
    away_team: str
    sport: SportLiteral = "nfl"
    payout_schedule_bps: list[int] | None = None
    payout_percentages: list[int] | None = None
    external_game_id: str | None = None
    starts_at: datetime | None = None
    max_cells_per_claimant: int | None = None
    seed: str | None = None

    @model_validator(mode="after")
    def one_schedule_form(self) -> "CreateBoardRequest":
        if self.payout_schedule_bps is not None and self.payout_percentages is not None:
            raise ValueError("give payout_schedule_bps or payout_percentages, not both")
        return self


class CellRef(BaseModel):
    row: int = Field(ge=0)
    col: int = Field(ge=0)


class ClaimRequest(BaseModel):
    cells: list[CellRef] = Field(min_length=1)
    provider: Literal["stripe", "paypal"] = "stripe"


class ScoreRequest(BaseModel):
    home_score: int = Field(ge=0)
    away_score: int = Field(ge=0)
    period: int | str


# ---------------------------------------------------------------------------
# Board views
# ---------------------------------------------------------------------------


class CellOut(BaseModel):
    row: int
    col: int
    owner_id: str | None = None
    owner_name: str | None = None
    claimed_at: datetime | None = None
    is_winner: bool = False
    winning_periods: list[int] = []

    @classmethod
    def from_domain(cls, cell: Cell) -> "CellOut":
        return cls(
            row=cell.row,
            col=cell.col,
            owner_id=cell.owner.user_id if cell.owner else None,
            owner_name=cell.owner.display_name if cell.owner else None,
            claimed_at=cell.owner.claimed_at if cell.owner else None,
            is_winner=cell.is_winner,
            winning_periods=list(cell.winning_periods),
        )


class PeriodPayoutOut(BaseModel):
    period: int
    label: str
    bps: int
    amount_cents: int
    amount_display: str


class PeriodResultOut(BaseModel):
    period: int
    label: str
    home_score: int
    away_score: int
    matched: list[list[int]]
    winners: list[list[int]]
    resolved_at: datetime

    @classmethod
    def from_domain(cls, result: PeriodResult, label: str) -> "PeriodResultOut":
        return cls(
            period=result.period,
            label=label,
            home_score=result.home_score,
            away_score=result.away_score,
            matched=[list(c) for c in result.matched],
            winners=[list(c) for c in result.winners],
            resolved_at=result.resolved_at,
        )


class BoardListItem(BaseModel):
    id: str
    name: str
    shape: str
    status: str
    sport: str
    home_team: str
    away_team: str
    price_per_cell_cents: int = DEFAULT_CELL_PRICE_CENTS
    pot_total_cents: int
    claimed_count: int
    total_cells: int
    completion_percentage: int
    created_at: datetime

    @classmethod
    def from_domain(cls, board: Board) -> "BoardListItem":
        return cls(
            id=board.id,
            name=board.name,
            shape=board.shape.value,
            status=board.status.value,
            sport=board.sport.value,
            home_team=board.home_team,
            away_team=board.away_team,
            price_per_cell_cents=board.price_per_cell,
            pot_total_cents=board.pot_total,
            claimed_count=board.claimed_count,
            total_cells=board.total_cells,
            completion_percentage=board.completion_percentage,
            created_at=board.created_at,
        )


class BoardListResponse(BaseModel):
    items: list[BoardListItem]


class BoardDetail(BoardListItem):
    price_display: str
    pot_display: str
    external_game_id: str | None
    starts_at: datetime | None
    created_by: str | None
    max_cells_per_claimant: int | None
    payout_schedule_bps: list[int]
    payouts: list[PeriodPayoutOut]
    # Header labels as shown on the grid: "7" on 10x10, "07" on 5x5.
    row_labels: list[str]
    col_labels: list[str]
    band_labels: list[list[str]]
    shuffle_seed: str | None
    cells: list[CellOut]
    period_results: list[PeriodResultOut]
    opened_at: datetime | None
    locked_at: datetime | None
    completed_at: datetime | None
    cancelled_at: datetime | None
    updated_at: datetime

    @classmethod
    def from_domain(cls, board: Board) -> "BoardDetail":
        labels = period_labels(board.sport)
        base = BoardListItem.from_domain(board).model_dump()
        return cls(
            **base,
            price_display=cents_to_display(board.price_per_cell),
            pot_display=cents_to_display(board.pot_total),
            external_game_id=board.external_game_id,
            starts_at=board.starts_at,
            created_by=board.created_by,
            max_cells_per_claimant=board.max_cells_per_claimant,
            payout_schedule_bps=list(board.payout_schedule),
            payouts=[
                PeriodPayoutOut(
                    period=p.period,
                    label=p.label,
                    bps=p.bps,
                    amount_cents=p.amount,
                    amount_display=cents_to_display(p.amount),
                )
                for p in payout_breakdown(board.pot_total, board.payout_schedule, labels)
            ],
            row_labels=[label_text(x) for x in board.row_headers],
            col_labels=[label_text(x) for x in board.col_headers],
            band_labels=[[str(d) for d in band] for band in board.band_headers],
            shuffle_seed=board.shuffle_seed,
            cells=[CellOut.from_domain(board.cells[k]) for k in sorted(board.cells)],
            period_results=[
                PeriodResultOut.from_domain(board.period_results[p], labels[p])
                for p in sorted(board.period_results)
            ],
            opened_at=board.opened_at,
            locked_at=board.locked_at,
            completed_at=board.completed_at,
            cancelled_at=board.cancelled_at,
            updated_at=board.updated_at,
        )


# ---------------------------------------------------------------------------
# Claims, scores, settlement
# ---------------------------------------------------------------------------


class PaymentPayloadOut(BaseModel):
    board_id: str
    cells: list[list[int]]
    amount_cents: int
    amount_display: str
    provider: str

    @classmethod
    def from_domain(cls, payload: PaymentPayload) -> "PaymentPayloadOut":
        return cls(
            board_id=payload.board_id,
            cells=[list(c) for c in payload.cells],
            amount_cents=payload.amount,
            amount_display=cents_to_display(payload.amount),
            provider=payload.provider.value,
        )


class ClaimResponse(BaseModel):
    board_id: str
    claimed: list[CellOut]
    skipped: list[list[int]]
    payment: PaymentPayloadOut


class WinnerPayoutOut(BaseModel):
    period: int
    period_label: str
    row: int
    col: int
    user_id: str
    display_name: str
    amount_cents: int

    @classmethod
    def from_domain(cls, p: WinnerPayout) -> "WinnerPayoutOut":
        return cls(
            period=p.period,
            period_label=p.period_label,
            row=p.row,
            col=p.col,
            user_id=p.user_id,
            display_name=p.display_name,
            amount_cents=p.amount,
        )


class ScoreResponse(BaseModel):
    board_id: str
    status: str
    period: int
    period_label: str
    winners: list[list[int]]
    payouts: list[WinnerPayoutOut]
    completed: bool
    duplicate: bool


class OwnerSummaryOut(BaseModel):
    user_id: str
    display_name: str
    total_payout_cents: int
    wins: int
    periods: list[str]

    @classmethod
    def from_domain(cls, s: OwnerSummary) -> "OwnerSummaryOut":
        return cls(
            user_id=s.user_id,
            display_name=s.display_name,
            total_payout_cents=s.total_payout,
            wins=s.wins,
            periods=list(s.periods),
        )


class SettlementResponse(BaseModel):
    board_id: str
    status: str
    pot_total_cents: int
    total_paid_cents: int
    house_total_cents: int
    payouts: list[WinnerPayoutOut]
    winners: list[OwnerSummaryOut]

    @classmethod
    def from_report(
        cls, report: SettlementReport, status: str, summary: list[OwnerSummary]
    ) -> "SettlementResponse":
        return cls(
            board_id=report.board_id,
            status=status,
            pot_total_cents=report.pot_total,
            total_paid_cents=report.total_paid,
            house_total_cents=report.house_total,
            payouts=[WinnerPayoutOut.from_domain(p) for p in report.payouts],
            winners=[OwnerSummaryOut.from_domain(s) for s in summary],
        )
