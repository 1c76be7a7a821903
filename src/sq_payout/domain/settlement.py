"""Settlement — turns resolved periods into per-winner payouts and payment payloads.

No money moves here; payment collaborators consume these plain values.
Unpaid money (unresolved or ownerless periods, split remainders, unscheduled
share) is reported as the house total so paid + house == pot always.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from src.sq_board.domain.models import Board, Coordinate
from src.sq_common.cents import split_evenly
from src.sq_common.enums import PaymentProvider
from src.sq_payout.domain.payout import payout_for_period
from src.sq_scoring.domain.periods import period_labels


@dataclass
class WinnerPayout:
    period: int
    period_label: str
    row: int
    col: int
    user_id: str
    display_name: str
    amount: int  # cents


@dataclass
class SettlementReport:
    board_id: str
    pot_total: int
    payouts: list[WinnerPayout]
    total_paid: int
    house_total: int


@dataclass
class OwnerSummary:
    user_id: str
    display_name: str
    total_payout: int = 0
    wins: int = 0
    periods: list[str] = field(default_factory=list)


@dataclass
class PaymentPayload:
    """Shape consumed by the payment collaborator when a claimant checks out."""

    board_id: str
    cells: list[Coordinate]
    amount: int  # cents
    provider: PaymentProvider


def period_payouts(board: Board, period: int) -> list[WinnerPayout]:
    """Payouts for one resolved period; empty when unresolved or ownerless."""
    result = board.period_results.get(period)
    if result is None or not result.winners:
        return []
    amount = payout_for_period(board.pot_total, period, board.payout_schedule)
    share, _remainder = split_evenly(amount, len(result.winners))
    labels = period_labels(board.sport)
    label = labels[period] if period < len(labels) else f"P{period + 1}"

    payouts: list[WinnerPayout] = []
    for row, col in sorted(result.winners):
        owner = board.cells[(row, col)].owner
        if owner is None:  # winners are recorded only for owned cells
            continue
        payouts.append(
            WinnerPayout(
                period=period,
                period_label=label,
                row=row,
                col=col,
                user_id=owner.user_id,
                display_name=owner.display_name,
                amount=share,
            )
        )
    return payouts


def settle_board(board: Board) -> SettlementReport:
    payouts: list[WinnerPayout] = []
    for period in sorted(board.period_results):
        payouts.extend(period_payouts(board, period))
    pot = board.pot_total
    total_paid = sum(p.amount for p in payouts)
    return SettlementReport(
        board_id=board.id,
        pot_total=pot,
        payouts=payouts,
        total_paid=total_paid,
        house_total=pot - total_paid,
    )


def winner_summary(payouts: Iterable[WinnerPayout]) -> dict[str, OwnerSummary]:
    summary: dict[str, OwnerSummary] = {}
    for p in payouts:
        entry = summary.setdefault(p.user_id, OwnerSummary(p.user_id, p.display_name))
        entry.total_payout += p.amount
        entry.wins += 1
        entry.periods.append(p.period_label)
    return summary


def build_payment_payload(
    board: Board,
    cells: Iterable[Coordinate],
    provider: PaymentProvider | str = PaymentProvider.STRIPE,
) -> PaymentPayload:
    coords = sorted(set(cells))
    for row, col in coords:
        board.cell(row, col)  # raises CellNotFoundError for foreign coordinates
    return PaymentPayload(
        board_id=board.id,
        cells=coords,
        amount=len(coords) * board.price_per_cell,
        provider=PaymentProvider(provider),
    )
