"""Tests for settlement: per-winner payouts, summaries, payment payloads."""

from typing import Any

import pytest

from src.sq_board.domain.factory import create_board
from src.sq_board.domain.ledger import claim_cell
from src.sq_board.domain.lifecycle import lock_board, open_board
from src.sq_board.domain.models import Board, Claimant, PeriodResult
from src.sq_common.datetime_utils import utc_now
from src.sq_common.enums import BoardShape, PaymentProvider
from src.sq_common.errors import CellNotFoundError
from src.sq_payout.domain.settlement import (
    build_payment_payload,
    period_payouts,
    settle_board,
    winner_summary,
)
from src.sq_scoring.domain.winner import resolve_winners

ALICE = Claimant("user-alice", "Alice")
BOB = Claimant("user-bob", "Bob")


def _make_board(**kwargs: Any) -> Board:
    defaults: dict[str, Any] = {
        "name": "Settlement Board",
        "price_per_cell": 100,
        "home_team": "KC",
        "away_team": "PHI",
    }
    defaults.update(kwargs)
    board = create_board(BoardShape.TEN_BY_TEN, **defaults)
    board.row_headers = [(d,) for d in range(10)]
    board.col_headers = [(d,) for d in range(10)]
    return board


class TestPeriodPayouts:
    def test_single_winner_gets_full_period(self) -> None:
        board = _make_board()
        open_board(board)
        claim_cell(board, 7, 4, ALICE)  # away 7, home 4
        lock_board(board)
        resolve_winners(board, 24, 17, 3)

        payouts = period_payouts(board, 3)
        assert len(payouts) == 1
        p = payouts[0]
        assert (p.user_id, p.period_label, p.amount) == ("user-alice", "Final", 3200)
        assert (p.row, p.col) == (7, 4)

    def test_unresolved_period_pays_nothing(self) -> None:
        board = _make_board()
        assert period_payouts(board, 0) == []

    def test_unowned_winner_pays_nothing(self) -> None:
        board = _make_board()
        open_board(board)
        lock_board(board)
        resolve_winners(board, 24, 17, 3)
        assert period_payouts(board, 3) == []

    def test_multiple_winners_split_with_floor(self) -> None:
        board = _make_board(price_per_cell=333)
        open_board(board)
        claim_cell(board, 1, 1, ALICE)
        claim_cell(board, 2, 2, BOB)
        lock_board(board)
        # Two winners recorded for one period (e.g. imported history).
        board.period_results[0] = PeriodResult(
            period=0, home_score=1, away_score=1,
            matched=[(1, 1), (2, 2)], winners=[(1, 1), (2, 2)], resolved_at=utc_now(),
        )
        payouts = period_payouts(board, 0)
        # pot 33300 * 1600 bps = 5328; split in two
        assert [p.amount for p in payouts] == [2664, 2664]


class TestSettleBoard:
    def test_paid_plus_house_equals_pot(self) -> None:
        board = _make_board(price_per_cell=123)
        open_board(board)
        claim_cell(board, 7, 4, ALICE)
        claim_cell(board, 0, 0, BOB)
        lock_board(board)
        resolve_winners(board, 4, 7, 0)     # alice
        resolve_winners(board, 10, 20, 1)   # bob
        resolve_winners(board, 3, 3, 2)     # nobody
        resolve_winners(board, 24, 17, 3)   # alice

        report = settle_board(board)
        assert report.pot_total == 12_300
        assert report.total_paid == 1968 + 2952 + 3936
        assert report.total_paid + report.house_total == report.pot_total

        summary = winner_summary(report.payouts)
        assert summary["user-alice"].total_payout == 1968 + 3936
        assert summary["user-alice"].wins == 2
        assert summary["user-alice"].periods == ["Q1", "Final"]
        assert summary["user-bob"].total_payout == 2952

    def test_no_results(self) -> None:
        report = settle_board(_make_board())
        assert report.payouts == []
        assert report.house_total == report.pot_total == 10_000


class TestPaymentPayload:
    def test_amount_and_provider(self) -> None:
        board = _make_board(price_per_cell=500)
        payload = build_payment_payload(board, [(0, 1), (0, 0), (0, 1)], "paypal")
        assert payload.cells == [(0, 0), (0, 1)]
        assert payload.amount == 1000
        assert payload.provider == PaymentProvider.PAYPAL
        assert payload.board_id == board.id

    def test_default_provider(self) -> None:
        payload = build_payment_payload(_make_board(), [(9, 9)])
        assert payload.provider == PaymentProvider.STRIPE

    def test_foreign_cell_rejected(self) -> None:
        with pytest.raises(CellNotFoundError):
            build_payment_payload(_make_board(), [(10, 0)])

    def test_unknown_provider_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_payment_payload(_make_board(), [(0, 0)], "venmo")
