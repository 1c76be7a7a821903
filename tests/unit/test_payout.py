"""Tests for the Payout Calculator — pot, schedules, conservation."""

import pytest

from src.sq_common.enums import BoardShape
from src.sq_common.errors import InvalidPayoutScheduleError, InvalidPeriodError
from src.sq_payout.domain.payout import (
    default_schedule,
    house_share,
    payout_breakdown,
    payout_for_period,
    percentages_to_bps,
    pot_total,
    total_payouts,
    validate_schedule,
)


class TestPotTotal:
    def test_ten_by_ten(self) -> None:
        assert pot_total(BoardShape.TEN_BY_TEN, 100) == 10_000

    def test_five_by_five(self) -> None:
        assert pot_total("FIVE_BY_FIVE", 400) == 10_000

    def test_shotgun(self) -> None:
        assert pot_total(BoardShape.SHOTGUN, 100) == 2_000

    def test_negative_price(self) -> None:
        with pytest.raises(ValueError):
            pot_total(BoardShape.TEN_BY_TEN, -1)


class TestValidateSchedule:
    def test_accepts_partial(self) -> None:
        assert validate_schedule((1000, 2000)) == [1000, 2000]

    def test_accepts_full(self) -> None:
        assert validate_schedule([2500] * 4) == [2500] * 4

    @pytest.mark.parametrize(
        "schedule",
        [[], [5000, 5001], [-100, 200], [1.5, 10], [True, 100]],
    )
    def test_rejects(self, schedule: list) -> None:
        with pytest.raises(InvalidPayoutScheduleError):
            validate_schedule(schedule)

    def test_percentages(self) -> None:
        assert percentages_to_bps([20, 20, 20, 40]) == [2000, 2000, 2000, 4000]
        with pytest.raises(InvalidPayoutScheduleError):
            percentages_to_bps([60, 50])


class TestDefaultSchedule:
    def test_grid(self) -> None:
        assert default_schedule(BoardShape.TEN_BY_TEN, 4) == [1600, 2400, 1600, 3200]
        assert default_schedule(BoardShape.FIVE_BY_FIVE, 2) == [4000, 4800]

    def test_shotgun_pays_half_and_final(self) -> None:
        assert default_schedule(BoardShape.SHOTGUN, 4) == [0, 4400, 0, 4400]
        assert default_schedule(BoardShape.SHOTGUN, 2) == [4400, 4400]

    def test_unsupported_period_count(self) -> None:
        with pytest.raises(InvalidPayoutScheduleError):
            default_schedule(BoardShape.TEN_BY_TEN, 3)


class TestPayoutForPeriod:
    def test_quarters(self) -> None:
        schedule = [1600, 2400, 1600, 3200]
        assert [payout_for_period(10_000, i, schedule) for i in range(4)] == [
            1600, 2400, 1600, 3200,
        ]

    def test_floor(self) -> None:
        assert payout_for_period(999, 0, [3333]) == 332

    def test_bad_index(self) -> None:
        with pytest.raises(InvalidPeriodError):
            payout_for_period(10_000, 4, [2500] * 4)

    def test_negative_pot(self) -> None:
        with pytest.raises(ValueError):
            payout_for_period(-1, 0, [1000])


class TestConservation:
    @pytest.mark.parametrize("pot", [0, 1, 99, 2_000, 10_000, 12_345, 9_999_999])
    @pytest.mark.parametrize(
        "schedule",
        [[1600, 2400, 1600, 3200], [2500] * 4, [3333, 3333, 3334], [0, 4400, 0, 4400]],
    )
    def test_payouts_never_exceed_pot(self, pot: int, schedule: list[int]) -> None:
        paid = total_payouts(pot, schedule)
        assert paid <= pot
        assert paid + house_share(pot, schedule) == pot

    def test_full_schedule_loses_only_rounding(self) -> None:
        assert total_payouts(10_001, [2500] * 4) == 10_000
        assert house_share(10_001, [2500] * 4) == 1


class TestBreakdown:
    def test_labels_and_amounts(self) -> None:
        rows = payout_breakdown(10_000, [1600, 2400, 1600, 3200], ("Q1", "Halftime", "Q3", "Final"))
        assert [r.label for r in rows] == ["Q1", "Halftime", "Q3", "Final"]
        assert [r.amount for r in rows] == [1600, 2400, 1600, 3200]
        assert rows[1].bps == 2400

    def test_missing_labels_fall_back(self) -> None:
        rows = payout_breakdown(100, [5000, 5000], ("H1",))
        assert rows[1].label == "P2"
