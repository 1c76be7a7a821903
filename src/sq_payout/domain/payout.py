"""Payout Calculator — pot and per-period payout math in integer cents.

Schedules are lists of basis points, one entry per scoring period. Their sum
may be at most 10000; whatever is left over is the house share.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from src.sq_board.domain.constants import (
    DEFAULT_SCHEDULE_2_PERIODS,
    DEFAULT_SCHEDULE_4_PERIODS,
    DEFAULT_SHOTGUN_SCHEDULE_2_PERIODS,
    DEFAULT_SHOTGUN_SCHEDULE_4_PERIODS,
    GRID_DIMENSIONS,
)
from src.sq_common.cents import BPS_DENOMINATOR, apply_bps
from src.sq_common.enums import BoardShape
from src.sq_common.errors import InvalidPayoutScheduleError, InvalidPeriodError


@dataclass
class PeriodPayout:
    period: int
    label: str
    bps: int
    amount: int  # cents


def pot_total(shape: BoardShape | str, price_per_cell: int) -> int:
    if price_per_cell < 0:
        raise ValueError(f"price_per_cell must not be negative, got {price_per_cell}")
    rows, cols = GRID_DIMENSIONS[BoardShape(shape)]
    return rows * cols * price_per_cell


def validate_schedule(schedule: Sequence[int]) -> list[int]:
    """Return the schedule as a list, or raise InvalidPayoutScheduleError."""
    if len(schedule) == 0:
        raise InvalidPayoutScheduleError("schedule must have at least one period")
    for bps in schedule:
        if isinstance(bps, bool) or not isinstance(bps, int):
            raise InvalidPayoutScheduleError(f"entries must be integer bps, got {bps!r}")
        if bps < 0:
            raise InvalidPayoutScheduleError(f"negative share {bps} bps")
    total = sum(schedule)
    if total > BPS_DENOMINATOR:
        raise InvalidPayoutScheduleError(f"shares sum to {total} bps, above {BPS_DENOMINATOR}")
    return list(schedule)


def percentages_to_bps(percentages: Sequence[int]) -> list[int]:
    """Whole percentages (20 for 20%) to a validated bps schedule."""
    return validate_schedule([p * 100 for p in percentages])


def default_schedule(shape: BoardShape | str, period_count: int) -> list[int]:
    shotgun = BoardShape(shape) == BoardShape.SHOTGUN
    if period_count == 4:
        base = DEFAULT_SHOTGUN_SCHEDULE_4_PERIODS if shotgun else DEFAULT_SCHEDULE_4_PERIODS
    elif period_count == 2:
        base = DEFAULT_SHOTGUN_SCHEDULE_2_PERIODS if shotgun else DEFAULT_SCHEDULE_2_PERIODS
    else:
        raise InvalidPayoutScheduleError(f"no default schedule for {period_count} periods")
    return list(base)


def payout_for_period(pot: int, period_index: int, schedule: Sequence[int]) -> int:
    if pot < 0:
        raise ValueError(f"pot must not be negative, got {pot}")
    validated = validate_schedule(schedule)
    if not (0 <= period_index < len(validated)):
        raise InvalidPeriodError(period_index)
    return apply_bps(pot, validated[period_index])


def total_payouts(pot: int, schedule: Sequence[int]) -> int:
    return sum(payout_for_period(pot, i, schedule) for i in range(len(schedule)))


def house_share(pot: int, schedule: Sequence[int]) -> int:
    """Pot minus every period's payout (includes floor-division remainders)."""
    return pot - total_payouts(pot, schedule)


def payout_breakdown(
    pot: int, schedule: Sequence[int], labels: Sequence[str]
) -> list[PeriodPayout]:
    return [
        PeriodPayout(
            period=i,
            label=labels[i] if i < len(labels) else f"P{i + 1}",
            bps=bps,
            amount=payout_for_period(pot, i, schedule),
        )
        for i, bps in enumerate(schedule)
    ]
