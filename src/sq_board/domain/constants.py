"""Board geometry, pricing limits and default payout schedules."""

from src.sq_common.enums import BoardShape

DIGITS: tuple[int, ...] = tuple(range(10))

# (rows, cols). Shotgun is one linear row of two 10-cell bands.
GRID_DIMENSIONS: dict[BoardShape, tuple[int, int]] = {
    BoardShape.SHOTGUN: (1, 20),
    BoardShape.FIVE_BY_FIVE: (5, 5),
    BoardShape.TEN_BY_TEN: (10, 10),
}

SHOTGUN_BAND_SIZE = 10
SHOTGUN_BAND_COUNT = 2
HALFTIME_BAND = 0
FINAL_BAND = 1

DEFAULT_CELL_PRICE_CENTS = 100
MIN_CELL_PRICE_CENTS = 10
MAX_CELL_PRICE_CENTS = 100_000

BOARD_NAME_MIN_LENGTH = 3
BOARD_NAME_MAX_LENGTH = 50

# Basis points per scoring period; the remainder (1200 bps) is the house share.
DEFAULT_SCHEDULE_4_PERIODS: tuple[int, ...] = (1600, 2400, 1600, 3200)
DEFAULT_SCHEDULE_2_PERIODS: tuple[int, ...] = (4000, 4800)
DEFAULT_SHOTGUN_SCHEDULE_4_PERIODS: tuple[int, ...] = (0, 4400, 0, 4400)
DEFAULT_SHOTGUN_SCHEDULE_2_PERIODS: tuple[int, ...] = (4400, 4400)
