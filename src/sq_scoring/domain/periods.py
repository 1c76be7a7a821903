"""Scoring periods per sport and mapping of live-feed period labels to indices."""

from src.sq_common.enums import Sport
from src.sq_common.errors import InvalidPeriodError

PERIOD_LABELS: dict[Sport, tuple[str, ...]] = {
    Sport.NFL: ("Q1", "Halftime", "Q3", "Final"),
    Sport.NBA: ("Q1", "Halftime", "Q3", "Final"),
    Sport.NCAAF: ("Q1", "Halftime", "Q3", "Final"),
    Sport.NCAAB: ("H1", "Final"),
    Sport.NHL: ("P1", "P2", "P3", "Final"),
    Sport.OTHER: ("Q1", "Q2", "Q3", "Final"),
}

# Feed labels that always mean the last paying period.
_FINAL_ALIASES = frozenset({"FINAL", "F", "FT", "OT", "F/OT", "FINAL/OT", "END"})
_HALF_ALIASES = frozenset({"HALF", "HALFTIME", "HT", "Q2", "H1", "1H"})


def period_labels(sport: Sport | str) -> tuple[str, ...]:
    return PERIOD_LABELS[Sport(sport)]


def period_count(sport: Sport | str) -> int:
    return len(period_labels(sport))


def halftime_period(count: int) -> int:
    """Index of the period that closes the first half: 1 of 4, 0 of 2."""
    return count // 2 - 1


def final_period(count: int) -> int:
    return count - 1


def period_index(sport: Sport | str, period: int | str) -> int:
    """Resolve a period index or feed label ('Q2', 'half', 'OT', 'Final') to an index.

    Overtime folds into the final period.
    """
    labels = period_labels(sport)
    count = len(labels)
    if isinstance(period, int) and not isinstance(period, bool):
        if 0 <= period < count:
            return period
        raise InvalidPeriodError(period)

    key = str(period).strip().upper()
    for i, label in enumerate(labels):
        if label.upper() == key:
            return i
    if key in _FINAL_ALIASES:
        return final_period(count)
    if key in _HALF_ALIASES:
        return halftime_period(count)
    # Generic "Q3" / "P3" style labels by ordinal.
    if len(key) == 2 and key[0] in "QP" and key[1].isdigit():
        ordinal = int(key[1])
        if 1 <= ordinal <= count:
            return ordinal - 1
    raise InvalidPeriodError(period)
