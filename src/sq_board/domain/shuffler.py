"""Digit Shuffler — unbiased permutations used for header labels.

Durstenfeld/Fisher-Yates: walk i from the last index down, swap with a
uniformly chosen j in [0, i]. Randomness comes from the OS CSPRNG unless a
seeded random.Random is passed for a reproducible draw.
"""

import random
import secrets
from collections.abc import Sequence
from typing import TypeVar

from src.sq_board.domain.constants import DIGITS
from src.sq_board.domain.models import HeaderLabel

T = TypeVar("T")

_system_random = random.SystemRandom()


def shuffle(sequence: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Return a uniformly random permutation of sequence; the input is untouched."""
    items = list(sequence)
    source = rng or _system_random
    for i in range(len(items) - 1, 0, -1):
        j = source.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


def generate_digits(count: int, rng: random.Random | None = None) -> list[HeaderLabel]:
    """Header labels for one axis.

    count == 10: ten single-digit labels, a permutation of 0-9.
    otherwise: count labels made from consecutive pairs of one shuffle of 0-9,
    e.g. count=5 -> [(3, 8), (0, 6), ...]; each pair is unordered for matching.
    """
    digits = shuffle(DIGITS, rng)
    if count == len(DIGITS):
        return [(d,) for d in digits]
    if not (1 <= count <= len(DIGITS) // 2):
        raise ValueError(f"count must be 10 or between 1 and 5, got {count}")
    return [(digits[i * 2], digits[i * 2 + 1]) for i in range(count)]


def generate_seed() -> str:
    return secrets.token_hex(8)


def seeded_rng(seed: str) -> random.Random:
    """Deterministic RNG for replaying a recorded header draw."""
    return random.Random(seed)


def label_text(label: HeaderLabel) -> str:
    """(0, 7) -> '07', (4,) -> '4'."""
    return "".join(str(d) for d in label)


def is_digit_permutation(labels: Sequence[HeaderLabel] | Sequence[int]) -> bool:
    """True when the labels' digits, flattened, are exactly 0-9 once each."""
    flat: list[int] = []
    for label in labels:
        if isinstance(label, int):
            flat.append(label)
        else:
            flat.extend(label)
    return sorted(flat) == list(DIGITS)
