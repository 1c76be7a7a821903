"""Integer arithmetic utilities for cents-based pots and payouts.

All prices, pots and payouts use int (cents). Payout fractions use int basis
points (10000 bps = 100%). No float.
"""

BPS_DENOMINATOR = 10_000


def validate_cell_price(price: int, min_cents: int, max_cents: int) -> None:
    """Validate that a per-cell price is an int within [min_cents, max_cents]."""
    if isinstance(price, bool) or not isinstance(price, int):
        raise ValueError(f"Price must be an integer number of cents, got {price!r}")
    if not (min_cents <= price <= max_cents):
        raise ValueError(
            f"Price must be between {min_cents} and {max_cents} cents, got {price}"
        )


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def apply_bps(amount: int, bps: int) -> int:
    """Floor share of amount: amount * bps // 10000 (players are never overpaid)."""
    if amount == 0 or bps == 0:
        return 0
    return amount * bps // BPS_DENOMINATOR


def split_evenly(amount: int, parts: int) -> tuple[int, int]:
    """Split amount into equal integer shares. Returns (share, remainder)."""
    if parts <= 0:
        raise ValueError(f"parts must be positive, got {parts}")
    return amount // parts, amount % parts
