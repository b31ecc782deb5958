"""Decimal tick arithmetic.

All prices are Decimal. Floats are only accepted at the boundary and go
through str() first so 2006.16 stays 2006.16.
"""

from decimal import ROUND_HALF_UP, Decimal

_ONE = Decimal(1)


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_to_tick(price: Decimal, tick_size: Decimal) -> Decimal:
    """Round half-up to the nearest multiple of tick_size: round(price/tick)·tick."""
    if tick_size <= 0:
        raise ValueError(f"Tick size must be positive, got {tick_size}")
    steps = (price / tick_size).quantize(_ONE, rounding=ROUND_HALF_UP)
    return steps * tick_size


def format_price(price: Decimal) -> str:
    """Display string: 2006.15 -> '₹2,006.15', -12 -> '-₹12.00'."""
    amount = price.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if amount < 0:
        return f"-₹{-amount:,.2f}"
    return f"₹{amount:,.2f}"
