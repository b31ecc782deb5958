"""Position pairing and P&L.

Trades are paired into positions through `original_trade_id`:
  - closed BUY  position: (close - open) * qty
  - closed SELL position: (open - close) * qty
  - open position: same formula with the current tick in place of close

Nothing here is cached; unrealized legs move with every tick.
"""
from collections.abc import Iterable, Sequence
from decimal import Decimal

from src.tl_common.enums import Side
from src.tl_ledger.domain.models import Position, Trade

_ZERO = Decimal(0)


def pair_positions(trades: Sequence[Trade]) -> list[Position]:
    """Pair each opening trade with its square-off, preserving opening order."""
    closing_by_original: dict[str, Trade] = {}
    for t in trades:
        if t.is_square_off and t.original_trade_id is not None:
            closing_by_original.setdefault(t.original_trade_id, t)
    return [
        Position(opening=t, closing=closing_by_original.get(t.id))
        for t in trades
        if not t.is_square_off
    ]


def position_pnl(position: Position, current_price: Decimal) -> Decimal:
    opening = position.opening
    close_price = current_price if position.closing is None else position.closing.exec_price
    if opening.side == Side.BUY:
        return (close_price - opening.exec_price) * opening.quantity
    return (opening.exec_price - close_price) * opening.quantity


def sum_pnl(positions: Iterable[Position], current_price: Decimal) -> Decimal:
    return sum((position_pnl(p, current_price) for p in positions), _ZERO)


def total_pnl(trades: Sequence[Trade], current_price: Decimal) -> Decimal:
    return sum_pnl(pair_positions(trades), current_price)
