"""TradeLedger — append-only trade log with square-off and P&L queries."""
from collections.abc import Callable, Iterable
from datetime import datetime
from decimal import Decimal

from src.tl_ledger.domain.models import Position, Trade
from src.tl_ledger.domain.pnl import pair_positions, sum_pnl


class TradeLedger:
    def __init__(self, next_id: Callable[[], str]) -> None:
        self._trades: list[Trade] = []
        self._next_id = next_id

    def record(self, trades: Iterable[Trade]) -> None:
        self._trades.extend(trades)

    def trades(self) -> list[Trade]:
        return list(self._trades)

    def positions(self) -> list[Position]:
        return pair_positions(self._trades)

    def open_trades(self) -> list[Trade]:
        return [p.opening for p in self.positions() if p.is_open]

    def open_trade_at(self, price: Decimal) -> Trade | None:
        """Oldest open trade armed at `price`, if any."""
        for trade in self.open_trades():
            if trade.target_price == price:
                return trade
        return None

    @property
    def open_count(self) -> int:
        return len(self.open_trades())

    def square_off(
        self, price: Decimal, current_price: Decimal, timestamp: datetime
    ) -> Trade | None:
        """Close the open trade at `price` at the current tick. No-op if none is open."""
        original = self.open_trade_at(price)
        if original is None:
            return None
        closing = self._closing_trade(original, current_price, timestamp)
        self._trades.append(closing)
        return closing

    def square_off_all(self, current_price: Decimal, timestamp: datetime) -> list[Trade]:
        """Close every open trade in one batch at one shared execution price."""
        closing = [
            self._closing_trade(t, current_price, timestamp) for t in self.open_trades()
        ]
        self._trades.extend(closing)
        return closing

    def realized_pnl(self) -> Decimal:
        closed = [p for p in self.positions() if not p.is_open]
        # current price is unused for closed positions
        return sum_pnl(closed, Decimal(0))

    def unrealized_pnl(self, current_price: Decimal) -> Decimal:
        return sum_pnl((p for p in self.positions() if p.is_open), current_price)

    def total_pnl(self, current_price: Decimal) -> Decimal:
        return sum_pnl(self.positions(), current_price)

    def clear(self) -> None:
        self._trades.clear()

    def load(self, trades: Iterable[Trade]) -> None:
        self._trades = list(trades)

    def __len__(self) -> int:
        return len(self._trades)

    def _closing_trade(
        self, original: Trade, current_price: Decimal, timestamp: datetime
    ) -> Trade:
        return Trade(
            id=self._next_id(),
            timestamp=timestamp,
            side=original.side.opposite,
            quantity=original.quantity,
            target_price=original.target_price,
            exec_price=current_price,
            is_square_off=True,
            original_trade_id=original.id,
        )
