"""Market data domain models — pure frozen dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class BookLevel:
    price: Decimal
    quantity: int


@dataclass(frozen=True)
class MarketSnapshot:
    """Synthetic top-of-book + depth derived from one price tick.

    asks are ascending by price, bids descending, i.e. both in price priority.
    """

    last_price: Decimal
    best_bid: Decimal | None
    best_ask: Decimal | None
    tick_size: Decimal
    asks: tuple[BookLevel, ...] = ()
    bids: tuple[BookLevel, ...] = ()

    @property
    def has_quotes(self) -> bool:
        return self.best_bid is not None and self.best_ask is not None

    @property
    def spread(self) -> Decimal | None:
        if self.best_bid is None or self.best_ask is None:
            return None
        return self.best_ask - self.best_bid


@dataclass(frozen=True)
class PricePoint:
    timestamp: datetime
    price: Decimal
