"""Order intent domain model — pure dataclass."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.tl_common.enums import Side


@dataclass(frozen=True)
class OrderIntent:
    """An armed conditional order. The target price is the key it is stored under."""

    side: Side
    quantity: int
    armed_at: datetime

    def triggers_at(self, target_price: Decimal, tick_price: Decimal) -> bool:
        # BUY fills at or below the target, SELL at or above it
        if self.side == Side.BUY:
            return tick_price <= target_price
        return tick_price >= target_price
