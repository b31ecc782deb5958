"""Trade ledger domain models — pure frozen dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.tl_common.enums import Side


@dataclass(frozen=True)
class Trade:
    id: str
    timestamp: datetime
    side: Side
    quantity: int
    target_price: Decimal     # armed price (copied from the opening trade on square-off)
    exec_price: Decimal       # tick price that filled it; slippage = exec - target
    is_square_off: bool = False
    original_trade_id: str | None = None

    @property
    def slippage(self) -> Decimal:
        return self.exec_price - self.target_price


@dataclass(frozen=True)
class Position:
    """An opening trade paired with at most one closing (square-off) trade."""

    opening: Trade
    closing: Trade | None = None

    @property
    def is_open(self) -> bool:
        return self.closing is None

    @property
    def quantity(self) -> int:
        return self.opening.quantity
