"""Random-walk price feed with occasional spikes, plus a bounded price history."""
import random
from collections import deque
from datetime import datetime
from decimal import Decimal

from src.tl_common.datetime_utils import utc_now
from src.tl_common.prices import to_decimal
from src.tl_market.domain.models import PricePoint

_CENT = Decimal("0.01")
TREND_BIAS_CHANCE = 0.1
PRICE_FLOOR_RATIO = 0.5


class RandomWalkTickSource:
    """Produces one price per call; owns no trading semantics."""

    def __init__(
        self,
        initial_price: Decimal | float | str,
        volatility: float = 0.0005,
        spike_chance: float = 0.02,
        spike_multiplier: float = 3.0,
        rng: random.Random | None = None,
    ) -> None:
        self.initial_price = to_decimal(initial_price)
        self.volatility = volatility
        self.spike_chance = spike_chance
        self.spike_multiplier = spike_multiplier
        self._rng = rng or random.Random()
        self._last = self.initial_price

    @property
    def last_price(self) -> Decimal:
        return self._last

    def next_price(self) -> Decimal:
        last = float(self._last)
        change = self._rng.uniform(-1.0, 1.0) * self.volatility * last

        if self._rng.random() < self.spike_chance:
            change *= self.spike_multiplier * (1 if self._rng.random() > 0.5 else -1)

        if self._rng.random() < TREND_BIAS_CHANCE:
            change += self._rng.uniform(-1.0, 1.0) * self.volatility * last

        new_price = max(last + change, last * PRICE_FLOOR_RATIO)
        self._last = Decimal(f"{new_price:.2f}")
        if self._last <= 0:
            self._last = _CENT
        return self._last

    def reset(self, price: Decimal | float | str | None = None) -> None:
        self._last = self.initial_price if price is None else to_decimal(price)


class PriceHistory:
    """Last `limit` ticks, oldest first."""

    def __init__(self, limit: int = 500) -> None:
        self._points: deque[PricePoint] = deque(maxlen=limit)

    def append(self, price: Decimal, timestamp: datetime | None = None) -> None:
        self._points.append(PricePoint(timestamp=timestamp or utc_now(), price=price))

    def points(self) -> list[PricePoint]:
        return list(self._points)

    def clear(self) -> None:
        self._points.clear()

    def __len__(self) -> int:
        return len(self._points)
