"""Ladder recalculation throttle: time gate AND price-drift gate."""
import time
from collections.abc import Callable
from decimal import Decimal

# Absorbs float error so an elapsed time equal to the interval passes.
_EPSILON_S = 1e-9


class RecalcThrottle:
    """Allows a recalculation when both:

      - at least `min_interval_s` elapsed since the last one, and
      - |price - last price| >= tick_size * drift_multiplier * step_multiplier.

    Before the first `mark()` it always allows.
    """

    def __init__(
        self,
        min_interval_s: float = 0.2,
        drift_multiplier: Decimal = Decimal(2),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.min_interval_s = min_interval_s
        self.drift_multiplier = drift_multiplier
        self._clock = clock
        self.last_price: Decimal | None = None
        self.last_at: float | None = None

    def drift_threshold(self, tick_size: Decimal, step_multiplier: int) -> Decimal:
        return tick_size * self.drift_multiplier * step_multiplier

    def should_recalculate(
        self,
        price: Decimal,
        tick_size: Decimal,
        step_multiplier: int,
        now: float | None = None,
    ) -> bool:
        if self.last_price is None or self.last_at is None:
            return True
        now = self._clock() if now is None else now
        if now - self.last_at + _EPSILON_S < self.min_interval_s:
            return False
        return abs(price - self.last_price) >= self.drift_threshold(tick_size, step_multiplier)

    def mark(self, price: Decimal, now: float | None = None) -> None:
        self.last_price = price
        self.last_at = self._clock() if now is None else now

    def reset(self) -> None:
        self.last_price = None
        self.last_at = None
