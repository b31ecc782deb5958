from dataclasses import dataclass
from decimal import Decimal

DEFAULT_QUANTITY_THRESHOLDS: tuple[int, ...] = (25, 50, 100, 200, 400, 800)


@dataclass(frozen=True)
class LadderConfig:
    """Shape of a generated ladder."""

    levels_per_side: int
    tick_size: Decimal
    quantity_thresholds: tuple[int, ...] = DEFAULT_QUANTITY_THRESHOLDS  # LIQUIDITY only

    def __post_init__(self) -> None:
        if self.levels_per_side < 1:
            raise ValueError(f"levels_per_side must be >= 1, got {self.levels_per_side}")
        if self.tick_size <= 0:
            raise ValueError(f"tick_size must be positive, got {self.tick_size}")
        thresholds = self.quantity_thresholds
        if any(q <= 0 for q in thresholds):
            raise ValueError("quantity_thresholds must be positive")
        if any(a >= b for a, b in zip(thresholds, thresholds[1:])):
            raise ValueError("quantity_thresholds must be strictly ascending")

    @property
    def max_levels(self) -> int:
        return 2 * self.levels_per_side + 1
