"""Engine settings and the exportable engine state — pure dataclasses."""
from dataclasses import dataclass, field
from decimal import Decimal

from src.tl_common.enums import LadderMode, Side
from src.tl_ladder.domain.models import DEFAULT_QUANTITY_THRESHOLDS, LadderConfig
from src.tl_ledger.domain.models import Trade
from src.tl_order.domain.models import OrderIntent

# Changing any of these redraws the ladder.
LADDER_SHAPE_FIELDS = frozenset(
    {"side", "ladder_mode", "levels_per_side", "tick_size", "quantity_thresholds"}
)


@dataclass
class EngineSettings:
    side: Side = Side.BUY
    quantity: int = 1
    ladder_mode: LadderMode = LadderMode.LTP
    levels_per_side: int = 12
    tick_size: Decimal = Decimal("0.05")
    auto_recalculate: bool = True
    recalc_step_multiplier: int = 1
    quantity_thresholds: tuple[int, ...] = DEFAULT_QUANTITY_THRESHOLDS

    def ladder_config(self) -> LadderConfig:
        return LadderConfig(
            levels_per_side=self.levels_per_side,
            tick_size=self.tick_size,
            quantity_thresholds=self.quantity_thresholds,
        )


@dataclass
class EngineState:
    """Everything needed to rebuild an engine: armed map, trade log, settings."""

    settings: EngineSettings
    armed: list[tuple[Decimal, OrderIntent]] = field(default_factory=list)
    trades: list[Trade] = field(default_factory=list)
    last_price: Decimal | None = None
