"""Persisted engine record — the single JSON document stored under SNAPSHOT_KEY.

Armed orders are stored as an explicit list of [price, intent] pairs so JSON
object keys never have to carry Decimal prices.
"""
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field

from src.tl_common.enums import LadderMode, Side
from src.tl_engine.domain.models import EngineSettings, EngineState
from src.tl_ledger.domain.models import Trade
from src.tl_order.domain.models import OrderIntent

RECORD_VERSION = 1

PositivePrice = Annotated[Decimal, Field(gt=0)]


class IntentRecord(BaseModel):
    side: Side
    quantity: int = Field(ge=1)
    armed_at: datetime

    @classmethod
    def from_domain(cls, intent: OrderIntent) -> "IntentRecord":
        return cls(side=intent.side, quantity=intent.quantity, armed_at=intent.armed_at)

    def to_domain(self) -> OrderIntent:
        return OrderIntent(side=self.side, quantity=self.quantity, armed_at=self.armed_at)


class TradeRecord(BaseModel):
    id: str
    timestamp: datetime
    side: Side
    quantity: int = Field(ge=1)
    target_price: PositivePrice
    exec_price: PositivePrice
    is_square_off: bool = False
    original_trade_id: str | None = None

    @classmethod
    def from_domain(cls, t: Trade) -> "TradeRecord":
        return cls(
            id=t.id,
            timestamp=t.timestamp,
            side=t.side,
            quantity=t.quantity,
            target_price=t.target_price,
            exec_price=t.exec_price,
            is_square_off=t.is_square_off,
            original_trade_id=t.original_trade_id,
        )

    def to_domain(self) -> Trade:
        return Trade(
            id=self.id,
            timestamp=self.timestamp,
            side=self.side,
            quantity=self.quantity,
            target_price=self.target_price,
            exec_price=self.exec_price,
            is_square_off=self.is_square_off,
            original_trade_id=self.original_trade_id,
        )


class SettingsRecord(BaseModel):
    ladder_mode: LadderMode
    levels_per_side: int = Field(ge=1)
    tick_size: Decimal = Field(gt=0)
    auto_recalculate: bool
    recalc_step_multiplier: int = Field(ge=1)
    quantity_thresholds: list[int]


class PersistedState(BaseModel):
    version: int = RECORD_VERSION
    saved_at: datetime
    armed: list[tuple[PositivePrice, IntentRecord]]
    trades: list[TradeRecord]
    side: Side
    quantity: int = Field(ge=1)
    settings: SettingsRecord
    last_price: PositivePrice | None = None

    @classmethod
    def from_domain(cls, state: EngineState, saved_at: datetime) -> "PersistedState":
        s = state.settings
        return cls(
            saved_at=saved_at,
            armed=[(price, IntentRecord.from_domain(i)) for price, i in state.armed],
            trades=[TradeRecord.from_domain(t) for t in state.trades],
            side=s.side,
            quantity=s.quantity,
            settings=SettingsRecord(
                ladder_mode=s.ladder_mode,
                levels_per_side=s.levels_per_side,
                tick_size=s.tick_size,
                auto_recalculate=s.auto_recalculate,
                recalc_step_multiplier=s.recalc_step_multiplier,
                quantity_thresholds=list(s.quantity_thresholds),
            ),
            last_price=state.last_price,
        )

    def to_domain(self) -> EngineState:
        cfg = self.settings
        return EngineState(
            settings=EngineSettings(
                side=self.side,
                quantity=self.quantity,
                ladder_mode=cfg.ladder_mode,
                levels_per_side=cfg.levels_per_side,
                tick_size=cfg.tick_size,
                auto_recalculate=cfg.auto_recalculate,
                recalc_step_multiplier=cfg.recalc_step_multiplier,
                quantity_thresholds=tuple(cfg.quantity_thresholds),
            ),
            armed=[(price, rec.to_domain()) for price, rec in self.armed],
            trades=[t.to_domain() for t in self.trades],
            last_price=self.last_price,
        )
