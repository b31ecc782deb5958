from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.tl_common.enums import BlockState, ConfirmAction, LadderMode, Side
from src.tl_confirm.domain.models import ConfirmCommand
from src.tl_engine.domain.models import EngineSettings
from src.tl_ledger.domain.models import Trade
from src.tl_market.domain.models import BookLevel, MarketSnapshot


# --- Requests ---

class ArmRequest(BaseModel):
    price: Decimal = Field(gt=0)
    side: Side | None = None
    quantity: int | None = Field(None, ge=1)


class ConfirmRequest(BaseModel):
    command_id: str


class RegenerateRequest(BaseModel):
    force: bool = False


class ResetRequest(BaseModel):
    price: Decimal | None = Field(None, gt=0)


class SettingsUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    side: Side | None = None
    quantity: int | None = Field(None, ge=1)
    ladder_mode: LadderMode | None = None
    levels_per_side: int | None = Field(None, ge=1, le=100)
    tick_size: Decimal | None = Field(None, gt=0)
    auto_recalculate: bool | None = None
    recalc_step_multiplier: int | None = Field(None, ge=1)
    quantity_thresholds: list[int] | None = None
    tick_interval_ms: int | None = Field(None, ge=20, le=200)


# --- Responses ---

class BookLevelResponse(BaseModel):
    price: Decimal
    quantity: int

    @classmethod
    def from_domain(cls, level: BookLevel) -> "BookLevelResponse":
        return cls(price=level.price, quantity=level.quantity)


class MarketResponse(BaseModel):
    last_price: Decimal
    best_bid: Decimal | None
    best_ask: Decimal | None
    spread: Decimal | None
    tick_size: Decimal
    asks: list[BookLevelResponse]
    bids: list[BookLevelResponse]
    tick_count: int
    running: bool
    tick_interval_ms: int | None

    @classmethod
    def from_snapshot(
        cls, snap: MarketSnapshot, tick_count: int, running: bool, interval_ms: int | None
    ) -> "MarketResponse":
        return cls(
            last_price=snap.last_price,
            best_bid=snap.best_bid,
            best_ask=snap.best_ask,
            spread=snap.spread,
            tick_size=snap.tick_size,
            asks=[BookLevelResponse.from_domain(lv) for lv in snap.asks],
            bids=[BookLevelResponse.from_domain(lv) for lv in snap.bids],
            tick_count=tick_count,
            running=running,
            tick_interval_ms=interval_ms,
        )


class PricePointResponse(BaseModel):
    t: datetime
    price: Decimal


class LadderLevelResponse(BaseModel):
    price: Decimal
    state: BlockState
    distance: Decimal


class LadderResponse(BaseModel):
    mode: LadderMode
    side: Side
    current_price: Decimal
    levels: list[LadderLevelResponse]


class ArmedOrderResponse(BaseModel):
    price: Decimal
    side: Side
    quantity: int
    armed_at: datetime


class ArmResponse(BaseModel):
    price: Decimal
    armed: bool
    state: BlockState


class TradeResponse(BaseModel):
    id: str
    timestamp: datetime
    side: Side
    quantity: int
    target_price: Decimal
    exec_price: Decimal
    is_square_off: bool
    original_trade_id: str | None

    @classmethod
    def from_domain(cls, t: Trade) -> "TradeResponse":
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


class PnlResponse(BaseModel):
    current_price: Decimal
    realized: Decimal
    unrealized: Decimal
    total: Decimal
    armed_count: int
    open_count: int


class ConfirmationResponse(BaseModel):
    open: bool
    command_id: str | None = None
    kind: ConfirmAction | None = None
    price: Decimal | None = None
    message: str | None = None

    @classmethod
    def from_command(cls, cmd: ConfirmCommand | None) -> "ConfirmationResponse":
        if cmd is None:
            return cls(open=False)
        return cls(
            open=True,
            command_id=cmd.command_id,
            kind=cmd.kind,
            price=cmd.price,
            message=cmd.message,
        )


class SettingsResponse(BaseModel):
    side: Side
    quantity: int
    ladder_mode: LadderMode
    levels_per_side: int
    tick_size: Decimal
    auto_recalculate: bool
    recalc_step_multiplier: int
    quantity_thresholds: list[int]
    tick_interval_ms: int | None = None

    @classmethod
    def from_domain(cls, s: EngineSettings, interval_ms: int | None) -> "SettingsResponse":
        return cls(
            side=s.side,
            quantity=s.quantity,
            ladder_mode=s.ladder_mode,
            levels_per_side=s.levels_per_side,
            tick_size=s.tick_size,
            auto_recalculate=s.auto_recalculate,
            recalc_step_multiplier=s.recalc_step_multiplier,
            quantity_thresholds=list(s.quantity_thresholds),
            tick_interval_ms=interval_ms,
        )
