"""TradingEngine — single-owner orchestrator for one simulated instrument.

One `advance(price)` call per tick, processed to completion:
snapshot update -> trigger check -> optional ladder regeneration -> history.
Commands (arm / cancel / square-off / configure) run between ticks, never
inside one, so trigger evaluation always sees a fully-formed armed map.
"""
import logging
import random
from dataclasses import fields, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.tl_common.datetime_utils import utc_now
from src.tl_common.enums import BlockState, LadderMode, Side
from src.tl_common.errors import InvalidPriceError, InvalidSettingsError
from src.tl_common.id_generator import TradeIdGenerator
from src.tl_common.prices import round_to_tick, to_decimal
from src.tl_engine.domain.models import LADDER_SHAPE_FIELDS, EngineSettings, EngineState
from src.tl_engine.engine.throttle import RecalcThrottle
from src.tl_ladder.engine.generators import generate
from src.tl_ledger.domain.models import Trade
from src.tl_ledger.engine.ledger import TradeLedger
from src.tl_market.domain.models import MarketSnapshot, PricePoint
from src.tl_market.engine.snapshot_builder import build_snapshot
from src.tl_market.engine.tick_source import PriceHistory
from src.tl_order.domain.models import OrderIntent
from src.tl_order.engine.trigger_engine import TriggerEngine

logger = logging.getLogger(__name__)

_SETTING_NAMES = frozenset(f.name for f in fields(EngineSettings))

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"auto_recalculate must be a boolean, got {value!r}")


class TradingEngine:
    def __init__(
        self,
        initial_price: Decimal | float | str,
        settings: EngineSettings | None = None,
        rng: random.Random | None = None,
        throttle: RecalcThrottle | None = None,
        id_generator: TradeIdGenerator | None = None,
        history_limit: int = 500,
    ) -> None:
        self._settings = replace(settings) if settings else EngineSettings()
        self._rng = rng or random.Random()
        self._throttle = throttle or RecalcThrottle()
        self._next_id = id_generator or TradeIdGenerator()
        self._orders = TriggerEngine()
        self._ledger = TradeLedger(self._next_id)
        self._history = PriceHistory(history_limit)
        self._current_price = self._positive(initial_price)
        self._snapshot = build_snapshot(
            self._current_price, self._settings.tick_size, None, self._rng
        )
        self._ladder: tuple[Decimal, ...] = ()
        self._tick_count = 0
        self.regenerate(force=True)

    # ------------------------------------------------------------------
    # Tick processing
    # ------------------------------------------------------------------

    def advance(self, price: Decimal | float | str, now: datetime | None = None) -> list[Trade]:
        """Process one tick. Returns the trades it executed (possibly none)."""
        tick_price = self._positive(price)
        now = now or utc_now()
        self._current_price = tick_price
        self._snapshot = build_snapshot(
            tick_price, self._settings.tick_size, self._snapshot, self._rng
        )

        executed = self._orders.on_tick(tick_price, now, self._next_id)
        if executed:
            self._ledger.record(executed)
            for t in executed:
                logger.info(
                    "EXECUTED %s %d @ %s (target %s, slippage %s)",
                    t.side.value, t.quantity, t.exec_price, t.target_price, t.slippage,
                )

        if self._settings.auto_recalculate:
            self.regenerate()

        self._history.append(tick_price, now)
        self._tick_count += 1
        return executed

    def regenerate(self, force: bool = False) -> bool:
        """Redraw the ladder if forced or the throttle allows it.

        Armed orders whose price is no longer on the new ladder are cancelled
        without creating a trade. Returns False when throttled.
        """
        s = self._settings
        if not force and not self._throttle.should_recalculate(
            self._current_price, s.tick_size, s.recalc_step_multiplier
        ):
            return False
        self._ladder = generate(self._snapshot, s.ladder_config(), s.side, s.ladder_mode)
        for price in self._orders.retain_only(self._ladder):
            logger.info("CANCELLED armed order @ %s: price left the ladder", price)
        self._throttle.mark(self._current_price)
        logger.debug(
            "Ladder regenerated: mode=%s levels=%d around %s",
            s.ladder_mode.value, len(self._ladder), self._current_price,
        )
        return True

    # ------------------------------------------------------------------
    # Order commands
    # ------------------------------------------------------------------

    def arm(
        self,
        price: Decimal | float | str,
        side: Side | None = None,
        quantity: int | None = None,
    ) -> bool:
        """Arm an order at `price` (current side/quantity unless given). False if already armed."""
        target = self._normalize(price)
        qty = self._settings.quantity if quantity is None else quantity
        if qty < 1:
            raise InvalidSettingsError(f"quantity must be >= 1, got {qty}")
        return self._orders.arm(target, side or self._settings.side, qty, utc_now())

    def cancel(self, price: Decimal | float | str) -> bool:
        return self._orders.cancel(self._normalize(price))

    def cancel_all(self) -> list[Decimal]:
        cancelled = self._orders.cancel_all()
        if cancelled:
            logger.info("CANCELLED %d armed orders", len(cancelled))
        return cancelled

    def square_off(self, price: Decimal | float | str) -> Trade | None:
        closing = self._ledger.square_off(
            self._normalize(price), self._current_price, utc_now()
        )
        if closing is not None:
            logger.info(
                "SQUARED OFF %s @ %s (closes %s)",
                closing.target_price, closing.exec_price, closing.original_trade_id,
            )
        return closing

    def square_off_all(self) -> list[Trade]:
        closing = self._ledger.square_off_all(self._current_price, utc_now())
        if closing:
            logger.info("SQUARED OFF %d positions @ %s", len(closing), self._current_price)
        return closing

    def reset(self, price: Decimal | float | str | None = None) -> None:
        """Drop armed orders, trades and history; redraw the ladder around `price`."""
        if price is not None:
            self._current_price = self._positive(price)
        self._orders.cancel_all()
        self._ledger.clear()
        self._history.clear()
        self._throttle.reset()
        self._tick_count = 0
        self._snapshot = build_snapshot(
            self._current_price, self._settings.tick_size, None, self._rng
        )
        self.regenerate(force=True)
        logger.info("Engine reset around %s", self._current_price)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure(self, **changes: Any) -> EngineSettings:
        """Apply setting changes atomically; redraws the ladder if its shape changed."""
        unknown = set(changes) - _SETTING_NAMES
        if unknown:
            raise InvalidSettingsError(f"unknown settings {sorted(unknown)}")

        candidate = replace(self._settings, **self._coerce(changes))
        try:
            candidate.ladder_config()
        except ValueError as exc:
            raise InvalidSettingsError(str(exc)) from exc

        changed = {
            name for name in changes
            if getattr(candidate, name) != getattr(self._settings, name)
        }
        if not changed:
            return self.settings

        tick_changed = candidate.tick_size != self._settings.tick_size
        self._settings = candidate
        if tick_changed:
            self._snapshot = build_snapshot(
                self._current_price, candidate.tick_size, None, self._rng
            )
        logger.info("Settings changed: %s", ", ".join(sorted(changed)))
        if changed & LADDER_SHAPE_FIELDS:
            self.regenerate(force=True)
        return self.settings

    def set_side(self, side: Side | str) -> EngineSettings:
        return self.configure(side=side)

    def toggle_side(self) -> EngineSettings:
        return self.configure(side=self._settings.side.opposite)

    def set_quantity(self, quantity: int) -> EngineSettings:
        return self.configure(quantity=quantity)

    def set_ladder_mode(self, mode: LadderMode | str) -> EngineSettings:
        return self.configure(ladder_mode=mode)

    def set_levels_per_side(self, levels: int) -> EngineSettings:
        return self.configure(levels_per_side=levels)

    def set_tick_size(self, tick_size: Decimal | float | str) -> EngineSettings:
        return self.configure(tick_size=tick_size)

    def set_auto_recalculate(self, enabled: bool) -> EngineSettings:
        return self.configure(auto_recalculate=enabled)

    def set_recalc_step_multiplier(self, multiplier: int) -> EngineSettings:
        return self.configure(recalc_step_multiplier=multiplier)

    def set_quantity_thresholds(self, thresholds: tuple[int, ...] | list[int]) -> EngineSettings:
        return self.configure(quantity_thresholds=thresholds)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def settings(self) -> EngineSettings:
        return replace(self._settings)

    @property
    def current_price(self) -> Decimal:
        return self._current_price

    @property
    def snapshot(self) -> MarketSnapshot:
        return self._snapshot

    @property
    def ladder(self) -> tuple[Decimal, ...]:
        return self._ladder

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def armed_orders(self) -> list[tuple[Decimal, OrderIntent]]:
        return self._orders.armed()

    @property
    def armed_count(self) -> int:
        return self._orders.armed_count

    @property
    def open_count(self) -> int:
        return self._ledger.open_count

    @property
    def trades(self) -> list[Trade]:
        return self._ledger.trades()

    @property
    def price_history(self) -> list[PricePoint]:
        return self._history.points()

    def ladder_price(self, price: Decimal | float | str) -> Decimal:
        """`price` snapped onto the current tick grid."""
        return self._normalize(price)

    def get_block_state(self, price: Decimal | float | str) -> BlockState:
        target = round_to_tick(to_decimal(price), self._settings.tick_size)
        if self._orders.is_armed(target):
            return BlockState.ARMED
        if self._ledger.open_trade_at(target) is not None:
            return BlockState.EXECUTED
        return BlockState.IDLE

    def block_states(self) -> list[tuple[Decimal, BlockState]]:
        return [(p, self.get_block_state(p)) for p in self._ladder]

    def total_pnl(self) -> Decimal:
        return self._ledger.total_pnl(self._current_price)

    def realized_pnl(self) -> Decimal:
        return self._ledger.realized_pnl()

    def unrealized_pnl(self) -> Decimal:
        return self._ledger.unrealized_pnl(self._current_price)

    # ------------------------------------------------------------------
    # Snapshot / restore
    # ------------------------------------------------------------------

    def dump(self) -> EngineState:
        return EngineState(
            settings=self.settings,
            armed=self._orders.armed(),
            trades=self._ledger.trades(),
            last_price=self._current_price,
        )

    def load(self, state: EngineState) -> None:
        """Replace settings, armed orders and trades with a saved state.

        The ladder is redrawn around the restored price but restored armed
        orders are kept even if they fall off it; the next regeneration
        reconciles them as usual. Nothing changes if the state is invalid.
        """
        s = replace(state.settings)
        price = self._current_price
        if state.last_price is not None:
            price = self._positive(state.last_price)
        try:
            config = s.ladder_config()
        except ValueError as exc:
            raise InvalidSettingsError(str(exc)) from exc
        for armed_price, _ in state.armed:
            self._positive(armed_price)
        snapshot = build_snapshot(price, s.tick_size, None, self._rng)
        ladder = generate(snapshot, config, s.side, s.ladder_mode)

        self._settings = s
        self._current_price = price
        self._snapshot = snapshot
        self._ladder = ladder
        self._orders.load(state.armed)
        self._ledger.load(state.trades)
        self._throttle.reset()
        self._throttle.mark(price)
        logger.info(
            "Engine state loaded: %d armed, %d trades, price %s",
            self._orders.armed_count, len(self._ledger), self._current_price,
        )

    # ------------------------------------------------------------------

    def _positive(self, price: Decimal | float | str) -> Decimal:
        value = to_decimal(price)
        if value <= 0:
            raise InvalidPriceError(price)
        return value

    def _normalize(self, price: Decimal | float | str) -> Decimal:
        return round_to_tick(self._positive(price), self._settings.tick_size)

    @staticmethod
    def _coerce(changes: dict[str, Any]) -> dict[str, Any]:
        out = dict(changes)
        try:
            if "side" in out:
                out["side"] = Side(out["side"])
            if "ladder_mode" in out:
                out["ladder_mode"] = LadderMode(out["ladder_mode"])
            if "tick_size" in out:
                out["tick_size"] = to_decimal(out["tick_size"])
            if "quantity_thresholds" in out:
                out["quantity_thresholds"] = tuple(int(q) for q in out["quantity_thresholds"])
            if "quantity" in out:
                out["quantity"] = max(1, int(out["quantity"]))
            if "levels_per_side" in out:
                out["levels_per_side"] = int(out["levels_per_side"])
            if "recalc_step_multiplier" in out:
                out["recalc_step_multiplier"] = int(out["recalc_step_multiplier"])
                if out["recalc_step_multiplier"] < 1:
                    raise ValueError("recalc_step_multiplier must be >= 1")
            if "auto_recalculate" in out:
                out["auto_recalculate"] = _as_bool(out["auto_recalculate"])
        except (ValueError, ArithmeticError) as exc:
            raise InvalidSettingsError(str(exc)) from exc
        return out
