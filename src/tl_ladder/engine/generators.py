"""Ladder generation: market snapshot + config + side -> candidate trigger prices.

Every generator returns a tuple of distinct, tick-rounded, strictly positive
prices sorted descending, at most 2·levels_per_side + 1 long.

Fallback chain on degenerate market data: LIQUIDITY -> DEPTH -> LTP.
"""
import logging
from collections.abc import Iterable
from decimal import Decimal

from src.tl_common.enums import LadderMode, Side
from src.tl_common.prices import round_to_tick
from src.tl_ladder.domain.models import LadderConfig
from src.tl_market.domain.models import MarketSnapshot

logger = logging.getLogger(__name__)


def generate(
    snapshot: MarketSnapshot, config: LadderConfig, side: Side, mode: LadderMode
) -> tuple[Decimal, ...]:
    if mode == LadderMode.LIQUIDITY:
        return liquidity_ladder(snapshot, config, side)
    if mode == LadderMode.DEPTH:
        return depth_ladder(snapshot, config, side)
    return ltp_ladder(snapshot, config)


def ltp_ladder(snapshot: MarketSnapshot, config: LadderConfig) -> tuple[Decimal, ...]:
    """Symmetric grid around the mid (or last price), one spread apart."""
    tick = config.tick_size
    if snapshot.has_quotes:
        mid = (snapshot.best_bid + snapshot.best_ask) / 2  # type: ignore[operator]
        step = max(tick, snapshot.spread)  # type: ignore[type-var]
    else:
        mid = snapshot.last_price
        step = tick
    n = config.levels_per_side
    return _finalize((mid + k * step for k in range(-n, n + 1)), config)


def depth_ladder(
    snapshot: MarketSnapshot, config: LadderConfig, side: Side
) -> tuple[Decimal, ...]:
    """One tick apart, anchored on the touch the order would interact with.

    BUY anchors on the best ask and grows upward, SELL on the best bid and grows
    downward.
    """
    anchor = snapshot.best_ask if side == Side.BUY else snapshot.best_bid
    if anchor is None:
        logger.debug("No %s quote, depth ladder falls back to LTP", side.value)
        return ltp_ladder(snapshot, config)
    direction = 1 if side == Side.BUY else -1
    tick = config.tick_size
    n = config.levels_per_side
    return _finalize((anchor + direction * k * tick for k in range(-n, n + 1)), config)


def liquidity_ladder(
    snapshot: MarketSnapshot, config: LadderConfig, side: Side
) -> tuple[Decimal, ...]:
    """Impact prices: where cumulative resting quantity first reaches each threshold."""
    levels = snapshot.asks if side == Side.BUY else snapshot.bids
    if not levels:
        logger.debug("Empty %s book side, liquidity ladder falls back to depth",
                     "ask" if side == Side.BUY else "bid")
        return depth_ladder(snapshot, config, side)

    tick = config.tick_size
    target = config.max_levels
    thresholds = config.quantity_thresholds

    impacts: list[Decimal] = []
    cumulative = 0
    idx = 0
    walked = levels[0]
    for level in levels:
        walked = level
        cumulative += level.quantity
        while idx < len(thresholds) and cumulative >= thresholds[idx]:
            price = round_to_tick(level.price, tick)
            if price not in impacts:
                impacts.append(price)
            idx += 1
        if idx == len(thresholds):
            break
    impacts = impacts[:target]

    # Nothing reached a threshold: the deepest walked level is the impact.
    if not impacts:
        impacts.append(round_to_tick(walked.price, tick))

    step = tick if side == Side.BUY else -tick
    cursor = impacts[-1]
    while len(impacts) < target:
        cursor += step
        if cursor <= 0:
            break
        if cursor not in impacts:
            impacts.append(cursor)

    return _finalize(impacts, config)


def _finalize(candidates: Iterable[Decimal], config: LadderConfig) -> tuple[Decimal, ...]:
    """Round to tick, floor at one tick, de-duplicate, sort descending, cap length."""
    tick = config.tick_size
    distinct = {max(round_to_tick(p, tick), tick) for p in candidates}
    return tuple(sorted(distinct, reverse=True)[: config.max_levels])
