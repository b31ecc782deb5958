"""Synthetic bid/ask/depth derived from a raw price tick."""
import random
from decimal import Decimal

from src.tl_common.prices import round_to_tick
from src.tl_market.domain.models import BookLevel, MarketSnapshot

MAX_SPREAD_TICKS = 10
BOOK_REFRESH_PROBABILITY = 0.10
DEFAULT_DEPTH = 10
MAX_LEVEL_QUANTITY = 100


def build_snapshot(
    price: Decimal,
    tick_size: Decimal,
    previous: MarketSnapshot | None = None,
    rng: random.Random | None = None,
    depth: int = DEFAULT_DEPTH,
) -> MarketSnapshot:
    """Pure: returns a new snapshot, deterministic for a seeded rng.

    The order book is only redrawn on ~10% of calls (or when there is no
    previous snapshot); otherwise the previous depth is carried forward as-is.
    """
    rng = rng or random.Random()
    spread = tick_size * rng.randint(1, MAX_SPREAD_TICKS)
    half = spread / 2
    best_bid = max(round_to_tick(price - half, tick_size), tick_size)
    best_ask = max(round_to_tick(price + half, tick_size), best_bid)

    if previous is None or rng.random() < BOOK_REFRESH_PROBABILITY:
        asks, bids = _synthesize_book(best_bid, best_ask, tick_size, rng, depth)
    else:
        asks, bids = previous.asks, previous.bids

    return MarketSnapshot(
        last_price=price,
        best_bid=best_bid,
        best_ask=best_ask,
        tick_size=tick_size,
        asks=asks,
        bids=bids,
    )


def _synthesize_book(
    best_bid: Decimal,
    best_ask: Decimal,
    tick_size: Decimal,
    rng: random.Random,
    depth: int,
) -> tuple[tuple[BookLevel, ...], tuple[BookLevel, ...]]:
    asks = tuple(
        BookLevel(best_ask + i * tick_size, rng.randint(1, MAX_LEVEL_QUANTITY))
        for i in range(depth)
    )
    bids: list[BookLevel] = []
    for i in range(depth):
        level_price = best_bid - i * tick_size
        if level_price <= 0:
            break
        bids.append(BookLevel(level_price, rng.randint(1, MAX_LEVEL_QUANTITY)))
    return asks, tuple(bids)
