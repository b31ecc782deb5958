import random
from decimal import Decimal

import pytest

from src.tl_common.enums import LadderMode, Side
from src.tl_ladder.domain.models import LadderConfig
from src.tl_ladder.engine.generators import (
    depth_ladder,
    generate,
    liquidity_ladder,
    ltp_ladder,
)
from src.tl_market.domain.models import BookLevel, MarketSnapshot
from src.tl_market.engine.snapshot_builder import build_snapshot

TICK = Decimal("0.05")


def _d(*values: str) -> tuple[Decimal, ...]:
    return tuple(Decimal(v) for v in values)


def _snap(
    last: str = "2006.16",
    bid: str | None = "2006.10",
    ask: str | None = "2006.20",
    asks: list[tuple[str, int]] | None = None,
    bids: list[tuple[str, int]] | None = None,
) -> MarketSnapshot:
    return MarketSnapshot(
        last_price=Decimal(last),
        best_bid=Decimal(bid) if bid else None,
        best_ask=Decimal(ask) if ask else None,
        tick_size=TICK,
        asks=tuple(BookLevel(Decimal(p), q) for p, q in asks or []),
        bids=tuple(BookLevel(Decimal(p), q) for p, q in bids or []),
    )


def _cfg(levels: int = 2, thresholds: tuple[int, ...] = (10, 30, 100)) -> LadderConfig:
    return LadderConfig(levels_per_side=levels, tick_size=TICK, quantity_thresholds=thresholds)


class TestLadderConfig:
    def test_max_levels(self) -> None:
        assert _cfg(levels=3).max_levels == 7

    def test_zero_levels_raises(self) -> None:
        with pytest.raises(ValueError, match="levels_per_side"):
            _cfg(levels=0)

    def test_non_positive_tick_raises(self) -> None:
        with pytest.raises(ValueError, match="tick_size"):
            LadderConfig(levels_per_side=1, tick_size=Decimal(0))

    def test_thresholds_must_ascend(self) -> None:
        with pytest.raises(ValueError, match="ascending"):
            _cfg(thresholds=(10, 10, 20))

    def test_thresholds_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            _cfg(thresholds=(0, 10))


class TestLtpLadder:
    def test_no_quotes_uses_last_price_and_tick_step(self) -> None:
        ladder = ltp_ladder(_snap(bid=None, ask=None), _cfg(levels=2))
        assert ladder == _d("2006.25", "2006.20", "2006.15", "2006.10", "2006.05")

    def test_quotes_use_mid_and_spread_step(self) -> None:
        # mid 2006.15, step = max(0.05, 0.10) = 0.10
        ladder = ltp_ladder(_snap(), _cfg(levels=2))
        assert ladder == _d("2006.35", "2006.25", "2006.15", "2006.05", "2005.95")

    def test_locked_market_steps_one_tick(self) -> None:
        ladder = ltp_ladder(_snap(bid="2006.15", ask="2006.15"), _cfg(levels=1))
        assert ladder == _d("2006.20", "2006.15", "2006.10")

    def test_floored_to_positive(self) -> None:
        ladder = ltp_ladder(_snap(last="0.10", bid=None, ask=None), _cfg(levels=3))
        assert ladder == _d("0.25", "0.20", "0.15", "0.10", "0.05")

    def test_side_independent(self) -> None:
        snap = _snap()
        assert generate(snap, _cfg(), Side.BUY, LadderMode.LTP) == generate(
            snap, _cfg(), Side.SELL, LadderMode.LTP
        )


class TestDepthLadder:
    def test_buy_anchors_on_ask(self) -> None:
        ladder = depth_ladder(_snap(), _cfg(levels=2), Side.BUY)
        assert ladder == _d("2006.30", "2006.25", "2006.20", "2006.15", "2006.10")

    def test_sell_anchors_on_bid(self) -> None:
        ladder = depth_ladder(_snap(), _cfg(levels=2), Side.SELL)
        assert ladder == _d("2006.20", "2006.15", "2006.10", "2006.05", "2006.00")

    def test_no_quotes_falls_back_to_ltp(self) -> None:
        snap = _snap(bid=None, ask=None)
        assert depth_ladder(snap, _cfg(), Side.BUY) == ltp_ladder(snap, _cfg())

    def test_missing_bid_falls_back_for_sell_only(self) -> None:
        snap = _snap(bid=None)
        assert depth_ladder(snap, _cfg(), Side.SELL) == ltp_ladder(snap, _cfg())
        assert depth_ladder(snap, _cfg(), Side.BUY)[2] == Decimal("2006.20")


class TestLiquidityLadder:
    def test_buy_impact_prices_then_pad_upward(self) -> None:
        snap = _snap(asks=[("2006.20", 10), ("2006.25", 20), ("2006.30", 30), ("2006.35", 40)])
        ladder = liquidity_ladder(snap, _cfg(levels=2), Side.BUY)
        # cumulative 10 @ .20, 30 @ .25, 100 @ .35; padded .40, .45
        assert ladder == _d("2006.45", "2006.40", "2006.35", "2006.25", "2006.20")

    def test_sell_walks_bids_and_pads_downward(self) -> None:
        snap = _snap(bids=[("2006.10", 50), ("2006.05", 50)])
        ladder = liquidity_ladder(snap, _cfg(levels=2), Side.SELL)
        assert ladder == _d("2006.10", "2006.05", "2006.00", "2005.95", "2005.90")

    def test_thin_book_seeds_from_deepest_level(self) -> None:
        snap = _snap(asks=[("2006.20", 1)])
        ladder = liquidity_ladder(snap, _cfg(levels=2, thresholds=(10,)), Side.BUY)
        assert ladder == _d("2006.40", "2006.35", "2006.30", "2006.25", "2006.20")

    def test_padding_seeds_from_last_walked_level(self) -> None:
        snap = _snap(asks=[("2006.20", 1), ("2006.25", 1), ("2006.30", 1)])
        # no thresholds: the walk stops at the first level
        ladder = liquidity_ladder(snap, _cfg(levels=1, thresholds=()), Side.BUY)
        assert ladder == _d("2006.30", "2006.25", "2006.20")

    def test_truncated_to_target_count(self) -> None:
        snap = _snap(asks=[(p, 10) for p in ("2006.20", "2006.25", "2006.30", "2006.35", "2006.40")])
        ladder = liquidity_ladder(snap, _cfg(levels=1, thresholds=(10, 20, 30, 40, 50)), Side.BUY)
        assert ladder == _d("2006.30", "2006.25", "2006.20")

    def test_sell_padding_stops_at_zero(self) -> None:
        snap = _snap(last="0.10", bid="0.10", ask="0.15", bids=[("0.10", 100)])
        ladder = liquidity_ladder(snap, _cfg(levels=3, thresholds=(10,)), Side.SELL)
        assert ladder == _d("0.10", "0.05")

    def test_empty_side_falls_back_to_depth(self) -> None:
        snap = _snap(asks=[], bids=[("2006.10", 50)])
        assert liquidity_ladder(snap, _cfg(), Side.BUY) == depth_ladder(snap, _cfg(), Side.BUY)

    def test_empty_book_no_quotes_falls_back_to_ltp(self) -> None:
        snap = _snap(bid=None, ask=None)
        assert liquidity_ladder(snap, _cfg(), Side.SELL) == ltp_ladder(snap, _cfg())


class TestLadderProperties:
    @pytest.mark.parametrize("mode", list(LadderMode))
    @pytest.mark.parametrize("side", list(Side))
    @pytest.mark.parametrize("seed", range(10))
    def test_descending_distinct_bounded(self, mode: LadderMode, side: Side, seed: int) -> None:
        rng = random.Random(seed)
        price = Decimal(f"{rng.uniform(1, 3000):.2f}")
        levels = rng.randint(1, 15)
        snap = build_snapshot(price, TICK, rng=rng)
        cfg = LadderConfig(levels_per_side=levels, tick_size=TICK)
        ladder = generate(snap, cfg, side, mode)

        assert 0 < len(ladder) <= 2 * levels + 1
        assert all(a > b for a, b in zip(ladder, ladder[1:]))
        assert all(p > 0 for p in ladder)
        assert all((p / TICK) % 1 == 0 for p in ladder)
