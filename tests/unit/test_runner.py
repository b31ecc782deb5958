import asyncio
import random
from dataclasses import replace
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.tl_common.enums import LadderMode
from src.tl_engine.application.runner import TickRunner, clamp_interval_ms
from src.tl_engine.application.service import EngineService
from src.tl_market.engine.tick_source import RandomWalkTickSource


def _source(volatility: float = 0.0) -> RandomWalkTickSource:
    return RandomWalkTickSource("2006.16", volatility=volatility, rng=random.Random(4))


class TestClamp:
    def test_bounds(self) -> None:
        assert clamp_interval_ms(5) == 20
        assert clamp_interval_ms(50) == 50
        assert clamp_interval_ms(1000) == 200

    def test_set_interval_clamps(self, service: EngineService) -> None:
        runner = TickRunner(service, _source(), interval_ms=10)
        assert runner.interval_ms == 20
        assert runner.set_interval_ms(500) == 200


class TestStep:
    def test_step_feeds_engine(self, service: EngineService) -> None:
        runner = TickRunner(service, _source())
        runner.step()
        assert service.engine.tick_count == 1
        assert service.engine.current_price == Decimal("2006.16")

    def test_reset_source(self, service: EngineService) -> None:
        runner = TickRunner(service, _source(volatility=0.01))
        for _ in range(5):
            runner.step()
        assert runner.reset_source(Decimal("1800")) == Decimal("1800")
        assert runner.reset_source() == Decimal("2006.16")


class TestLoop:
    async def test_start_and_stop(self, service: EngineService) -> None:
        runner = TickRunner(service, _source(), interval_ms=20)
        runner.start()
        assert runner.is_running
        await asyncio.sleep(0.1)
        await runner.stop()
        assert not runner.is_running
        assert service.engine.tick_count >= 1

    async def test_paused_runner_skips_ticks(self, service: EngineService) -> None:
        runner = TickRunner(service, _source(), interval_ms=20)
        runner.pause()
        runner.start()
        assert not runner.is_running
        await asyncio.sleep(0.08)
        assert service.engine.tick_count == 0
        assert runner.toggle() is True
        await runner.stop()

    async def test_failed_tick_does_not_stop_loop(self) -> None:
        calls = []

        def on_tick(price: Decimal) -> list:
            calls.append(price)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return []

        svc = MagicMock()
        svc.on_tick.side_effect = on_tick
        svc.snapshot_due.return_value = False
        runner = TickRunner(svc, _source(), interval_ms=20)
        runner.start()
        await asyncio.sleep(0.1)
        assert runner.is_running
        await runner.stop()
        assert svc.on_tick.call_count >= 2

    async def test_persists_when_due(self) -> None:
        svc = MagicMock()
        svc.on_tick.return_value = []
        svc.snapshot_due.return_value = True
        svc.persist = AsyncMock(return_value=True)
        runner = TickRunner(svc, _source(), interval_ms=20)
        runner.start()
        await asyncio.sleep(0.1)
        await runner.stop()
        svc.persist.assert_awaited()


class TestService:
    def test_snapshot_due_after_trade(self, engine_factory) -> None:
        svc = EngineService(engine_factory(), snapshot_every_ticks=1000)
        svc.engine.arm("2006.20")
        svc.on_tick(Decimal("2006.30"))
        assert not svc.snapshot_due()
        svc.on_tick(Decimal("2006.10"))
        assert svc.snapshot_due()

    def test_snapshot_due_every_n_ticks(self, engine_factory) -> None:
        svc = EngineService(engine_factory(), snapshot_every_ticks=2)
        svc.on_tick(Decimal("2006.30"))
        assert not svc.snapshot_due()
        svc.on_tick(Decimal("2006.35"))
        assert svc.snapshot_due()

    async def test_persist_without_store(self, service: EngineService) -> None:
        assert await service.persist() is False
        assert await service.restore() is False

    async def test_restore_loads_state(self, engine_factory) -> None:
        source = engine_factory()
        source.arm("2005.00")
        store = MagicMock()
        store.load = AsyncMock(return_value=source.dump())
        svc = EngineService(engine_factory(), store)
        assert await svc.restore() is True
        assert svc.engine.armed_count == 1

    async def test_restore_discards_unusable_state(self, engine_factory) -> None:
        state = engine_factory().dump()
        state = replace(
            state,
            last_price=Decimal("0"),
            settings=replace(state.settings, ladder_mode=LadderMode.DEPTH),
        )
        store = MagicMock()
        store.load = AsyncMock(return_value=state)
        svc = EngineService(engine_factory(), store)
        assert await svc.restore() is False
        assert svc.engine.settings.ladder_mode == LadderMode.LTP
        assert svc.engine.current_price == Decimal("2006.16")

    async def test_persist_clears_dirty(self, engine_factory) -> None:
        store = MagicMock()
        store.save = AsyncMock(return_value=True)
        svc = EngineService(engine_factory(), store, snapshot_every_ticks=1000)
        svc.engine.advance("2006.20")
        svc.mark_dirty()
        assert await svc.persist() is True
        assert not svc.snapshot_due()
