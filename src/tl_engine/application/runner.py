"""TickRunner — the periodic timer driving the engine.

Each iteration pulls one price from the tick source and hands it to the
service synchronously; the only await points are the sleep between ticks and
the occasional snapshot save. Stopping the task is the only cancellation.
"""
import asyncio
import contextlib
import logging
from decimal import Decimal

from src.tl_engine.application.service import EngineService
from src.tl_market.engine.tick_source import RandomWalkTickSource

logger = logging.getLogger(__name__)

MIN_INTERVAL_MS = 20
MAX_INTERVAL_MS = 200


def clamp_interval_ms(interval_ms: int) -> int:
    return max(MIN_INTERVAL_MS, min(MAX_INTERVAL_MS, int(interval_ms)))


class TickRunner:
    def __init__(
        self,
        service: EngineService,
        source: RandomWalkTickSource,
        interval_ms: int = 50,
    ) -> None:
        self._service = service
        self._source = source
        self._interval_ms = clamp_interval_ms(interval_ms)
        self._task: asyncio.Task[None] | None = None
        self._paused = False

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def set_interval_ms(self, interval_ms: int) -> int:
        self._interval_ms = clamp_interval_ms(interval_ms)
        return self._interval_ms

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._paused

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop(), name="tick-runner")
            logger.info("Tick runner started at %dms", self._interval_ms)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Tick runner stopped")

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def toggle(self) -> bool:
        self._paused = not self._paused
        return not self._paused

    def reset_source(self, price: Decimal | None = None) -> Decimal:
        """Restart the feed at `price` (default: its initial price); returns it."""
        self._source.reset(price)
        return self._source.last_price

    def step(self) -> None:
        """Process exactly one tick."""
        self._service.on_tick(self._source.next_price())

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval_ms / 1000)
            if self._paused:
                continue
            try:
                self.step()
            except Exception:
                logger.exception("Tick processing failed")
                continue
            if self._service.snapshot_due():
                await self._service.persist()
