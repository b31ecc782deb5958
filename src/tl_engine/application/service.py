"""EngineService — composition of one TradingEngine, its gateway and its snapshot store.

Everything runs on the event loop thread. `on_tick` is synchronous, so a tick
is never interleaved with an API command.
"""
import logging
from decimal import Decimal

from src.tl_common.errors import AppError
from src.tl_confirm.engine.gateway import ConfirmationGateway
from src.tl_engine.engine.engine import TradingEngine
from src.tl_ledger.domain.models import Trade
from src.tl_persistence.infrastructure.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class EngineService:
    def __init__(
        self,
        engine: TradingEngine,
        store: SnapshotStore | None = None,
        snapshot_every_ticks: int = 100,
    ) -> None:
        self.engine = engine
        self.gateway = ConfirmationGateway(engine)
        self._store = store
        self._snapshot_every = max(1, snapshot_every_ticks)
        self._dirty = False

    def on_tick(self, price: Decimal) -> list[Trade]:
        trades = self.engine.advance(price)
        if trades:
            self._dirty = True
        return trades

    def mark_dirty(self) -> None:
        self._dirty = True

    def snapshot_due(self) -> bool:
        return self._dirty or self.engine.tick_count % self._snapshot_every == 0

    async def restore(self) -> bool:
        if self._store is None:
            return False
        state = await self._store.load()
        if state is None:
            logger.info("No usable snapshot, starting from defaults")
            return False
        try:
            self.engine.load(state)
        except AppError as exc:
            logger.warning("Discarding unusable snapshot: %s", exc.message)
            return False
        return True

    async def persist(self) -> bool:
        if self._store is None:
            return False
        saved = await self._store.save(self.engine.dump())
        if saved:
            self._dirty = False
        return saved
