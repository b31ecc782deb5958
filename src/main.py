"""FastAPI application entry point.

Run with: uvicorn src.main:app --port 8000

The lifespan builds the engine, restores the last redis snapshot (if fresh),
and starts the tick runner; shutdown stops the runner and saves a final
snapshot.
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
import random
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from decimal import Decimal

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.tl_api.dependencies import clear_runtime, install_runtime
from src.tl_api.middleware.request_log import RequestLogMiddleware
from src.tl_api.router import router as engine_router
from src.tl_common.errors import AppError
from src.tl_common.redis_client import close_redis, get_redis
from src.tl_common.response import error_response
from src.tl_engine.application.runner import TickRunner
from src.tl_engine.application.service import EngineService
from src.tl_engine.domain.models import EngineSettings
from src.tl_engine.engine.engine import TradingEngine
from src.tl_engine.engine.throttle import RecalcThrottle
from src.tl_market.engine.tick_source import RandomWalkTickSource
from src.tl_persistence.infrastructure.snapshot_store import SnapshotStore

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_service(store: SnapshotStore | None = None) -> EngineService:
    engine = TradingEngine(
        initial_price=settings.INITIAL_PRICE,
        settings=EngineSettings(
            tick_size=Decimal(settings.DEFAULT_TICK_SIZE),
            levels_per_side=settings.DEFAULT_LEVELS_PER_SIDE,
        ),
        rng=random.Random(),
        throttle=RecalcThrottle(
            min_interval_s=settings.MIN_RECALC_INTERVAL_MS / 1000,
            drift_multiplier=Decimal(settings.RECALC_DRIFT_TICKS),
        ),
        history_limit=settings.PRICE_HISTORY_LIMIT,
    )
    return EngineService(engine, store, snapshot_every_ticks=settings.SNAPSHOT_EVERY_TICKS)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: restore + start ticking. Shutdown: stop ticking + save."""
    store = SnapshotStore(
        await get_redis(), settings.SNAPSHOT_KEY, max_age_s=settings.SNAPSHOT_MAX_AGE_SECONDS
    )
    service = build_service(store)
    await service.restore()

    source = RandomWalkTickSource(
        initial_price=settings.INITIAL_PRICE,
        volatility=settings.VOLATILITY,
        spike_chance=settings.SPIKE_CHANCE,
        spike_multiplier=settings.SPIKE_MULTIPLIER,
    )
    runner = TickRunner(service, source, interval_ms=settings.TICK_INTERVAL_MS)
    runner.reset_source(service.engine.current_price)
    install_runtime(service, runner)
    runner.start()
    yield
    await runner.stop()
    await service.persist()
    clear_runtime()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(engine_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
