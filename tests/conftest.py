"""Shared test fixtures."""

import random
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.tl_api.dependencies import clear_runtime, install_runtime
from src.tl_common.id_generator import TradeIdGenerator
from src.tl_engine.application.service import EngineService
from src.tl_engine.domain.models import EngineSettings
from src.tl_engine.engine.engine import TradingEngine


def make_engine(**overrides: object) -> TradingEngine:
    """Deterministic engine: price 2006.16, tick 0.05, 2 levels per side, no auto-recalc."""
    settings = EngineSettings(
        tick_size=Decimal("0.05"),
        levels_per_side=2,
        auto_recalculate=False,
    )
    for name, value in overrides.items():
        setattr(settings, name, value)
    return TradingEngine(
        initial_price="2006.16",
        settings=settings,
        rng=random.Random(7),
        id_generator=TradeIdGenerator(),
    )


@pytest.fixture
def engine_factory():
    return make_engine


@pytest.fixture
def engine() -> TradingEngine:
    return make_engine()


@pytest.fixture
def service(engine: TradingEngine) -> EngineService:
    return EngineService(engine)


@pytest.fixture
async def client(service: EngineService) -> AsyncClient:
    """Async HTTP client against the app, with an in-process engine and no tick runner."""
    install_runtime(service, None)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    clear_runtime()
