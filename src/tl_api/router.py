"""Engine REST endpoints.

GET  /market                           — snapshot, book and runner status
GET  /market/history                   — recent ticks
POST /market/pause | /market/resume    — stop/start consuming ticks
GET  /ladder                           — ladder prices with block states
POST /ladder/regenerate                — throttled (or forced) redraw
GET  /orders                           — armed orders
POST /orders/arm                       — arm at a price
POST /orders/{price}/cancel            — opens a CANCEL_ONE confirmation
POST /orders/cancel-all                — opens a CANCEL_ALL confirmation
POST /positions/{price}/square-off     — opens a SQUAREOFF_ONE confirmation
POST /positions/square-off-all         — opens a SQUAREOFF_ALL confirmation
GET  /confirmation                     — pending confirmation, if any
POST /confirmation/confirm             — executes the pending command
POST /confirmation/close               — dismisses it
GET  /trades, GET /pnl
GET  /settings, PATCH /settings
POST /reset
"""

from decimal import Decimal
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Request

from src.tl_api.dependencies import get_runner, get_service
from src.tl_api.schemas import (
    ArmedOrderResponse,
    ArmRequest,
    ArmResponse,
    ConfirmationResponse,
    ConfirmRequest,
    LadderLevelResponse,
    LadderResponse,
    MarketResponse,
    PnlResponse,
    PricePointResponse,
    RegenerateRequest,
    ResetRequest,
    SettingsResponse,
    SettingsUpdateRequest,
    TradeResponse,
)
from src.tl_common.enums import ConfirmAction
from src.tl_common.response import ApiResponse, success_response
from src.tl_engine.application.runner import TickRunner
from src.tl_engine.application.service import EngineService

router = APIRouter(tags=["engine"])

ServiceDep = Annotated[EngineService, Depends(get_service)]
RunnerDep = Annotated[TickRunner | None, Depends(get_runner)]
PricePath = Annotated[Decimal, Path(gt=0)]


def _ok(request: Request, data: Any) -> ApiResponse:
    return success_response(data, getattr(request.state, "request_id", None))


def _confirmation(request: Request, svc: EngineService) -> ApiResponse:
    body = ConfirmationResponse.from_command(svc.gateway.pending)
    return _ok(request, body.model_dump(mode="json"))


# --- Market ---

@router.get("/market")
async def get_market(request: Request, svc: ServiceDep, runner: RunnerDep) -> ApiResponse:
    engine = svc.engine
    body = MarketResponse.from_snapshot(
        engine.snapshot,
        tick_count=engine.tick_count,
        running=runner.is_running if runner else False,
        interval_ms=runner.interval_ms if runner else None,
    )
    return _ok(request, body.model_dump(mode="json"))


@router.get("/market/history")
async def get_history(request: Request, svc: ServiceDep) -> ApiResponse:
    points = [
        PricePointResponse(t=p.timestamp, price=p.price).model_dump(mode="json")
        for p in svc.engine.price_history
    ]
    return _ok(request, points)


@router.post("/market/pause")
async def pause_market(request: Request, runner: RunnerDep) -> ApiResponse:
    if runner is not None:
        runner.pause()
    return _ok(request, {"running": False})


@router.post("/market/resume")
async def resume_market(request: Request, runner: RunnerDep) -> ApiResponse:
    if runner is not None:
        runner.resume()
    return _ok(request, {"running": runner.is_running if runner else False})


# --- Ladder ---

def _ladder_body(svc: EngineService) -> dict[str, Any]:
    engine = svc.engine
    settings = engine.settings
    current = engine.current_price
    body = LadderResponse(
        mode=settings.ladder_mode,
        side=settings.side,
        current_price=current,
        levels=[
            LadderLevelResponse(price=price, state=state, distance=abs(current - price))
            for price, state in engine.block_states()
        ],
    )
    return body.model_dump(mode="json")


@router.get("/ladder")
async def get_ladder(request: Request, svc: ServiceDep) -> ApiResponse:
    return _ok(request, _ladder_body(svc))


@router.post("/ladder/regenerate")
async def regenerate_ladder(
    req: RegenerateRequest, request: Request, svc: ServiceDep
) -> ApiResponse:
    regenerated = svc.engine.regenerate(force=req.force)
    if regenerated:
        svc.mark_dirty()
    return _ok(request, {"regenerated": regenerated, "ladder": _ladder_body(svc)})


# --- Orders ---

@router.get("/orders")
async def list_armed(request: Request, svc: ServiceDep) -> ApiResponse:
    items = [
        ArmedOrderResponse(
            price=price, side=i.side, quantity=i.quantity, armed_at=i.armed_at
        ).model_dump(mode="json")
        for price, i in svc.engine.armed_orders
    ]
    return _ok(request, items)


@router.post("/orders/arm")
async def arm_order(req: ArmRequest, request: Request, svc: ServiceDep) -> ApiResponse:
    engine = svc.engine
    armed = engine.arm(req.price, side=req.side, quantity=req.quantity)
    if armed:
        svc.mark_dirty()
    price = engine.ladder_price(req.price)
    body = ArmResponse(price=price, armed=armed, state=engine.get_block_state(price))
    return _ok(request, body.model_dump(mode="json"))


@router.post("/orders/cancel-all")
async def request_cancel_all(request: Request, svc: ServiceDep) -> ApiResponse:
    svc.gateway.open(ConfirmAction.CANCEL_ALL)
    return _confirmation(request, svc)


@router.post("/orders/{price}/cancel")
async def request_cancel(price: PricePath, request: Request, svc: ServiceDep) -> ApiResponse:
    svc.gateway.open(ConfirmAction.CANCEL_ONE, svc.engine.ladder_price(price))
    return _confirmation(request, svc)


@router.post("/positions/square-off-all")
async def request_square_off_all(request: Request, svc: ServiceDep) -> ApiResponse:
    svc.gateway.open(ConfirmAction.SQUAREOFF_ALL)
    return _confirmation(request, svc)


@router.post("/positions/{price}/square-off")
async def request_square_off(
    price: PricePath, request: Request, svc: ServiceDep
) -> ApiResponse:
    svc.gateway.open(ConfirmAction.SQUAREOFF_ONE, svc.engine.ladder_price(price))
    return _confirmation(request, svc)


# --- Confirmation ---

@router.get("/confirmation")
async def get_confirmation(request: Request, svc: ServiceDep) -> ApiResponse:
    return _confirmation(request, svc)


@router.post("/confirmation/confirm")
async def confirm(req: ConfirmRequest, request: Request, svc: ServiceDep) -> ApiResponse:
    confirmed = svc.gateway.confirm_id(req.command_id)
    if confirmed:
        svc.mark_dirty()
    return _ok(request, {"confirmed": confirmed})


@router.post("/confirmation/close")
async def close_confirmation(request: Request, svc: ServiceDep) -> ApiResponse:
    svc.gateway.close()
    return _confirmation(request, svc)


# --- Trades / P&L ---

@router.get("/trades")
async def list_trades(request: Request, svc: ServiceDep) -> ApiResponse:
    items = [
        TradeResponse.from_domain(t).model_dump(mode="json")
        for t in reversed(svc.engine.trades)
    ]
    return _ok(request, items)


@router.get("/pnl")
async def get_pnl(request: Request, svc: ServiceDep) -> ApiResponse:
    engine = svc.engine
    body = PnlResponse(
        current_price=engine.current_price,
        realized=engine.realized_pnl(),
        unrealized=engine.unrealized_pnl(),
        total=engine.total_pnl(),
        armed_count=engine.armed_count,
        open_count=engine.open_count,
    )
    return _ok(request, body.model_dump(mode="json"))


# --- Settings ---

@router.get("/settings")
async def get_settings(request: Request, svc: ServiceDep, runner: RunnerDep) -> ApiResponse:
    body = SettingsResponse.from_domain(
        svc.engine.settings, runner.interval_ms if runner else None
    )
    return _ok(request, body.model_dump(mode="json"))


@router.patch("/settings")
async def update_settings(
    req: SettingsUpdateRequest, request: Request, svc: ServiceDep, runner: RunnerDep
) -> ApiResponse:
    changes = req.model_dump(exclude_none=True)
    interval_ms = changes.pop("tick_interval_ms", None)
    settings = svc.engine.configure(**changes)
    if interval_ms is not None and runner is not None:
        runner.set_interval_ms(interval_ms)
    svc.mark_dirty()
    body = SettingsResponse.from_domain(settings, runner.interval_ms if runner else None)
    return _ok(request, body.model_dump(mode="json"))


@router.post("/reset")
async def reset(
    req: ResetRequest, request: Request, svc: ServiceDep, runner: RunnerDep
) -> ApiResponse:
    price = req.price
    if runner is not None:
        price = runner.reset_source(price)
    svc.gateway.close()
    svc.engine.reset(price)
    svc.mark_dirty()
    return _ok(request, _ladder_body(svc))
