"""Process-wide engine runtime, installed by the app lifespan."""

from src.tl_common.errors import InternalError
from src.tl_engine.application.runner import TickRunner
from src.tl_engine.application.service import EngineService

_service: EngineService | None = None
_runner: TickRunner | None = None


def install_runtime(service: EngineService, runner: TickRunner | None) -> None:
    global _service, _runner  # noqa: PLW0603
    _service = service
    _runner = runner


def clear_runtime() -> None:
    global _service, _runner  # noqa: PLW0603
    _service = None
    _runner = None


def get_service() -> EngineService:
    if _service is None:
        raise InternalError("Engine is not running")
    return _service


def get_runner() -> TickRunner | None:
    return _runner
