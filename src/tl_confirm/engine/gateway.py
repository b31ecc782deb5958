"""ConfirmationGateway — the only path to cancel and square-off commands.

Two steps: `open()` builds a ConfirmCommand and makes it pending, `confirm()`
must then be handed that same command to dispatch it. A closed, replaced or
foreign command never fires.
"""
import logging
import uuid
from decimal import Decimal
from typing import Any, Protocol

from src.tl_common.enums import ConfirmAction
from src.tl_common.errors import MissingTargetPriceError
from src.tl_common.prices import format_price
from src.tl_confirm.domain.models import ConfirmCommand

logger = logging.getLogger(__name__)


class ConfirmTarget(Protocol):
    def cancel(self, price: Decimal) -> bool: ...

    def cancel_all(self) -> list[Decimal]: ...

    def square_off(self, price: Decimal) -> Any: ...

    def square_off_all(self) -> list[Any]: ...


def build_message(kind: ConfirmAction, price: Decimal | None) -> str:
    if kind == ConfirmAction.CANCEL_ONE:
        return f"Cancel the armed order at {format_price(price)}?"  # type: ignore[arg-type]
    if kind == ConfirmAction.SQUAREOFF_ONE:
        return f"Square off the open position at {format_price(price)} at market?"  # type: ignore[arg-type]
    if kind == ConfirmAction.CANCEL_ALL:
        return "Cancel all armed orders?"
    return "Square off all open positions at market?"


class ConfirmationGateway:
    def __init__(self, target: ConfirmTarget) -> None:
        self._target = target
        self._pending: ConfirmCommand | None = None

    @property
    def pending(self) -> ConfirmCommand | None:
        return self._pending

    @property
    def is_open(self) -> bool:
        return self._pending is not None

    def open(
        self,
        kind: ConfirmAction | str,
        price: Decimal | None = None,
        message: str | None = None,
    ) -> ConfirmCommand:
        """Make a new command pending, replacing any previous one."""
        kind = ConfirmAction(kind)
        if kind.is_bulk:
            price = None
        elif price is None:
            raise MissingTargetPriceError(kind.value)
        self._pending = ConfirmCommand(
            command_id=uuid.uuid4().hex,
            kind=kind,
            price=price,
            message=message or build_message(kind, price),
        )
        return self._pending

    def close(self) -> None:
        self._pending = None

    def confirm(self, command: ConfirmCommand | None = None) -> bool:
        """Dispatch `command` if it is the pending one; clears the dialog.

        Passing None confirms whatever is pending. Returns False (no-op) when
        nothing is pending or `command` is stale.
        """
        pending = self._pending
        if pending is None:
            return False
        if command is not None and command.command_id != pending.command_id:
            logger.debug("Ignoring stale confirmation %s", command.command_id)
            return False
        self._pending = None
        self._dispatch(pending)
        return True

    def confirm_id(self, command_id: str) -> bool:
        pending = self._pending
        if pending is None or pending.command_id != command_id:
            return False
        return self.confirm(pending)

    def _dispatch(self, command: ConfirmCommand) -> None:
        logger.info("Confirmed %s %s", command.kind.value, command.price or "")
        if command.kind == ConfirmAction.CANCEL_ONE:
            self._target.cancel(command.price)  # type: ignore[arg-type]
        elif command.kind == ConfirmAction.CANCEL_ALL:
            self._target.cancel_all()
        elif command.kind == ConfirmAction.SQUAREOFF_ONE:
            self._target.square_off(command.price)  # type: ignore[arg-type]
        else:
            self._target.square_off_all()
