from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from src.tl_common.enums import ConfirmAction
from src.tl_common.errors import MissingTargetPriceError
from src.tl_confirm.engine.gateway import ConfirmationGateway, build_message
from src.tl_engine.engine.engine import TradingEngine


class TestOpen:
    def test_single_action_requires_price(self) -> None:
        gw = ConfirmationGateway(MagicMock())
        with pytest.raises(MissingTargetPriceError):
            gw.open(ConfirmAction.CANCEL_ONE)
        assert gw.pending is None

    def test_bulk_action_drops_price(self) -> None:
        gw = ConfirmationGateway(MagicMock())
        cmd = gw.open(ConfirmAction.CANCEL_ALL, Decimal("2005.00"))
        assert cmd.price is None
        assert cmd.message == "Cancel all armed orders?"

    def test_open_replaces_pending(self) -> None:
        gw = ConfirmationGateway(MagicMock())
        first = gw.open(ConfirmAction.CANCEL_ALL)
        second = gw.open("SQUAREOFF_ALL")
        assert gw.pending == second
        assert first.command_id != second.command_id

    def test_custom_message(self) -> None:
        gw = ConfirmationGateway(MagicMock())
        cmd = gw.open(ConfirmAction.CANCEL_ALL, message="Flatten the book?")
        assert cmd.message == "Flatten the book?"

    def test_messages(self) -> None:
        assert build_message(ConfirmAction.CANCEL_ONE, Decimal("2005")) == (
            "Cancel the armed order at ₹2,005.00?"
        )
        assert "₹2,005.00" in build_message(ConfirmAction.SQUAREOFF_ONE, Decimal("2005"))
        assert build_message(ConfirmAction.SQUAREOFF_ALL, None) == (
            "Square off all open positions at market?"
        )


class TestConfirm:
    def test_dispatches_pending_command(self) -> None:
        target = MagicMock()
        gw = ConfirmationGateway(target)
        cmd = gw.open(ConfirmAction.CANCEL_ONE, Decimal("2005.00"))
        assert gw.confirm(cmd) is True
        target.cancel.assert_called_once_with(Decimal("2005.00"))
        assert gw.is_open is False

    @pytest.mark.parametrize(
        ("kind", "method"),
        [
            (ConfirmAction.CANCEL_ALL, "cancel_all"),
            (ConfirmAction.SQUAREOFF_ALL, "square_off_all"),
        ],
    )
    def test_bulk_dispatch(self, kind: ConfirmAction, method: str) -> None:
        target = MagicMock()
        gw = ConfirmationGateway(target)
        gw.open(kind)
        assert gw.confirm() is True
        getattr(target, method).assert_called_once_with()

    def test_square_off_one(self) -> None:
        target = MagicMock()
        gw = ConfirmationGateway(target)
        gw.open(ConfirmAction.SQUAREOFF_ONE, Decimal("2004.00"))
        gw.confirm()
        target.square_off.assert_called_once_with(Decimal("2004.00"))

    def test_nothing_pending_is_noop(self) -> None:
        target = MagicMock()
        assert ConfirmationGateway(target).confirm() is False
        assert target.method_calls == []

    def test_stale_command_ignored(self) -> None:
        target = MagicMock()
        gw = ConfirmationGateway(target)
        stale = gw.open(ConfirmAction.CANCEL_ALL)
        current = gw.open(ConfirmAction.SQUAREOFF_ALL)
        assert gw.confirm(stale) is False
        assert target.method_calls == []
        assert gw.pending == current

    def test_closed_command_never_fires(self) -> None:
        target = MagicMock()
        gw = ConfirmationGateway(target)
        cmd = gw.open(ConfirmAction.CANCEL_ALL)
        gw.close()
        assert gw.confirm(cmd) is False
        assert target.method_calls == []

    def test_confirm_id(self) -> None:
        target = MagicMock()
        gw = ConfirmationGateway(target)
        cmd = gw.open(ConfirmAction.CANCEL_ALL)
        assert gw.confirm_id("nope") is False
        assert gw.is_open
        assert gw.confirm_id(cmd.command_id) is True
        target.cancel_all.assert_called_once_with()

    def test_dispatches_once(self) -> None:
        target = MagicMock()
        gw = ConfirmationGateway(target)
        cmd = gw.open(ConfirmAction.CANCEL_ALL)
        gw.confirm(cmd)
        assert gw.confirm(cmd) is False
        assert target.cancel_all.call_count == 1


class TestWithEngine:
    def test_cancel_goes_through_engine(self, engine: TradingEngine) -> None:
        engine.arm("2005.00")
        gw = ConfirmationGateway(engine)
        gw.open(ConfirmAction.CANCEL_ONE, Decimal("2005.00"))
        assert engine.armed_count == 1
        gw.confirm()
        assert engine.armed_count == 0

    def test_square_off_all_goes_through_engine(self, engine: TradingEngine) -> None:
        engine.arm("2005.00")
        engine.advance("2004.90")
        gw = ConfirmationGateway(engine)
        gw.open(ConfirmAction.SQUAREOFF_ALL)
        gw.confirm()
        assert engine.open_count == 0
        assert len(engine.trades) == 2
