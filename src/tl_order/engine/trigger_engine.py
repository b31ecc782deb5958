"""TriggerEngine — owns the armed-order map and evaluates it on every tick."""
import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from decimal import Decimal

from src.tl_common.enums import Side
from src.tl_ledger.domain.models import Trade
from src.tl_order.domain.models import OrderIntent

logger = logging.getLogger(__name__)


class TriggerEngine:
    """Armed orders keyed by tick-normalized target price, one order per price.

    Callers normalize prices before calling in; arm/cancel against the wrong
    state are silent no-ops that return False.
    """

    def __init__(self) -> None:
        self._armed: dict[Decimal, OrderIntent] = {}

    def arm(self, price: Decimal, side: Side, quantity: int, armed_at: datetime) -> bool:
        if price in self._armed:
            return False
        self._armed[price] = OrderIntent(side=side, quantity=quantity, armed_at=armed_at)
        logger.debug("ARMED %s %d @ %s", side.value, quantity, price)
        return True

    def cancel(self, price: Decimal) -> bool:
        intent = self._armed.pop(price, None)
        if intent is None:
            return False
        logger.debug("CANCELLED %s %d @ %s", intent.side.value, intent.quantity, price)
        return True

    def cancel_all(self) -> list[Decimal]:
        cancelled = sorted(self._armed, reverse=True)
        self._armed.clear()
        return cancelled

    def retain_only(self, prices: Iterable[Decimal]) -> list[Decimal]:
        """Cancel every armed order whose price is not in `prices`; return those prices."""
        keep = set(prices)
        dropped = sorted((p for p in self._armed if p not in keep), reverse=True)
        for p in dropped:
            del self._armed[p]
        return dropped

    def on_tick(
        self, price: Decimal, timestamp: datetime, next_id: Callable[[], str]
    ) -> list[Trade]:
        """Fire every armed order whose condition holds at `price`.

        All orders are evaluated against one frozen view of the map, then the
        fired ones are removed together. Each produces exactly one Trade filled
        at the tick price.
        """
        fired = [
            (target, intent)
            for target, intent in list(self._armed.items())
            if intent.triggers_at(target, price)
        ]
        trades: list[Trade] = []
        for target, intent in fired:
            del self._armed[target]
            trades.append(
                Trade(
                    id=next_id(),
                    timestamp=timestamp,
                    side=intent.side,
                    quantity=intent.quantity,
                    target_price=target,
                    exec_price=price,
                )
            )
        return trades

    def is_armed(self, price: Decimal) -> bool:
        return price in self._armed

    def get(self, price: Decimal) -> OrderIntent | None:
        return self._armed.get(price)

    def armed(self) -> list[tuple[Decimal, OrderIntent]]:
        """Armed orders, highest price first."""
        return sorted(self._armed.items(), key=lambda kv: kv[0], reverse=True)

    @property
    def armed_count(self) -> int:
        return len(self._armed)

    def load(self, pairs: Iterable[tuple[Decimal, OrderIntent]]) -> None:
        self._armed = dict(pairs)
