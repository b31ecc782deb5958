"""Global enums — values double as the persisted/serialized representation."""

from enum import Enum


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"

    @property
    def opposite(self) -> "Side":
        return Side.SELL if self is Side.BUY else Side.BUY


class BlockState(str, Enum):
    """Lifecycle of one ladder price: IDLE → ARMED → (TRIGGERED→EXECUTED | CANCELLED) → IDLE.

    Per-price queries only ever report IDLE, ARMED or EXECUTED; TRIGGERED and
    CANCELLED are the transition names used in logs.
    """
    IDLE = "IDLE"
    ARMED = "ARMED"
    TRIGGERED = "TRIGGERED"
    EXECUTED = "EXECUTED"
    CANCELLED = "CANCELLED"


class LadderMode(str, Enum):
    LTP = "LTP"
    DEPTH = "DEPTH"
    LIQUIDITY = "LIQUIDITY"


class ConfirmAction(str, Enum):
    CANCEL_ONE = "CANCEL_ONE"
    CANCEL_ALL = "CANCEL_ALL"
    SQUAREOFF_ONE = "SQUAREOFF_ONE"
    SQUAREOFF_ALL = "SQUAREOFF_ALL"

    @property
    def is_bulk(self) -> bool:
        return self in (ConfirmAction.CANCEL_ALL, ConfirmAction.SQUAREOFF_ALL)
