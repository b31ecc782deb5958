from dataclasses import dataclass
from decimal import Decimal

from src.tl_common.enums import ConfirmAction


@dataclass(frozen=True)
class ConfirmCommand:
    """A destructive action waiting for explicit confirmation."""

    command_id: str
    kind: ConfirmAction
    price: Decimal | None  # None for bulk actions
    message: str
