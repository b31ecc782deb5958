"""Unified error codes and custom exceptions.

Error code ranges:
  3xxx: Settings
  4xxx: Orders
  6xxx: Confirmation
  9xxx: System

Redundant commands (arming an armed price, cancelling an idle one, squaring off
a price with no open trade) are NOT errors; the engine ignores them. These
exceptions cover malformed input only.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 3xxx: Settings ---

class InvalidSettingsError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3001, f"Invalid settings: {detail}", 422)


# --- 4xxx: Orders ---

class InvalidPriceError(AppError):
    def __init__(self, price: object) -> None:
        super().__init__(4001, f"Price must be positive, got {price}", 422)


# --- 6xxx: Confirmation ---

class MissingTargetPriceError(AppError):
    def __init__(self, kind: str) -> None:
        super().__init__(6001, f"Confirmation {kind} requires a target price", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
