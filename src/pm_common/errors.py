"""Unified error codes and custom exceptions.

Every error is deterministic and fail-closed: raising it leaves all aggregate
state exactly as it was before the call.

Error code ranges:
  3xxx: Market
  4xxx: Trade amount
  5xxx: Position / claims
  6xxx: Creator share curve
  7xxx: Fee configuration
  9xxx: System / arithmetic
"""

from enum import Enum


class ErrorCategory(str, Enum):
    VALIDATION = "VALIDATION"
    STATE = "STATE"
    NOT_FOUND = "NOT_FOUND"
    ARITHMETIC = "ARITHMETIC"


class AppError(Exception):
    """Base application error.

    ``kind`` is a stable tag callers can match on without importing the
    concrete subclass; contextual payload is kept as plain attributes.
    """

    kind: str = "AppError"
    category: ErrorCategory = ErrorCategory.VALIDATION

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


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    kind = "MarketNotFound"
    category = ErrorCategory.NOT_FOUND

    def __init__(self, market_id: str) -> None:
        self.market_id = market_id
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketNotActiveError(AppError):
    kind = "MarketNotActive"
    category = ErrorCategory.STATE

    def __init__(self, market_id: str, status: str | None = None) -> None:
        self.market_id = market_id
        self.status = status
        detail = f" (status={status})" if status else ""
        super().__init__(3002, f"Market is not active: {market_id}{detail}", 422)


class MarketExpiredError(AppError):
    kind = "MarketExpired"
    category = ErrorCategory.STATE

    def __init__(self, market_id: str, end_time: str) -> None:
        self.market_id = market_id
        self.end_time = end_time
        super().__init__(3003, f"Market {market_id} ended at {end_time}", 422)


class MarketAlreadyResolvedError(AppError):
    kind = "MarketAlreadyResolved"
    category = ErrorCategory.STATE

    def __init__(self, market_id: str) -> None:
        self.market_id = market_id
        super().__init__(3004, f"Market already resolved: {market_id}", 409)


class InvalidStateTransitionError(AppError):
    kind = "InvalidStateTransition"
    category = ErrorCategory.STATE

    def __init__(self, market_id: str, current: str, target: str, reason: str = "") -> None:
        self.market_id = market_id
        self.current = current
        self.target = target
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(
            3005, f"Market {market_id} cannot move from {current} to {target}{detail}", 422
        )


class InvalidOutcomeIndexError(AppError):
    kind = "InvalidOutcomeIndex"

    def __init__(self, outcome_index: int, outcome_count: int) -> None:
        self.outcome_index = outcome_index
        self.outcome_count = outcome_count
        super().__init__(
            3006,
            f"Invalid outcome index {outcome_index}, market has {outcome_count} outcomes",
            422,
        )


class InvalidMarketConfigError(AppError):
    kind = "InvalidMarketConfig"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(3007, f"Invalid market config: {detail}", 422)


class InvalidExtensionError(AppError):
    kind = "InvalidExtension"

    def __init__(self, additional_hours: int, max_hours: int) -> None:
        self.additional_hours = additional_hours
        self.max_hours = max_hours
        super().__init__(
            3008,
            f"Extension must be between 1 and {max_hours} hours, got {additional_hours}",
            422,
        )


# --- 4xxx: Trade amount ---

class AmountCannotBeZeroError(AppError):
    kind = "AmountCannotBeZero"

    def __init__(self) -> None:
        super().__init__(4001, "Amount cannot be zero", 422)


class NegativeAmountError(AppError):
    kind = "NegativeAmount"

    def __init__(self, field: str, value: int) -> None:
        self.field = field
        self.value = value
        super().__init__(4002, f"{field} must be non-negative, got {value}", 422)


# --- 5xxx: Position / claims ---

class InsufficientSharesError(AppError):
    kind = "InsufficientShares"

    def __init__(self, requested: int, owned: int) -> None:
        self.requested = requested
        self.owned = owned
        super().__init__(
            5001, f"Insufficient shares: requested {requested}, owned {owned}", 422
        )


class MarketNotSettledError(AppError):
    kind = "MarketNotSettled"
    category = ErrorCategory.STATE

    def __init__(self, market_id: str, status: str) -> None:
        self.market_id = market_id
        self.status = status
        super().__init__(
            5002, f"Market {market_id} has no settlement yet (status={status})", 422
        )


class NoPayoutToClaimError(AppError):
    kind = "NoPayoutToClaim"
    category = ErrorCategory.STATE

    def __init__(self, market_id: str, user_id: str) -> None:
        self.market_id = market_id
        self.user_id = user_id
        super().__init__(5003, f"No payout for user {user_id} in market {market_id}", 422)


class AlreadyClaimedError(AppError):
    kind = "AlreadyClaimed"
    category = ErrorCategory.STATE

    def __init__(self, market_id: str, user_id: str) -> None:
        self.market_id = market_id
        self.user_id = user_id
        super().__init__(5004, f"User {user_id} already claimed in market {market_id}", 409)


# --- 6xxx: Creator share curve ---

class SupplyExceedsMaximumError(AppError):
    kind = "SupplyExceedsMaximum"

    def __init__(self, supply: int, amount: int, max_supply: int) -> None:
        self.supply = supply
        self.amount = amount
        self.max_supply = max_supply
        super().__init__(
            6001,
            f"Supply {supply} + {amount} exceeds maximum {max_supply}",
            422,
        )


class InsufficientSupplyError(AppError):
    kind = "InsufficientSupply"

    def __init__(self, supply: int, amount: int) -> None:
        self.supply = supply
        self.amount = amount
        super().__init__(6002, f"Cannot sell {amount} from supply {supply}", 422)


class InvalidCurveConfigError(AppError):
    kind = "InvalidCurveConfig"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(6003, f"Invalid curve config: {detail}", 422)


class CurveNotFoundError(AppError):
    kind = "CurveNotFound"
    category = ErrorCategory.NOT_FOUND

    def __init__(self, creator_id: str) -> None:
        self.creator_id = creator_id
        super().__init__(6004, f"Share curve not found for creator {creator_id}", 404)


class CurveAlreadyExistsError(AppError):
    kind = "CurveAlreadyExists"
    category = ErrorCategory.STATE

    def __init__(self, creator_id: str) -> None:
        self.creator_id = creator_id
        super().__init__(6005, f"Share curve already exists for creator {creator_id}", 409)


# --- 7xxx: Fee configuration ---

class InvalidFeeRateError(AppError):
    kind = "InvalidFeeRate"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(7001, f"Invalid fee rate: {detail}", 422)


# --- 9xxx: System ---

class ArithmeticOverflowError(AppError):
    kind = "ArithmeticOverflow"
    category = ErrorCategory.ARITHMETIC

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(9003, f"Arithmetic overflow in {operation}", 422)
