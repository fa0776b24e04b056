"""Global enums shared by the curve and market packages."""

from enum import Enum


class MarketStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PENDING_RESOLUTION = "PENDING_RESOLUTION"
    DISPUTED = "DISPUTED"
    RESOLVED = "RESOLVED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (MarketStatus.RESOLVED, MarketStatus.CANCELLED)


class TradeAction(str, Enum):
    BET = "BET"
    BUY = "BUY"
    SELL = "SELL"


class PayoutKind(str, Enum):
    """Which payout rule produced a settlement line."""
    WINNINGS = "WINNINGS"
    REFUND = "REFUND"


class MarketEventType(str, Enum):
    MARKET_CREATED = "MARKET_CREATED"
    BET_PLACED = "BET_PLACED"
    MARKET_EXTENDED = "MARKET_EXTENDED"
    STATUS_CHANGED = "STATUS_CHANGED"
    PAYOUT_CLAIMED = "PAYOUT_CLAIMED"
    SHARES_BOUGHT = "SHARES_BOUGHT"
    SHARES_SOLD = "SHARES_SOLD"
