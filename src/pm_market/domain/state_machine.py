"""Market status guards.

    ACTIVE -> ACTIVE (extension) | PENDING_RESOLUTION | CANCELLED
    PENDING_RESOLUTION -> RESOLVED | DISPUTED | CANCELLED
    DISPUTED -> RESOLVED | CANCELLED
    RESOLVED, CANCELLED: terminal (claims only)

Guards only decide legality; they never mutate. The market service applies a
transition after its guard passes.
"""

from datetime import datetime

from src.pm_common.enums import MarketStatus
from src.pm_common.errors import (
    InvalidExtensionError,
    InvalidOutcomeIndexError,
    InvalidStateTransitionError,
    MarketAlreadyResolvedError,
    MarketExpiredError,
    MarketNotActiveError,
)
from src.pm_market.domain.models import Market

ALLOWED_TRANSITIONS: dict[MarketStatus, frozenset[MarketStatus]] = {
    MarketStatus.ACTIVE: frozenset({
        MarketStatus.ACTIVE,
        MarketStatus.PENDING_RESOLUTION,
        MarketStatus.CANCELLED,
    }),
    MarketStatus.PENDING_RESOLUTION: frozenset({
        MarketStatus.RESOLVED,
        MarketStatus.DISPUTED,
        MarketStatus.CANCELLED,
    }),
    MarketStatus.DISPUTED: frozenset({
        MarketStatus.RESOLVED,
        MarketStatus.CANCELLED,
    }),
    MarketStatus.RESOLVED: frozenset(),
    MarketStatus.CANCELLED: frozenset(),
}


def check_can_trade(market: Market, now: datetime) -> None:
    if market.status != MarketStatus.ACTIVE:
        raise MarketNotActiveError(market.id, market.status.value)
    if now >= market.end_time:
        raise MarketExpiredError(market.id, market.end_time.isoformat())


def check_transition(
    market: Market,
    target: MarketStatus,
    now: datetime,
    winning_outcome_index: int | None = None,
    additional_hours: int | None = None,
    max_extension_hours: int = 720,
) -> None:
    current = market.status
    if current == MarketStatus.RESOLVED and target == MarketStatus.RESOLVED:
        raise MarketAlreadyResolvedError(market.id)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStateTransitionError(market.id, current.value, target.value)

    if target == MarketStatus.ACTIVE:
        if additional_hours is None:
            raise InvalidStateTransitionError(
                market.id, current.value, target.value, "extension requires additional_hours"
            )
        if not (1 <= additional_hours <= max_extension_hours):
            raise InvalidExtensionError(additional_hours, max_extension_hours)
    elif target == MarketStatus.PENDING_RESOLUTION:
        if now < market.end_time:
            raise InvalidStateTransitionError(
                market.id, current.value, target.value,
                f"market ends at {market.end_time.isoformat()}",
            )
    elif target == MarketStatus.RESOLVED:
        if winning_outcome_index is None:
            raise InvalidStateTransitionError(
                market.id, current.value, target.value, "winning_outcome_index is required"
            )
        if not (0 <= winning_outcome_index < market.outcome_count):
            raise InvalidOutcomeIndexError(winning_outcome_index, market.outcome_count)
