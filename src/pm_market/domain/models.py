"""Domain models for pm_market — dataclasses, no business logic.

A Market is one aggregate: reserves, per-outcome share totals, volume,
positions and settlement change together and are saved together.
"""

from dataclasses import dataclass, field
from datetime import datetime

from src.pm_clearing.domain.fee import FeeSchedule
from src.pm_common.enums import MarketStatus, PayoutKind, TradeAction


@dataclass
class Outcome:
    index: int
    label: str
    shares_outstanding: int = 0
    total_staked: int = 0  # net principal deposited on this outcome


@dataclass
class Position:
    market_id: str
    user_id: str
    outcome_index: int
    shares_owned: int = 0
    cost_basis: int = 0  # sum of net (after-fee) principal


@dataclass(frozen=True)
class Trade:
    """Immutable record of one bet, handed to the ledger collaborator."""

    id: str
    market_id: str
    user_id: str
    action: TradeAction
    outcome_index: int
    gross_amount: int
    fee: int
    net_amount: int
    shares_delta: int
    price: int  # average price per whole share, base units
    timestamp: datetime


@dataclass(frozen=True)
class Payout:
    user_id: str
    outcome_index: int
    kind: PayoutKind
    amount: int


@dataclass
class Settlement:
    """Computed once when the market reaches RESOLVED or CANCELLED."""

    kind: PayoutKind
    total_pooled: int
    payouts: list[Payout]
    dust: int  # pooled funds not paid out by rounding or an unbacked winner
    claimed_users: set[str] = field(default_factory=set)

    def payout_for(self, user_id: str) -> int:
        return sum(p.amount for p in self.payouts if p.user_id == user_id)


@dataclass
class Market:
    id: str
    title: str
    creator_id: str
    outcomes: list[Outcome]
    reserves: list[int]
    virtual_liquidity: int
    fee_schedule: FeeSchedule
    end_time: datetime
    status: MarketStatus = MarketStatus.ACTIVE
    total_volume: int = 0
    winning_outcome_index: int | None = None
    positions: dict[tuple[str, int], Position] = field(default_factory=dict)
    settlement: Settlement | None = None
    created_at: datetime | None = None
    resolved_at: datetime | None = None

    @property
    def outcome_count(self) -> int:
        return len(self.outcomes)

    def reserve_snapshot(self) -> tuple[int, ...]:
        return tuple(self.reserves)

    def position(self, user_id: str, outcome_index: int) -> Position:
        key = (user_id, outcome_index)
        if key not in self.positions:
            self.positions[key] = Position(
                market_id=self.id, user_id=user_id, outcome_index=outcome_index
            )
        return self.positions[key]

    def positions_of(self, user_id: str) -> list[Position]:
        return [p for (uid, _), p in sorted(self.positions.items()) if uid == user_id]
