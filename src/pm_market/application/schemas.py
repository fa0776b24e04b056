"""Pydantic schemas for pm_market service results and transition parameters.

Amounts are int base units. Probabilities are reported twice: floored basis
points for exact comparisons and a float for display.
"""

from fractions import Fraction

from pydantic import BaseModel

from src.pm_common.amounts import BPS_DENOMINATOR
from src.pm_common.enums import MarketStatus
from src.pm_market.domain.amm import BetQuote
from src.pm_market.domain.models import Market, Payout, Trade


def to_bps(p: Fraction) -> int:
    return p.numerator * BPS_DENOMINATOR // p.denominator


class TransitionParams(BaseModel):
    winning_outcome_index: int | None = None
    additional_hours: int | None = None
    reason: str = ""


class BetQuoteOut(BaseModel):
    outcome_index: int
    gross: int
    fee: int
    net: int
    shares_out: int

    @classmethod
    def from_domain(cls, quote: BetQuote) -> "BetQuoteOut":
        return cls(
            outcome_index=quote.outcome_index,
            gross=quote.gross,
            fee=quote.fee,
            net=quote.net,
            shares_out=quote.shares_out,
        )


class TradeOut(BaseModel):
    id: str
    market_id: str
    user_id: str
    action: str
    outcome_index: int
    gross_amount: int
    fee: int
    net_amount: int
    shares_delta: int
    price: int
    timestamp: str

    @classmethod
    def from_domain(cls, trade: Trade) -> "TradeOut":
        return cls(
            id=trade.id,
            market_id=trade.market_id,
            user_id=trade.user_id,
            action=trade.action.value,
            outcome_index=trade.outcome_index,
            gross_amount=trade.gross_amount,
            fee=trade.fee,
            net_amount=trade.net_amount,
            shares_delta=trade.shares_delta,
            price=trade.price,
            timestamp=trade.timestamp.isoformat(),
        )


class PlaceBetResponse(BaseModel):
    shares_out: int
    new_probabilities_bps: list[int]
    new_probabilities: list[float]
    trade: TradeOut


class OutcomeOut(BaseModel):
    index: int
    label: str
    reserve: int
    shares_outstanding: int
    total_staked: int
    probability_bps: int


class MarketDetail(BaseModel):
    id: str
    title: str
    creator_id: str
    status: MarketStatus
    end_time: str
    total_volume: int
    virtual_liquidity: int
    fee_bps: int
    winning_outcome_index: int | None
    outcomes: list[OutcomeOut]

    @classmethod
    def from_domain(cls, market: Market, probabilities: list[Fraction]) -> "MarketDetail":
        return cls(
            id=market.id,
            title=market.title,
            creator_id=market.creator_id,
            status=market.status,
            end_time=market.end_time.isoformat(),
            total_volume=market.total_volume,
            virtual_liquidity=market.virtual_liquidity,
            fee_bps=market.fee_schedule.total_bps,
            winning_outcome_index=market.winning_outcome_index,
            outcomes=[
                OutcomeOut(
                    index=o.index,
                    label=o.label,
                    reserve=market.reserves[o.index],
                    shares_outstanding=o.shares_outstanding,
                    total_staked=o.total_staked,
                    probability_bps=to_bps(probabilities[o.index]),
                )
                for o in market.outcomes
            ],
        )


class PayoutOut(BaseModel):
    user_id: str
    outcome_index: int
    kind: str
    amount: int

    @classmethod
    def from_domain(cls, payout: Payout) -> "PayoutOut":
        return cls(
            user_id=payout.user_id,
            outcome_index=payout.outcome_index,
            kind=payout.kind.value,
            amount=payout.amount,
        )


class TransitionResult(BaseModel):
    market_id: str
    old_status: MarketStatus
    new_status: MarketStatus
    end_time: str
    payouts: list[PayoutOut] = []
    total_payout: int = 0


class ClaimResult(BaseModel):
    market_id: str
    user_id: str
    kind: str
    amount: int
