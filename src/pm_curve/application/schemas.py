"""Pydantic schemas for creator share curve results."""

from pydantic import BaseModel

from src.pm_common.amounts import units_to_display
from src.pm_curve.domain.models import CreatorShareCurve, CurveTrade


class CurveQuote(BaseModel):
    supply: int
    amount: int
    value: int  # buy cost or gross sell proceeds
    average_price: int
    value_display: str


class CurveTradeOut(BaseModel):
    id: str
    creator_id: str
    user_id: str
    action: str
    amount: int
    gross_value: int
    fee: int
    net_value: int
    supply_after: int
    timestamp: str

    @classmethod
    def from_domain(cls, trade: CurveTrade) -> "CurveTradeOut":
        return cls(
            id=trade.id,
            creator_id=trade.creator_id,
            user_id=trade.user_id,
            action=trade.action.value,
            amount=trade.amount,
            gross_value=trade.gross_value,
            fee=trade.fee,
            net_value=trade.net_value,
            supply_after=trade.supply_after,
            timestamp=trade.timestamp.isoformat(),
        )


class CurveSnapshot(BaseModel):
    creator_id: str
    supply: int
    max_supply: int
    current_price: int
    reserve: int
    reward_pool: int
    platform_fees: int
    holder_count: int

    @classmethod
    def from_domain(cls, curve: CreatorShareCurve, current_price: int) -> "CurveSnapshot":
        return cls(
            creator_id=curve.creator_id,
            supply=curve.supply,
            max_supply=curve.config.max_supply,
            current_price=current_price,
            reserve=curve.reserve,
            reward_pool=curve.reward_pool,
            platform_fees=curve.platform_fees,
            holder_count=sum(1 for b in curve.holders.values() if b > 0),
        )


def build_quote(supply: int, amount: int, value: int, decimals: int) -> CurveQuote:
    return CurveQuote(
        supply=supply,
        amount=amount,
        value=value,
        average_price=value // amount if amount else 0,
        value_display=units_to_display(value, decimals),
    )
