"""Market settlement — winnings on resolution, principal refunds on cancellation.

Resolution: each winning position gets
    shares_owned x total_pooled // shares_outstanding[winner]
where total_pooled is the sum of real reserves. Virtual liquidity is never
paid out. Losing shares redeem 0.

Cancellation: each position gets back its cost_basis (net principal), so
sum(refunds) == sum(net deposits) == sum(reserves).
"""

from src.pm_common.amounts import mul_div
from src.pm_common.enums import PayoutKind
from src.pm_market.domain.models import Market, Payout, Settlement


def settle_resolution(market: Market, winning_outcome_index: int) -> Settlement:
    total_pooled = sum(market.reserves)
    winning_shares = market.outcomes[winning_outcome_index].shares_outstanding
    payouts: list[Payout] = []
    for (user_id, outcome_index), pos in sorted(market.positions.items()):
        if outcome_index != winning_outcome_index or pos.shares_owned == 0:
            continue
        amount = mul_div(pos.shares_owned, total_pooled, winning_shares, "resolution payout")
        payouts.append(Payout(user_id, outcome_index, PayoutKind.WINNINGS, amount))
    paid = sum(p.amount for p in payouts)
    return Settlement(
        kind=PayoutKind.WINNINGS,
        total_pooled=total_pooled,
        payouts=payouts,
        dust=total_pooled - paid,
    )


def settle_cancellation(market: Market) -> Settlement:
    total_pooled = sum(market.reserves)
    payouts = [
        Payout(user_id, outcome_index, PayoutKind.REFUND, pos.cost_basis)
        for (user_id, outcome_index), pos in sorted(market.positions.items())
        if pos.cost_basis > 0
    ]
    paid = sum(p.amount for p in payouts)
    return Settlement(
        kind=PayoutKind.REFUND,
        total_pooled=total_pooled,
        payouts=payouts,
        dust=total_pooled - paid,
    )
