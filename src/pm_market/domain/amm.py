"""Virtual-liquidity AMM pricing — pure functions over a reserve snapshot.

    effective_reserve(i) = reserves[i] + V
    total_effective      = sum(effective_reserve)
    probability(i)       = effective_reserve(i) / total_effective
    shares_out(i, net)   = net x total_effective // effective_reserve(i)

V (virtual liquidity per outcome) is configuration, never a balance: it only
appears inside these formulas and is excluded from payouts. With V > 0 every
outcome keeps effective reserve >= V, so no probability can reach 0 or 1, and
probabilities sum to exactly 1 for any number of outcomes.
"""

from dataclasses import dataclass
from fractions import Fraction

from src.pm_clearing.domain.fee import FeeSchedule
from src.pm_common.amounts import BPS_DENOMINATOR, checked, checked_add, mul_div
from src.pm_common.errors import (
    AmountCannotBeZeroError,
    InvalidOutcomeIndexError,
    NegativeAmountError,
)


@dataclass(frozen=True)
class BetQuote:
    outcome_index: int
    gross: int
    fee: int
    net: int
    shares_out: int


def check_outcome_index(reserves: tuple[int, ...], outcome_index: int) -> None:
    if not (0 <= outcome_index < len(reserves)):
        raise InvalidOutcomeIndexError(outcome_index, len(reserves))


def effective_reserve(reserves: tuple[int, ...], outcome_index: int, virtual_liquidity: int) -> int:
    check_outcome_index(reserves, outcome_index)
    return checked_add(reserves[outcome_index], virtual_liquidity, "effective reserve")


def total_effective(reserves: tuple[int, ...], virtual_liquidity: int) -> int:
    total = 0
    for reserve in reserves:
        total = checked_add(total, checked(reserve, "reserve"), "total effective reserve")
    return checked_add(total, virtual_liquidity * len(reserves), "total effective reserve")


def probability(reserves: tuple[int, ...], outcome_index: int, virtual_liquidity: int) -> Fraction:
    """Exact probability of one outcome; 0 < p < 1 whenever V > 0."""
    own = effective_reserve(reserves, outcome_index, virtual_liquidity)
    total = total_effective(reserves, virtual_liquidity)
    if total == 0:
        # no virtual liquidity and no stake yet: uniform prior
        return Fraction(1, len(reserves))
    return Fraction(own, total)


def probabilities(reserves: tuple[int, ...], virtual_liquidity: int) -> list[Fraction]:
    return [probability(reserves, i, virtual_liquidity) for i in range(len(reserves))]


def probability_bps(reserves: tuple[int, ...], outcome_index: int, virtual_liquidity: int) -> int:
    """Probability in basis points, floored: a fresh 3-outcome market reports 3333."""
    p = probability(reserves, outcome_index, virtual_liquidity)
    return p.numerator * BPS_DENOMINATOR // p.denominator


def calculate_shares(
    reserves: tuple[int, ...], outcome_index: int, net_amount: int, virtual_liquidity: int
) -> int:
    """Shares minted for ``net_amount`` against the pre-trade snapshot."""
    if net_amount < 0:
        raise NegativeAmountError("net amount", net_amount)
    own = effective_reserve(reserves, outcome_index, virtual_liquidity)
    total = total_effective(reserves, virtual_liquidity)
    if own == 0:
        # only reachable with V == 0 on an unbacked outcome: price it at 1/N
        return checked(net_amount * len(reserves), "shares out")
    return mul_div(net_amount, total, own, "shares out")


def quote_bet(
    reserves: tuple[int, ...],
    outcome_index: int,
    gross_amount: int,
    virtual_liquidity: int,
    fees: FeeSchedule,
) -> BetQuote:
    check_outcome_index(reserves, outcome_index)
    if gross_amount == 0:
        raise AmountCannotBeZeroError()
    split = fees.split(gross_amount)
    shares = calculate_shares(reserves, outcome_index, split.net, virtual_liquidity)
    return BetQuote(
        outcome_index=outcome_index,
        gross=gross_amount,
        fee=split.fee,
        net=split.net,
        shares_out=shares,
    )


def apply_bet(reserves: tuple[int, ...], quote: BetQuote) -> tuple[int, ...]:
    """Reserve snapshot after the quoted bet; the input is not modified."""
    updated = list(reserves)
    updated[quote.outcome_index] = checked_add(
        updated[quote.outcome_index], quote.net, "reserve"
    )
    return tuple(updated)
