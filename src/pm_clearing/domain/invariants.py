"""Aggregate invariant verification after each mutation.

Checks run on the private copy before it is saved, so a violation aborts the
mutation and nothing is persisted. Violations are programming errors and raise
AssertionError.
"""

import logging

from src.pm_curve.domain.models import CreatorShareCurve
from src.pm_curve.domain.pricing import cumulative_cost
from src.pm_market.domain import amm
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)


def verify_market_invariants(market: Market) -> None:
    """Verify market invariants. Raises AssertionError if violated.

    INV-1: reserves[i] >= 0 for every outcome
    INV-2: shares_outstanding[i] == sum of position shares on outcome i
    INV-3: sum(reserves) == sum(position cost_basis) == sum(total_staked)
    INV-4: with virtual liquidity, 0 < probability(i) < 1 and probabilities sum to 1
    """
    try:
        for i, reserve in enumerate(market.reserves):
            assert reserve >= 0, f"INV-1 violated: market={market.id} reserve[{i}]={reserve}"

        for outcome in market.outcomes:
            held = sum(
                p.shares_owned for p in market.positions.values()
                if p.outcome_index == outcome.index
            )
            assert outcome.shares_outstanding == held, (
                f"INV-2 violated: market={market.id} outcome={outcome.index} "
                f"shares_outstanding={outcome.shares_outstanding} != positions={held}"
            )

        reserves = sum(market.reserves)
        principal = sum(p.cost_basis for p in market.positions.values())
        staked = sum(o.total_staked for o in market.outcomes)
        assert reserves == principal == staked, (
            f"INV-3 violated: market={market.id} reserves={reserves} "
            f"cost_basis={principal} total_staked={staked}"
        )

        if market.virtual_liquidity > 0:
            probs = amm.probabilities(market.reserve_snapshot(), market.virtual_liquidity)
            assert all(0 < p < 1 for p in probs), (
                f"INV-4 violated: market={market.id} probabilities={probs}"
            )
            assert sum(probs) == 1, f"INV-4 violated: market={market.id} sum={sum(probs)}"
    except AssertionError as e:
        logger.error(str(e))
        raise

    logger.debug(
        "Invariants OK: market=%s, reserves=%s, volume=%d",
        market.id, market.reserves, market.total_volume,
    )


def verify_settlement_conservation(market: Market) -> None:
    """Payouts never exceed the pool; refunds return exactly the pool."""
    settlement = market.settlement
    assert settlement is not None, f"market={market.id} has no settlement"
    paid = sum(p.amount for p in settlement.payouts)
    assert paid + settlement.dust == settlement.total_pooled, (
        f"Settlement violated: market={market.id} paid={paid} "
        f"dust={settlement.dust} pool={settlement.total_pooled}"
    )
    assert settlement.dust >= 0, f"Settlement violated: market={market.id} overpays"


def verify_curve_invariants(curve: CreatorShareCurve) -> None:
    """CURVE-1: 0 <= supply <= max_supply and supply == sum(holders)
    CURVE-2: reserve == cumulative_cost(supply)
    """
    held = sum(curve.holders.values())
    assert 0 <= curve.supply <= curve.config.max_supply, (
        f"CURVE-1 violated: creator={curve.creator_id} supply={curve.supply}"
    )
    assert curve.supply == held, (
        f"CURVE-1 violated: creator={curve.creator_id} supply={curve.supply} != holders={held}"
    )
    expected = cumulative_cost(curve.supply, curve.config)
    assert curve.reserve == expected, (
        f"CURVE-2 violated: creator={curve.creator_id} reserve={curve.reserve} != {expected}"
    )
    logger.debug("Curve invariants OK: creator=%s, supply=%d", curve.creator_id, curve.supply)
