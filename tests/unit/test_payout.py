"""Tests for pm_clearing.domain.payout and pm_clearing.domain.invariants."""

from datetime import UTC, datetime

import pytest

from src.pm_clearing.domain.fee import FeeSchedule
from src.pm_clearing.domain.invariants import (
    verify_curve_invariants,
    verify_market_invariants,
    verify_settlement_conservation,
)
from src.pm_clearing.domain.payout import settle_cancellation, settle_resolution
from src.pm_common.enums import PayoutKind
from src.pm_curve.domain.models import CreatorShareCurve, CurveConfig
from src.pm_market.domain.models import Market, Outcome


def _market_with_positions(bets: list[tuple[str, int, int, int]]) -> Market:
    """bets: (user, outcome, net principal, shares)."""
    market = Market(
        id="mkt-1",
        title="Q",
        creator_id="creator-1",
        outcomes=[Outcome(0, "Yes"), Outcome(1, "No")],
        reserves=[0, 0],
        virtual_liquidity=5_000_000_000,
        fee_schedule=FeeSchedule(total_bps=150),
        end_time=datetime(2026, 1, 2, tzinfo=UTC),
    )
    for user, idx, net, shares in bets:
        market.reserves[idx] += net
        market.outcomes[idx].shares_outstanding += shares
        market.outcomes[idx].total_staked += net
        pos = market.position(user, idx)
        pos.shares_owned += shares
        pos.cost_basis += net
    return market


class TestResolution:
    def test_pro_rata_with_dust(self) -> None:
        market = _market_with_positions([
            ("a", 0, 100, 1), ("b", 0, 100, 2), ("c", 1, 1, 5),
        ])
        settlement = settle_resolution(market, 0)
        # pool 201 split 1:2 -> 67 and 134, nothing left
        assert [(p.user_id, p.amount) for p in settlement.payouts] == [("a", 67), ("b", 134)]
        assert settlement.dust == 0
        assert settlement.kind == PayoutKind.WINNINGS

    def test_rounding_leaves_dust_not_overpayment(self) -> None:
        market = _market_with_positions([
            ("a", 0, 50, 3), ("b", 0, 50, 3), ("c", 0, 0, 3), ("d", 1, 0, 1),
        ])
        settlement = settle_resolution(market, 0)
        # 100 / 3 each -> 33 x 3 = 99, 1 unit of dust
        assert [p.amount for p in settlement.payouts] == [33, 33, 33]
        assert settlement.dust == 1

    def test_winner_nobody_holds(self) -> None:
        market = _market_with_positions([("a", 0, 100, 10)])
        settlement = settle_resolution(market, 1)
        assert settlement.payouts == []
        assert settlement.dust == 100

    def test_conservation_check_passes(self) -> None:
        market = _market_with_positions([("a", 0, 10, 7), ("b", 1, 20, 9)])
        market.settlement = settle_resolution(market, 1)
        verify_settlement_conservation(market)


class TestCancellation:
    def test_refund_equals_principal(self) -> None:
        market = _market_with_positions([
            ("a", 0, 98_500_000, 197), ("a", 1, 1_000, 3), ("b", 1, 7, 1),
        ])
        settlement = settle_cancellation(market)
        assert settlement.kind == PayoutKind.REFUND
        assert settlement.payout_for("a") == 98_501_000
        assert settlement.payout_for("b") == 7
        assert settlement.dust == 0
        assert sum(p.amount for p in settlement.payouts) == sum(market.reserves)


class TestMarketInvariants:
    def test_consistent_market_passes(self) -> None:
        verify_market_invariants(_market_with_positions([("a", 0, 10, 20)]))

    def test_negative_reserve(self) -> None:
        market = _market_with_positions([])
        market.reserves[0] = -1
        with pytest.raises(AssertionError, match="INV-1"):
            verify_market_invariants(market)

    def test_share_mismatch(self) -> None:
        market = _market_with_positions([("a", 0, 10, 20)])
        market.outcomes[0].shares_outstanding += 1
        with pytest.raises(AssertionError, match="INV-2"):
            verify_market_invariants(market)

    def test_reserve_mismatch(self) -> None:
        market = _market_with_positions([("a", 0, 10, 20)])
        market.reserves[1] += 5
        with pytest.raises(AssertionError, match="INV-3"):
            verify_market_invariants(market)


class TestCurveInvariants:
    def _curve(self) -> CreatorShareCurve:
        return CreatorShareCurve(
            creator_id="c", config=CurveConfig(1400, 4200, 1000), supply=100,
            holders={"a": 60, "b": 40}, reserve=238_095_238,
        )

    def test_consistent_curve_passes(self) -> None:
        verify_curve_invariants(self._curve())

    def test_holders_mismatch(self) -> None:
        curve = self._curve()
        curve.holders["a"] = 59
        with pytest.raises(AssertionError, match="CURVE-1"):
            verify_curve_invariants(curve)

    def test_reserve_off_curve(self) -> None:
        curve = self._curve()
        curve.reserve -= 1
        with pytest.raises(AssertionError, match="CURVE-2"):
            verify_curve_invariants(curve)
