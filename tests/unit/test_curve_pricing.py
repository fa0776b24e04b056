"""Tests for pm_curve.domain.pricing — cubic bonding curve math."""

import pytest

from src.pm_common.errors import (
    AmountCannotBeZeroError,
    ArithmeticOverflowError,
    ErrorCategory,
    InsufficientSupplyError,
    InvalidCurveConfigError,
    NegativeAmountError,
    SupplyExceedsMaximumError,
)
from src.pm_curve.domain import pricing
from src.pm_curve.domain.models import CurveConfig

USDC = 10**6


@pytest.fixture
def config() -> CurveConfig:
    return CurveConfig(price_scale=1400, cost_scale=4200, max_supply=1000, unit=USDC)


class TestCurveConfig:
    def test_cost_scale_must_be_three_times_price_scale(self) -> None:
        with pytest.raises(InvalidCurveConfigError, match="3 x price_scale"):
            CurveConfig(price_scale=1400, cost_scale=4000, max_supply=1000)

    def test_non_positive_max_supply_rejected(self) -> None:
        with pytest.raises(InvalidCurveConfigError):
            CurveConfig(price_scale=1400, cost_scale=4200, max_supply=0)

    def test_default_reads_settings(self) -> None:
        config = CurveConfig.default()
        assert config.price_scale == 1400
        assert config.cost_scale == 4200
        assert config.max_supply == 1000
        assert config.unit == USDC


class TestPrice:
    def test_zero_supply_is_free(self, config: CurveConfig) -> None:
        assert pricing.price(0, config) == 0

    def test_supply_10(self, config: CurveConfig) -> None:
        # 10^2 / 1400 = 0.0714...
        assert pricing.price(10, config) == 71_428

    def test_supply_100(self, config: CurveConfig) -> None:
        # 100^2 / 1400 = 7.142857...
        assert pricing.price(100, config) == 7_142_857

    def test_supply_1000(self, config: CurveConfig) -> None:
        assert pricing.price(1000, config) == 714_285_714


class TestBuyCost:
    def test_first_share(self, config: CurveConfig) -> None:
        # 1^3 / 4200 = 0.000238...
        assert pricing.buy_cost(0, 1, config) == 238

    def test_ten_shares_from_fifty(self, config: CurveConfig) -> None:
        # (60^3 - 50^3) / 4200 = 91000 / 4200 = 21.666...
        cost = pricing.buy_cost(50, 10, config)
        assert abs(cost - 21_666_666) <= 1

    def test_hundred_shares_from_zero(self, config: CurveConfig) -> None:
        assert pricing.buy_cost(0, 100, config) == 238_095_238

    def test_whole_supply(self, config: CurveConfig) -> None:
        assert pricing.buy_cost(0, 1000, config) == 238_095_238_095

    def test_zero_amount_rejected(self, config: CurveConfig) -> None:
        with pytest.raises(AmountCannotBeZeroError):
            pricing.buy_cost(10, 0, config)

    def test_buy_at_max_supply_rejected(self, config: CurveConfig) -> None:
        with pytest.raises(SupplyExceedsMaximumError) as exc:
            pricing.buy_cost(1000, 1, config)
        assert exc.value.max_supply == 1000

    def test_buy_crossing_max_supply_rejected(self, config: CurveConfig) -> None:
        with pytest.raises(SupplyExceedsMaximumError):
            pricing.buy_cost(999, 2, config)
        with pytest.raises(SupplyExceedsMaximumError):
            pricing.buy_cost(0, 1001, config)

    def test_strictly_increasing_and_convex(self, config: CurveConfig) -> None:
        marginal = [pricing.buy_cost(s, 1, config) for s in range(0, 200)]
        assert all(b > a for a, b in zip(marginal, marginal[1:]))


class TestSellProceeds:
    def test_sell_last_share(self, config: CurveConfig) -> None:
        assert pricing.sell_proceeds(1, 1, config) == 238

    def test_sell_everything(self, config: CurveConfig) -> None:
        assert pricing.sell_proceeds(100, 100, config) == 238_095_238

    def test_zero_amount_rejected(self, config: CurveConfig) -> None:
        with pytest.raises(AmountCannotBeZeroError):
            pricing.sell_proceeds(100, 0, config)

    def test_more_than_supply_rejected(self, config: CurveConfig) -> None:
        with pytest.raises(InsufficientSupplyError) as exc:
            pricing.sell_proceeds(50, 51, config)
        assert exc.value.supply == 50
        assert exc.value.amount == 51


class TestCurveIdentities:
    @pytest.mark.parametrize("supply,amount", [(0, 1), (20, 5), (50, 10), (333, 667), (999, 1)])
    def test_buy_equals_sell_back(self, config: CurveConfig, supply: int, amount: int) -> None:
        assert pricing.buy_cost(supply, amount, config) == pricing.sell_proceeds(
            supply + amount, amount, config
        )

    @pytest.mark.parametrize("supply,a,b", [(0, 50, 50), (0, 1, 1), (30, 20, 7), (500, 250, 250)])
    def test_split_purchase_costs_the_same(
        self, config: CurveConfig, supply: int, a: int, b: int
    ) -> None:
        split = pricing.buy_cost(supply, a, config) + pricing.buy_cost(supply + a, b, config)
        assert split == pricing.buy_cost(supply, a + b, config)

    def test_one_by_one_purchases_match_bulk(self, config: CurveConfig) -> None:
        total = sum(pricing.buy_cost(s, 1, config) for s in range(100))
        assert total == pricing.buy_cost(0, 100, config)


class TestAveragePrices:
    def test_average_buy_price_floors(self, config: CurveConfig) -> None:
        cost = pricing.buy_cost(50, 10, config)
        assert pricing.average_buy_price(50, 10, config) == cost // 10

    def test_average_sell_price_floors(self, config: CurveConfig) -> None:
        proceeds = pricing.sell_proceeds(60, 7, config)
        assert pricing.average_sell_price(60, 7, config) == proceeds // 7


class TestQuotes:
    def test_zero_quotes_are_zero(self, config: CurveConfig) -> None:
        assert pricing.quote_buy(0, 0, config) == 0
        assert pricing.quote_sell(0, 0, config) == 0

    def test_quote_matches_cost(self, config: CurveConfig) -> None:
        assert pricing.quote_buy(10, 5, config) == pricing.buy_cost(10, 5, config)


class TestOverflow:
    def test_cubic_term_past_256_bits_rejected(self) -> None:
        huge = CurveConfig(price_scale=1, cost_scale=3, max_supply=2**100, unit=10**18)
        with pytest.raises(ArithmeticOverflowError):
            pricing.buy_cost(0, 2**90, huge)

    def test_negative_supply_rejected(self, config: CurveConfig) -> None:
        with pytest.raises(NegativeAmountError) as exc:
            pricing.price(-1, config)
        assert exc.value.field == "supply"
        assert exc.value.category == ErrorCategory.VALIDATION

    def test_negative_amount_rejected(self, config: CurveConfig) -> None:
        with pytest.raises(NegativeAmountError, match="amount"):
            pricing.sell_proceeds(10, -1, config)
