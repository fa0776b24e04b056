"""Cubic bonding curve pricing — pure functions, no state.

    price(s)           = s^2 / price_scale
    cumulative_cost(s) = s^3 / cost_scale         (integral of price, cost_scale = 3 x price_scale)
    buy_cost(s, a)     = cumulative_cost(s + a) - cumulative_cost(s)
    sell_proceeds(s, a) = cumulative_cost(s) - cumulative_cost(s - a)

Values are collateral base units. cumulative_cost is floored once per supply
point and every cost is a difference of two such points, so the terms
telescope: buy_cost(s, a) == sell_proceeds(s + a, a) and
buy_cost(s, a) + buy_cost(s + a, b) == buy_cost(s, a + b) hold exactly, and a
curve's reserve always equals cumulative_cost(supply).
"""

from src.pm_common.amounts import checked_mul, checked_sub
from src.pm_common.errors import (
    AmountCannotBeZeroError,
    InsufficientSupplyError,
    NegativeAmountError,
    SupplyExceedsMaximumError,
)
from src.pm_curve.domain.models import CurveConfig


def price(supply: int, config: CurveConfig) -> int:
    """Marginal price at ``supply``; price(0) == 0."""
    _check_supply(supply)
    squared = checked_mul(supply, supply, "curve price")
    return checked_mul(squared, config.unit, "curve price") // config.price_scale


def cumulative_cost(supply: int, config: CurveConfig) -> int:
    _check_supply(supply)
    cubed = checked_mul(checked_mul(supply, supply, "curve cost"), supply, "curve cost")
    return checked_mul(cubed, config.unit, "curve cost") // config.cost_scale


def buy_cost(supply: int, amount: int, config: CurveConfig) -> int:
    if amount == 0:
        raise AmountCannotBeZeroError()
    _check_supply(supply)
    _check_supply(amount, "amount")
    if supply + amount > config.max_supply:
        raise SupplyExceedsMaximumError(supply, amount, config.max_supply)
    return checked_sub(
        cumulative_cost(supply + amount, config),
        cumulative_cost(supply, config),
        "curve buy cost",
    )


def sell_proceeds(supply: int, amount: int, config: CurveConfig) -> int:
    if amount == 0:
        raise AmountCannotBeZeroError()
    _check_supply(supply)
    _check_supply(amount, "amount")
    if amount > supply:
        raise InsufficientSupplyError(supply, amount)
    return checked_sub(
        cumulative_cost(supply, config),
        cumulative_cost(supply - amount, config),
        "curve sell proceeds",
    )


def average_buy_price(supply: int, amount: int, config: CurveConfig) -> int:
    """Average price per share, floored."""
    return buy_cost(supply, amount, config) // amount


def average_sell_price(supply: int, amount: int, config: CurveConfig) -> int:
    return sell_proceeds(supply, amount, config) // amount


def quote_buy(supply: int, amount: int, config: CurveConfig) -> int:
    """Like buy_cost, but a zero amount quotes 0 (display helpers)."""
    if amount == 0:
        return 0
    return buy_cost(supply, amount, config)


def quote_sell(supply: int, amount: int, config: CurveConfig) -> int:
    if amount == 0:
        return 0
    return sell_proceeds(supply, amount, config)


def _check_supply(value: int, field: str = "supply") -> None:
    if value < 0:
        raise NegativeAmountError(field, value)
