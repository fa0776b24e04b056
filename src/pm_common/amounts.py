"""Integer arithmetic utilities for collateral base units.

All prices, amounts, reserves and balances are int in collateral base units
(USDC: 1 token = 10**6 units). No float, no Decimal.

Python ints never wrap, so the ledger domain is bounded explicitly: every
product or sum that can grow with supply or reserves goes through the checked
helpers below and is rejected past 256 bits.
"""

from src.pm_common.errors import ArithmeticOverflowError

UINT256_MAX = (1 << 256) - 1
BPS_DENOMINATOR = 10_000


def checked(value: int, operation: str) -> int:
    """Return ``value`` if it fits the unsigned 256-bit domain."""
    if value < 0 or value > UINT256_MAX:
        raise ArithmeticOverflowError(operation)
    return value


def checked_add(a: int, b: int, operation: str = "add") -> int:
    return checked(a + b, operation)


def checked_sub(a: int, b: int, operation: str = "sub") -> int:
    return checked(a - b, operation)


def checked_mul(a: int, b: int, operation: str = "mul") -> int:
    return checked(a * b, operation)


def mul_div(a: int, b: int, denominator: int, operation: str = "mul_div") -> int:
    """floor(a * b / denominator) with the product checked before dividing."""
    if denominator <= 0:
        raise ArithmeticOverflowError(f"{operation}: division by {denominator}")
    return checked_mul(a, b, operation) // denominator


def apply_bps(amount: int, bps: int) -> int:
    """floor(amount * bps / 10000)."""
    return mul_div(amount, bps, BPS_DENOMINATOR, "apply_bps")


def to_units(tokens: int, decimals: int = 6) -> int:
    """Whole tokens -> base units: to_units(100) == 100_000_000."""
    return tokens * 10**decimals


def units_to_display(units: int, decimals: int = 6) -> str:
    """Convert base units to display string: 98_500_000 -> '98.500000'."""
    sign = "-" if units < 0 else ""
    abs_units = -units if units < 0 else units
    scale = 10**decimals
    if decimals == 0:
        return f"{sign}{abs_units:,}"
    return f"{sign}{abs_units // scale:,}.{abs_units % scale:0{decimals}d}"
