"""Fee engine — splits a gross amount into fee and net, and the fee into parts.

fee = floor(gross x total_bps / 10000); net = gross - fee.
Creator and shareholder parts are floored on the same gross base; the platform
takes the remainder, so the three parts always add up to ``fee`` exactly.
Rates are validated when the schedule is built, never at trade time.
"""

from dataclasses import dataclass

from config.settings import settings
from src.pm_common.amounts import BPS_DENOMINATOR, apply_bps, checked
from src.pm_common.errors import InvalidFeeRateError, NegativeAmountError


@dataclass(frozen=True)
class FeeSplit:
    gross: int
    fee: int
    net: int
    platform: int
    creator: int
    shareholder: int


@dataclass(frozen=True)
class FeeSchedule:
    total_bps: int
    platform_bps: int = 0
    creator_bps: int = 0
    shareholder_bps: int = 0

    def __post_init__(self) -> None:
        if not (0 <= self.total_bps <= BPS_DENOMINATOR):
            raise InvalidFeeRateError(
                f"total_bps must be within [0, {BPS_DENOMINATOR}], got {self.total_bps}"
            )
        parts = (self.platform_bps, self.creator_bps, self.shareholder_bps)
        if any(p < 0 for p in parts):
            raise InvalidFeeRateError(f"sub-rates must be non-negative, got {parts}")
        if sum(parts) > self.total_bps:
            raise InvalidFeeRateError(
                f"sub-rates {parts} sum to {sum(parts)} > total_bps {self.total_bps}"
            )

    @classmethod
    def market_default(cls) -> "FeeSchedule":
        return cls(
            total_bps=settings.MARKET_FEE_BPS,
            platform_bps=settings.PLATFORM_FEE_BPS,
            creator_bps=settings.CREATOR_FEE_BPS,
            shareholder_bps=settings.SHAREHOLDER_FEE_BPS,
        )

    @classmethod
    def curve_sell_default(cls) -> "FeeSchedule":
        # shareholder part funds the creator's reward pool
        return cls(
            total_bps=settings.CURVE_SELL_FEE_BPS,
            platform_bps=settings.CURVE_PLATFORM_FEE_BPS,
            shareholder_bps=settings.CURVE_REWARD_FEE_BPS,
        )

    def split(self, gross: int) -> FeeSplit:
        if gross < 0:
            raise NegativeAmountError("gross amount", gross)
        checked(gross, "fee split")
        fee = apply_bps(gross, self.total_bps)
        creator = apply_bps(gross, self.creator_bps)
        shareholder = apply_bps(gross, self.shareholder_bps)
        return FeeSplit(
            gross=gross,
            fee=fee,
            net=gross - fee,
            platform=fee - creator - shareholder,
            creator=creator,
            shareholder=shareholder,
        )


def calc_fee(amount: int, fee_bps: int) -> int:
    """Floor-division fee: amount x fee_bps // 10000."""
    return apply_bps(amount, fee_bps)
