import pytest

from src.pm_clearing.domain.fee import FeeSchedule, calc_fee
from src.pm_common.errors import ErrorCategory, InvalidFeeRateError, NegativeAmountError

USDC = 10**6


class TestFeeScheduleValidation:
    def test_rate_above_100_percent_rejected(self) -> None:
        with pytest.raises(InvalidFeeRateError):
            FeeSchedule(total_bps=10_001)

    def test_negative_rate_rejected(self) -> None:
        with pytest.raises(InvalidFeeRateError):
            FeeSchedule(total_bps=-1)

    def test_sub_rates_above_total_rejected(self) -> None:
        with pytest.raises(InvalidFeeRateError, match="sum to 160"):
            FeeSchedule(total_bps=150, platform_bps=100, creator_bps=60)

    def test_negative_sub_rate_rejected(self) -> None:
        with pytest.raises(InvalidFeeRateError):
            FeeSchedule(total_bps=150, platform_bps=-5)

    def test_boundaries_accepted(self) -> None:
        FeeSchedule(total_bps=0)
        FeeSchedule(total_bps=10_000, platform_bps=10_000)


class TestFeeSplit:
    def test_market_default_on_100_usdc(self) -> None:
        split = FeeSchedule.market_default().split(100 * USDC)
        # 1.5% total: 0.75% platform, 0.6% creator, 0.15% shareholders
        assert split.fee == 1_500_000
        assert split.net == 98_500_000
        assert split.platform == 750_000
        assert split.creator == 600_000
        assert split.shareholder == 150_000

    def test_parts_always_sum_to_fee(self) -> None:
        schedule = FeeSchedule(total_bps=150, platform_bps=75, creator_bps=60, shareholder_bps=15)
        for gross in (1, 7, 99, 667, 12_345, 999_999_999):
            split = schedule.split(gross)
            assert split.platform + split.creator + split.shareholder == split.fee
            assert split.fee + split.net == gross
            assert split.platform >= 0

    def test_fee_floors(self) -> None:
        # 99 x 150 / 10000 = 1.485 -> 1
        assert FeeSchedule(total_bps=150).split(99).fee == 1

    def test_unallocated_rate_goes_to_platform(self) -> None:
        split = FeeSchedule(total_bps=200, creator_bps=50).split(10_000)
        assert split.creator == 50
        assert split.platform == 150

    def test_zero_rate(self) -> None:
        split = FeeSchedule(total_bps=0).split(1_000)
        assert split.fee == 0
        assert split.net == 1_000

    def test_negative_gross_is_a_validation_error(self) -> None:
        with pytest.raises(NegativeAmountError) as exc:
            FeeSchedule.market_default().split(-5)
        assert exc.value.category == ErrorCategory.VALIDATION
        assert exc.value.value == -5

    def test_curve_sell_default_splits_evenly(self) -> None:
        split = FeeSchedule.curve_sell_default().split(64_523_810)
        assert split.fee == 3_226_190
        assert split.shareholder == 1_613_095
        assert split.platform == 1_613_095


class TestCalcFee:
    def test_floor_division(self) -> None:
        # 100 x 20 / 10000 = 0.2 -> 0
        assert calc_fee(100, 20) == 0

    def test_exact_division(self) -> None:
        assert calc_fee(10_000, 20) == 20
