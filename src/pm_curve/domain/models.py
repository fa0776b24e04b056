"""Domain models for pm_curve — dataclasses, no pricing logic."""

from dataclasses import dataclass, field
from datetime import datetime

from config.settings import settings
from src.pm_common.enums import TradeAction
from src.pm_common.errors import InvalidCurveConfigError


@dataclass(frozen=True)
class CurveConfig:
    price_scale: int
    cost_scale: int
    max_supply: int
    unit: int = 10**6  # collateral base units per whole token

    def __post_init__(self) -> None:
        if self.price_scale <= 0:
            raise InvalidCurveConfigError(f"price_scale must be positive, got {self.price_scale}")
        # the cubic integral is only exact when cost_scale = 3 x price_scale
        if self.cost_scale != 3 * self.price_scale:
            raise InvalidCurveConfigError(
                f"cost_scale must equal 3 x price_scale ({3 * self.price_scale}), "
                f"got {self.cost_scale}"
            )
        if self.max_supply <= 0:
            raise InvalidCurveConfigError(f"max_supply must be positive, got {self.max_supply}")
        if self.unit <= 0:
            raise InvalidCurveConfigError(f"unit must be positive, got {self.unit}")

    @classmethod
    def default(cls) -> "CurveConfig":
        return cls(
            price_scale=settings.CURVE_PRICE_SCALE,
            cost_scale=settings.CURVE_COST_SCALE,
            max_supply=settings.CURVE_MAX_SUPPLY,
            unit=10**settings.COLLATERAL_DECIMALS,
        )


@dataclass
class CreatorShareCurve:
    """One creator's share instrument. Mutated only through the curve service."""

    creator_id: str
    config: CurveConfig
    supply: int = 0
    holders: dict[str, int] = field(default_factory=dict)
    reserve: int = 0  # collateral backing outstanding shares
    reward_pool: int = 0  # sell fees owed to shareholders
    platform_fees: int = 0
    created_at: datetime | None = None

    def balance_of(self, user_id: str) -> int:
        return self.holders.get(user_id, 0)


@dataclass(frozen=True)
class CurveTrade:
    """Immutable record of one curve buy or sell, handed to the ledger."""

    id: str
    creator_id: str
    user_id: str
    action: TradeAction
    amount: int
    gross_value: int
    fee: int
    net_value: int
    supply_after: int
    timestamp: datetime
