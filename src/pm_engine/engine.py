"""PricingEngine — the surface handed to the service layer.

Curve quotes are pure and take the caller's supply snapshot and config. Curve
trades go through CreatorShareService and market operations through
MarketService; each serializes mutations per creator or per market.
"""

from datetime import timedelta
from fractions import Fraction

from src.pm_clearing.domain.fee import FeeSchedule
from src.pm_common.datetime_utils import Clock, utc_now
from src.pm_common.enums import MarketStatus
from src.pm_common.events import EventPublisherProtocol
from src.pm_curve.application.schemas import CurveSnapshot, CurveTradeOut
from src.pm_curve.application.service import (
    CreatorShareService,
    quote_curve_buy,
    quote_curve_sell,
)
from src.pm_curve.domain.models import CurveConfig
from src.pm_curve.domain.repository import CurveRepositoryProtocol, CurveTradeLedgerProtocol
from src.pm_market.application.schemas import (
    BetQuoteOut,
    ClaimResult,
    MarketDetail,
    PlaceBetResponse,
    TransitionParams,
)
from src.pm_market.application.service import MarketService
from src.pm_market.domain.repository import MarketRepositoryProtocol, TradeLedgerProtocol


class PricingEngine:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        ledger: TradeLedgerProtocol | None = None,
        publisher: EventPublisherProtocol | None = None,
        clock: Clock = utc_now,
        curve_repo: CurveRepositoryProtocol | None = None,
        curve_ledger: CurveTradeLedgerProtocol | None = None,
    ) -> None:
        self.markets = MarketService(repo=repo, ledger=ledger, publisher=publisher, clock=clock)
        self.curves = CreatorShareService(
            repo=curve_repo, ledger=curve_ledger, publisher=publisher, clock=clock
        )

    @staticmethod
    def quote_curve_buy(supply: int, amount: int, config: CurveConfig | None = None) -> int:
        return quote_curve_buy(supply, amount, config or CurveConfig.default())

    @staticmethod
    def quote_curve_sell(supply: int, amount: int, config: CurveConfig | None = None) -> int:
        return quote_curve_sell(supply, amount, config or CurveConfig.default())

    async def create_curve(
        self, creator_id: str, config: CurveConfig | None = None
    ) -> CurveSnapshot:
        await self.curves.create_curve(creator_id, config)
        return await self.curves.get_snapshot(creator_id)

    async def buy_shares(self, creator_id: str, user_id: str, amount: int) -> CurveTradeOut:
        return await self.curves.buy(creator_id, user_id, amount)

    async def sell_shares(self, creator_id: str, user_id: str, amount: int) -> CurveTradeOut:
        return await self.curves.sell(creator_id, user_id, amount)

    async def create_market(
        self,
        title: str,
        outcome_labels: list[str],
        duration: timedelta,
        creator_id: str,
        virtual_liquidity: int | None = None,
        fee_schedule: FeeSchedule | None = None,
    ) -> MarketDetail:
        return await self.markets.create_market(
            title, outcome_labels, duration, creator_id, virtual_liquidity, fee_schedule
        )

    async def get_market(self, market_id: str) -> MarketDetail:
        return await self.markets.get_market(market_id)

    async def quote_bet(self, market_id: str, outcome_index: int, gross_amount: int) -> BetQuoteOut:
        return await self.markets.quote_bet(market_id, outcome_index, gross_amount)

    async def place_bet(
        self, market_id: str, user_id: str, outcome_index: int, gross_amount: int
    ) -> PlaceBetResponse:
        return await self.markets.place_bet(market_id, user_id, outcome_index, gross_amount)

    async def probability(self, market_id: str, outcome_index: int) -> Fraction:
        return await self.markets.probability(market_id, outcome_index)

    async def transition(
        self,
        market_id: str,
        target: MarketStatus,
        params: TransitionParams | None = None,
    ) -> MarketStatus:
        result = await self.markets.transition(market_id, target, params)
        return result.new_status

    async def claim_payout(self, market_id: str, user_id: str) -> ClaimResult:
        return await self.markets.claim_payout(market_id, user_id)
