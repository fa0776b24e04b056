"""CreatorShareService — per-creator share curve buy/sell and quotes.

Quotes are pure. Buy and sell hold the creator's lock, mutate a private copy
of the curve, and commit it together with its trade record: the trade is
appended first and taken back out if the save fails, so any error leaves the
stored curve and the ledger untouched. Locks are created only for curves that
exist.
"""

import asyncio
import logging
from collections import defaultdict

from config.settings import settings
from src.pm_clearing.domain.fee import FeeSchedule
from src.pm_clearing.domain.invariants import verify_curve_invariants
from src.pm_common.amounts import checked_add
from src.pm_common.datetime_utils import Clock, utc_now
from src.pm_common.enums import MarketEventType, TradeAction
from src.pm_common.errors import (
    AmountCannotBeZeroError,
    CurveAlreadyExistsError,
    CurveNotFoundError,
    InsufficientSharesError,
)
from src.pm_common.events import DomainEvent, EventPublisherProtocol
from src.pm_common.id_generator import generate_id
from src.pm_curve.application.schemas import (
    CurveQuote,
    CurveSnapshot,
    CurveTradeOut,
    build_quote,
)
from src.pm_curve.domain import pricing
from src.pm_curve.domain.models import CreatorShareCurve, CurveConfig, CurveTrade
from src.pm_curve.domain.repository import CurveRepositoryProtocol, CurveTradeLedgerProtocol
from src.pm_curve.infrastructure.persistence import (
    InMemoryCurveRepository,
    InMemoryCurveTradeLedger,
)

logger = logging.getLogger(__name__)


def quote_curve_buy(supply: int, amount: int, config: CurveConfig) -> int:
    return pricing.buy_cost(supply, amount, config)


def quote_curve_sell(supply: int, amount: int, config: CurveConfig) -> int:
    return pricing.sell_proceeds(supply, amount, config)


class CreatorShareService:
    def __init__(
        self,
        repo: CurveRepositoryProtocol | None = None,
        ledger: CurveTradeLedgerProtocol | None = None,
        publisher: EventPublisherProtocol | None = None,
        clock: Clock = utc_now,
        sell_fees: FeeSchedule | None = None,
    ) -> None:
        self._repo: CurveRepositoryProtocol = repo or InMemoryCurveRepository()
        self._ledger: CurveTradeLedgerProtocol = ledger or InMemoryCurveTradeLedger()
        self._publisher = publisher
        self._clock = clock
        self._sell_fees = sell_fees or FeeSchedule.curve_sell_default()
        self._curve_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def create_curve(
        self, creator_id: str, config: CurveConfig | None = None
    ) -> CreatorShareCurve:
        async with self._curve_locks[creator_id]:
            if await self._repo.get(creator_id) is not None:
                raise CurveAlreadyExistsError(creator_id)
            curve = CreatorShareCurve(
                creator_id=creator_id,
                config=config or CurveConfig.default(),
                created_at=self._clock(),
            )
            await self._repo.save(curve)
        logger.info(
            "Share curve created: creator=%s", creator_id, extra={"creator_id": creator_id}
        )
        return curve

    async def get_snapshot(self, creator_id: str) -> CurveSnapshot:
        curve = await self._load(creator_id)
        return CurveSnapshot.from_domain(curve, pricing.price(curve.supply, curve.config))

    async def quote_buy(self, creator_id: str, amount: int) -> CurveQuote:
        curve = await self._load(creator_id)
        cost = pricing.quote_buy(curve.supply, amount, curve.config)
        return build_quote(curve.supply, amount, cost, settings.COLLATERAL_DECIMALS)

    async def quote_sell(self, creator_id: str, amount: int) -> CurveQuote:
        """Gross proceeds before the sell fee."""
        curve = await self._load(creator_id)
        proceeds = pricing.quote_sell(curve.supply, amount, curve.config)
        return build_quote(curve.supply, amount, proceeds, settings.COLLATERAL_DECIMALS)

    async def buy(self, creator_id: str, user_id: str, amount: int) -> CurveTradeOut:
        async with await self._lock_for(creator_id):
            curve = await self._load(creator_id)
            cost = pricing.buy_cost(curve.supply, amount, curve.config)

            curve.supply += amount
            curve.holders[user_id] = curve.balance_of(user_id) + amount
            curve.reserve = checked_add(curve.reserve, cost, "curve reserve")
            verify_curve_invariants(curve)

            trade = CurveTrade(
                id=generate_id("ctr_"),
                creator_id=creator_id,
                user_id=user_id,
                action=TradeAction.BUY,
                amount=amount,
                gross_value=cost,
                fee=0,
                net_value=cost,
                supply_after=curve.supply,
                timestamp=self._clock(),
            )
            await self._commit(curve, trade)

        logger.info(
            "Shares bought: creator=%s, user=%s, amount=%d, cost=%d, supply=%d",
            creator_id, user_id, amount, cost, trade.supply_after,
            extra={"creator_id": creator_id, "user_id": user_id, "trade_id": trade.id},
        )
        await self._publish(MarketEventType.SHARES_BOUGHT, trade)
        return CurveTradeOut.from_domain(trade)

    async def sell(self, creator_id: str, user_id: str, amount: int) -> CurveTradeOut:
        async with await self._lock_for(creator_id):
            curve = await self._load(creator_id)
            if amount == 0:
                raise AmountCannotBeZeroError()
            owned = curve.balance_of(user_id)
            if amount > owned:
                raise InsufficientSharesError(amount, owned)
            gross = pricing.sell_proceeds(curve.supply, amount, curve.config)
            split = self._sell_fees.split(gross)

            curve.supply -= amount
            curve.holders[user_id] = owned - amount
            curve.reserve -= gross
            curve.reward_pool += split.creator + split.shareholder
            curve.platform_fees += split.platform
            verify_curve_invariants(curve)

            trade = CurveTrade(
                id=generate_id("ctr_"),
                creator_id=creator_id,
                user_id=user_id,
                action=TradeAction.SELL,
                amount=amount,
                gross_value=gross,
                fee=split.fee,
                net_value=split.net,
                supply_after=curve.supply,
                timestamp=self._clock(),
            )
            await self._commit(curve, trade)

        logger.info(
            "Shares sold: creator=%s, user=%s, amount=%d, gross=%d, fee=%d, supply=%d",
            creator_id, user_id, amount, gross, split.fee, trade.supply_after,
            extra={"creator_id": creator_id, "user_id": user_id, "trade_id": trade.id},
        )
        await self._publish(MarketEventType.SHARES_SOLD, trade)
        return CurveTradeOut.from_domain(trade)

    async def _load(self, creator_id: str) -> CreatorShareCurve:
        curve = await self._repo.get(creator_id)
        if curve is None:
            raise CurveNotFoundError(creator_id)
        return curve

    async def _lock_for(self, creator_id: str) -> asyncio.Lock:
        if creator_id not in self._curve_locks:
            await self._load(creator_id)
        return self._curve_locks[creator_id]

    async def _commit(self, curve: CreatorShareCurve, trade: CurveTrade) -> None:
        await self._ledger.append(trade)
        try:
            await self._repo.save(curve)
        except Exception:
            await self._ledger.remove(trade.id)
            raise

    async def _publish(self, event_type: MarketEventType, trade: CurveTrade) -> None:
        if self._publisher is None:
            return
        await self._publisher.publish(
            DomainEvent(
                type=event_type,
                aggregate_id=trade.creator_id,
                occurred_at=trade.timestamp,
                payload={
                    "trade_id": trade.id,
                    "user_id": trade.user_id,
                    "amount": trade.amount,
                    "net_value": trade.net_value,
                    "supply_after": trade.supply_after,
                },
            )
        )
