"""MarketService — stateful orchestrator for virtual-liquidity prediction markets.

Reads (quotes, probabilities, market detail) take no lock and never mutate.
Every mutation (bet, transition, claim) holds the market's lock, validates,
applies all changes to a private copy of the aggregate, checks invariants and
saves once. A bet appends its trade to the ledger before the save and takes
it back out if the save fails, so the market and its trade record commit
together or not at all. Different markets never share a lock, and a lock is
only created for a market that exists.
"""

import asyncio
import logging
from collections import defaultdict
from datetime import timedelta
from fractions import Fraction

from config.settings import settings
from src.pm_clearing.domain.fee import FeeSchedule
from src.pm_clearing.domain.invariants import (
    verify_market_invariants,
    verify_settlement_conservation,
)
from src.pm_clearing.domain.payout import settle_cancellation, settle_resolution
from src.pm_common.amounts import checked_add, mul_div
from src.pm_common.datetime_utils import Clock, utc_now
from src.pm_common.enums import MarketEventType, MarketStatus, TradeAction
from src.pm_common.errors import (
    AlreadyClaimedError,
    InvalidMarketConfigError,
    MarketNotFoundError,
    MarketNotSettledError,
    NoPayoutToClaimError,
)
from src.pm_common.events import DomainEvent, EventPublisherProtocol
from src.pm_common.id_generator import generate_id
from src.pm_market.application.schemas import (
    BetQuoteOut,
    ClaimResult,
    MarketDetail,
    PayoutOut,
    PlaceBetResponse,
    TradeOut,
    TransitionParams,
    TransitionResult,
    to_bps,
)
from src.pm_market.domain import amm
from src.pm_market.domain.models import Market, Outcome, Trade
from src.pm_market.domain.repository import MarketRepositoryProtocol, TradeLedgerProtocol
from src.pm_market.domain.state_machine import check_can_trade, check_transition
from src.pm_market.infrastructure.persistence import (
    InMemoryMarketRepository,
    InMemoryTradeLedger,
)

logger = logging.getLogger(__name__)


class MarketService:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        ledger: TradeLedgerProtocol | None = None,
        publisher: EventPublisherProtocol | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or InMemoryMarketRepository()
        self._ledger: TradeLedgerProtocol = ledger or InMemoryTradeLedger()
        self._publisher = publisher
        self._clock = clock
        self._market_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    # ------------------------------------------------------------------
    # Creation and reads
    # ------------------------------------------------------------------

    async def create_market(
        self,
        title: str,
        outcome_labels: list[str],
        duration: timedelta,
        creator_id: str,
        virtual_liquidity: int | None = None,
        fee_schedule: FeeSchedule | None = None,
    ) -> MarketDetail:
        if not (settings.MIN_OUTCOMES <= len(outcome_labels) <= settings.MAX_OUTCOMES):
            raise InvalidMarketConfigError(
                f"outcome count must be within [{settings.MIN_OUTCOMES}, "
                f"{settings.MAX_OUTCOMES}], got {len(outcome_labels)}"
            )
        min_duration = timedelta(hours=settings.MIN_MARKET_DURATION_HOURS)
        max_duration = timedelta(hours=settings.MAX_MARKET_DURATION_HOURS)
        if not (min_duration <= duration <= max_duration):
            raise InvalidMarketConfigError(
                f"duration must be within [{min_duration}, {max_duration}], got {duration}"
            )
        liquidity = (
            settings.VIRTUAL_LIQUIDITY_PER_OUTCOME if virtual_liquidity is None
            else virtual_liquidity
        )
        if liquidity < 0:
            raise InvalidMarketConfigError(f"virtual liquidity must be >= 0, got {liquidity}")

        now = self._clock()
        market = Market(
            id=generate_id("mkt_"),
            title=title,
            creator_id=creator_id,
            outcomes=[Outcome(index=i, label=label) for i, label in enumerate(outcome_labels)],
            reserves=[0] * len(outcome_labels),
            virtual_liquidity=liquidity,
            fee_schedule=fee_schedule or FeeSchedule.market_default(),
            end_time=now + duration,
            created_at=now,
        )
        async with self._market_locks[market.id]:
            await self._repo.save(market)

        logger.info(
            "Market created: market=%s, outcomes=%d, end_time=%s",
            market.id, market.outcome_count, market.end_time.isoformat(),
            extra={"market_id": market.id},
        )
        await self._publish(MarketEventType.MARKET_CREATED, market, {"title": title})
        return self._detail(market)

    async def get_market(self, market_id: str) -> MarketDetail:
        return self._detail(await self._load(market_id))

    async def quote_bet(self, market_id: str, outcome_index: int, gross_amount: int) -> BetQuoteOut:
        market = await self._load(market_id)
        quote = amm.quote_bet(
            market.reserve_snapshot(),
            outcome_index,
            gross_amount,
            market.virtual_liquidity,
            market.fee_schedule,
        )
        return BetQuoteOut.from_domain(quote)

    async def calculate_shares(self, market_id: str, outcome_index: int, net_amount: int) -> int:
        """Shares a net (after-fee) amount would buy right now."""
        market = await self._load(market_id)
        return amm.calculate_shares(
            market.reserve_snapshot(), outcome_index, net_amount, market.virtual_liquidity
        )

    async def probability(self, market_id: str, outcome_index: int) -> Fraction:
        market = await self._load(market_id)
        return amm.probability(market.reserve_snapshot(), outcome_index, market.virtual_liquidity)

    async def probabilities(self, market_id: str) -> list[Fraction]:
        market = await self._load(market_id)
        return amm.probabilities(market.reserve_snapshot(), market.virtual_liquidity)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def place_bet(
        self, market_id: str, user_id: str, outcome_index: int, gross_amount: int
    ) -> PlaceBetResponse:
        async with await self._lock_for(market_id):
            market = await self._load(market_id)
            now = self._clock()
            check_can_trade(market, now)

            # priced on the snapshot taken before this bet touches the reserves
            snapshot = market.reserve_snapshot()
            quote = amm.quote_bet(
                snapshot, outcome_index, gross_amount,
                market.virtual_liquidity, market.fee_schedule,
            )

            market.reserves = list(amm.apply_bet(snapshot, quote))
            outcome = market.outcomes[outcome_index]
            outcome.shares_outstanding = checked_add(
                outcome.shares_outstanding, quote.shares_out, "shares outstanding"
            )
            outcome.total_staked = checked_add(outcome.total_staked, quote.net, "total staked")
            market.total_volume = checked_add(market.total_volume, gross_amount, "volume")
            position = market.position(user_id, outcome_index)
            position.shares_owned += quote.shares_out
            position.cost_basis += quote.net
            verify_market_invariants(market)

            trade = Trade(
                id=generate_id("trd_"),
                market_id=market_id,
                user_id=user_id,
                action=TradeAction.BET,
                outcome_index=outcome_index,
                gross_amount=gross_amount,
                fee=quote.fee,
                net_amount=quote.net,
                shares_delta=quote.shares_out,
                price=self._average_price(quote.net, quote.shares_out),
                timestamp=now,
            )
            await self._commit(market, trade)
            new_probs = amm.probabilities(market.reserve_snapshot(), market.virtual_liquidity)

        logger.info(
            "Bet placed: market=%s, user=%s, outcome=%d, gross=%d, fee=%d, shares=%d",
            market_id, user_id, outcome_index, gross_amount, quote.fee, quote.shares_out,
            extra={
                "market_id": market_id,
                "user_id": user_id,
                "outcome_index": outcome_index,
                "trade_id": trade.id,
            },
        )
        await self._publish(
            MarketEventType.BET_PLACED,
            market,
            {
                "trade_id": trade.id,
                "user_id": user_id,
                "outcome_index": outcome_index,
                "gross_amount": gross_amount,
                "shares_out": quote.shares_out,
                "probabilities_bps": [to_bps(p) for p in new_probs],
            },
        )
        return PlaceBetResponse(
            shares_out=quote.shares_out,
            new_probabilities_bps=[to_bps(p) for p in new_probs],
            new_probabilities=[float(p) for p in new_probs],
            trade=TradeOut.from_domain(trade),
        )

    async def transition(
        self,
        market_id: str,
        target: MarketStatus,
        params: TransitionParams | None = None,
    ) -> TransitionResult:
        params = params or TransitionParams()
        async with await self._lock_for(market_id):
            market = await self._load(market_id)
            now = self._clock()
            check_transition(
                market,
                target,
                now,
                winning_outcome_index=params.winning_outcome_index,
                additional_hours=params.additional_hours,
                max_extension_hours=settings.MAX_EXTENSION_HOURS,
            )
            old_status = market.status

            if target == MarketStatus.ACTIVE:
                assert params.additional_hours is not None
                market.end_time = market.end_time + timedelta(hours=params.additional_hours)
            elif target == MarketStatus.RESOLVED:
                assert params.winning_outcome_index is not None
                market.winning_outcome_index = params.winning_outcome_index
                market.resolved_at = now
                market.settlement = settle_resolution(market, params.winning_outcome_index)
            elif target == MarketStatus.CANCELLED:
                market.resolved_at = now
                market.settlement = settle_cancellation(market)
            market.status = target

            if market.settlement is not None:
                verify_settlement_conservation(market)
            await self._repo.save(market)

        payouts = market.settlement.payouts if market.settlement else []
        logger.info(
            "Market transition: market=%s, %s -> %s, payouts=%d, reason=%s",
            market_id, old_status.value, target.value, len(payouts), params.reason,
            extra={"market_id": market_id},
        )
        event_type = (
            MarketEventType.MARKET_EXTENDED if target == MarketStatus.ACTIVE
            else MarketEventType.STATUS_CHANGED
        )
        await self._publish(
            event_type,
            market,
            {
                "old_status": old_status.value,
                "new_status": target.value,
                "end_time": market.end_time.isoformat(),
                "reason": params.reason,
            },
        )
        return TransitionResult(
            market_id=market_id,
            old_status=old_status,
            new_status=market.status,
            end_time=market.end_time.isoformat(),
            payouts=[PayoutOut.from_domain(p) for p in payouts],
            total_payout=sum(p.amount for p in payouts),
        )

    async def claim_payout(self, market_id: str, user_id: str) -> ClaimResult:
        async with await self._lock_for(market_id):
            market = await self._load(market_id)
            settlement = market.settlement
            if not market.status.is_terminal or settlement is None:
                raise MarketNotSettledError(market_id, market.status.value)
            if user_id in settlement.claimed_users:
                raise AlreadyClaimedError(market_id, user_id)
            amount = settlement.payout_for(user_id)
            if amount == 0:
                raise NoPayoutToClaimError(market_id, user_id)
            settlement.claimed_users.add(user_id)
            await self._repo.save(market)

        logger.info(
            "Payout claimed: market=%s, user=%s, kind=%s, amount=%d",
            market_id, user_id, settlement.kind.value, amount,
            extra={"market_id": market_id, "user_id": user_id},
        )
        await self._publish(
            MarketEventType.PAYOUT_CLAIMED,
            market,
            {"user_id": user_id, "kind": settlement.kind.value, "amount": amount},
        )
        return ClaimResult(
            market_id=market_id, user_id=user_id, kind=settlement.kind.value, amount=amount
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load(self, market_id: str) -> Market:
        market = await self._repo.get_market_by_id(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    async def _lock_for(self, market_id: str) -> asyncio.Lock:
        # unknown ids fail here instead of leaving an empty lock behind
        if market_id not in self._market_locks:
            await self._load(market_id)
        return self._market_locks[market_id]

    async def _commit(self, market: Market, trade: Trade) -> None:
        """Record the trade and save the market as one unit.

        A ledger failure happens before anything is saved; a failed save
        takes the trade back out of the ledger.
        """
        await self._ledger.append(trade)
        try:
            await self._repo.save(market)
        except Exception:
            await self._ledger.remove(trade.id)
            raise

    def _detail(self, market: Market) -> MarketDetail:
        probs = amm.probabilities(market.reserve_snapshot(), market.virtual_liquidity)
        return MarketDetail.from_domain(market, probs)

    @staticmethod
    def _average_price(net: int, shares: int) -> int:
        if shares == 0:
            return 0
        return mul_div(net, 10**settings.COLLATERAL_DECIMALS, shares, "average price")

    async def _publish(self, event_type: MarketEventType, market: Market, payload: dict) -> None:
        if self._publisher is None:
            return
        await self._publisher.publish(
            DomainEvent(
                type=event_type,
                aggregate_id=market.id,
                occurred_at=self._clock(),
                payload=payload,
            )
        )
