"""In-memory market store and trade ledger.

``get_market_by_id`` returns a deep copy: the service mutates its own
snapshot and the stored market only changes when ``save`` replaces it, which
keeps reserves, shares, volume and positions moving in lockstep.
"""

import copy

from src.pm_market.domain.models import Market, Trade


class InMemoryMarketRepository:
    def __init__(self) -> None:
        self._markets: dict[str, Market] = {}

    async def get_market_by_id(self, market_id: str) -> Market | None:
        market = self._markets.get(market_id)
        return copy.deepcopy(market) if market is not None else None

    async def save(self, market: Market) -> None:
        self._markets[market.id] = copy.deepcopy(market)

    def __len__(self) -> int:
        return len(self._markets)


class InMemoryTradeLedger:
    def __init__(self) -> None:
        self.trades: list[Trade] = []

    async def append(self, trade: Trade) -> None:
        self.trades.append(trade)

    async def remove(self, trade_id: str) -> None:
        self.trades = [t for t in self.trades if t.id != trade_id]

    def for_market(self, market_id: str) -> list[Trade]:
        return [t for t in self.trades if t.market_id == market_id]
