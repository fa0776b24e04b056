# src/pm_market/domain/repository.py
"""Repository Protocols — dependency inversion for testability.

Unit tests inject the in-memory implementations from
pm_market.infrastructure.persistence; a durable store implements the same
Protocols outside this package.
"""

from typing import Protocol

from src.pm_market.domain.models import Market, Trade


class MarketRepositoryProtocol(Protocol):
    async def get_market_by_id(self, market_id: str) -> Market | None: ...

    async def save(self, market: Market) -> None: ...


class TradeLedgerProtocol(Protocol):
    async def append(self, trade: Trade) -> None: ...

    async def remove(self, trade_id: str) -> None:
        """Drop an appended trade whose aggregate save failed."""
        ...
