"""Shared test fixtures."""

from datetime import UTC, datetime

import pytest

from src.pm_common.datetime_utils import FrozenClock
from src.pm_common.events import QueueEventPublisher
from src.pm_curve.application.service import CreatorShareService
from src.pm_curve.domain.models import CurveConfig
from src.pm_curve.infrastructure.persistence import (
    InMemoryCurveRepository,
    InMemoryCurveTradeLedger,
)
from src.pm_market.application.service import MarketService
from src.pm_market.infrastructure.persistence import (
    InMemoryMarketRepository,
    InMemoryTradeLedger,
)

USDC = 10**6


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def publisher() -> QueueEventPublisher:
    return QueueEventPublisher()


@pytest.fixture
def market_repo() -> InMemoryMarketRepository:
    return InMemoryMarketRepository()


@pytest.fixture
def trade_ledger() -> InMemoryTradeLedger:
    return InMemoryTradeLedger()


@pytest.fixture
def market_service(
    market_repo: InMemoryMarketRepository,
    trade_ledger: InMemoryTradeLedger,
    publisher: QueueEventPublisher,
    clock: FrozenClock,
) -> MarketService:
    return MarketService(repo=market_repo, ledger=trade_ledger, publisher=publisher, clock=clock)


@pytest.fixture
def curve_config() -> CurveConfig:
    return CurveConfig(price_scale=1400, cost_scale=4200, max_supply=1000, unit=USDC)


@pytest.fixture
def curve_ledger() -> InMemoryCurveTradeLedger:
    return InMemoryCurveTradeLedger()


@pytest.fixture
def curve_service(
    curve_ledger: InMemoryCurveTradeLedger,
    publisher: QueueEventPublisher,
    clock: FrozenClock,
) -> CreatorShareService:
    return CreatorShareService(
        repo=InMemoryCurveRepository(), ledger=curve_ledger, publisher=publisher, clock=clock
    )
