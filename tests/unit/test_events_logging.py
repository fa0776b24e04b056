"""Tests for pm_common.events and pm_common.logging_config."""

import json
import logging
from datetime import UTC, datetime

import pytest

from src.pm_common.enums import MarketEventType
from src.pm_common.events import DomainEvent, QueueEventPublisher
from src.pm_common.logging_config import JSONFormatter, setup_logging


class TestQueueEventPublisher:
    async def test_publish_and_drain_in_order(self) -> None:
        publisher = QueueEventPublisher()
        at = datetime(2026, 1, 1, tzinfo=UTC)
        for t in (MarketEventType.MARKET_CREATED, MarketEventType.BET_PLACED):
            await publisher.publish(DomainEvent(type=t, aggregate_id="mkt_1", occurred_at=at))
        assert [e.type for e in publisher.drain()] == [
            MarketEventType.MARKET_CREATED,
            MarketEventType.BET_PLACED,
        ]
        assert publisher.drain() == []


class TestJSONFormatter:
    def test_includes_extra_fields(self) -> None:
        record = logging.LogRecord(
            "src.pm_market", logging.INFO, __file__, 1, "Bet placed: %s", ("x",), None
        )
        record.market_id = "mkt_1"
        payload = json.loads(JSONFormatter().format(record))
        assert payload["message"] == "Bet placed: x"
        assert payload["level"] == "INFO"
        assert payload["market_id"] == "mkt_1"
        assert "user_id" not in payload


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def _restore_root(self):
        level = logging.root.level
        yield
        logging.root.setLevel(level)

    def test_installs_handler(self) -> None:
        handler = setup_logging("DEBUG", "text")
        try:
            assert handler in logging.root.handlers
            assert logging.root.level == logging.DEBUG
            assert not isinstance(handler.formatter, JSONFormatter)
        finally:
            logging.root.removeHandler(handler)

    def test_json_format(self) -> None:
        handler = setup_logging("WARNING")
        try:
            assert isinstance(handler.formatter, JSONFormatter)
        finally:
            logging.root.removeHandler(handler)
