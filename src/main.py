"""Process entry point: logging from settings plus a wired PricingEngine.

Embedders call ``create_engine()`` once at start-up and keep the engine; the
returned publisher is drained by whatever delivers notifications.
"""

import logging

from config.settings import settings
from src.pm_common.datetime_utils import Clock, utc_now
from src.pm_common.events import QueueEventPublisher
from src.pm_common.logging_config import setup_logging
from src.pm_engine.engine import PricingEngine

logger = logging.getLogger(__name__)


def create_engine(
    clock: Clock = utc_now, configure_logging: bool = True
) -> tuple[PricingEngine, QueueEventPublisher]:
    if configure_logging:
        setup_logging("DEBUG" if settings.DEBUG else settings.LOG_LEVEL, settings.LOG_FORMAT)
    publisher = QueueEventPublisher()
    engine = PricingEngine(publisher=publisher, clock=clock)
    logger.info(
        "%s started: fee_bps=%d, virtual_liquidity=%d, curve_max_supply=%d",
        settings.APP_NAME,
        settings.MARKET_FEE_BPS,
        settings.VIRTUAL_LIQUIDITY_PER_OUTCOME,
        settings.CURVE_MAX_SUPPLY,
    )
    return engine, publisher
