from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # App
    APP_NAME: str = "Creator Market Pricing Engine"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json | text

    # Collateral (USDC = 6 decimals); every amount below is in base units
    COLLATERAL_DECIMALS: int = 6

    # Prediction market fees (bps of gross bet amount)
    MARKET_FEE_BPS: int = 150
    PLATFORM_FEE_BPS: int = 75
    CREATOR_FEE_BPS: int = 60
    SHAREHOLDER_FEE_BPS: int = 15

    # Virtual liquidity injected per outcome: 5000 USDC
    VIRTUAL_LIQUIDITY_PER_OUTCOME: int = 5_000_000_000

    # Market creation / extension bounds
    MIN_OUTCOMES: int = 2
    MAX_OUTCOMES: int = 4
    MIN_MARKET_DURATION_HOURS: int = 6
    MAX_MARKET_DURATION_HOURS: int = 7 * 24
    MAX_EXTENSION_HOURS: int = 720

    # Creator share bonding curve: price = supply^2 / 1400, cost integral / 4200
    CURVE_PRICE_SCALE: int = 1400
    CURVE_COST_SCALE: int = 4200
    CURVE_MAX_SUPPLY: int = 1000
    CURVE_SELL_FEE_BPS: int = 500
    CURVE_REWARD_FEE_BPS: int = 250
    CURVE_PLATFORM_FEE_BPS: int = 250


settings = Settings()
