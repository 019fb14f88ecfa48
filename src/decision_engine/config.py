"""Settings (pydantic-settings, loaded from env vars)."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # --- Model transport ---
    ANTHROPIC_API_KEY: str = ""
    MODEL_NAME: str = "claude-sonnet-4-5"
    MODEL_MAX_TOKENS: int = 8192
    MODEL_TEMPERATURE: float = 0.5
    MAX_MODEL_TIMEOUT_SECONDS: float = 120.0

    # --- Asset classes ---
    MAJOR_SYMBOLS: list[str] = ["BTCUSDT", "ETHUSDT"]
    BTC_ETH_LEVERAGE: int = 5
    ALTCOIN_LEVERAGE: int = 5

    # --- Decision Validation (Hardcoded) ---
    MAJOR_POSITION_EQUITY_MULTIPLE: float = 10.0
    ALTCOIN_POSITION_EQUITY_MULTIPLE: float = 1.5
    POSITION_SIZE_TOLERANCE_PCT: float = 0.01
    TAKE_PROFIT_LEVELS: int = 3
    MIN_RR_RATIO: float = 2.0
    ENTRY_INTERPOLATION: float = 0.2

    # --- Context Assembly ---
    MIN_OI_VALUE_MILLIONS: float = 15.0
    MARKET_DATA_CONCURRENCY: int = 8

    model_config = {"env_prefix": "", "case_sensitive": True}
