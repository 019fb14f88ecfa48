"""InstrumentSnapshot, OpenInterest, OITopEntry — per-symbol market inputs."""

from pydantic import BaseModel


class OpenInterest(BaseModel):
    latest: float = 0.0
    average: float = 0.0

    model_config = {"frozen": True}


class InstrumentSnapshot(BaseModel):
    symbol: str
    current_price: float
    price_change_1h: float = 0.0
    price_change_4h: float = 0.0
    price_change_24h: float = 0.0
    current_ema20: float = 0.0
    current_macd: float = 0.0
    current_rsi7: float = 0.0
    open_interest: OpenInterest | None = None
    funding_rate: float = 0.0

    model_config = {"frozen": True}

    @property
    def oi_value_millions(self) -> float | None:
        """Notional open interest in millions of quote currency, if known."""
        if self.open_interest is None or self.current_price <= 0:
            return None
        return self.open_interest.latest * self.current_price / 1_000_000


class OITopEntry(BaseModel):
    """One row of the open-interest growth ranking."""

    symbol: str
    rank: int
    oi_delta_percent: float = 0.0
    oi_delta_value: float = 0.0
    price_delta_percent: float = 0.0
    net_long: float = 0.0
    net_short: float = 0.0

    model_config = {"frozen": True}
