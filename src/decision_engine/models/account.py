"""AccountSnapshot, PositionRecord, CandidateEntry, PerformanceSummary."""

from typing import Literal

from pydantic import BaseModel


class AccountSnapshot(BaseModel):
    total_equity: float
    available_balance: float = 0.0
    total_pnl: float = 0.0
    total_pnl_pct: float = 0.0
    margin_used: float = 0.0
    margin_used_pct: float = 0.0
    position_count: int = 0

    model_config = {"frozen": True}


class PositionRecord(BaseModel):
    symbol: str
    side: Literal["long", "short"]
    entry_price: float
    mark_price: float
    quantity: float
    leverage: int
    unrealized_pnl: float = 0.0
    unrealized_pnl_pct: float = 0.0
    liquidation_price: float = 0.0
    margin_used: float = 0.0
    update_time: int = 0  # epoch ms

    model_config = {"frozen": True}


class CandidateEntry(BaseModel):
    symbol: str
    sources: list[str] = []  # "ai500", "oi_top"

    model_config = {"frozen": True}


class PerformanceSummary(BaseModel):
    sharpe_ratio: float = 0.0
    total_trades: int = 0
    win_rate: float = 0.0

    model_config = {"frozen": True}
