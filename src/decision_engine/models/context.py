"""CycleInput and EvaluationContext — the per-cycle snapshot."""

from datetime import datetime

from pydantic import BaseModel

from decision_engine.models.account import (
    AccountSnapshot,
    CandidateEntry,
    PerformanceSummary,
    PositionRecord,
)
from decision_engine.models.market import InstrumentSnapshot, OITopEntry


class CycleInput(BaseModel):
    """What the caller supplies for one evaluation cycle."""

    current_time: datetime
    call_count: int
    runtime_minutes: int
    account: AccountSnapshot
    positions: list[PositionRecord] = []
    candidates: list[CandidateEntry] = []
    major_leverage: int
    altcoin_leverage: int
    performance: PerformanceSummary | None = None

    model_config = {"frozen": True}


class EvaluationContext(BaseModel):
    current_time: datetime
    call_count: int
    runtime_minutes: int
    account: AccountSnapshot
    positions: list[PositionRecord] = []
    candidates: list[CandidateEntry] = []
    market_data: dict[str, InstrumentSnapshot] = {}
    oi_top: dict[str, OITopEntry] = {}
    unavailable: dict[str, str] = {}
    major_leverage: int
    altcoin_leverage: int
    performance: PerformanceSummary | None = None

    model_config = {"frozen": True}

    @property
    def position_symbols(self) -> set[str]:
        return {p.symbol for p in self.positions}
