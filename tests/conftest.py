"""Shared fixtures for decision engine tests."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from decision_engine.config import Settings
from decision_engine.models.account import AccountSnapshot, CandidateEntry, PositionRecord
from decision_engine.models.context import CycleInput
from decision_engine.models.market import InstrumentSnapshot, OpenInterest


@pytest.fixture
def settings():
    return Settings(
        MAJOR_SYMBOLS=["BTCUSDT", "ETHUSDT"],
        BTC_ETH_LEVERAGE=5,
        ALTCOIN_LEVERAGE=3,
        MAJOR_POSITION_EQUITY_MULTIPLE=10.0,
        ALTCOIN_POSITION_EQUITY_MULTIPLE=1.5,
        POSITION_SIZE_TOLERANCE_PCT=0.01,
        MIN_RR_RATIO=2.0,
        ENTRY_INTERPOLATION=0.2,
        MIN_OI_VALUE_MILLIONS=15.0,
        MARKET_DATA_CONCURRENCY=4,
    )


@pytest.fixture
def eth_long():
    """The canonical valid ETH long from the decision contract."""
    return {
        "symbol": "ETHUSDT",
        "action": "open_long",
        "leverage": 3,
        "position_size_usd": 500,
        "stop_loss": 3735,
        "take_profit_levels": [3966, 4081, 4197],
        "reasoning": "x",
    }


@pytest.fixture
def sol_short():
    return {
        "symbol": "SOLUSDT",
        "action": "open_short",
        "leverage": 2,
        "position_size_usd": 1000,
        "stop_loss": 210.0,
        "take_profit_levels": [190.0, 180.0, 170.0],
        "reasoning": "breakdown below range",
    }


@pytest.fixture
def response_factory():
    return _make_response


@pytest.fixture
def snapshot_factory():
    return _make_snapshot


@pytest.fixture
def position_factory():
    return _make_position


@pytest.fixture
def cycle_factory():
    return _make_cycle


def _make_response(decisions: list[dict], rationale: str = "rationale text") -> str:
    return f"{rationale} {json.dumps(decisions)}"


def _make_snapshot(symbol: str, price: float, oi: float | None = 10_000_000.0) -> InstrumentSnapshot:
    return InstrumentSnapshot(
        symbol=symbol,
        current_price=price,
        price_change_1h=0.5,
        price_change_4h=1.2,
        open_interest=OpenInterest(latest=oi, average=oi) if oi is not None else None,
        funding_rate=0.0001,
    )


def _make_position(symbol: str, side: str = "long") -> PositionRecord:
    return PositionRecord(
        symbol=symbol,
        side=side,
        entry_price=1.0,
        mark_price=1.0,
        quantity=100.0,
        leverage=3,
    )


def _make_cycle(
    positions: list[PositionRecord] | None = None,
    candidates: list[str] | None = None,
    equity: float = 5000.0,
) -> CycleInput:
    return CycleInput(
        current_time=datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc),
        call_count=7,
        runtime_minutes=21,
        account=AccountSnapshot(total_equity=equity, available_balance=equity),
        positions=positions or [],
        candidates=[CandidateEntry(symbol=s, sources=["ai500"]) for s in (candidates or [])],
        major_leverage=5,
        altcoin_leverage=3,
    )
