"""Assemble the per-cycle EvaluationContext from positions, candidates and market data."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Protocol

import structlog

from decision_engine.errors import DataUnavailable
from decision_engine.models.context import CycleInput, EvaluationContext

if TYPE_CHECKING:
    from decision_engine.config import Settings
    from decision_engine.models.market import InstrumentSnapshot, OITopEntry

logger = structlog.get_logger()


class MarketDataProvider(Protocol):
    async def get_snapshot(self, symbol: str) -> InstrumentSnapshot:
        """Fetch one symbol. Raise DataUnavailable when the data does not exist."""
        ...

    async def get_oi_top(self) -> list[OITopEntry]:
        """Fetch the open-interest growth ranking."""
        ...


class ContextBuilder:
    def __init__(self, settings: Settings, provider: MarketDataProvider) -> None:
        self.settings = settings
        self.provider = provider

    async def build(self, cycle: CycleInput) -> EvaluationContext:
        """Fetch market data for positions + candidates, apply the OI floor, merge OI ranking."""
        position_symbols = {p.symbol for p in cycle.positions}
        symbols = self._collect_symbols(cycle)

        semaphore = asyncio.Semaphore(max(1, self.settings.MARKET_DATA_CONCURRENCY))
        results = await asyncio.gather(*(self._fetch(symbol, semaphore) for symbol in symbols))

        market_data: dict[str, InstrumentSnapshot] = {}
        unavailable: dict[str, str] = {}
        for symbol, snapshot, error in results:
            if snapshot is None:
                unavailable[symbol] = error
                continue
            if symbol not in position_symbols:
                reason = self._check_liquidity(snapshot)
                if reason:
                    unavailable[symbol] = reason
                    continue
            market_data[symbol] = snapshot

        oi_top = await self._fetch_oi_top()

        logger.info(
            "context_built",
            symbols=len(symbols),
            available=len(market_data),
            unavailable=len(unavailable),
            oi_top=len(oi_top),
        )
        return EvaluationContext(
            current_time=cycle.current_time,
            call_count=cycle.call_count,
            runtime_minutes=cycle.runtime_minutes,
            account=cycle.account,
            positions=cycle.positions,
            candidates=cycle.candidates,
            market_data=market_data,
            oi_top=oi_top,
            unavailable=unavailable,
            major_leverage=cycle.major_leverage,
            altcoin_leverage=cycle.altcoin_leverage,
            performance=cycle.performance,
        )

    def max_candidates(self, cycle: CycleInput) -> int:
        # Ranking upstream already decided the list length.
        return len(cycle.candidates)

    def _collect_symbols(self, cycle: CycleInput) -> list[str]:
        """Open positions first, then ranked candidates; duplicates dropped."""
        symbols = [p.symbol for p in cycle.positions]
        symbols += [c.symbol for c in cycle.candidates[: self.max_candidates(cycle)]]
        return list(dict.fromkeys(symbols))

    async def _fetch(
        self, symbol: str, semaphore: asyncio.Semaphore
    ) -> tuple[str, InstrumentSnapshot | None, str]:
        async with semaphore:
            try:
                return symbol, await self.provider.get_snapshot(symbol), ""
            except DataUnavailable as e:
                logger.info("market_data_unavailable", symbol=symbol, reason=e.reason)
                return symbol, None, e.reason
            except Exception as e:
                logger.warning("market_data_unavailable", symbol=symbol, error=str(e))
                return symbol, None, f"fetch failed: {e}"

    def _check_liquidity(self, snapshot: InstrumentSnapshot) -> str:
        """Return a skip reason when notional OI is under the floor, else ''."""
        oi_millions = snapshot.oi_value_millions
        if oi_millions is None or oi_millions >= self.settings.MIN_OI_VALUE_MILLIONS:
            return ""
        logger.info(
            "symbol_skipped_low_oi",
            symbol=snapshot.symbol,
            oi_value_millions=round(oi_millions, 2),
            floor=self.settings.MIN_OI_VALUE_MILLIONS,
            open_interest=snapshot.open_interest.latest,
            price=snapshot.current_price,
        )
        floor = self.settings.MIN_OI_VALUE_MILLIONS * 1_000_000
        return f"OI value {oi_millions * 1_000_000:,.0f} < floor {floor:,.0f}"

    async def _fetch_oi_top(self) -> dict[str, OITopEntry]:
        """Optional input; any failure yields an empty map."""
        try:
            entries = await self.provider.get_oi_top()
        except Exception as e:
            logger.debug("oi_top_unavailable", error=str(e))
            return {}
        return {entry.symbol: entry for entry in entries}
