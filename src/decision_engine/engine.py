"""One evaluation cycle: context -> prompts -> model -> validated decisions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import structlog

from decision_engine.errors import DecisionError
from decision_engine.models.decision import FullDecision
from decision_engine.response_parser import parse_full_decision

if TYPE_CHECKING:
    from decision_engine.config import Settings
    from decision_engine.context_builder import ContextBuilder
    from decision_engine.models.context import CycleInput, EvaluationContext

logger = structlog.get_logger()


class PromptBuilder(Protocol):
    def build_system_prompt(
        self, account_equity: float, major_leverage: int, altcoin_leverage: int
    ) -> str: ...

    def build_user_prompt(self, context: EvaluationContext) -> str: ...


class ModelClient(Protocol):
    async def complete(self, system_prompt: str, user_prompt: str) -> str: ...


class DecisionEngine:
    def __init__(
        self,
        settings: Settings,
        context_builder: ContextBuilder,
        prompt_builder: PromptBuilder,
        model_client: ModelClient,
    ) -> None:
        self.settings = settings
        self.context_builder = context_builder
        self.prompt_builder = prompt_builder
        self.model_client = model_client

    async def get_full_decision(self, cycle: CycleInput) -> FullDecision:
        """Run the cycle strictly: any DecisionError propagates to the caller."""
        context = await self.context_builder.build(cycle)
        return await self._decide(context)

    async def run_cycle(self, cycle: CycleInput) -> FullDecision:
        """Run the cycle; a failed parse yields an empty batch (same as wait)."""
        context = await self.context_builder.build(cycle)
        try:
            return await self._decide(context)
        except DecisionError as e:
            logger.warning(
                "decision_cycle_failed",
                call_count=cycle.call_count,
                error_type=type(e).__name__,
                error=e.message,
            )
            return FullDecision(
                user_prompt=e.user_prompt,
                cot_trace=e.rationale,
                error=e.message,
            )

    async def _decide(self, context: EvaluationContext) -> FullDecision:
        equity = context.account.total_equity
        system_prompt = self.prompt_builder.build_system_prompt(
            equity, context.major_leverage, context.altcoin_leverage
        )
        user_prompt = self.prompt_builder.build_user_prompt(context)

        try:
            response = await self.model_client.complete(system_prompt, user_prompt)
            decision = parse_full_decision(
                response,
                equity,
                context.major_leverage,
                context.altcoin_leverage,
                self.settings,
            )
        except DecisionError as e:
            e.user_prompt = user_prompt
            raise

        return decision.model_copy(update={"user_prompt": user_prompt})
