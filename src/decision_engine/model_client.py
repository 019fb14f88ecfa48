"""Anthropic AsyncClient wrapper for the decision model."""

from __future__ import annotations

import asyncio

import structlog
from anthropic import AsyncAnthropic
from tenacity import retry, stop_after_attempt, wait_exponential

from decision_engine.config import Settings
from decision_engine.errors import ModelCallError

logger = structlog.get_logger()


class AnthropicModelClient:
    """Transport only: returns the raw response text or raises ModelCallError."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        try:
            text = await asyncio.wait_for(
                self._call_api(system_prompt, user_prompt),
                timeout=self.settings.MAX_MODEL_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError as e:
            logger.warning("model_timeout", timeout=self.settings.MAX_MODEL_TIMEOUT_SECONDS)
            raise ModelCallError(
                f"model call timed out after {self.settings.MAX_MODEL_TIMEOUT_SECONDS:g}s"
            ) from e
        except Exception as e:
            logger.warning("model_error", error=str(e))
            raise ModelCallError(f"model call failed: {e}") from e

        if not text.strip():
            raise ModelCallError("model returned an empty response")
        return text

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=10), reraise=True)
    async def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Low-level Anthropic API call with retry."""
        client = AsyncAnthropic(api_key=self.settings.ANTHROPIC_API_KEY)
        response = await client.messages.create(
            model=self.settings.MODEL_NAME,
            max_tokens=self.settings.MODEL_MAX_TOKENS,
            temperature=self.settings.MODEL_TEMPERATURE,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        text = "".join(block.text for block in response.content if hasattr(block, "text"))
        logger.info("model_call", model=self.settings.MODEL_NAME, chars=len(text))
        return text
