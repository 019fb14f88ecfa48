"""Error taxonomy for the decision pipeline.

Every fatal error keeps the rationale text the model wrote before its
structured payload, so an operator can see why the output was unusable.
"""

from __future__ import annotations

from typing import Any


class DecisionError(Exception):
    """Base error for a failed decision cycle."""

    def __init__(self, message: str, rationale: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.rationale = rationale
        self.user_prompt = ""

    def __str__(self) -> str:
        if not self.rationale:
            return self.message
        return f"{self.message}\n\n=== rationale ===\n{self.rationale}"


class ExtractionError(DecisionError):
    """No array start, or no matching array end, in the model response."""


class DecodeError(DecisionError):
    """The normalized payload is not a valid array of decision records."""

    def __init__(self, detail: str, payload: str, rationale: str = "") -> None:
        super().__init__(f"decision payload decode failed: {detail}\npayload: {payload}", rationale)
        self.detail = detail
        self.payload = payload


class ValidationError(DecisionError):
    """A decoded decision record violates an invariant."""

    def __init__(
        self,
        index: int,
        rule: str,
        reason: str,
        decisions: list[Any] | None = None,
        rationale: str = "",
    ) -> None:
        super().__init__(f"decision #{index} failed validation [{rule}]: {reason}", rationale)
        self.index = index
        self.rule = rule
        self.reason = reason
        self.decisions = decisions or []


class ModelCallError(DecisionError):
    """The model transport could not produce a response."""


class DataUnavailable(Exception):
    """Market data for one symbol could not be fetched. Never fatal."""

    def __init__(self, symbol: str, reason: str) -> None:
        super().__init__(f"{symbol}: {reason}")
        self.symbol = symbol
        self.reason = reason
