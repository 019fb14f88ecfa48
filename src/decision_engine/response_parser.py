"""Turn a raw model response into a validated FullDecision."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError as SchemaError

from decision_engine.decision_validator import DecisionValidator
from decision_engine.errors import DecisionError, DecodeError, ExtractionError
from decision_engine.models.decision import Decision, FullDecision, decision_list_adapter

if TYPE_CHECKING:
    from decision_engine.config import Settings

logger = structlog.get_logger()

ARRAY_START = "["
ARRAY_END = "]"

# Typographic quotes models substitute for ASCII ones. Nothing else is repaired.
QUOTE_TABLE = str.maketrans(
    {
        "\u201c": '"',
        "\u201d": '"',
        "\u2018": "'",
        "\u2019": "'",
    }
)

_FAILURE_EVENTS = {
    "ExtractionError": "decision_extract_failed",
    "DecodeError": "decision_decode_failed",
    "ValidationError": "decision_validation_failed",
}


def extract_cot_trace(response: str) -> str:
    """Rationale is everything before the first array start, trimmed."""
    start = response.find(ARRAY_START)
    if start == -1:
        return response.strip()
    return response[:start].strip()


@dataclass
class BracketScanner:
    """Depth-counted scan for the array end that closes a given array start."""

    text: str
    position: int = 0
    depth: int = 0

    def find_closing(self, start: int) -> int:
        if start >= len(self.text) or self.text[start] != ARRAY_START:
            raise ExtractionError(f"no array start at index {start}")

        self.position = start
        self.depth = 0
        while self.position < len(self.text):
            char = self.text[self.position]
            if char == ARRAY_START:
                self.depth += 1
            elif char == ARRAY_END:
                self.depth -= 1
                if self.depth == 0:
                    return self.position
            self.position += 1

        raise ExtractionError(f"no closing array end found (unclosed depth {self.depth})")


def extract_payload(response: str) -> str:
    """Return the first top-level JSON array in the response."""
    start = response.find(ARRAY_START)
    if start == -1:
        raise ExtractionError("no array start found in response")
    end = BracketScanner(response).find_closing(start)
    return response[start : end + 1].strip()


def normalize_quotes(payload: str) -> str:
    return payload.translate(QUOTE_TABLE)


def _reject_constant(name: str) -> float:
    raise ValueError(f"{name} is not a valid JSON number")


def decode_decisions(payload: str) -> list[Decision]:
    """Decode a normalized payload. Required-field checks are left to validation."""
    try:
        raw = json.loads(payload, parse_constant=_reject_constant)
    except ValueError as e:
        raise DecodeError(str(e), payload) from e

    try:
        return decision_list_adapter.validate_python(raw)
    except SchemaError as e:
        raise DecodeError(str(e), payload) from e


def parse_full_decision(
    response: str,
    account_equity: float,
    major_leverage: int,
    altcoin_leverage: int,
    settings: Settings,
) -> FullDecision:
    """Split, extract, normalize, decode and validate one response.

    Raises a DecisionError subclass with the rationale attached on any failure.
    """
    cot_trace = extract_cot_trace(response)

    try:
        payload = normalize_quotes(extract_payload(response))
        decisions = decode_decisions(payload)
        DecisionValidator(settings).validate(
            decisions, account_equity, major_leverage, altcoin_leverage
        )
    except DecisionError as e:
        e.rationale = cot_trace
        logger.warning(
            _FAILURE_EVENTS.get(type(e).__name__, "decision_parse_failed"),
            error=e.message,
            cot_trace=cot_trace,
        )
        raise

    logger.info("decisions_parsed", count=len(decisions), actions=[d.action for d in decisions])
    return FullDecision(cot_trace=cot_trace, decisions=decisions)
