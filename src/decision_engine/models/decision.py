"""Decision records (tagged union over action kinds) and FullDecision."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Discriminator, Field, Tag, TypeAdapter, field_validator

OPEN_ACTIONS = {"open_long", "open_short"}
CLOSE_ACTIONS = {"close_long", "close_short"}
IDLE_ACTIONS = {"hold", "wait"}
VALID_ACTIONS = OPEN_ACTIONS | CLOSE_ACTIONS | IDLE_ACTIONS | {"update_stop", "partial_close"}


class BaseDecision(BaseModel):
    # Non-finite floats are a decode failure.
    model_config = {"allow_inf_nan": False}

    symbol: str = ""
    reasoning: str = ""

    @field_validator("symbol", "reasoning", mode="before")
    @classmethod
    def null_text_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class OpenDecision(BaseDecision):
    """open_long / open_short. Missing or null fields decode to zero and fail validation."""

    action: Literal["open_long", "open_short"]
    leverage: int = 0
    position_size_usd: float = 0.0
    stop_loss: float = 0.0
    take_profit_levels: list[float] = []
    trailing_stop_pct: float | None = None
    checklist_passed: int | None = None
    risk_reward_ratio: float | None = None
    signal_type: str | None = None
    oi_signal: str | None = None
    oi_adjustment: str | None = None

    @field_validator("leverage", "position_size_usd", "stop_loss", mode="before")
    @classmethod
    def null_number_as_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("take_profit_levels", mode="before")
    @classmethod
    def null_levels_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def is_long(self) -> bool:
        return self.action == "open_long"


class CloseDecision(BaseDecision):
    action: Literal["close_long", "close_short"]


class UpdateStopDecision(BaseDecision):
    action: Literal["update_stop"]
    new_stop_loss: float | None = None


class PartialCloseDecision(BaseDecision):
    action: Literal["partial_close"]
    close_percentage: int | None = None


class IdleDecision(BaseDecision):
    action: Literal["hold", "wait"]


class UnrecognizedDecision(BaseDecision):
    """Any action outside the known set; always rejected by validation."""

    action: str = ""

    @field_validator("action", mode="before")
    @classmethod
    def null_action_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v


def _decision_tag(value: Any) -> str | None:
    if isinstance(value, dict):
        action = value.get("action")
    elif isinstance(value, BaseDecision):
        action = value.action
    else:
        return None

    if not isinstance(action, str):
        return "unrecognized"
    if action in OPEN_ACTIONS:
        return "open"
    if action in CLOSE_ACTIONS:
        return "close"
    if action in IDLE_ACTIONS:
        return "idle"
    if action in ("update_stop", "partial_close"):
        return action
    return "unrecognized"


Decision = Annotated[
    Union[
        Annotated[OpenDecision, Tag("open")],
        Annotated[CloseDecision, Tag("close")],
        Annotated[UpdateStopDecision, Tag("update_stop")],
        Annotated[PartialCloseDecision, Tag("partial_close")],
        Annotated[IdleDecision, Tag("idle")],
        Annotated[UnrecognizedDecision, Tag("unrecognized")],
    ],
    Discriminator(_decision_tag),
]

decision_list_adapter: TypeAdapter[list[Decision]] = TypeAdapter(list[Decision])


def encode_decisions(decisions: list[Decision]) -> str:
    """Serialize records to the wire shape, omitting absent optional fields."""
    return decision_list_adapter.dump_json(decisions, exclude_none=True).decode()


class FullDecision(BaseModel):
    """Audit record of one cycle: prompt, rationale, and the accepted batch."""

    user_prompt: str = ""
    cot_trace: str = ""
    decisions: list[Decision] = []
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    error: str | None = None

    @property
    def is_wait(self) -> bool:
        """True when the cycle produced nothing to execute."""
        return all(isinstance(d, IdleDecision) for d in self.decisions)
