"""Hardcoded decision invariants — the model CANNOT override these rules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

import structlog
from pydantic import BaseModel

from decision_engine.errors import ValidationError
from decision_engine.models.decision import (
    VALID_ACTIONS,
    CloseDecision,
    Decision,
    IdleDecision,
    OpenDecision,
    PartialCloseDecision,
    UpdateStopDecision,
)

if TYPE_CHECKING:
    from decision_engine.config import Settings

logger = structlog.get_logger()


class RuleCheck(BaseModel):
    passed: bool
    rule: str
    reason: str


class AssetLimits(BaseModel):
    asset_class: str
    max_leverage: int
    max_position_value: float
    equity_multiple: float


_OK = "OK"


class DecisionValidator:
    """
    Checks run in order; the first failing rule rejects the whole batch.
    | Rule              | Applies to      | Requirement                                 |
    |-------------------|-----------------|---------------------------------------------|
    | action            | all             | one of VALID_ACTIONS                        |
    | symbol            | all but idle    | non-empty                                   |
    | leverage          | open            | 0 < leverage <= asset-class ceiling         |
    | position_size     | open            | > 0                                         |
    | position_cap      | open            | <= equity x multiple (+1% tolerance)        |
    | stop_loss         | open            | > 0                                         |
    | take_profit       | open            | exactly 3 targets, each > 0                 |
    | ordering          | open            | long: SL < TP1 < TP2 < TP3, short: reversed |
    | risk_reward       | open            | R:R from assumed entry >= 2.0               |
    | new_stop_loss     | update_stop     | > 0                                         |
    | close_percentage  | partial_close   | 0 < pct <= 100                              |
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def validate(
        self,
        decisions: list[Decision],
        account_equity: float,
        major_leverage: int,
        altcoin_leverage: int,
    ) -> None:
        """Raise ValidationError for the first record that breaks a rule."""
        for i, decision in enumerate(decisions, start=1):
            check = self.validate_decision(decision, account_equity, major_leverage, altcoin_leverage)
            if not check.passed:
                logger.warning(
                    "decision_rejected",
                    index=i,
                    rule=check.rule,
                    reason=check.reason,
                    symbol=decision.symbol,
                    action=decision.action,
                )
                raise ValidationError(i, check.rule, check.reason, decisions=decisions)

    def validate_decision(
        self,
        decision: Decision,
        account_equity: float,
        major_leverage: int,
        altcoin_leverage: int,
    ) -> RuleCheck:
        check = self._check_action(decision)
        if not check.passed or isinstance(decision, IdleDecision):
            return check

        check = self._check_symbol(decision)
        if not check.passed:
            return check

        if isinstance(decision, UpdateStopDecision):
            return self._check_new_stop_loss(decision)
        if isinstance(decision, PartialCloseDecision):
            return self._check_close_percentage(decision)
        if isinstance(decision, CloseDecision):
            return check

        # Past the action check only open records remain.
        limits = self.limits_for(decision.symbol, account_equity, major_leverage, altcoin_leverage)
        open_checks: list[Callable[[OpenDecision, AssetLimits], RuleCheck]] = [
            self._check_leverage,
            self._check_position_size,
            self._check_position_cap,
            self._check_stop_loss,
            self._check_take_profit,
            self._check_ordering,
            self._check_risk_reward,
        ]
        for open_check in open_checks:
            check = open_check(decision, limits)
            if not check.passed:
                return check
        return check

    def limits_for(
        self,
        symbol: str,
        account_equity: float,
        major_leverage: int,
        altcoin_leverage: int,
    ) -> AssetLimits:
        if symbol in self.settings.MAJOR_SYMBOLS:
            multiple = self.settings.MAJOR_POSITION_EQUITY_MULTIPLE
            return AssetLimits(
                asset_class="major",
                max_leverage=major_leverage,
                max_position_value=account_equity * multiple,
                equity_multiple=multiple,
            )
        multiple = self.settings.ALTCOIN_POSITION_EQUITY_MULTIPLE
        return AssetLimits(
            asset_class="altcoin",
            max_leverage=altcoin_leverage,
            max_position_value=account_equity * multiple,
            equity_multiple=multiple,
        )

    def assumed_entry(self, decision: OpenDecision) -> float:
        """Entry interpolated from the stop toward the first target."""
        tp1 = decision.take_profit_levels[0]
        fraction = self.settings.ENTRY_INTERPOLATION
        if decision.is_long:
            return decision.stop_loss + (tp1 - decision.stop_loss) * fraction
        return decision.stop_loss - (decision.stop_loss - tp1) * fraction

    # --- generic ---

    def _check_action(self, decision: Decision) -> RuleCheck:
        if decision.action not in VALID_ACTIONS:
            return RuleCheck(
                passed=False,
                rule="action",
                reason=f"Invalid action '{decision.action}'. Must be one of {sorted(VALID_ACTIONS)}",
            )
        return RuleCheck(passed=True, rule="action", reason=_OK)

    def _check_symbol(self, decision: Decision) -> RuleCheck:
        if not decision.symbol:
            return RuleCheck(
                passed=False,
                rule="symbol",
                reason=f"symbol is required for {decision.action}",
            )
        return RuleCheck(passed=True, rule="symbol", reason=_OK)

    # --- update_stop / partial_close ---

    def _check_new_stop_loss(self, decision: UpdateStopDecision) -> RuleCheck:
        if decision.new_stop_loss is None or decision.new_stop_loss <= 0:
            return RuleCheck(
                passed=False,
                rule="new_stop_loss",
                reason=f"new_stop_loss must be > 0, got {decision.new_stop_loss}",
            )
        return RuleCheck(passed=True, rule="new_stop_loss", reason=_OK)

    def _check_close_percentage(self, decision: PartialCloseDecision) -> RuleCheck:
        pct = decision.close_percentage
        if pct is None or pct <= 0 or pct > 100:
            return RuleCheck(
                passed=False,
                rule="close_percentage",
                reason=f"close_percentage must be in (0, 100], got {pct}",
            )
        return RuleCheck(passed=True, rule="close_percentage", reason=_OK)

    # --- open_long / open_short ---

    def _check_leverage(self, decision: OpenDecision, limits: AssetLimits) -> RuleCheck:
        if decision.leverage <= 0 or decision.leverage > limits.max_leverage:
            return RuleCheck(
                passed=False,
                rule="leverage",
                reason=(
                    f"Leverage must be 1-{limits.max_leverage}x for {decision.symbol} "
                    f"({limits.asset_class}), got {decision.leverage}x"
                ),
            )
        return RuleCheck(passed=True, rule="leverage", reason=_OK)

    def _check_position_size(self, decision: OpenDecision, limits: AssetLimits) -> RuleCheck:
        if decision.position_size_usd <= 0:
            return RuleCheck(
                passed=False,
                rule="position_size",
                reason=f"position_size_usd must be > 0, got {decision.position_size_usd:.2f}",
            )
        return RuleCheck(passed=True, rule="position_size", reason=_OK)

    def _check_position_cap(self, decision: OpenDecision, limits: AssetLimits) -> RuleCheck:
        tolerance = limits.max_position_value * self.settings.POSITION_SIZE_TOLERANCE_PCT
        if decision.position_size_usd > limits.max_position_value + tolerance:
            return RuleCheck(
                passed=False,
                rule="position_cap",
                reason=(
                    f"{limits.asset_class} position value must not exceed "
                    f"{limits.max_position_value:.0f} ({limits.equity_multiple:g}x equity), "
                    f"got {decision.position_size_usd:.0f}"
                ),
            )
        return RuleCheck(passed=True, rule="position_cap", reason=_OK)

    def _check_stop_loss(self, decision: OpenDecision, limits: AssetLimits) -> RuleCheck:
        if decision.stop_loss <= 0:
            return RuleCheck(
                passed=False,
                rule="stop_loss",
                reason=f"stop_loss must be > 0, got {decision.stop_loss:.2f}",
            )
        return RuleCheck(passed=True, rule="stop_loss", reason=_OK)

    def _check_take_profit(self, decision: OpenDecision, limits: AssetLimits) -> RuleCheck:
        levels = decision.take_profit_levels
        expected = self.settings.TAKE_PROFIT_LEVELS
        if len(levels) != expected:
            return RuleCheck(
                passed=False,
                rule="take_profit",
                reason=f"take_profit_levels must hold {expected} targets, got {len(levels)}",
            )
        for n, tp in enumerate(levels, start=1):
            if tp <= 0:
                return RuleCheck(
                    passed=False,
                    rule="take_profit",
                    reason=f"take-profit target {n} must be > 0, got {tp:.2f}",
                )
        return RuleCheck(passed=True, rule="take_profit", reason=_OK)

    def _check_ordering(self, decision: OpenDecision, limits: AssetLimits) -> RuleCheck:
        prices = [decision.stop_loss, *decision.take_profit_levels]
        pairs = list(zip(prices, prices[1:]))
        if decision.is_long:
            ordered = all(a < b for a, b in pairs)
            direction = "increase"
        else:
            ordered = all(a > b for a, b in pairs)
            direction = "decrease"
        if not ordered:
            targets = ", ".join(f"{tp:.2f}" for tp in decision.take_profit_levels)
            return RuleCheck(
                passed=False,
                rule="ordering",
                reason=(
                    f"{decision.action} stop and take-profit targets must strictly {direction}: "
                    f"stop {decision.stop_loss:.2f}, targets [{targets}]"
                ),
            )
        return RuleCheck(passed=True, rule="ordering", reason=_OK)

    def _check_risk_reward(self, decision: OpenDecision, limits: AssetLimits) -> RuleCheck:
        entry = self.assumed_entry(decision)
        tp1 = decision.take_profit_levels[0]
        risk = abs(entry - decision.stop_loss)
        reward = abs(tp1 - entry)
        rr = reward / risk if risk > 0 else 0.0
        if rr < self.settings.MIN_RR_RATIO:
            return RuleCheck(
                passed=False,
                rule="risk_reward",
                reason=(
                    f"R:R {rr:.2f}:1 < min {self.settings.MIN_RR_RATIO}:1 "
                    f"[risk {risk / entry * 100:.2f}% reward {reward / entry * 100:.2f}%] "
                    f"[stop {decision.stop_loss:.2f} tp1 {tp1:.2f}]"
                ),
            )
        return RuleCheck(passed=True, rule="risk_reward", reason=f"R:R {rr:.2f}")
