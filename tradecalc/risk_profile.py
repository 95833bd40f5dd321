"""Risk allocation profiles deciding how much of an account to risk per trade."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RiskStrategy(Enum):
    """How the risk percentage is derived."""

    FIXED = "fixed"
    COMPOUNDING = "compounding"
    KELLY_CRITERION = "kelly_criterion"


@dataclass
class RiskProfile:
    """A named risk profile with a default risk percentage."""

    name: str
    default_risk: float = 1.0
    strategy: RiskStrategy = RiskStrategy.FIXED

    def calculate_risk_amount(
        self,
        account_balance: float,
        win_rate: float = 0.0,
        risk_reward_ratio: float = 0.0,
    ) -> float:
        """Risk percentage to use for the next trade."""
        if self.strategy is RiskStrategy.KELLY_CRITERION:
            return min(self.default_risk, 1.0)
        return self.default_risk


class KellyRiskProfile(RiskProfile):
    """Half-Kelly sizing, capped at the profile's default risk."""

    def __init__(self, name: str, default_risk: float = 1.0) -> None:
        super().__init__(name, default_risk, RiskStrategy.KELLY_CRITERION)

    def calculate_risk_amount(
        self,
        account_balance: float,
        win_rate: float = 0.0,
        risk_reward_ratio: float = 0.0,
    ) -> float:
        if win_rate <= 0.0 or win_rate >= 1.0 or risk_reward_ratio <= 0.0:
            return self.default_risk
        kelly = (win_rate * risk_reward_ratio - (1.0 - win_rate)) / risk_reward_ratio
        half_kelly = kelly * 0.5
        return max(0.0, min(half_kelly * 100.0, self.default_risk))


def create_conservative() -> RiskProfile:
    return RiskProfile("Conservative", 0.5, RiskStrategy.FIXED)


def create_moderate() -> RiskProfile:
    return RiskProfile("Moderate", 1.0, RiskStrategy.COMPOUNDING)


def create_aggressive() -> RiskProfile:
    return KellyRiskProfile("Aggressive (Kelly)", 2.0)