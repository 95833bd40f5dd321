"""Monte Carlo simulation of an account balance under a risk profile."""

from __future__ import annotations

import csv
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Union

from tradecalc.analytics import sharpe_ratio
from tradecalc.risk_profile import RiskProfile, RiskStrategy, create_moderate


@dataclass
class RiskSimulationParams:
    """Inputs of a balance simulation."""

    initial_balance: float = 10000.0
    num_trades: int = 100
    win_rate: float = 0.55
    risk_reward_ratio: float = 2.0
    max_risk_per_trade: float = 2.0
    strategy: RiskStrategy = RiskStrategy.FIXED
    include_drawdowns: bool = True


@dataclass
class RiskSimulationResult:
    """Balance curve and summary metrics of one simulation run."""

    balance_curve: list[float] = field(default_factory=list)
    final_balance: float = 0.0
    max_drawdown: float = 0.0
    max_drawdown_percent: float = 0.0
    max_consecutive_losses: int = 0
    sharpe_ratio: float = 0.0
    profit_factor: float = 0.0


class RiskCurveGenerator:
    """Simulates a sequence of trades sized by a risk profile."""

    def __init__(
        self,
        params: Optional[RiskSimulationParams] = None,
        profile: Optional[RiskProfile] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.params = params if params is not None else RiskSimulationParams()
        self.profile = profile if profile is not None else create_moderate()
        self.results = RiskSimulationResult()
        self._rng = random.Random(seed)

    def _risk_percent(self, balance: float) -> float:
        if self.profile.strategy is RiskStrategy.KELLY_CRITERION:
            risk = self.profile.calculate_risk_amount(
                balance, self.params.win_rate, self.params.risk_reward_ratio
            )
        else:
            risk = self.profile.default_risk
        return min(risk, self.params.max_risk_per_trade)

    def generate_curve(self) -> RiskSimulationResult:
        """Run the simulation and return its result."""
        params = self.params
        balance = params.initial_balance
        curve = [balance]
        returns: list[float] = []
        trade_results: list[float] = []
        losing_run = 0
        max_losing_run = 0

        for _ in range(params.num_trades):
            risk = self._risk_percent(balance)
            is_win = self._rng.random() < params.win_rate
            previous = balance
            balance = self.simulate_trade(balance, risk, is_win)

            change = balance - previous
            returns.append(change / previous if previous else 0.0)
            trade_results.append(change)

            if change < 0:
                losing_run += 1
                max_losing_run = max(max_losing_run, losing_run)
            else:
                losing_run = 0
            curve.append(balance)

        result = RiskSimulationResult(
            balance_curve=curve,
            final_balance=balance,
            max_consecutive_losses=max_losing_run,
        )
        result.max_drawdown, result.max_drawdown_percent = self._drawdown(curve)
        result.sharpe_ratio = sharpe_ratio(returns)
        result.profit_factor = self._profit_factor(trade_results)
        self.results = result
        return result

    def simulate_trade(self, balance: float, risk_percent: float, is_win: bool) -> float:
        """Balance after one trade risking ``risk_percent`` of ``balance``."""
        risk_amount = balance * (risk_percent / 100.0)
        if is_win:
            return balance + risk_amount * self.params.risk_reward_ratio
        return balance - risk_amount

    def _drawdown(self, curve: Sequence[float]) -> tuple[float, float]:
        peak = self.params.initial_balance
        max_drawdown = 0.0
        max_percent = 0.0
        for balance in curve:
            peak = max(peak, balance)
            drawdown = peak - balance
            if drawdown > max_drawdown:
                max_drawdown = drawdown
                max_percent = drawdown / peak * 100.0 if peak > 0 else 0.0
        return max_drawdown, max_percent

    @staticmethod
    def _profit_factor(trade_results: Sequence[float]) -> float:
        profit = sum(pl for pl in trade_results if pl > 0)
        loss = sum(abs(pl) for pl in trade_results if pl <= 0)
        return profit / loss if loss > 0 else 0.0

    def export_csv(self, filename: Union[str, Path]) -> None:
        """Write the last balance curve with per-trade returns in percent."""
        curve = self.results.balance_curve
        with open(filename, "w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle, lineterminator="\n")
            writer.writerow(["Trade", "Balance", "Return"])
            previous: Optional[float] = None
            for index, balance in enumerate(curve):
                if previous:
                    pct = (balance - previous) / previous * 100.0
                else:
                    pct = 0.0
                writer.writerow([index, f"{balance:g}", f"{pct:g}"])
                previous = balance