"""Equity statistics computed from a sequence of closed trades."""

from __future__ import annotations

import math
import statistics
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence


class TradeOutcome(Enum):
    """Final state of a trade."""

    PENDING = "Pending"
    WIN_AT_TP1 = "Win at TP1"
    WIN_AT_TP2 = "Win at TP2"
    LOSS_AT_SL = "Loss at SL"
    BREAK_EVEN = "Break Even"

    @property
    def is_win(self) -> bool:
        return self in (TradeOutcome.WIN_AT_TP1, TradeOutcome.WIN_AT_TP2)

    @property
    def is_loss(self) -> bool:
        return self is TradeOutcome.LOSS_AT_SL


@dataclass
class TradeRecord:
    """The parts of a trade that the statistics depend on."""

    outcome: TradeOutcome = TradeOutcome.PENDING
    risk_amount: float = 0.0
    reward_amount: float = 0.0
    risk_reward_ratio: float = 0.0
    entry_price: float = 0.0
    stop_loss_price: float = 0.0
    take_profit_price: float = 0.0

    @property
    def is_win(self) -> bool:
        return self.outcome.is_win

    @property
    def is_loss(self) -> bool:
        return self.outcome.is_loss

    @property
    def pnl(self) -> float:
        """Signed profit or loss of the trade."""
        if self.is_win:
            return self.reward_amount
        if self.is_loss:
            return -self.risk_amount
        return 0.0


@dataclass
class EquityStats:
    """Summary statistics of an equity curve."""

    initial_balance: float = 0.0
    final_balance: float = 0.0
    total_pnl: float = 0.0
    percent_gain: float = 0.0
    win_rate: float = 0.0
    total_trades: int = 0

    max_drawdown: float = 0.0
    max_drawdown_percent: float = 0.0
    drawdown_duration: int = 0
    sharpe_ratio: float = 0.0
    profit_factor: float = 0.0

    longest_win_streak: int = 0
    longest_lose_streak: int = 0
    current_streak: int = 0

    avg_win: float = 0.0
    avg_loss: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0

    avg_r_multiple: float = 0.0
    expectancy: float = 0.0


def sharpe_ratio(returns: Sequence[float]) -> float:
    """Annualised Sharpe ratio of per-trade returns, risk-free rate zero."""
    if not returns:
        return 0.0
    mean = statistics.fmean(returns)
    std_dev = statistics.pstdev(returns, mu=mean)
    return mean / std_dev * math.sqrt(252.0) if std_dev > 0 else 0.0


def profit_factor(trades: Iterable[TradeRecord]) -> float:
    """Gross wins divided by gross losses; zero when there are no losses."""
    total_wins = 0.0
    total_losses = 0.0
    for trade in trades:
        if trade.is_win:
            total_wins += trade.reward_amount
        elif trade.is_loss:
            total_losses += trade.risk_amount
    return total_wins / total_losses if total_losses > 0 else 0.0


class EquityAnalyzer:
    """Builds equity curves and statistics from trade histories."""

    def calculate_stats(self, trades: Sequence[TradeRecord], initial_balance: float) -> EquityStats:
        stats = EquityStats(initial_balance=initial_balance, total_trades=len(trades))
        if not trades:
            stats.final_balance = initial_balance
            return stats

        curve = self.generate_equity_curve(trades, initial_balance)
        stats.final_balance = curve[-1]
        stats.total_pnl = stats.final_balance - initial_balance
        stats.percent_gain = stats.total_pnl / initial_balance * 100.0 if initial_balance > 0 else 0.0

        wins = [t.reward_amount for t in trades if t.is_win]
        losses = [t.risk_amount for t in trades if t.is_loss]
        winning = len(wins)
        losing = len(trades) - winning

        stats.win_rate = winning / len(trades) * 100.0
        stats.largest_win = max([0.0, *wins])
        stats.largest_loss = max([0.0, *losses])
        stats.avg_win = sum(wins) / winning if winning else 0.0
        stats.avg_loss = sum(losses) / losing if losing else 0.0

        total_r = sum(
            t.risk_reward_ratio if t.is_win else -1.0
            for t in trades
            if t.is_win or t.is_loss
        )
        stats.avg_r_multiple = total_r / len(trades)
        stats.expectancy = stats.avg_r_multiple

        self._drawdown_metrics(stats, curve)
        self._streaks(stats, trades)
        stats.profit_factor = profit_factor(trades)

        returns = [(cur - prev) / prev for prev, cur in zip(curve, curve[1:])]
        stats.sharpe_ratio = sharpe_ratio(returns)
        return stats

    def generate_equity_curve(self, trades: Iterable[TradeRecord], initial_balance: float) -> list[float]:
        curve = [initial_balance]
        balance = initial_balance
        for trade in trades:
            if trade.is_win:
                balance += trade.reward_amount
            elif trade.is_loss:
                balance -= trade.risk_amount
            curve.append(balance)
        return curve

    @staticmethod
    def _drawdown_metrics(stats: EquityStats, curve: Sequence[float]) -> None:
        if len(curve) < 2:
            return
        peak = curve[0]
        max_drawdown = 0.0
        duration = 0
        max_duration = 0
        for balance in curve[1:]:
            if balance > peak:
                peak = balance
                duration = 0
                continue
            duration += 1
            drawdown = peak - balance
            if drawdown > max_drawdown:
                max_drawdown = drawdown
                stats.max_drawdown_percent = drawdown / peak * 100.0 if peak > 0 else 0.0
            max_duration = max(max_duration, duration)
        stats.max_drawdown = max_drawdown
        stats.drawdown_duration = max_duration

    @staticmethod
    def _streaks(stats: EquityStats, trades: Iterable[TradeRecord]) -> None:
        win_streak = lose_streak = 0
        max_win = max_lose = 0
        for trade in trades:
            if trade.is_win:
                win_streak += 1
                lose_streak = 0
                max_win = max(max_win, win_streak)
            elif trade.is_loss:
                lose_streak += 1
                win_streak = 0
                max_lose = max(max_lose, lose_streak)
            else:
                win_streak = lose_streak = 0
        stats.longest_win_streak = max_win
        stats.longest_lose_streak = max_lose
        if win_streak > 0:
            stats.current_streak = win_streak
        elif lose_streak > 0:
            stats.current_streak = -lose_streak
        else:
            stats.current_streak = 0

    def stats_report(self, stats: EquityStats) -> str:
        """Human-readable multi-section report of the statistics."""
        if stats.current_streak > 0:
            streak = f"{stats.current_streak} wins"
        elif stats.current_streak < 0:
            streak = f"{-stats.current_streak} losses"
        else:
            streak = "none"

        lines = [
            "=== ADVANCED EQUITY STATISTICS ===",
            "",
            "Basic Performance:",
            f"  Initial Balance: ${stats.initial_balance:.2f}",
            f"  Final Balance:   ${stats.final_balance:.2f}",
            f"  Total P&L:       ${stats.total_pnl:.2f} ({stats.percent_gain:.2f}%)",
            f"  Win Rate:        {stats.win_rate:.2f}%",
            f"  Total Trades:    {stats.total_trades}",
            "",
            "Risk Metrics:",
            f"  Max Drawdown:    ${stats.max_drawdown:.2f} ({stats.max_drawdown_percent:.2f}%)",
            f"  Drawdown Length: {stats.drawdown_duration} trades",
            f"  Sharpe Ratio:    {stats.sharpe_ratio:.3f}",
            f"  Profit Factor:   {stats.profit_factor:.3f}",
            "",
            "Trade Streaks:",
            f"  Longest Win Streak:  {stats.longest_win_streak} trades",
            f"  Longest Loss Streak: {stats.longest_lose_streak} trades",
            f"  Current Streak:      {streak}",
            "",
            "Trade Statistics:",
            f"  Average Win:     ${stats.avg_win:.2f}",
            f"  Average Loss:    ${stats.avg_loss:.2f}",
            f"  Largest Win:     ${stats.largest_win:.2f}",
            f"  Largest Loss:    ${stats.largest_loss:.2f}",
            f"  Expectancy:      {stats.expectancy:.3f}R",
        ]
        return "\n".join(lines) + "\n"