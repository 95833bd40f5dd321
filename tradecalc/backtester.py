"""Candle-based backtester for a simple momentum entry with fixed exits."""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

from tradecalc.analytics import EquityAnalyzer, EquityStats, TradeOutcome, TradeRecord

PIP = 0.0001
SKIP_AFTER_TRADE = 5
MAX_TRADE_CANDLES = 100
SWING_LOOKBACK = 10

_DATE_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d")


@dataclass
class CandleData:
    """One OHLC bar; ``timestamp`` is seconds since the epoch."""

    timestamp: float
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


class StrategyType(Enum):
    """How stop loss and take profit are placed."""

    FIXED_RR = "fixed_rr"
    STRUCTURE_BASED = "structure_based"
    DYNAMIC_TARGET = "dynamic_target"


@dataclass
class BacktestConfig:
    """Settings of a backtest run."""

    initial_balance: float = 10000.0
    risk_per_trade: float = 1.0
    stop_loss_pips: float = 0.0
    take_profit_pips: float = 0.0
    risk_reward_ratio: float = 0.0
    strategy_type: StrategyType = StrategyType.FIXED_RR
    use_compounding: bool = False
    use_limit_orders: bool = False
    commission: float = 0.0
    slippage: float = 0.0
    long_enabled: bool = True
    short_enabled: bool = True


@dataclass
class BacktestResult:
    """Trades, curves and summary figures of a backtest run."""

    trades: list[TradeRecord] = field(default_factory=list)
    stats: EquityStats = field(default_factory=EquityStats)
    equity_curve: list[float] = field(default_factory=list)
    drawdown_curve: list[float] = field(default_factory=list)
    monthly_returns: dict[tuple[int, int], float] = field(default_factory=dict)

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    net_profit: float = 0.0

    @property
    def total_return(self) -> float:
        """Net profit as a fraction of the initial balance."""
        initial = self.stats.initial_balance
        return self.net_profit / initial if initial > 0 else 0.0

    @property
    def max_drawdown(self) -> float:
        """Largest drawdown as a fraction of the peak balance."""
        return self.stats.max_drawdown_percent / 100.0

    @property
    def sharpe_ratio(self) -> float:
        return self.stats.sharpe_ratio

    @property
    def num_trades(self) -> int:
        return self.total_trades

    @property
    def drawdowns(self) -> list[float]:
        """Drawdown curve as fractions rather than percentages."""
        return [value / 100.0 for value in self.drawdown_curve]


def _parse_timestamp(text: str) -> float:
    text = text.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).timestamp()
        except ValueError:
            continue
    raise ValueError(f"unrecognised date: {text!r}")


def _parse_volume(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        return 0.0


def load_price_data(filename: Union[str, Path]) -> list[CandleData]:
    """Read ``date,open,high,low,close[,volume]`` rows after a header line.

    Candles come back sorted by timestamp. Raises ``ValueError`` when the
    file holds no candles.
    """
    candles: list[CandleData] = []
    with open(filename, newline="", encoding="utf-8") as handle:
        reader = csv.reader(handle)
        next(reader, None)
        for row in reader:
            if not row or not "".join(row).strip():
                continue
            if len(row) < 5:
                raise ValueError(f"incomplete price row: {row!r}")
            candles.append(
                CandleData(
                    timestamp=_parse_timestamp(row[0]),
                    open=float(row[1]),
                    high=float(row[2]),
                    low=float(row[3]),
                    close=float(row[4]),
                    volume=_parse_volume(row[5]) if len(row) > 5 else 0.0,
                )
            )
    if not candles:
        raise ValueError(f"no price data in {filename}")
    candles.sort(key=lambda candle: candle.timestamp)
    return candles


def _default_config() -> BacktestConfig:
    return BacktestConfig(
        initial_balance=10000.0,
        risk_per_trade=1.0,
        stop_loss_pips=10.0,
        take_profit_pips=20.0,
        risk_reward_ratio=2.0,
        strategy_type=StrategyType.FIXED_RR,
    )


class Backtester:
    """Runs the entry rule over a candle series and simulates each trade."""

    def __init__(self, config: Optional[BacktestConfig] = None) -> None:
        self.config = config if config is not None else _default_config()
        self.candles: list[CandleData] = []
        self.last_result = BacktestResult()

    def load_data(self, filename: Union[str, Path]) -> int:
        """Load candles from a CSV file; return how many were read."""
        self.candles = load_price_data(filename)
        return len(self.candles)

    def detect_entry(self, index: int) -> Optional[bool]:
        """True for a long signal, False for a short one, None for none.

        Long: close above the previous close and above its own open.
        Short: close below the previous close and below its own open.
        """
        if index <= 0 or index >= len(self.candles) - 1:
            return None
        current = self.candles[index]
        previous = self.candles[index - 1]
        if current.close > previous.close and current.close > current.open:
            return True
        if current.close < previous.close and current.close < current.open:
            return False
        return None

    def stop_loss_and_take_profit(self, index: int, is_long: bool) -> tuple[float, float]:
        """Stop loss and take profit prices for an entry at ``index``."""
        config = self.config
        entry = self.candles[index].close

        if config.strategy_type is StrategyType.FIXED_RR:
            stop = config.stop_loss_pips * PIP
            target = config.take_profit_pips * PIP
            if is_long:
                return entry - stop, entry + target
            return entry + stop, entry - target

        if config.strategy_type is StrategyType.STRUCTURE_BASED:
            window = self.candles[max(0, index - SWING_LOOKBACK):index]
            swing_high = max([entry, *(c.high for c in window)])
            swing_low = min([entry, *(c.low for c in window)])
            if is_long:
                distance = entry - swing_low
                return swing_low, entry + distance * config.risk_reward_ratio
            distance = swing_high - entry
            return swing_high, entry - distance * config.risk_reward_ratio

        if is_long:
            return entry * 0.99, entry * 1.01
        return entry * 1.01, entry * 0.99

    def run_backtest(self) -> BacktestResult:
        """Simulate every signalled trade and summarise the run."""
        config = self.config
        result = BacktestResult(equity_curve=[config.initial_balance], drawdown_curve=[0.0])

        index = 1
        while index < len(self.candles) - 1:
            direction = self.detect_entry(index)
            if direction is not None:
                allowed = config.long_enabled if direction else config.short_enabled
                if allowed and self._simulate_trade(index, direction, result):
                    index += SKIP_AFTER_TRADE
            index += 1

        result.stats = EquityAnalyzer().calculate_stats(result.trades, config.initial_balance)
        result.total_trades = len(result.trades)
        result.winning_trades = sum(1 for trade in result.trades if trade.is_win)
        result.losing_trades = sum(1 for trade in result.trades if trade.is_loss)
        result.win_rate = (
            result.winning_trades / result.total_trades * 100.0 if result.total_trades else 0.0
        )
        result.net_profit = result.stats.final_balance - config.initial_balance
        result.profit_factor = result.stats.profit_factor

        self.last_result = result
        return result

    def _find_outcome(
        self, entry_index: int, is_long: bool, entry: float, stop: float, target: float
    ) -> Optional[TradeOutcome]:
        for i in range(entry_index + 1, len(self.candles)):
            candle = self.candles[i]
            outcome: Optional[TradeOutcome] = None
            if is_long:
                if candle.low <= stop:
                    outcome = TradeOutcome.LOSS_AT_SL
                elif candle.high >= target:
                    outcome = TradeOutcome.WIN_AT_TP1
            else:
                if candle.high >= stop:
                    outcome = TradeOutcome.LOSS_AT_SL
                elif candle.low <= target:
                    outcome = TradeOutcome.WIN_AT_TP1

            if i >= entry_index + MAX_TRADE_CANDLES:
                gain = candle.close - entry if is_long else entry - candle.close
                if gain > 0:
                    return TradeOutcome.WIN_AT_TP1
                if gain < 0:
                    return TradeOutcome.LOSS_AT_SL
                return TradeOutcome.BREAK_EVEN
            if outcome is not None:
                return outcome
        return None

    def _simulate_trade(self, entry_index: int, is_long: bool, result: BacktestResult) -> bool:
        if entry_index >= len(self.candles) - 1:
            return False

        entry = self.candles[entry_index].close
        stop, target = self.stop_loss_and_take_profit(entry_index, is_long)
        outcome = self._find_outcome(entry_index, is_long, entry, stop, target)
        if outcome is None:
            return False

        balance = result.equity_curve[-1]
        risk_amount = balance * self.config.risk_per_trade / 100.0
        stop_distance = abs(entry - stop)
        ratio = abs(target - entry) / stop_distance if stop_distance > 0 else 0.0
        trade = TradeRecord(
            outcome=outcome,
            risk_amount=risk_amount,
            reward_amount=risk_amount * ratio,
            risk_reward_ratio=ratio,
            entry_price=entry,
            stop_loss_price=stop,
            take_profit_price=target,
        )

        new_balance = balance + trade.pnl
        result.equity_curve.append(new_balance)
        peak = max(result.equity_curve)
        result.drawdown_curve.append((peak - new_balance) / peak * 100.0 if peak else 0.0)
        result.trades.append(trade)
        return True

    def export_results(self, filename: Union[str, Path]) -> None:
        """Write the trades of the last run with running balance as CSV."""
        balance = self.config.initial_balance
        with open(filename, "w", newline="", encoding="utf-8") as handle:
            handle.write("Trade,Entry Price,SL,TP,Outcome,P&L,Balance\n")
            for number, trade in enumerate(self.last_result.trades, start=1):
                balance += trade.pnl
                pnl = f"{trade.pnl:g}" if trade.is_win or trade.is_loss else "0.00"
                fields: Iterable[str] = (
                    str(number),
                    f"{trade.entry_price:g}",
                    f"{trade.stop_loss_price:g}",
                    f"{trade.take_profit_price:g}",
                    trade.outcome.value,
                    pnl,
                    f"{balance:g}",
                )
                handle.write(",".join(fields) + "\n")