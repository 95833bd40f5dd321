# tradecalc

Tools for evaluating trading strategies and the risk taken along the way.

- **Equity statistics** (`tradecalc.analytics`): equity curve, drawdown, streaks,
  Sharpe ratio, profit factor, expectancy and a formatted text report.
- **Risk profiles** (`tradecalc.risk_profile`): fixed, compounding and
  half-Kelly position sizing, with ready-made conservative, moderate and
  aggressive profiles.
- **Risk curves** (`tradecalc.risk_curve`): Monte Carlo simulation of an
  account balance under a risk profile, with CSV export.
- **Trade journal** (`tradecalc.journal`): notes, setup reasoning, sentiment
  tags and lessons learned per trade, exportable to CSV and JSON and
  importable from JSON.
- **Backtesting** (`tradecalc.backtester`): runs a simple candle-based entry
  rule over OHLC price data loaded from CSV, with fixed-pip or
  structure-based stop loss and take profit.
- **Charts** (`tradecalc.charts`): equity curve, drawdown and monthly-return
  heatmap images drawn with matplotlib.
- **Batch settings** (`tradecalc.batch_config`): a `BatchConfig` dataclass
  and its conversion to and from nested JSON.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Usage

### Equity statistics

```python
from tradecalc.analytics import EquityAnalyzer, TradeOutcome, TradeRecord

trades = [
    TradeRecord(TradeOutcome.WIN_AT_TP1, risk_amount=100, reward_amount=200, risk_reward_ratio=2),
    TradeRecord(TradeOutcome.LOSS_AT_SL, risk_amount=100),
]
analyzer = EquityAnalyzer()
stats = analyzer.calculate_stats(trades, 10_000.0)
print(analyzer.stats_report(stats))
```

### Risk profiles

```python
from tradecalc.risk_profile import create_aggressive, create_conservative

kelly = create_aggressive()
kelly.calculate_risk_amount(10_000.0, 0.55, 2.0)   # percent of balance, half-Kelly, capped at 2.0

create_conservative().calculate_risk_amount(10_000.0, 0.5, 2.0)   # 0.5
```

### Simulating a risk curve

```python
from tradecalc.risk_curve import RiskCurveGenerator, RiskSimulationParams
from tradecalc.risk_profile import create_moderate

params = RiskSimulationParams(initial_balance=10_000.0, num_trades=200, win_rate=0.5)
generator = RiskCurveGenerator(params, create_moderate(), seed=42)
result = generator.generate_curve()
print(result.final_balance, result.max_drawdown_percent, result.sharpe_ratio)
generator.export_csv("risk_curve.csv")
```

Passing a `seed` makes a run repeatable.

### Keeping a journal

```python
from tradecalc.journal import SentimentTag, TradeJournal

journal = TradeJournal()
journal.add_entry("T-1", "Clean breakout", "Retest of the daily level", [SentimentTag.PATIENT])
journal.add_lesson_learned("T-1", "Wait for the close before entering")
journal.export_csv("journal.csv")
journal.export_json("journal.json")
```

Methods that change an entry raise `KeyError` when the trade id has no entry.
`all_entries()` and `entries_by_tag()` return entries newest first.

### Backtesting a price file

The CSV file has a header line followed by rows of
`timestamp,open,high,low,close[,volume]`, with timestamps as
`YYYY-MM-DD HH:MM:SS` or `YYYY-MM-DD`.

```python
from tradecalc.backtester import Backtester, BacktestConfig, StrategyType

tester = Backtester(BacktestConfig(stop_loss_pips=10, take_profit_pips=20,
                                   strategy_type=StrategyType.FIXED_RR))
tester.load_data("eurusd.csv")
result = tester.run_backtest()
print(result.total_trades, result.win_rate, result.net_profit)
tester.export_results("trades.csv")
```

`load_data` raises `ValueError` when the file holds no candles.

### Charts

```python
from tradecalc.charts import ChartConfig, EquityCurveGenerator

charts = EquityCurveGenerator(ChartConfig(output_dir="exports/charts", dark_mode=True))
path = charts.generate_equity_curve("eurusd", result)
charts.generate_drawdown_chart("eurusd", result)
```

Each method returns the path of the written image, or `None` when the result
has no data for that chart. The monthly heatmap reads
`result.monthly_returns`, a mapping of `(year, month)` to a fractional return;
`run_backtest` does not fill it, so set it yourself before calling
`generate_monthly_returns_heatmap`.

### Batch settings

```python
from tradecalc.batch_config import batch_config_to_dict, load_batch_config

config = load_batch_config("batch.json")
print(config.thread_count, config.chart_dir, config.backtest_config.initial_balance)
print(batch_config_to_dict(config))
```

A batch configuration file is JSON with optional `performance`, `output`,
`paths`, `logging` and `backtest` sections; any key left out keeps its
default. Values of the wrong kind raise `TypeError`, negative counts raise
`ValueError`.

## What the package does not do

- There is no runner that backtests many price files in one go: `BatchConfig`
  only describes the settings of such a run, and nothing in the package
  reads a strategy directory, runs files in parallel or writes Markdown, JSON
  or CSV summary reports across strategies. Loop over files with
  `Backtester` yourself.
- There is no command-line program; everything is used from Python.
- The backtester's trades carry only what the statistics need (outcome,
  risk and reward amounts, prices); there is no lot-size or instrument
  position calculator.