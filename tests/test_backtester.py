from datetime import datetime

import pytest

from tradecalc.analytics import TradeOutcome
from tradecalc.backtester import (
    BacktestConfig,
    Backtester,
    CandleData,
    StrategyType,
    load_price_data,
)


def bar(ts, o, h, l, c):
    return CandleData(timestamp=float(ts), open=o, high=h, low=l, close=c)


def long_win_candles():
    return [
        bar(0, 1.0, 1.0, 1.0, 1.0),
        bar(1, 1.0, 1.001, 1.0, 1.001),
        bar(2, 1.001, 1.004, 1.0005, 1.003),
        bar(3, 1.003, 1.003, 1.003, 1.003),
    ]


def long_loss_candles():
    return [
        bar(0, 1.0, 1.0, 1.0, 1.0),
        bar(1, 1.0, 1.001, 1.0, 1.001),
        bar(2, 1.001, 1.0012, 0.9990, 0.9995),
        bar(3, 0.9995, 0.9995, 0.9995, 0.9995),
    ]


def make_backtester(candles, **config):
    tester = Backtester()
    for key, value in config.items():
        setattr(tester.config, key, value)
    tester.candles = candles
    return tester


def write_csv(path, rows):
    path.write_text("Date,Open,High,Low,Close,Volume\n" + "".join(r + "\n" for r in rows))
    return path


def test_load_price_data_sorts_and_parses(tmp_path):
    path = write_csv(
        tmp_path / "prices.csv",
        [
            "2023-01-02 00:00:00,102,110,100,108,1200",
            "2023-01-01 00:00:00,100,105,95,102,1000",
        ],
    )
    candles = load_price_data(path)
    assert [c.close for c in candles] == [102.0, 108.0]
    assert candles[0].timestamp < candles[1].timestamp
    assert candles[0].volume == 1000.0


def test_date_only_and_bad_volume(tmp_path):
    path = write_csv(tmp_path / "p.csv", ["2023-01-01,100,105,95,102,abc", "2023-01-02,1,2,0.5,1.5"])
    candles = load_price_data(path)
    assert candles[0].timestamp == datetime(2023, 1, 1).timestamp()
    assert candles[0].volume == 0.0
    assert candles[1].volume == 0.0


def test_load_empty_file_raises(tmp_path):
    path = write_csv(tmp_path / "empty.csv", [])
    with pytest.raises(ValueError):
        load_price_data(path)


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Backtester().load_data(tmp_path / "missing.csv")


def test_load_data_returns_count(tmp_path):
    path = write_csv(tmp_path / "p.csv", ["2023-01-01,100,105,95,102,1000", "2023-01-02,102,110,100,108,1200"])
    tester = Backtester()
    assert tester.load_data(path) == 2
    assert len(tester.candles) == 2


def test_default_config_values():
    config = Backtester().config
    assert config.stop_loss_pips == 10.0
    assert config.take_profit_pips == 20.0
    assert config.strategy_type is StrategyType.FIXED_RR


def test_detect_entry_directions():
    candles = [
        bar(0, 1.0, 1.0, 1.0, 1.0),
        bar(1, 1.0, 1.2, 1.0, 1.1),
        bar(2, 1.1, 1.1, 0.9, 1.0),
        bar(3, 1.0, 1.0, 1.0, 1.0),
    ]
    tester = make_backtester(candles)
    assert tester.detect_entry(1) is True
    assert tester.detect_entry(2) is False
    assert tester.detect_entry(0) is None
    assert tester.detect_entry(3) is None


def test_fixed_rr_levels_bracket_entry():
    tester = make_backtester(long_win_candles())
    entry = tester.candles[1].close
    sl, tp = tester.stop_loss_and_take_profit(1, True)
    assert sl < entry < tp
    assert (tp - entry) / (entry - sl) == pytest.approx(2.0)
    short_sl, short_tp = tester.stop_loss_and_take_profit(1, False)
    assert short_tp < entry < short_sl


def test_structure_based_uses_swing_low():
    candles = [
        bar(0, 1.0, 1.05, 0.95, 1.0),
        bar(1, 1.0, 1.1, 0.99, 1.08),
        bar(2, 1.08, 1.08, 1.08, 1.08),
    ]
    tester = make_backtester(candles, strategy_type=StrategyType.STRUCTURE_BASED, risk_reward_ratio=2.0)
    sl, tp = tester.stop_loss_and_take_profit(1, True)
    assert sl == 0.95
    assert tp - 1.08 == pytest.approx(2.0 * (1.08 - sl))


def test_dynamic_target_defaults_to_one_percent():
    tester = make_backtester(long_win_candles(), strategy_type=StrategyType.DYNAMIC_TARGET)
    entry = tester.candles[1].close
    sl, tp = tester.stop_loss_and_take_profit(1, True)
    assert sl == pytest.approx(entry * 0.99)
    assert tp == pytest.approx(entry * 1.01)


def test_winning_trade():
    result = make_backtester(long_win_candles()).run_backtest()
    assert result.total_trades == 1
    assert result.trades[0].outcome is TradeOutcome.WIN_AT_TP1
    assert result.net_profit == pytest.approx(200.0)
    assert result.win_rate == 100.0
    assert len(result.equity_curve) == len(result.drawdown_curve) == 2
    assert result.drawdown_curve == [0.0, 0.0]


def test_losing_trade_records_drawdown():
    result = make_backtester(long_loss_candles()).run_backtest()
    assert result.losing_trades == 1
    assert result.trades[0].outcome is TradeOutcome.LOSS_AT_SL
    assert result.net_profit == pytest.approx(-result.trades[0].risk_amount)
    assert result.drawdown_curve[-1] > 0
    assert result.max_drawdown == pytest.approx(result.stats.max_drawdown_percent / 100.0)


def test_long_disabled_skips_trades():
    result = make_backtester(long_win_candles(), long_enabled=False).run_backtest()
    assert result.total_trades == 0
    assert result.equity_curve == [10000.0]


def test_unfinished_trade_is_dropped():
    candles = long_win_candles()[:2] + [bar(2, 1.001, 1.0015, 1.0005, 1.001), bar(3, 1.001, 1.0015, 1.0005, 1.001)]
    result = make_backtester(candles).run_backtest()
    assert result.trades == []
    assert result.net_profit == 0.0


def test_trade_closed_after_time_limit():
    candles = [bar(0, 1.0, 1.0, 1.0, 1.0), bar(1, 1.0, 1.0001, 1.0, 1.0001)]
    candles += [bar(i, 1.0005, 1.0005, 1.0005, 1.0005) for i in range(2, 102)]
    result = make_backtester(candles).run_backtest()
    assert result.total_trades == 1
    assert result.trades[0].outcome is TradeOutcome.WIN_AT_TP1


def test_empty_data_gives_empty_result():
    result = Backtester().run_backtest()
    assert result.total_trades == 0
    assert result.stats.final_balance == result.equity_curve[-1]


def test_result_fraction_properties():
    result = make_backtester(long_win_candles()).run_backtest()
    assert result.total_return == pytest.approx(result.net_profit / 10000.0)
    assert result.num_trades == result.total_trades
    assert result.drawdowns == [d / 100.0 for d in result.drawdown_curve]


def test_export_results(tmp_path):
    tester = make_backtester(long_win_candles())
    result = tester.run_backtest()
    out = tmp_path / "trades.csv"
    tester.export_results(out)
    lines = out.read_text().splitlines()
    assert lines[0] == "Trade,Entry Price,SL,TP,Outcome,P&L,Balance"
    assert len(lines) == 1 + result.total_trades
    fields = lines[1].split(",")
    assert fields[4] == TradeOutcome.WIN_AT_TP1.value
    assert float(fields[-1]) == pytest.approx(result.stats.final_balance)


def test_config_dataclass_defaults():
    config = BacktestConfig()
    tester = Backtester(config)
    assert tester.config is config
    assert config.long_enabled and config.short_enabled
    assert config.commission == 0.0