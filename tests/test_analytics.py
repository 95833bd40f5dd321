import pytest

from tradecalc.analytics import (
    EquityAnalyzer,
    TradeOutcome,
    TradeRecord,
    profit_factor,
    sharpe_ratio,
)

RISK = 100.0
REWARD = 200.0
RR = 2.0
INITIAL = 1000.0


def win():
    return TradeRecord(TradeOutcome.WIN_AT_TP1, RISK, REWARD, RR)


def win_tp2():
    return TradeRecord(TradeOutcome.WIN_AT_TP2, RISK, REWARD, RR)


def loss():
    return TradeRecord(TradeOutcome.LOSS_AT_SL, RISK, REWARD, RR)


def pending():
    return TradeRecord(TradeOutcome.PENDING, RISK, REWARD, RR)


@pytest.fixture
def analyzer():
    return EquityAnalyzer()


def test_empty_trades_keep_initial_balance(analyzer):
    stats = analyzer.calculate_stats([], INITIAL)
    assert stats.final_balance == INITIAL
    assert stats.total_trades == 0
    assert stats.win_rate == 0.0


def test_equity_curve_follows_outcomes(analyzer):
    curve = analyzer.generate_equity_curve([win(), loss(), pending()], INITIAL)
    assert curve == pytest.approx([INITIAL, INITIAL + REWARD, INITIAL + REWARD - RISK, INITIAL + REWARD - RISK])


def test_final_balance_matches_curve_end(analyzer):
    trades = [win(), loss(), win_tp2(), loss(), loss()]
    curve = analyzer.generate_equity_curve(trades, INITIAL)
    stats = analyzer.calculate_stats(trades, INITIAL)
    assert stats.final_balance == pytest.approx(curve[-1])
    assert stats.total_pnl == pytest.approx(curve[-1] - INITIAL)
    assert len(curve) == len(trades) + 1


def test_win_rate_half(analyzer):
    stats = analyzer.calculate_stats([win(), loss()], INITIAL)
    assert stats.win_rate == pytest.approx(50.0)


def test_profit_factor_ratio_of_inputs():
    assert profit_factor([win(), loss()]) == pytest.approx(REWARD / RISK)
    assert profit_factor([win(), win()]) == 0.0


def test_streaks(analyzer):
    n_wins, n_losses = 3, 2
    trades = [win()] * n_wins + [loss()] * n_losses
    stats = analyzer.calculate_stats(trades, INITIAL)
    assert stats.longest_win_streak == n_wins
    assert stats.longest_lose_streak == n_losses
    assert stats.current_streak == -n_losses


def test_pending_resets_streak(analyzer):
    stats = analyzer.calculate_stats([win(), win(), pending()], INITIAL)
    assert stats.current_streak == 0
    assert stats.longest_win_streak == 2


def test_expectancy_all_wins_equals_rr(analyzer):
    stats = analyzer.calculate_stats([win(), win_tp2()], INITIAL)
    assert stats.expectancy == pytest.approx(RR)
    assert stats.avg_r_multiple == stats.expectancy


def test_expectancy_all_losses_minus_one(analyzer):
    stats = analyzer.calculate_stats([loss(), loss()], INITIAL)
    assert stats.expectancy == pytest.approx(-1.0)
    assert stats.avg_loss == pytest.approx(RISK)
    assert stats.largest_loss == pytest.approx(RISK)


def test_drawdown_after_peak(analyzer):
    stats = analyzer.calculate_stats([win(), loss()], INITIAL)
    assert stats.max_drawdown == pytest.approx(RISK)
    assert 0.0 < stats.max_drawdown_percent < 100.0
    assert stats.drawdown_duration == 1


def test_no_drawdown_when_only_winning(analyzer):
    stats = analyzer.calculate_stats([win(), win()], INITIAL)
    assert stats.max_drawdown == 0.0
    assert stats.drawdown_duration == 0


def test_sharpe_ratio_edge_cases():
    assert sharpe_ratio([]) == 0.0
    assert sharpe_ratio([0.01, 0.01, 0.01]) == 0.0
    assert sharpe_ratio([0.02, 0.01, 0.03]) > 0
    assert sharpe_ratio([-0.02, -0.01, -0.03]) < 0


def test_report_contains_sections(analyzer):
    stats = analyzer.calculate_stats([], INITIAL)
    report = analyzer.stats_report(stats)
    assert report.startswith("=== ADVANCED EQUITY STATISTICS ===")
    assert "Initial Balance: $1000.00" in report
    assert "Current Streak:      none" in report


def test_report_shows_losing_streak(analyzer):
    stats = analyzer.calculate_stats([loss(), loss()], INITIAL)
    report = analyzer.stats_report(stats)
    assert "2 losses" in report
    assert "Expectancy:      -1.000R" in report