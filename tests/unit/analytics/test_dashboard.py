"""Tests for the dashboard aggregate and chart series."""

import pytest

from trade_compass.analytics.dashboard import (
    aggregate_dashboard,
    build_cumulative_pnl_series,
    build_daily_pnl_series,
)
from trade_compass.analytics.kpis import DailyStat
from trade_compass.core.enums import ScoreProfile

from tests.factories import make_day_trade


@pytest.fixture
def march_trades():
    return [
        make_day_trade("2024-02-01", 300.0, symbol="XAUUSD", position_size=1.0),
        make_day_trade("2024-03-12", 100.0, symbol="EURUSD", position_size=2.0),
        make_day_trade("2024-03-13", -40.0, symbol="EURUSD"),
        make_day_trade("2024-03-14", 0.0, symbol="GBPUSD"),
    ]


class TestSeries:
    def test_daily_series_sorted(self):
        stats = [DailyStat("2024-01-03", net_pnl=5.0), DailyStat("2024-01-01", net_pnl=-2.0)]
        series = build_daily_pnl_series(stats)
        assert [p.date for p in series] == ["2024-01-01", "2024-01-03"]
        assert series[0].label == "Jan 01"

    def test_cumulative_series(self):
        stats = [
            DailyStat("2024-01-01", net_pnl=10.0),
            DailyStat("2024-01-02", net_pnl=-4.0),
            DailyStat("2024-01-03", net_pnl=6.0),
        ]
        values = [p.value for p in build_cumulative_pnl_series(stats)]
        assert values == pytest.approx([10.0, 6.0, 12.0])


class TestAggregateDashboard:
    def test_window_and_blocks(self, march_trades, today):
        stats = aggregate_dashboard(march_trades, days=5, today=today)

        assert [p.date for p in stats.daily_pnl] == [
            "2024-03-10", "2024-03-11", "2024-03-12", "2024-03-13", "2024-03-14",
        ]
        assert [p.value for p in stats.daily_pnl] == pytest.approx([0.0, 0.0, 100.0, -40.0, 0.0])

        # Headline KPIs cover the whole history
        assert stats.kpis.total_trades == 4
        assert stats.kpis.total_profit == pytest.approx(360.0)
        assert stats.kpis.win_rate == pytest.approx(200 / 3)
        assert stats.kpis.avg_position_size == pytest.approx(1.5)

        assert [s.symbol for s in stats.symbols] == ["XAUUSD", "EURUSD", "GBPUSD"]
        assert stats.compass_score.profile == ScoreProfile.DASHBOARD
        assert stats.risk_progress.week_pnl == pytest.approx(60.0)

    def test_top_symbols_limit(self, march_trades, today):
        stats = aggregate_dashboard(march_trades, top_symbols=1, today=today)
        assert [s.symbol for s in stats.symbols] == ["XAUUSD"]

    def test_clock_supplies_today(self, march_trades, sim_clock):
        stats = aggregate_dashboard(march_trades, days=1, clock=sim_clock)
        assert [p.date for p in stats.daily_pnl] == ["2024-03-14"]

    def test_empty_history(self, today):
        stats = aggregate_dashboard([], days=30, today=today)
        assert len(stats.daily_pnl) == 30
        assert stats.kpis.total_trades == 0
        assert stats.symbols == []
        assert stats.compass_score.score == pytest.approx(1.5)

    def test_to_dict_is_plain(self, march_trades, today):
        payload = aggregate_dashboard(march_trades, days=2, today=today).to_dict()
        assert set(payload) == {"kpis", "daily_pnl", "symbols", "compass_score", "risk_progress"}
        assert payload["compass_score"]["profile"] == "dashboard"
        assert payload["daily_pnl"][-1]["label"] == "Mar 14"
