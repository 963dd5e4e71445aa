"""Tests for calendar aggregation and the month views."""

from datetime import date

import pytest

from trade_compass.analytics.calendar import (
    aggregate_calendar,
    build_calendar_model,
    build_weekly_summary,
    month_bounds,
)
from trade_compass.analytics.kpis import build_daily_stats
from trade_compass.core.enums import CalendarCategory

from tests.factories import make_day_trade, make_trade


@pytest.fixture
def january_trades():
    return [
        make_day_trade("2024-01-05", 30.0),
        make_day_trade("2024-01-05", -10.0),
        make_day_trade("2024-01-06", -15.0),
        make_day_trade("2024-01-08", 0.0),
        make_day_trade("2024-02-01", 500.0),
    ]


class TestMonthBounds:
    def test_leap_february(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_december(self):
        assert month_bounds(2023, 12) == (date(2023, 12, 1), date(2023, 12, 31))


class TestAggregateCalendar:
    def test_month_totals_and_extremes(self, january_trades):
        month = aggregate_calendar(january_trades, year=2024, month=1)

        assert [d.date for d in month.days] == ["2024-01-05", "2024-01-06", "2024-01-08"]
        assert month.total_trades == 4
        assert month.total_profit == pytest.approx(5.0)
        assert month.total_wins == 1
        assert month.total_losses == 2
        assert month.best_day.date == "2024-01-05"
        assert month.best_day.profit == pytest.approx(20.0)
        assert month.worst_day.date == "2024-01-06"

    def test_breakeven_day_counts_trades_only(self, january_trades):
        month = aggregate_calendar(january_trades, year=2024, month=1)
        flat = month.days[2]
        assert flat.trades_count == 1
        assert flat.win_count == 0
        assert flat.loss_count == 0

    def test_ties_go_to_earliest_day(self):
        trades = [
            make_day_trade("2024-01-04", 10.0),
            make_day_trade("2024-01-03", 10.0),
            make_day_trade("2024-01-10", -7.0),
            make_day_trade("2024-01-09", -7.0),
        ]
        month = aggregate_calendar(trades)
        assert month.best_day.date == "2024-01-03"
        assert month.worst_day.date == "2024-01-09"

    def test_empty(self):
        month = aggregate_calendar([], year=2024, month=1)
        assert month.days == []
        assert month.best_day is None
        assert month.worst_day is None
        assert month.to_dict()["best_day"] is None

    def test_undated_trades_skipped(self):
        month = aggregate_calendar([make_trade(10.0, close=None)])
        assert month.total_trades == 0


class TestCalendarModel:
    def test_one_cell_per_day(self, january_trades):
        daily = build_daily_stats(january_trades, "2024-01-01", "2024-01-31")
        cells = build_calendar_model(daily, date(2024, 1, 1))

        assert len(cells) == 31
        by_date = {c.date: c for c in cells}
        assert by_date["2024-01-05"].category == CalendarCategory.WIN_DAY
        assert by_date["2024-01-05"].pnl == pytest.approx(20.0)
        assert by_date["2024-01-06"].category == CalendarCategory.LOSS_DAY
        assert by_date["2024-01-08"].category == CalendarCategory.FLAT_DAY
        assert by_date["2024-01-02"].category == CalendarCategory.NO_TRADE
        assert by_date["2024-01-02"].trades_count == 0

    def test_sparse_daily_stats(self):
        daily = build_daily_stats([make_day_trade("2024-02-29", 3.0)])
        cells = build_calendar_model(daily, date(2024, 2, 15))
        assert len(cells) == 29
        assert cells[-1].to_dict() == {
            "date": "2024-02-29", "pnl": 3.0, "trades_count": 1, "category": "winDay",
        }


class TestWeeklySummary:
    def test_sunday_start_weeks_clipped_to_month(self):
        trades = [
            make_day_trade("2024-01-02", 10.0),
            make_day_trade("2024-01-05", 15.0),
            make_day_trade("2024-01-07", -5.0),
            make_day_trade("2024-01-31", 2.0),
        ]
        daily = build_daily_stats(trades, "2024-01-01", "2024-01-31")
        weeks = build_weekly_summary(daily, date(2024, 1, 1))

        assert len(weeks) == 5
        assert [w.label for w in weeks] == ["Week 1", "Week 2", "Week 3", "Week 4", "Week 5"]
        assert (weeks[0].start, weeks[0].end) == ("2024-01-01", "2024-01-06")
        assert weeks[0].net_pnl == pytest.approx(25.0)
        assert weeks[0].days_traded == 2
        assert (weeks[1].start, weeks[1].end) == ("2024-01-07", "2024-01-13")
        assert weeks[1].net_pnl == pytest.approx(-5.0)
        assert (weeks[4].start, weeks[4].end) == ("2024-01-28", "2024-01-31")
        assert weeks[4].days_traded == 1

    def test_month_starting_on_sunday(self):
        # September 2024 starts on a Sunday
        weeks = build_weekly_summary([], date(2024, 9, 1))
        assert weeks[0].start == "2024-09-01"
        assert weeks[0].end == "2024-09-07"
        assert weeks[-1].end == "2024-09-30"
