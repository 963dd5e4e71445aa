"""Calendar aggregation: per-day results, month heat-map cells, week rows.

Usage::

    month = aggregate_calendar(trades, year=2024, month=1)
    print(month.best_day.date if month.best_day else "no trades")

    daily = build_daily_stats(trades, "2024-01-01", "2024-01-31")
    cells = build_calendar_model(daily, date(2024, 1, 1))
    weeks = build_weekly_summary(daily, date(2024, 1, 1))
"""

from __future__ import annotations

import logging
from calendar import monthrange
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta, tzinfo
from typing import Any, Sequence

from trade_compass.core.enums import CalendarCategory, TradeOutcome
from trade_compass.core.models import Trade

from .dates import date_key, effective_date_key
from .kpis import DailyStat, iter_days

logger = logging.getLogger(__name__)


@dataclass
class CalendarDay:
    date: str  # "YYYY-MM-DD"
    profit: float = 0.0
    trades_count: int = 0
    win_count: int = 0
    loss_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class CalendarMonth:
    days: list[CalendarDay] = field(default_factory=list)
    total_trades: int = 0
    total_profit: float = 0.0
    total_wins: int = 0
    total_losses: int = 0
    best_day: CalendarDay | None = None
    worst_day: CalendarDay | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "days": [d.to_dict() for d in self.days],
            "total_trades": self.total_trades,
            "total_profit": self.total_profit,
            "total_wins": self.total_wins,
            "total_losses": self.total_losses,
            "best_day": self.best_day.to_dict() if self.best_day else None,
            "worst_day": self.worst_day.to_dict() if self.worst_day else None,
        }


@dataclass
class CalendarCell:
    date: str
    pnl: float
    trades_count: int
    category: CalendarCategory

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "pnl": self.pnl,
            "trades_count": self.trades_count,
            "category": self.category.value,
        }


@dataclass
class WeekSummary:
    label: str  # "Week 1"
    start: str
    end: str
    net_pnl: float = 0.0
    days_traded: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a month (month is 1-12)."""
    return date(year, month, 1), date(year, month, monthrange(year, month)[1])


# ------------------------------------------------------------------ #
# Per-day aggregation                                                  #
# ------------------------------------------------------------------ #

def aggregate_calendar(
    trades: Sequence[Trade],
    *,
    year: int | None = None,
    month: int | None = None,
    tz: tzinfo | None = None,
) -> CalendarMonth:
    """Group trades into calendar days and pick the best and worst day.

    With *year* and *month* (1-12) trades outside that month are
    skipped.  Break-even trades count as trades but neither win nor
    loss.  Ties for best/worst go to the earliest day.
    """
    first_key = last_key = None
    if year is not None and month is not None:
        first, last = month_bounds(year, month)
        first_key, last_key = date_key(first), date_key(last)

    by_day: dict[str, CalendarDay] = {}
    for trade in trades:
        key = effective_date_key(trade, tz)
        if key is None:
            continue
        if first_key is not None and not first_key <= key <= last_key:
            continue

        day = by_day.get(key)
        if day is None:
            day = by_day[key] = CalendarDay(date=key)
        day.profit += trade.pnl
        day.trades_count += 1
        if trade.outcome == TradeOutcome.WIN:
            day.win_count += 1
        elif trade.outcome == TradeOutcome.LOSS:
            day.loss_count += 1

    days = [by_day[k] for k in sorted(by_day)]

    best: CalendarDay | None = None
    worst: CalendarDay | None = None
    for day in days:
        if best is None or day.profit > best.profit:
            best = day
        if worst is None or day.profit < worst.profit:
            worst = day

    return CalendarMonth(
        days=days,
        total_trades=sum(d.trades_count for d in days),
        total_profit=sum(d.profit for d in days),
        total_wins=sum(d.win_count for d in days),
        total_losses=sum(d.loss_count for d in days),
        best_day=best,
        worst_day=worst,
    )


# ------------------------------------------------------------------ #
# Month views over daily stats                                         #
# ------------------------------------------------------------------ #

def _categorise(stat: DailyStat | None) -> CalendarCategory:
    if stat is None or stat.trades_count == 0:
        return CalendarCategory.NO_TRADE
    if stat.net_pnl > 0:
        return CalendarCategory.WIN_DAY
    if stat.net_pnl < 0:
        return CalendarCategory.LOSS_DAY
    return CalendarCategory.FLAT_DAY


def build_calendar_model(daily_stats: Sequence[DailyStat], month: date) -> list[CalendarCell]:
    """One heat-map cell per day of the month containing *month*."""
    stats = {s.date: s for s in daily_stats}
    first, last = month_bounds(month.year, month.month)

    cells: list[CalendarCell] = []
    for day in iter_days(first, last):
        key = date_key(day)
        stat = stats.get(key)
        category = _categorise(stat)
        if category == CalendarCategory.NO_TRADE:
            cells.append(CalendarCell(key, 0.0, 0, category))
        else:
            cells.append(CalendarCell(key, stat.net_pnl, stat.trades_count, category))
    return cells


def build_weekly_summary(daily_stats: Sequence[DailyStat], month: date) -> list[WeekSummary]:
    """Sunday-start week rows for the month, each clipped to the month."""
    stats = {s.date: s for s in daily_stats}
    first, last = month_bounds(month.year, month.month)

    weeks: list[WeekSummary] = []
    week_start = first - timedelta(days=(first.weekday() + 1) % 7)
    index = 1
    while week_start <= last:
        week_end = week_start + timedelta(days=6)
        lo, hi = max(week_start, first), min(week_end, last)

        summary = WeekSummary(label=f"Week {index}", start=date_key(lo), end=date_key(hi))
        for day in iter_days(lo, hi):
            stat = stats.get(date_key(day))
            if stat is not None and stat.trades_count > 0:
                summary.net_pnl += stat.net_pnl
                summary.days_traded += 1
        weeks.append(summary)

        week_start = week_end + timedelta(days=1)
        index += 1
    return weeks
