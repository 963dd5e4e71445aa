"""Risk progress, risk-guard evaluation and risk timelines.

Daily and weekly P&L are expressed as a percentage of a *rolling equity
base*: the cumulative P&L of every day strictly before the period when
that is positive, otherwise a fixed default balance.  This keeps the
percentages finite on a fresh or drawn-down account.  Weeks start on
Monday.

The guard is evaluated in strict priority order, first match wins::

    daily-locked -> weekly-locked -> daily-warning -> weekly-warning -> none

Usage::

    progress = compute_risk_progress(trades, today=date(2024, 3, 14))
    guard = evaluate_risk_guard(progress, settings.risk)
    if guard.state != RiskGuardState.NONE:
        print(guard.message)
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta, tzinfo
from typing import Any, Mapping, Sequence

from trade_compass.core.clock import IClock, WallClock
from trade_compass.core.config import RiskSettings
from trade_compass.core.enums import RiskGuardState, RiskStatusLevel
from trade_compass.core.models import Trade

from .dates import date_key
from .kpis import daily_pnl_by_date, iter_days

logger = logging.getLogger(__name__)

DEFAULT_BASE_BALANCE = 10_000.0
DEFAULT_WARNING_THRESHOLD = 50.0  # percent of the loss cap


@dataclass
class RiskProgress:
    today_pnl: float = 0.0
    week_pnl: float = 0.0
    daily_pnl_percent: float = 0.0
    weekly_pnl_percent: float = 0.0
    daily_base_balance: float = DEFAULT_BASE_BALANCE
    weekly_base_balance: float = DEFAULT_BASE_BALANCE

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RiskGuardEvaluation:
    state: RiskGuardState = RiskGuardState.NONE
    message: str | None = None
    today_return_percent: float | None = None
    week_return_percent: float | None = None
    daily_loss_usage: float | None = None  # percent of the daily cap used
    weekly_loss_usage: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "message": self.message,
            "today_return_percent": self.today_return_percent,
            "week_return_percent": self.week_return_percent,
            "daily_loss_usage": self.daily_loss_usage,
            "weekly_loss_usage": self.weekly_loss_usage,
        }


@dataclass
class RiskStatus:
    status: RiskStatusLevel
    label: str

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status.value, "label": self.label}


@dataclass
class DailyRiskPoint:
    date: str  # "YYYY-MM-DD"
    label: str  # "Jan 05"
    pnl: float
    pnl_percent: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class WeeklyRiskPoint:
    week_start: str
    week_end: str
    label: str  # "Jan 1-Jan 7"
    pnl: float
    pnl_percent: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RiskTimeline:
    daily: list[DailyRiskPoint] = field(default_factory=list)
    weekly: list[WeeklyRiskPoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "daily": [p.to_dict() for p in self.daily],
            "weekly": [p.to_dict() for p in self.weekly],
        }


# ------------------------------------------------------------------ #
# Helpers                                                              #
# ------------------------------------------------------------------ #

def start_of_week(day: date) -> date:
    """Monday of the week containing *day*."""
    return day - timedelta(days=day.weekday())


def _resolve_today(
    today: date | None,
    clock: IClock | None,
    tz: tzinfo | None,
) -> date:
    if today is not None:
        return today
    if clock is not None:
        return clock.today()
    return WallClock(tz).today()


def rolling_base(
    daily_pnl: Mapping[str, float],
    before_key: str,
    default_base_balance: float = DEFAULT_BASE_BALANCE,
) -> float:
    """Cumulative P&L strictly before *before_key* if positive, else the default."""
    cumulative = sum(p for k, p in daily_pnl.items() if k < before_key)
    return cumulative if cumulative > 0 else default_base_balance


def _sum_between(daily_pnl: Mapping[str, float], first_key: str, last_key: str) -> float:
    return sum(p for k, p in daily_pnl.items() if first_key <= k <= last_key)


def _percent(pnl: float, base: float) -> float:
    return (pnl / base) * 100 if base > 0 else 0.0


# ------------------------------------------------------------------ #
# Risk progress                                                        #
# ------------------------------------------------------------------ #

def compute_risk_progress(
    trades: Sequence[Trade],
    *,
    today: date | None = None,
    clock: IClock | None = None,
    default_base_balance: float = DEFAULT_BASE_BALANCE,
    tz: tzinfo | None = None,
) -> RiskProgress:
    """Today's and this week's P&L in currency and percent of the rolling base.

    Parameters
    ----------
    trades : Sequence[Trade]
        Full trade history of the account (the base needs every prior day).
    today : date, optional
        Reference day.  Falls back to *clock*, then the wall clock.
    default_base_balance : float
        Base used while cumulative prior P&L is not positive.
    """
    current = _resolve_today(today, clock, tz)
    today_key = date_key(current)
    week_key = date_key(start_of_week(current))

    daily_pnl = daily_pnl_by_date(trades, tz)

    today_pnl = daily_pnl.get(today_key, 0.0)
    week_pnl = _sum_between(daily_pnl, week_key, today_key)
    daily_base = rolling_base(daily_pnl, today_key, default_base_balance)
    weekly_base = rolling_base(daily_pnl, week_key, default_base_balance)

    return RiskProgress(
        today_pnl=today_pnl,
        week_pnl=week_pnl,
        daily_pnl_percent=_percent(today_pnl, daily_base),
        weekly_pnl_percent=_percent(week_pnl, weekly_base),
        daily_base_balance=daily_base,
        weekly_base_balance=weekly_base,
    )


# ------------------------------------------------------------------ #
# Guard                                                                #
# ------------------------------------------------------------------ #

def _loss_usage(pnl_percent: float, cap: float) -> tuple[float, float]:
    loss_abs = abs(pnl_percent) if pnl_percent < 0 else 0.0
    usage = (loss_abs / cap) * 100 if cap > 0 else 0.0
    return loss_abs, usage


def evaluate_risk_guard(
    progress: RiskProgress | None,
    settings: RiskSettings | None,
    *,
    warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
) -> RiskGuardEvaluation:
    """Classify the account into a risk-guard state.

    A loss cap of 0 disables that check.  Locked and warning states
    carry a message with the return (2 dp) and the share of the cap
    used (0 dp).
    """
    if progress is None or settings is None:
        return RiskGuardEvaluation()

    daily_pct = progress.daily_pnl_percent
    weekly_pct = progress.weekly_pnl_percent
    daily_cap = settings.max_daily_loss_percent
    weekly_cap = settings.max_weekly_loss_percent

    daily_loss, daily_usage = _loss_usage(daily_pct, daily_cap)
    weekly_loss, weekly_usage = _loss_usage(weekly_pct, weekly_cap)

    if daily_cap > 0 and daily_loss >= daily_cap:
        return RiskGuardEvaluation(
            state=RiskGuardState.DAILY_LOCKED,
            message=(
                "Daily loss limit reached - you should not open new trades today. "
                f"Today: {daily_pct:.2f}% ({daily_usage:.0f}% of your daily loss cap)."
            ),
            today_return_percent=daily_pct,
            daily_loss_usage=daily_usage,
        )

    if weekly_cap > 0 and weekly_loss >= weekly_cap:
        return RiskGuardEvaluation(
            state=RiskGuardState.WEEKLY_LOCKED,
            message=(
                "Weekly loss limit reached - you should not open new trades this week. "
                f"This week: {weekly_pct:.2f}% ({weekly_usage:.0f}% of your weekly loss cap)."
            ),
            week_return_percent=weekly_pct,
            weekly_loss_usage=weekly_usage,
        )

    if daily_cap > 0 and warning_threshold <= daily_usage < 100:
        return RiskGuardEvaluation(
            state=RiskGuardState.DAILY_WARNING,
            message=(
                "You are close to your daily loss limit. "
                f"Today: {daily_pct:.2f}% ({daily_usage:.0f}% of your daily loss cap)."
            ),
            today_return_percent=daily_pct,
            daily_loss_usage=daily_usage,
        )

    if weekly_cap > 0 and warning_threshold <= weekly_usage < 100:
        return RiskGuardEvaluation(
            state=RiskGuardState.WEEKLY_WARNING,
            message=(
                "You are close to your weekly loss limit. "
                f"This week: {weekly_pct:.2f}% ({weekly_usage:.0f}% of your weekly loss cap)."
            ),
            week_return_percent=weekly_pct,
            weekly_loss_usage=weekly_usage,
        )

    return RiskGuardEvaluation(
        state=RiskGuardState.NONE,
        today_return_percent=daily_pct,
        week_return_percent=weekly_pct,
        daily_loss_usage=daily_usage,
        weekly_loss_usage=weekly_usage,
    )


# ------------------------------------------------------------------ #
# Status badges                                                        #
# ------------------------------------------------------------------ #

def _classify_status(
    pnl_percent: float,
    max_loss: float,
    target: float,
    warning_threshold: float,
) -> RiskStatus:
    # Target first; loss levels only apply to a flat or losing period
    level = RiskStatusLevel.SAFE
    if target > 0 and pnl_percent >= target:
        level = RiskStatusLevel.TARGET
    elif pnl_percent <= 0 and max_loss > 0:
        loss_abs = abs(pnl_percent)
        if loss_abs >= max_loss:
            level = RiskStatusLevel.LIMIT
        elif loss_abs >= max_loss * warning_threshold / 100:
            level = RiskStatusLevel.WARNING
    return RiskStatus(status=level, label=level.label)


def daily_risk_status(
    daily_pnl_percent: float,
    settings: RiskSettings,
    *,
    warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
) -> RiskStatus:
    return _classify_status(
        daily_pnl_percent,
        settings.max_daily_loss_percent,
        settings.target_daily_profit_percent,
        warning_threshold,
    )


def weekly_risk_status(
    weekly_pnl_percent: float,
    settings: RiskSettings,
    *,
    warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
) -> RiskStatus:
    return _classify_status(
        weekly_pnl_percent,
        settings.max_weekly_loss_percent,
        settings.target_weekly_profit_percent,
        warning_threshold,
    )


# ------------------------------------------------------------------ #
# Timeline                                                             #
# ------------------------------------------------------------------ #

def build_risk_timeline(
    trades: Sequence[Trade],
    *,
    days: int = 30,
    weeks: int = 12,
    today: date | None = None,
    clock: IClock | None = None,
    default_base_balance: float = DEFAULT_BASE_BALANCE,
    tz: tzinfo | None = None,
) -> RiskTimeline:
    """Per-day and per-week P&L percentages, each against its own rolling base.

    The daily series covers ``today - days`` through today inclusive.  The
    weekly series covers the current Monday-start week and the
    ``weeks - 1`` before it; the current week ends at today.
    """
    current = _resolve_today(today, clock, tz)
    daily_pnl = daily_pnl_by_date(trades, tz)

    daily_points: list[DailyRiskPoint] = []
    for day in iter_days(current - timedelta(days=days), current):
        key = date_key(day)
        pnl = daily_pnl.get(key, 0.0)
        base = rolling_base(daily_pnl, key, default_base_balance)
        daily_points.append(DailyRiskPoint(
            date=key,
            label=day.strftime("%b %d"),
            pnl=pnl,
            pnl_percent=_percent(pnl, base),
        ))

    weekly_points: list[WeeklyRiskPoint] = []
    current_week = start_of_week(current)
    week_start = start_of_week(current - timedelta(weeks=max(weeks, 1) - 1))
    while week_start <= current_week:
        week_end = min(week_start + timedelta(days=6), current)
        start_key, end_key = date_key(week_start), date_key(week_end)
        pnl = _sum_between(daily_pnl, start_key, end_key)
        base = rolling_base(daily_pnl, start_key, default_base_balance)
        weekly_points.append(WeeklyRiskPoint(
            week_start=start_key,
            week_end=end_key,
            label=f"{week_start.strftime('%b')} {week_start.day}-{week_end.strftime('%b')} {week_end.day}",
            pnl=pnl,
            pnl_percent=_percent(pnl, base),
        ))
        week_start += timedelta(days=7)

    return RiskTimeline(daily=daily_points, weekly=weekly_points)
