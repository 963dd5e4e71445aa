"""Dashboard aggregate: everything the landing screen shows, in one pass.

Composes the headline KPIs, a zero-filled daily P&L series for the last
``days`` days, the top symbols, the DASHBOARD Compass Score and the risk
progress for today / this week.  Headline KPIs, symbols and the Compass
Score cover the whole trade list; only the daily series is windowed.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta, tzinfo
from typing import Any, Sequence

from trade_compass.core.clock import IClock, WallClock
from trade_compass.core.enums import ScoreProfile
from trade_compass.core.models import Trade

from .compass import CompassScore, compute_compass_score
from .dates import date_key
from .kpis import (
    DailyStat,
    DashboardKpis,
    SymbolStat,
    compute_dashboard_kpis,
    compute_symbol_stats,
    daily_pnl_by_date,
    iter_days,
)
from .risk import DEFAULT_BASE_BALANCE, RiskProgress, compute_risk_progress

logger = logging.getLogger(__name__)


@dataclass
class SeriesPoint:
    date: str  # "YYYY-MM-DD"
    label: str  # "Jan 05"
    value: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DashboardStats:
    kpis: DashboardKpis
    daily_pnl: list[SeriesPoint] = field(default_factory=list)
    symbols: list[SymbolStat] = field(default_factory=list)
    compass_score: CompassScore | None = None
    risk_progress: RiskProgress | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kpis": self.kpis.to_dict(),
            "daily_pnl": [p.to_dict() for p in self.daily_pnl],
            "symbols": [s.to_dict() for s in self.symbols],
            "compass_score": self.compass_score.to_dict() if self.compass_score else None,
            "risk_progress": self.risk_progress.to_dict() if self.risk_progress else None,
        }


def _label(key: str) -> str:
    return date.fromisoformat(key).strftime("%b %d")


def build_daily_pnl_series(daily_stats: Sequence[DailyStat]) -> list[SeriesPoint]:
    """Daily net P&L in date order."""
    ordered = sorted(daily_stats, key=lambda s: s.date)
    return [SeriesPoint(s.date, _label(s.date), s.net_pnl) for s in ordered]


def build_cumulative_pnl_series(daily_stats: Sequence[DailyStat]) -> list[SeriesPoint]:
    """Running total of daily net P&L in date order."""
    points: list[SeriesPoint] = []
    cumulative = 0.0
    for stat in sorted(daily_stats, key=lambda s: s.date):
        cumulative += stat.net_pnl
        points.append(SeriesPoint(stat.date, _label(stat.date), cumulative))
    return points


def aggregate_dashboard(
    trades: Sequence[Trade],
    *,
    days: int = 30,
    top_symbols: int = 5,
    today: date | None = None,
    clock: IClock | None = None,
    default_base_balance: float = DEFAULT_BASE_BALANCE,
    tz: tzinfo | None = None,
) -> DashboardStats:
    """Build the dashboard statistics block.

    Parameters
    ----------
    trades : Sequence[Trade]
        Full trade history of the account.
    days : int
        Length of the daily P&L window, ending today inclusive.
    today : date, optional
        Reference day; falls back to *clock*, then the wall clock.
    """
    if today is None:
        today = clock.today() if clock is not None else WallClock(tz).today()

    by_day = daily_pnl_by_date(trades, tz)
    window = iter_days(today - timedelta(days=max(days, 1) - 1), today)
    daily_pnl = [
        SeriesPoint(date_key(d), d.strftime("%b %d"), by_day.get(date_key(d), 0.0))
        for d in window
    ]

    stats = DashboardStats(
        kpis=compute_dashboard_kpis(trades),
        daily_pnl=daily_pnl,
        symbols=compute_symbol_stats(trades, limit=top_symbols),
        compass_score=compute_compass_score(trades, ScoreProfile.DASHBOARD, tz=tz),
        risk_progress=compute_risk_progress(
            trades, today=today, default_base_balance=default_base_balance, tz=tz,
        ),
    )
    logger.debug(
        "Dashboard aggregated: %d trades, %d-day window ending %s",
        len(trades), len(daily_pnl), today.isoformat(),
    )
    return stats
