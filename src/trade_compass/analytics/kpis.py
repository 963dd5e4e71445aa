"""Headline KPIs and per-day aggregates.

Two entry points produce the same :class:`KpiSet` shape:

* :func:`compute_kpis` works from individual trades.
* :func:`kpis_from_daily_stats` works from pre-bucketed :class:`DailyStat`
  rows (stored daily aggregates or the output of :func:`build_daily_stats`).
  Average R is then trade-count weighted across days and the profit
  factor is taken over day-level net P&L.

The dashboard headline block (:func:`compute_dashboard_kpis`) and the
top-symbol table (:func:`compute_symbol_stats`) are computed here too.
Note the dashboard win rate leaves break-even trades out of the
denominator while :class:`KpiSet` keeps them in.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import date, timedelta, tzinfo
from typing import Any, Sequence

from trade_compass.core.enums import TradeOutcome
from trade_compass.core.models import Trade

from .buckets import BucketAccumulator
from .dates import date_key, effective_date_key

logger = logging.getLogger(__name__)


@dataclass
class KpiSet:
    net_pnl: float = 0.0
    win_rate: float = 0.0  # 0-100
    profit_factor: float | None = None
    avg_r: float | None = None
    total_trades: int = 0
    days_traded: int = 0
    win_count: int = 0
    loss_count: int = 0
    breakeven_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DailyStat:
    """Aggregate of all trades whose effective date falls on one day."""

    date: str  # "YYYY-MM-DD"
    net_pnl: float = 0.0
    trades_count: int = 0
    wins_count: int = 0
    losses_count: int = 0
    breakeven_count: int = 0
    avg_r: float | None = None
    profit_factor: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DashboardKpis:
    total_trades: int = 0
    total_profit: float = 0.0
    win_count: int = 0
    loss_count: int = 0
    win_rate: float = 0.0  # 0-100, break-evens excluded
    avg_profit_per_trade: float = 0.0
    avg_position_size: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SymbolStat:
    symbol: str
    total_profit: float = 0.0
    trades_count: int = 0
    win_count: int = 0
    loss_count: int = 0
    win_rate: float = 0.0  # 0-1

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ------------------------------------------------------------------ #
# Trade-level KPIs                                                     #
# ------------------------------------------------------------------ #

def compute_kpis(trades: Sequence[Trade], tz: tzinfo | None = None) -> KpiSet:
    """Compute the KPI set from individual trades.

    Win rate counts break-evens in its denominator; trades without P&L
    are not classified at all.
    """
    if not trades:
        return KpiSet()

    net_pnl = sum(t.pnl for t in trades)

    wins = losses = breakevens = 0
    gross_profit = 0.0
    gross_loss = 0.0
    r_values: list[float] = []
    days: set[str] = set()

    for trade in trades:
        outcome = trade.outcome
        if outcome == TradeOutcome.WIN:
            wins += 1
            gross_profit += trade.pnl
        elif outcome == TradeOutcome.LOSS:
            losses += 1
            gross_loss += trade.pnl
        elif outcome == TradeOutcome.BREAKEVEN:
            breakevens += 1

        if trade.r_multiple is not None:
            r_values.append(trade.r_multiple)

        key = effective_date_key(trade, tz)
        if key is not None:
            days.add(key)

    classified = wins + losses + breakevens
    gross_loss = abs(gross_loss)

    return KpiSet(
        net_pnl=net_pnl,
        win_rate=(wins / classified) * 100 if classified > 0 else 0.0,
        profit_factor=gross_profit / gross_loss if gross_loss > 0 else None,
        avg_r=sum(r_values) / len(r_values) if r_values else None,
        total_trades=len(trades),
        days_traded=len(days),
        win_count=wins,
        loss_count=losses,
        breakeven_count=breakevens,
    )


# ------------------------------------------------------------------ #
# Daily aggregation                                                    #
# ------------------------------------------------------------------ #

def _as_date(value: date | str) -> date:
    return date.fromisoformat(value) if isinstance(value, str) else value


def iter_days(start: date | str, end: date | str) -> list[date]:
    """Every calendar day from *start* to *end* inclusive."""
    first, last = _as_date(start), _as_date(end)
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]


def daily_pnl_by_date(trades: Sequence[Trade], tz: tzinfo | None = None) -> dict[str, float]:
    """Net P&L per ``YYYY-MM-DD`` effective date, keys in ascending order.

    Undated trades are dropped.
    """
    by_day: dict[str, float] = defaultdict(float)
    for trade in trades:
        key = effective_date_key(trade, tz)
        if key is None:
            continue
        by_day[key] += trade.pnl
    return {key: by_day[key] for key in sorted(by_day)}


def build_daily_stats(
    trades: Sequence[Trade],
    start: date | str | None = None,
    end: date | str | None = None,
    tz: tzinfo | None = None,
) -> list[DailyStat]:
    """Bucket trades into per-day aggregates by effective date.

    With both *start* and *end* every day of the range is emitted,
    zero-filled where nothing traded, so the result doubles as the
    "days in range" denominator of the period-summary Compass Score.
    Trades without a usable date are skipped.
    """
    start_key = date_key(_as_date(start)) if start is not None else None
    end_key = date_key(_as_date(end)) if end is not None else None

    buckets: dict[str, BucketAccumulator] = defaultdict(BucketAccumulator)
    skipped = 0
    for trade in trades:
        key = effective_date_key(trade, tz)
        if key is None:
            skipped += 1
            continue
        if start_key is not None and key < start_key:
            continue
        if end_key is not None and key > end_key:
            continue
        buckets[key].record(trade)

    if skipped:
        logger.debug("build_daily_stats: %d trade(s) without a usable date", skipped)

    if start is not None and end is not None:
        keys = [date_key(d) for d in iter_days(start, end)]
    else:
        keys = sorted(buckets)

    daily: list[DailyStat] = []
    for key in keys:
        acc = buckets.get(key)
        if acc is None:
            daily.append(DailyStat(date=key))
            continue
        daily.append(DailyStat(
            date=key,
            net_pnl=acc.net_pnl,
            trades_count=acc.trades,
            wins_count=acc.wins,
            losses_count=acc.losses,
            breakeven_count=acc.breakevens,
            avg_r=acc.avg_r,
            profit_factor=acc.profit_factor,
        ))
    return daily


def kpis_from_daily_stats(daily_stats: Sequence[DailyStat]) -> KpiSet:
    """Compute the KPI set from per-day aggregates."""
    if not daily_stats:
        return KpiSet()

    net_pnl = sum(s.net_pnl for s in daily_stats)
    total_trades = sum(s.trades_count for s in daily_stats)
    days_traded = sum(1 for s in daily_stats if s.trades_count > 0)

    wins = sum(s.wins_count for s in daily_stats)
    losses = sum(s.losses_count for s in daily_stats)
    breakevens = sum(s.breakeven_count for s in daily_stats)
    classified = wins + losses + breakevens

    gross_profit = sum(s.net_pnl for s in daily_stats if s.net_pnl > 0)
    gross_loss = abs(sum(s.net_pnl for s in daily_stats if s.net_pnl < 0))

    weighted_r = 0.0
    weight = 0
    for stat in daily_stats:
        if stat.avg_r is not None and stat.trades_count > 0:
            weighted_r += stat.avg_r * stat.trades_count
            weight += stat.trades_count

    return KpiSet(
        net_pnl=net_pnl,
        win_rate=(wins / classified) * 100 if classified > 0 else 0.0,
        profit_factor=gross_profit / gross_loss if gross_loss > 0 else None,
        avg_r=weighted_r / weight if weight > 0 else None,
        total_trades=total_trades,
        days_traded=days_traded,
        win_count=wins,
        loss_count=losses,
        breakeven_count=breakevens,
    )


# ------------------------------------------------------------------ #
# Dashboard headline + symbols                                         #
# ------------------------------------------------------------------ #

def compute_dashboard_kpis(trades: Sequence[Trade]) -> DashboardKpis:
    total_trades = len(trades)
    total_profit = sum(t.pnl for t in trades)
    win_count = sum(1 for t in trades if t.outcome == TradeOutcome.WIN)
    loss_count = sum(1 for t in trades if t.outcome == TradeOutcome.LOSS)
    decided = win_count + loss_count

    sizes = [t.position_size for t in trades if t.position_size and t.position_size > 0]

    return DashboardKpis(
        total_trades=total_trades,
        total_profit=total_profit,
        win_count=win_count,
        loss_count=loss_count,
        win_rate=(win_count / decided) * 100 if decided > 0 else 0.0,
        avg_profit_per_trade=total_profit / total_trades if total_trades > 0 else 0.0,
        avg_position_size=sum(sizes) / len(sizes) if sizes else None,
    )


def compute_symbol_stats(trades: Sequence[Trade], limit: int | None = 5) -> list[SymbolStat]:
    """Per-symbol totals, best total profit first.

    Trades without a symbol are skipped.  *limit* caps the result
    (None = all symbols).
    """
    by_symbol: dict[str, SymbolStat] = {}
    for trade in trades:
        if not trade.symbol:
            continue
        stat = by_symbol.get(trade.symbol)
        if stat is None:
            stat = by_symbol[trade.symbol] = SymbolStat(symbol=trade.symbol)
        stat.total_profit += trade.pnl
        stat.trades_count += 1
        if trade.outcome == TradeOutcome.WIN:
            stat.win_count += 1
        elif trade.outcome == TradeOutcome.LOSS:
            stat.loss_count += 1

    for stat in by_symbol.values():
        decided = stat.win_count + stat.loss_count
        stat.win_rate = stat.win_count / decided if decided > 0 else 0.0

    ranked = sorted(by_symbol.values(), key=lambda s: s.total_profit, reverse=True)
    return ranked if limit is None else ranked[:limit]
